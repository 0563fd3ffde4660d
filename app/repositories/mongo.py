from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Sequence

from bson.objectid import ObjectId
from mongoengine import NotUniqueError, OperationError
from mongoengine.connection import ConnectionFailure as MongoEngineConnectionFailure
from pymongo.errors import PyMongoError

from app.models.submission import Submission
from app.models.test import Test, TestQuestion
from app.models.user import User
from app.repositories.base import SubmissionRepository, TestRepository, UserRepository
from app.schemas import QuestionSpec, SubmissionRecord, TestRecord, UserRecord
from app.services.errors import Conflict, EmailTaken, Internal
from app.utils.base import UserRole


@contextmanager
def _datastore_errors(on_duplicate: type[Exception] | None = None) -> Iterator[None]:
    """Translate storage failures into domain errors."""
    try:
        yield
    except NotUniqueError as exc:
        if on_duplicate is None:
            raise Internal(original_exception=exc) from exc
        raise on_duplicate() from exc
    except (OperationError, PyMongoError, MongoEngineConnectionFailure) as exc:
        raise Internal(original_exception=exc) from exc


def _test_record(doc: Test) -> TestRecord:
    return TestRecord(
        id=doc.id,
        name=doc.name,
        teacher_id=str(doc.teacher.pk),
        questions=tuple(
            QuestionSpec(question=q.question, options=tuple(q.options), correct_answer=q.correct_answer)
            for q in doc.questions
        ),
        max_marks=doc.max_marks,
        created_at=doc.created_at,
    )


def _submission_record(doc: Submission) -> SubmissionRecord:
    return SubmissionRecord(
        id=doc.id,
        test_id=doc.test.pk,
        student_id=str(doc.student.pk),
        answers={int(k): v for k, v in (doc.answers or {}).items()},
        score=doc.score,
        created_at=doc.created_at,
    )


def _user_record(doc: User) -> UserRecord:
    return UserRecord(
        id=str(doc.id),
        name=doc.name,
        email=doc.email,
        password=doc.password,
        role=UserRole(doc.role),
        token_version=doc.token_version,
    )


class MongoTestRepository(TestRepository):
    def create(self, teacher_id: str, name: str, questions: Sequence[QuestionSpec], max_marks: int) -> TestRecord:
        doc = Test(
            name=name,
            teacher=ObjectId(teacher_id),
            questions=[
                TestQuestion(question=q.question, options=list(q.options), correct_answer=q.correct_answer)
                for q in questions
            ],
            max_marks=max_marks,
        )
        with _datastore_errors():
            doc.save(force_insert=True)
        return _test_record(doc)

    def get(self, test_id: int) -> TestRecord | None:
        with _datastore_errors():
            doc: Test | None = Test.objects(id=test_id).first()
        return _test_record(doc) if doc else None

    def list_page(self, skip: int, limit: int) -> tuple[int, list[TestRecord]]:
        with _datastore_errors():
            total = Test.objects.count()
            # Past the end, or bounds wider than a bson int64, never reach the server
            if skip >= total:
                return total, []
            docs = list(Test.objects.order_by("-created_at", "-id").skip(skip).limit(min(limit, total - skip)))
        return total, [_test_record(doc) for doc in docs]


class MongoSubmissionRepository(SubmissionRepository):
    def find_by_pair(self, test_id: int, student_id: str) -> SubmissionRecord | None:
        with _datastore_errors():
            doc: Submission | None = Submission.objects(test=test_id, student=ObjectId(student_id)).first()
        return _submission_record(doc) if doc else None

    def create(self, test_id: int, student_id: str, answers: dict[int, str], score: int) -> SubmissionRecord:
        # Unique (test, student) index makes the insert the authoritative duplicate check
        doc = Submission(
            test=test_id,
            student=ObjectId(student_id),
            answers={str(k): v for k, v in answers.items()},
            score=score,
        )
        with _datastore_errors(on_duplicate=Conflict):
            doc.save(force_insert=True)
        return _submission_record(doc)


class MongoUserRepository(UserRepository):
    def create(self, name: str, email: str, password_hash: str, role: UserRole) -> UserRecord:
        doc = User(name=name, email=email, password=password_hash, role=role.value)
        with _datastore_errors(on_duplicate=EmailTaken):
            doc.save(force_insert=True)
        return _user_record(doc)

    def get(self, user_id: str) -> UserRecord | None:
        if not ObjectId.is_valid(user_id):
            return None
        with _datastore_errors():
            doc: User | None = User.objects(id=user_id).first()
        return _user_record(doc) if doc else None

    def get_by_email(self, email: str) -> UserRecord | None:
        with _datastore_errors():
            doc: User | None = User.objects(email=email).first()
        return _user_record(doc) if doc else None

    def bump_token_version(self, user_id: str) -> UserRecord | None:
        if not ObjectId.is_valid(user_id):
            return None
        with _datastore_errors():
            doc: User | None = User.objects(id=user_id).first()
            if not doc:
                return None
            doc.token_version = str(int(doc.token_version) + 1)
            doc.save()
        return _user_record(doc)
