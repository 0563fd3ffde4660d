from __future__ import annotations

import itertools
import threading
import uuid
from datetime import datetime, timezone
from typing import Sequence

from app.repositories.base import SubmissionRepository, TestRepository, UserRepository
from app.schemas import QuestionSpec, SubmissionRecord, TestRecord, UserRecord
from app.services.errors import Conflict, EmailTaken
from app.utils.base import UserRole


class MemoryStore:
    """Process-local datastore. One lock guards all tables."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.tests: dict[int, TestRecord] = {}
        self.submissions: dict[int, SubmissionRecord] = {}
        self.submission_pairs: dict[tuple[int, str], int] = {}
        self.users: dict[str, UserRecord] = {}
        self.test_ids = itertools.count(1)
        self.submission_ids = itertools.count(1)


class MemoryTestRepository(TestRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    def create(self, teacher_id: str, name: str, questions: Sequence[QuestionSpec], max_marks: int) -> TestRecord:
        with self.store.lock:
            record = TestRecord(
                id=next(self.store.test_ids),
                name=name,
                teacher_id=teacher_id,
                questions=tuple(questions),
                max_marks=max_marks,
                created_at=datetime.now(timezone.utc),
            )
            self.store.tests[record.id] = record
            return record

    def get(self, test_id: int) -> TestRecord | None:
        with self.store.lock:
            return self.store.tests.get(test_id)

    def list_page(self, skip: int, limit: int) -> tuple[int, list[TestRecord]]:
        with self.store.lock:
            ordered = sorted(self.store.tests.values(), key=lambda t: (t.created_at, t.id), reverse=True)
            return len(ordered), ordered[skip:skip + limit]


class MemorySubmissionRepository(SubmissionRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    def find_by_pair(self, test_id: int, student_id: str) -> SubmissionRecord | None:
        with self.store.lock:
            submission_id = self.store.submission_pairs.get((test_id, student_id))
            return self.store.submissions.get(submission_id) if submission_id is not None else None

    def create(self, test_id: int, student_id: str, answers: dict[int, str], score: int) -> SubmissionRecord:
        with self.store.lock:
            if (test_id, student_id) in self.store.submission_pairs:
                raise Conflict()
            record = SubmissionRecord(
                id=next(self.store.submission_ids),
                test_id=test_id,
                student_id=student_id,
                answers=dict(answers),
                score=score,
                created_at=datetime.now(timezone.utc),
            )
            self.store.submissions[record.id] = record
            self.store.submission_pairs[(test_id, student_id)] = record.id
            return record


class MemoryUserRepository(UserRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    def create(self, name: str, email: str, password_hash: str, role: UserRole) -> UserRecord:
        with self.store.lock:
            if any(u.email == email for u in self.store.users.values()):
                raise EmailTaken()
            record = UserRecord(id=uuid.uuid4().hex, name=name, email=email, password=password_hash, role=role)
            self.store.users[record.id] = record
            return record

    def get(self, user_id: str) -> UserRecord | None:
        with self.store.lock:
            return self.store.users.get(user_id)

    def get_by_email(self, email: str) -> UserRecord | None:
        with self.store.lock:
            return next((u for u in self.store.users.values() if u.email == email), None)

    def bump_token_version(self, user_id: str) -> UserRecord | None:
        with self.store.lock:
            user = self.store.users.get(user_id)
            if not user:
                return None
            user = user.model_copy(update={"token_version": str(int(user.token_version) + 1)})
            self.store.users[user_id] = user
            return user
