from __future__ import annotations

import logging
import random

from app.connections.mongo import init_mongo, close_mongo, ensure_indexes
from app.models.submission import Submission
from app.models.test import Test
from app.models.user import User
from app.repositories.mongo import MongoSubmissionRepository, MongoTestRepository, MongoUserRepository
from app.schemas import Identity, QuestionSpec, UserRecord
from app.services.auth import hash_password
from app.services.catalog import TestCatalog
from app.services.ledger import SubmissionLedger
from app.utils.base import UserRole
from app.utils.logging import configure_logging


logger = logging.getLogger(__name__)


def _ensure_users() -> tuple[UserRecord, list[UserRecord]]:
    users = MongoUserRepository()
    fixtures = [
        ("Tina Teacher", "tina@example.com", UserRole.TEACHER),
        ("Alice Example", "alice@example.com", UserRole.STUDENT),
        ("Bob Example", "bob@example.com", UserRole.STUDENT),
        ("Carol Example", "carol@example.com", UserRole.STUDENT),
    ]
    created: list[UserRecord] = []
    for name, email, role in fixtures:
        user = users.get_by_email(email)
        if not user:
            user = users.create(name=name, email=email, password_hash=hash_password("Secret123!"), role=role)
        created.append(user)
    return created[0], created[1:]


def _arithmetic_question(i: int) -> QuestionSpec:
    a, b = random.randint(1, 20), random.randint(1, 20)
    answer = a + b
    options = [str(answer + delta) for delta in (0, 1, -1, 2)]
    random.shuffle(options)
    return QuestionSpec(question=f"Q{i}: What is {a} + {b}?", options=tuple(options), correct_answer=str(answer))


def _ensure_tests(catalog: TestCatalog, teacher: Identity, count: int = 15) -> list[int]:
    ids = []
    for i in range(1, count + 1):
        questions = [_arithmetic_question(n) for n in range(1, random.randint(3, 8) + 1)]
        test = catalog.create_test(teacher, name=f"Arithmetic Drill {i}", questions=questions, max_marks=10)
        ids.append(test.id)
    return ids


def _submit_randomly(ledger: SubmissionLedger, catalog: TestCatalog, students: list[Identity], test_ids: list[int]) -> None:
    for student in students:
        for test_id in random.sample(test_ids, k=min(3, len(test_ids))):
            test = catalog.get_test(test_id)
            answers = {index: random.choice(q.options) for index, q in enumerate(test.questions)}
            submission = ledger.submit_exam(student, test_id=test_id, answers=answers)
            logger.info("Student %s scored %s on test %s", student.user_id, submission.score, test_id)


def seed() -> None:
    configure_logging()
    init_mongo()
    try:
        # Purge existing data in an order that respects references
        Submission.drop_collection()
        Test.drop_collection()
        User.drop_collection()
        ensure_indexes()

        teacher, students = _ensure_users()
        catalog = TestCatalog(MongoTestRepository())
        ledger = SubmissionLedger(MongoTestRepository(), MongoSubmissionRepository())

        test_ids = _ensure_tests(catalog, Identity(user_id=teacher.id, role=teacher.role))
        _submit_randomly(ledger, catalog, [Identity(user_id=s.id, role=s.role) for s in students], test_ids)
        logger.info("Seed completed.")
    finally:
        close_mongo()


if __name__ == "__main__":
    seed()
