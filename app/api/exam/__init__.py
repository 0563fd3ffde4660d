from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from app.repositories import (
    SubmissionRepository,
    TestRepository,
    get_submission_repository,
    get_test_repository,
)
from app.schemas import Identity, QuestionSpec
from app.services.auth import get_current_identity, require_student, require_teacher
from app.services.catalog import TestCatalog
from app.services.ledger import SubmissionLedger
from app.services.rate_limit import SubmissionGuard, create_test_rate_limit, get_submission_guard


router = APIRouter()


def get_test_catalog(tests: TestRepository = Depends(get_test_repository)) -> TestCatalog:
    return TestCatalog(tests)


def get_submission_ledger(
    tests: TestRepository = Depends(get_test_repository),
    submissions: SubmissionRepository = Depends(get_submission_repository),
) -> SubmissionLedger:
    return SubmissionLedger(tests, submissions)


class CreateTestBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    test_name: str = Field(alias="testName", min_length=1)
    questions: list[QuestionSpec]
    max_marks: int = Field(alias="maxMarks", ge=1)


@router.post("/new-test", status_code=201, dependencies=[Depends(require_teacher), Depends(create_test_rate_limit)])
def create_test(
    body: CreateTestBody,
    identity: Identity = Depends(require_teacher),
    catalog: TestCatalog = Depends(get_test_catalog),
) -> dict:
    """TEACHER: Author a new test owned by the caller."""
    test = catalog.create_test(identity, name=body.test_name, questions=body.questions, max_marks=body.max_marks)
    return {"message": "Test created successfully!", "test": test.to_output(reveal_answers=True)}


@router.get("/all-tests")
def list_tests(
    page: str | None = None,
    limit: str | None = None,
    identity: Identity = Depends(get_current_identity),
    catalog: TestCatalog = Depends(get_test_catalog),
) -> dict:
    """PROTECTED: Page through tests, newest first. Bad page/limit fall back to defaults."""
    return catalog.list_tests(page=page, limit=limit).to_output(viewer_id=identity.user_id)


@router.get("/tests/{test_id}")
def get_test(
    test_id: int,
    identity: Identity = Depends(get_current_identity),
    catalog: TestCatalog = Depends(get_test_catalog),
) -> dict:
    """PROTECTED: Fetch one test. Only its author sees the answer key."""
    test = catalog.get_test(test_id)
    return {"test": test.to_output(reveal_answers=test.teacher_id == identity.user_id)}


class SubmitExamBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    test_id: int = Field(alias="testId")
    answers: dict[int, str]
    # Accepted for compatibility, never trusted
    score: float | None = None


@router.post("/submit", status_code=201)
def submit_exam(
    body: SubmitExamBody,
    identity: Identity = Depends(require_student),
    ledger: SubmissionLedger = Depends(get_submission_ledger),
    guard: SubmissionGuard = Depends(get_submission_guard),
) -> dict[str, Any]:
    """STUDENT: Submit answers once per test; the score is computed here."""
    guard.check(identity, body.test_id)
    submission = ledger.submit_exam(identity, test_id=body.test_id, answers=body.answers, claimed_score=body.score)
    guard.record(identity, submission.test_id)
    return {"message": "Submission successful.", "submission": submission.to_output()}
