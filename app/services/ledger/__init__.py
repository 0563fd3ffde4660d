from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.repositories import SubmissionRepository, TestRepository
from app.schemas import Identity, SubmissionRecord
from app.services.auth import authorize
from app.services.errors import Conflict, NotFound, ValidationError, errors_from_pydantic
from app.services.scoring import score
from app.utils.base import UserRole


logger = logging.getLogger(__name__)

_answers_adapter = TypeAdapter(dict[int, str])


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class SubmissionLedger:
    """Accepts each student's answers for a test exactly once and scores them."""

    def __init__(self, tests: TestRepository, submissions: SubmissionRepository):
        self.tests = tests
        self.submissions = submissions

    def submit_exam(
        self,
        identity: Identity | None,
        test_id: Any,
        answers: Mapping[Any, Any] | None,
        claimed_score: Any = None,
    ) -> SubmissionRecord:
        """Record a submission and return it with a server-computed score.

        `claimed_score` is shape-checked and then ignored; the stored score
        always comes from the test's answer key.
        """
        student = authorize(identity, UserRole.STUDENT)
        parsed_answers = self._validate(test_id, answers, claimed_score)

        test = self.tests.get(test_id)
        if not test:
            raise NotFound("Test not found.")

        # Fast path for a clearer error; the repository insert is what enforces uniqueness
        if self.submissions.find_by_pair(test.id, student.user_id):
            logger.warning("Duplicate submission rejected: test=%s student=%s", test.id, student.user_id)
            raise Conflict()

        points = score(test, parsed_answers)
        try:
            submission = self.submissions.create(
                test_id=test.id,
                student_id=student.user_id,
                answers=parsed_answers,
                score=points,
            )
        except Conflict:
            logger.warning("Concurrent duplicate submission rejected: test=%s student=%s", test.id, student.user_id)
            raise

        if claimed_score is not None and claimed_score != points:
            logger.info("Ignored client score %s for submission %s (computed %s)", claimed_score, submission.id, points)
        logger.info("Submission %s accepted: test=%s student=%s score=%s", submission.id, test.id, student.user_id, points)
        return submission

    def _validate(self, test_id: Any, answers: Any, claimed_score: Any) -> dict[int, str]:
        errors: list[dict[str, Any]] = []
        if isinstance(test_id, bool) or not isinstance(test_id, int):
            errors.append({"loc": ["testId"], "msg": "Input should be a valid integer", "type": "int_type"})
        if claimed_score is not None and not _is_number(claimed_score):
            errors.append({"loc": ["score"], "msg": "Input should be a valid number", "type": "float_type"})

        parsed: dict[int, str] = {}
        if answers is None:
            errors.append({"loc": ["answers"], "msg": "Field required", "type": "missing"})
        else:
            try:
                parsed = _answers_adapter.validate_python(answers)
            except PydanticValidationError as exc:
                errors.extend({**err, "loc": ["answers", *err["loc"]]} for err in errors_from_pydantic(exc))

        if errors:
            raise ValidationError("Invalid submission data.", errors=errors)
        return parsed
