from __future__ import annotations

import logging
import math
from typing import Any, Sequence

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.repositories import TestRepository
from app.schemas import Identity, QuestionSpec, TestPage, TestRecord
from app.services.auth import authorize
from app.services.errors import NotFound, ValidationError, errors_from_pydantic
from app.utils.base import UserRole
from app.utils.config import settings


logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1

_questions_adapter = TypeAdapter(list[QuestionSpec])


def _positive_int(value: Any, default: int) -> int:
    """Parse a pagination parameter, falling back to `default` when absent or invalid."""
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


class TestCatalog:
    """Creation and newest-first listing of tests."""
    __test__ = False

    def __init__(self, tests: TestRepository):
        self.tests = tests

    def create_test(
        self,
        identity: Identity | None,
        name: Any,
        questions: Sequence[QuestionSpec | dict] | None,
        max_marks: Any,
    ) -> TestRecord:
        teacher = authorize(identity, UserRole.TEACHER)

        errors: list[dict[str, Any]] = []
        if not isinstance(name, str) or not name.strip():
            errors.append({"loc": ["testName"], "msg": "Test name is required.", "type": "missing"})
        if isinstance(max_marks, bool) or not isinstance(max_marks, int) or max_marks < 1:
            errors.append({"loc": ["maxMarks"], "msg": "Max marks must be at least 1.", "type": "greater_than_equal"})

        parsed: list[QuestionSpec] = []
        try:
            parsed = _questions_adapter.validate_python(questions)
        except PydanticValidationError as exc:
            errors.extend(
                {**err, "loc": ["questions", *err["loc"]]} for err in errors_from_pydantic(exc)
            )

        if errors:
            raise ValidationError("Invalid test data.", errors=errors)

        test = self.tests.create(teacher_id=teacher.user_id, name=name, questions=parsed, max_marks=max_marks)
        logger.info("Test %s created by teacher %s with %d questions", test.id, test.teacher_id, len(test.questions))
        return test

    def list_tests(self, page: Any = None, limit: Any = None) -> TestPage:
        page = _positive_int(page, DEFAULT_PAGE)
        limit = _positive_int(limit, settings.default_page_size)

        # Count and slice come from the same call so page bounds stay consistent
        total, items = self.tests.list_page(skip=(page - 1) * limit, limit=limit)
        return TestPage(items=items, page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))

    def get_test(self, test_id: int) -> TestRecord:
        test = self.tests.get(test_id)
        if not test:
            raise NotFound("Test not found.")
        return test
