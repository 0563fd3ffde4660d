from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

OPTIONS_PER_QUESTION = 4


class QuestionSpec(BaseModel):
    """A multiple-choice question.

    Fields:
    - question (str): prompt text
    - options (list[str]): exactly four distinct, non-empty options
    - correct_answer (str): the literal option value that is correct
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    question: str = Field(min_length=1, validation_alias=AliasChoices("question", "prompt"))
    options: tuple[str, ...]
    correct_answer: str = Field(
        min_length=1,
        validation_alias=AliasChoices("correctAnswer", "correct_answer", "answer"),
        serialization_alias="correctAnswer",
    )

    @field_validator("question")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Question text is required")
        return value

    @field_validator("options")
    @classmethod
    def _four_distinct_options(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if len(value) != OPTIONS_PER_QUESTION:
            raise ValueError(f"Exactly {OPTIONS_PER_QUESTION} options are required")
        if any(not option.strip() for option in value):
            raise ValueError("Options must not be empty")
        if len(set(value)) != len(value):
            raise ValueError("Options must be distinct")
        return value

    @model_validator(mode="after")
    def _answer_is_an_option(self) -> "QuestionSpec":
        if self.correct_answer not in self.options:
            raise ValueError("Correct answer must match one of the options")
        return self

    def to_output(self, reveal_answer: bool = True) -> dict[str, Any]:
        output: dict[str, Any] = {"question": self.question, "options": list(self.options)}
        if reveal_answer:
            output["correctAnswer"] = self.correct_answer
        return output


class TestRecord(BaseModel):
    """An authored test. Question order is significant and never changes."""
    __test__ = False

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    teacher_id: str
    questions: tuple[QuestionSpec, ...]
    max_marks: int
    created_at: datetime

    def to_output(self, reveal_answers: bool = False) -> dict[str, Any]:
        return {
            "id": self.id,
            "testName": self.name,
            "teacherId": self.teacher_id,
            "questions": [q.to_output(reveal_answer=reveal_answers) for q in self.questions],
            "maxMarks": self.max_marks,
            "createdAt": self.created_at.isoformat(),
        }


class TestPage(BaseModel):
    __test__ = False

    items: list[TestRecord]
    page: int
    limit: int
    total: int
    total_pages: int

    def to_output(self, viewer_id: str | None = None) -> dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "totalTests": self.total,
            "totalPages": self.total_pages,
            "tests": [t.to_output(reveal_answers=t.teacher_id == viewer_id) for t in self.items],
        }


class SubmissionRecord(BaseModel):
    """One student's single answer set for one test, with its computed score."""
    model_config = ConfigDict(frozen=True)

    id: int
    test_id: int
    student_id: str
    answers: dict[int, str]
    score: int
    created_at: datetime

    def to_output(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "testId": self.test_id,
            "studentId": self.student_id,
            "answers": {str(k): v for k, v in self.answers.items()},
            "score": self.score,
            "createdAt": self.created_at.isoformat(),
        }
