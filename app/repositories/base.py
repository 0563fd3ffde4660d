"""Datastore collaborator contracts.

Services receive these at construction and never touch a storage engine
directly. Implementations must enforce uniqueness of submissions per
(test, student) themselves and signal a duplicate with `Conflict`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from app.schemas import QuestionSpec, SubmissionRecord, TestRecord, UserRecord
from app.utils.base import UserRole


class TestRepository(ABC):
    __test__ = False

    @abstractmethod
    def create(
        self,
        teacher_id: str,
        name: str,
        questions: Sequence[QuestionSpec],
        max_marks: int,
    ) -> TestRecord: ...

    @abstractmethod
    def get(self, test_id: int) -> TestRecord | None: ...

    @abstractmethod
    def list_page(self, skip: int, limit: int) -> tuple[int, list[TestRecord]]:
        """Return (total count, newest-first slice) from one count+fetch pair."""


class SubmissionRepository(ABC):
    @abstractmethod
    def find_by_pair(self, test_id: int, student_id: str) -> SubmissionRecord | None: ...

    @abstractmethod
    def create(
        self,
        test_id: int,
        student_id: str,
        answers: dict[int, str],
        score: int,
    ) -> SubmissionRecord:
        """Insert atomically; raise `Conflict` if the pair already exists."""


class UserRepository(ABC):
    @abstractmethod
    def create(self, name: str, email: str, password_hash: str, role: UserRole) -> UserRecord:
        """Insert a user; raise `EmailTaken` if the email is registered."""

    @abstractmethod
    def get(self, user_id: str) -> UserRecord | None: ...

    @abstractmethod
    def get_by_email(self, email: str) -> UserRecord | None: ...

    @abstractmethod
    def bump_token_version(self, user_id: str) -> UserRecord | None: ...
