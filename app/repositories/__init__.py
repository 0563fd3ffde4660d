"""Repository providers, selected by `settings.storage_backend`."""
from functools import lru_cache

from app.repositories.base import SubmissionRepository, TestRepository, UserRepository
from app.repositories.mongo import MongoSubmissionRepository, MongoTestRepository, MongoUserRepository
from app.repositories.memory import (
    MemoryStore,
    MemorySubmissionRepository,
    MemoryTestRepository,
    MemoryUserRepository,
)
from app.utils.base import StorageBackend
from app.utils.config import settings


@lru_cache(maxsize=1)
def get_memory_store() -> MemoryStore:
    return MemoryStore()


def _use_memory() -> bool:
    return settings.storage_backend == StorageBackend.MEMORY.value


def get_test_repository() -> TestRepository:
    if _use_memory():
        return MemoryTestRepository(get_memory_store())
    return MongoTestRepository()


def get_submission_repository() -> SubmissionRepository:
    if _use_memory():
        return MemorySubmissionRepository(get_memory_store())
    return MongoSubmissionRepository()


def get_user_repository() -> UserRepository:
    if _use_memory():
        return MemoryUserRepository(get_memory_store())
    return MongoUserRepository()


__all__ = [
    "MemoryStore",
    "SubmissionRepository",
    "TestRepository",
    "UserRepository",
    "get_memory_store",
    "get_submission_repository",
    "get_test_repository",
    "get_user_repository",
]
