from enum import Enum


class BaseEnum(Enum):
    @classmethod
    def choices(cls):
        return [(item.value, item.name) for item in cls]


class UserRole(BaseEnum):
    TEACHER = "Teacher"
    STUDENT = "Student"


class StorageBackend(BaseEnum):
    MONGO = "mongo"
    MEMORY = "memory"
