from app.utils.base.enums import BaseEnum, StorageBackend, UserRole

__all__ = ["BaseEnum", "StorageBackend", "UserRole"]
