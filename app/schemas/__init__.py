from app.schemas.exam import QuestionSpec, SubmissionRecord, TestPage, TestRecord
from app.schemas.user import Identity, UserRecord

__all__ = [
    "Identity",
    "QuestionSpec",
    "SubmissionRecord",
    "TestPage",
    "TestRecord",
    "UserRecord",
]
