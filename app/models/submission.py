from mongoengine import DictField, IntField, LazyReferenceField, SequenceField

from app.models.base import BaseDocument
from app.models.test import Test
from app.models.user import User


class Submission(BaseDocument):
    """A student's one and only answer set for a test.

    Fields:
    - test/student (refs)
    - answers (dict[str, str]): question index -> chosen option value
    - score (int): computed from the test's answer key
    Unique per (test, student).
    """
    id = SequenceField(primary_key=True)
    test = LazyReferenceField(document_type=Test, required=True, null=False)
    student = LazyReferenceField(document_type=User, required=True, null=False)
    answers = DictField(null=False, default=dict)
    score = IntField(required=True, null=False, default=0, min_value=0)

    meta = {
        "collection": "submissions",
        "indexes": [
            {"fields": ["test", "student"], "unique": True},
            {"fields": ["student"]},
        ],
    }
