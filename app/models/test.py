from mongoengine import (
    EmbeddedDocumentField,
    IntField,
    LazyReferenceField,
    ListField,
    SequenceField,
    StringField,
)

from app.models.base import BaseDocument, BaseEmbeddedDocument
from app.models.user import User


class TestQuestion(BaseEmbeddedDocument):
    """Embedded: one multiple-choice question of a test.

    Fields:
    - question (str): prompt
    - options (list[str]): four options, order preserved
    - correct_answer (str): literal value of the correct option
    """
    __test__ = False

    question = StringField(required=True, null=False)
    options = ListField(StringField(), required=True, null=False)
    correct_answer = StringField(required=True, null=False)


class Test(BaseDocument):
    """Authored test.

    `id` is a numeric sequence so clients can reference tests by number.
    Questions are stored in authoring order; answers index into that order.
    """
    __test__ = False

    id = SequenceField(primary_key=True)
    name = StringField(required=True, null=False)
    teacher = LazyReferenceField(document_type=User, required=True, null=False)
    questions = ListField(EmbeddedDocumentField(TestQuestion), null=False, default=list)
    max_marks = IntField(required=True, null=False, min_value=1)

    meta = {
        "collection": "tests",
        "indexes": [
            {"fields": ["-created_at", "-id"]},
            {"fields": ["teacher"]},
        ],
    }
