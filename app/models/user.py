from mongoengine import EmailField, StringField

from app.models.base import BaseDocument
from app.utils.base import UserRole


class User(BaseDocument):
    """User document.

    Fields:
    - name (str): Full name
    - email (EmailStr, unique): Login identifier
    - password (str, hashed): Bcrypt-hashed password
    - role (str): Teacher or Student
    - token_version (str): Incremented on logout to invalidate tokens
    """
    name = StringField(required=True, null=False)
    password = StringField(required=True, null=False)
    email = EmailField(required=True, null=False, unique=True)
    role = StringField(required=True, null=False, choices=UserRole.choices())
    token_version = StringField(required=True, null=False, default="1")

    meta = {
        "collection": "users",
        "indexes": [
            {"fields": ["email"], "unique": True},
        ],
    }
