from pydantic import BaseModel

from app.utils.base import UserRole


class UserRecord(BaseModel):
    """Stored user as seen by the services. `password` is the bcrypt hash."""
    id: str
    name: str
    email: str
    password: str
    role: UserRole
    token_version: str = "1"

    def to_output(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role.value}


class Identity(BaseModel):
    """A verified caller: who they are and which role they act in."""
    user_id: str
    role: UserRole
