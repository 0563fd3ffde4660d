from fastapi.testclient import TestClient

from app.schemas import Identity, QuestionSpec
from app.utils.base import UserRole


TEACHER = Identity(user_id="teacher-1", role=UserRole.TEACHER)
OTHER_TEACHER = Identity(user_id="teacher-2", role=UserRole.TEACHER)
STUDENT = Identity(user_id="student-1", role=UserRole.STUDENT)
OTHER_STUDENT = Identity(user_id="student-2", role=UserRole.STUDENT)


def make_question(prompt: str, options=("A", "B", "C", "D"), correct: str = "A") -> QuestionSpec:
    return QuestionSpec(question=prompt, options=tuple(options), correct_answer=correct)


def question_payload(prompt: str, options=("A", "B", "C", "D"), correct: str = "A") -> dict:
    return {"question": prompt, "options": list(options), "correctAnswer": correct}


def signup(client: TestClient, email: str, role: str, password: str = "Secret123!") -> dict:
    response = client.post(
        "/api/users/signup",
        json={"name": email.split("@")[0], "email": email, "password": password, "role": role},
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(tokens: dict) -> dict:
    return {"Authorization": f"Bearer {tokens['access_token']}"}


class FakeRedis:
    """Just the TTL key commands the limiters use."""

    def __init__(self):
        self.ttls = {}

    def ttl(self, key):
        return self.ttls.get(key, -2)

    def exists(self, key):
        return int(key in self.ttls)

    def setex(self, name, time, value):
        self.ttls[name] = time
