import pytest
from fastapi.testclient import TestClient

from app.utils.config import settings

# Never reach for Mongo or Redis from the test suite
settings.storage_backend = "memory"
settings.create_test_rate_limit_seconds = 0
settings.recent_submission_seconds = 0

from main import create_app  # noqa: E402
from app.repositories import (  # noqa: E402
    get_submission_repository,
    get_test_repository,
    get_user_repository,
)
from app.repositories.memory import (  # noqa: E402
    MemoryStore,
    MemorySubmissionRepository,
    MemoryTestRepository,
    MemoryUserRepository,
)
from app.services.rate_limit import create_test_rate_limit  # noqa: E402
from tests.factories import auth_headers, signup  # noqa: E402


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def catalog_repo(store) -> MemoryTestRepository:
    return MemoryTestRepository(store)


@pytest.fixture
def submission_repo(store) -> MemorySubmissionRepository:
    return MemorySubmissionRepository(store)


@pytest.fixture
def app(store):
    application = create_app()
    application.dependency_overrides[get_test_repository] = lambda: MemoryTestRepository(store)
    application.dependency_overrides[get_submission_repository] = lambda: MemorySubmissionRepository(store)
    application.dependency_overrides[get_user_repository] = lambda: MemoryUserRepository(store)
    application.dependency_overrides[create_test_rate_limit] = lambda: None
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def teacher_headers(client) -> dict:
    return auth_headers(signup(client, "tina@example.com", "Teacher"))


@pytest.fixture
def student_headers(client) -> dict:
    return auth_headers(signup(client, "alice@example.com", "Student"))
