from datetime import datetime, timedelta, timezone

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from app.repositories import UserRepository, get_user_repository
from app.schemas import Identity, UserRecord
from app.services.errors import Forbidden, Unauthorized
from app.utils.base import UserRole
from app.utils.config import settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/users/login", auto_error=False)


class TokenPair(BaseModel):
    """Pair of JWT tokens used by the client for auth and refresh."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


def verify_password(plain: str, hashed: str) -> bool:
    """Verify plaintext password against a bcrypt hash."""
    return pwd_context.verify(plain, hashed)


def hash_password(plain: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return pwd_context.hash(plain)


def create_token(subject: str, token_version: str, expires_delta: timedelta, token_type: str) -> str:
    """Create a signed JWT with subject, token version, expiration and type."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
        "tv": token_version,
        "typ": token_type,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_tokens(user: UserRecord) -> TokenPair:
    """Create access and refresh token pair for a user."""
    access = create_token(
        subject=user.id,
        token_version=user.token_version,
        expires_delta=timedelta(minutes=settings.access_token_expires_minutes),
        token_type="access",
    )
    refresh = create_token(
        subject=user.id,
        token_version=user.token_version,
        expires_delta=timedelta(days=settings.refresh_token_expires_days),
        token_type="refresh",
    )
    return TokenPair(access_token=access, refresh_token=refresh)


def resolve_token(token: str | None, users: UserRepository, token_type: str = "access") -> UserRecord:
    """Resolve a signed token to its user.

    Rejects missing, expired or tampered tokens, tokens of the wrong type and
    tokens whose version no longer matches the user (logout).
    """
    if not token:
        raise Unauthorized()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise Unauthorized() from exc

    user_id = payload.get("sub")
    token_version = payload.get("tv")
    if user_id is None or token_version is None or payload.get("typ") != token_type:
        raise Unauthorized()

    user = users.get(user_id)
    if not user or user.token_version != token_version:
        raise Unauthorized()
    return user


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    users: UserRepository = Depends(get_user_repository),
) -> UserRecord:
    """Auth dependency that validates an access token and returns the user."""
    return resolve_token(token, users)


def get_current_identity(user: UserRecord = Depends(get_current_user)) -> Identity:
    return Identity(user_id=user.id, role=user.role)


def authorize(identity: Identity | None, required_role: UserRole) -> Identity:
    """Permit the caller only when it acts in `required_role`."""
    if identity is None or identity.role != required_role:
        raise Forbidden(f"Only {required_role.value.lower()}s can perform this action.")
    return identity


def require_role(required_role: UserRole):
    """Return a FastAPI dependency that resolves the caller and enforces a role."""

    def _dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        return authorize(identity, required_role)

    return _dependency


require_teacher = require_role(UserRole.TEACHER)
require_student = require_role(UserRole.STUDENT)
