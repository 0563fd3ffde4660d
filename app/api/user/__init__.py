from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel, EmailStr, Field

from app.repositories import UserRepository, get_user_repository
from app.schemas import UserRecord
from app.services.errors import EmailTaken, Unauthorized
from app.utils.base import UserRole
from app.services.auth import (
    TokenPair,
    verify_password,
    get_current_user,
    create_tokens,
    hash_password,
    resolve_token,
)


router = APIRouter()


class SignupBody(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    role: UserRole


@router.post("/signup", response_model=TokenPair, status_code=201)
def signup(body: SignupBody, users: UserRepository = Depends(get_user_repository)) -> TokenPair:
    # Reject duplicate email signups early; the unique index backs this up
    if users.get_by_email(body.email):
        raise EmailTaken()
    # Hash password before storing; return tokens so client is logged in
    user = users.create(name=body.name, email=body.email, password_hash=hash_password(body.password), role=body.role)
    return create_tokens(user)


@router.post("/login", response_model=TokenPair)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    users: UserRepository = Depends(get_user_repository),
) -> TokenPair:
    # Find user by email (username field of OAuth2PasswordRequestForm)
    user = users.get_by_email(form_data.username)
    # Validate password; avoid leaking whether email exists
    if not user or not verify_password(form_data.password, user.password):
        raise Unauthorized("Invalid credentials")
    return create_tokens(user)


class RefreshBody(BaseModel):
    refresh_token: str


@router.post("/refresh", response_model=TokenPair)
def refresh_token(body: RefreshBody, users: UserRepository = Depends(get_user_repository)) -> TokenPair:
    try:
        user = resolve_token(body.refresh_token, users, token_type="refresh")
    except Unauthorized as exc:
        raise Unauthorized("Invalid refresh token") from exc
    return create_tokens(user)


@router.post("/logout")
def logout(
    current_user: UserRecord = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
) -> dict:
    # Bump token_version so existing tokens become invalid immediately
    users.bump_token_version(current_user.id)
    return {"status": True}


@router.get("/me")
def me(current_user: UserRecord = Depends(get_current_user)) -> dict:
    return {"message": "You are a verified user!", "user": current_user.to_output()}
