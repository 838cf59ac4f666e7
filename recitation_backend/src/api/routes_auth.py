"""
Auth endpoints:
- POST /api/auth/register
- POST /api/auth/login
- GET /api/auth/me

Register and login both respond with { token, user }.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.api.auth import Identity, create_access_token, get_current_identity, hash_password, verify_password
from src.api.db import db_session_dep
from src.api.errors import AuthError, ConflictError, NotFound
from src.api.models import ROLE_USER, User
from src.api.schemas import AuthLoginRequest, AuthRegisterRequest, AuthTokenResponse, UserPublic

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def default_avatar_url(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(name)}&background=random"


def _normalize_email(email: str) -> str:
    return email.lower().strip()


def _token_response(user: User) -> AuthTokenResponse:
    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    return AuthTokenResponse(token=token, user=UserPublic.model_validate(user))


@router.post(
    "/register",
    response_model=AuthTokenResponse,
    summary="Register a new user",
    description="Creates a new user and returns a JWT token with the public user profile.",
    operation_id="register_user",
)
def register(req: AuthRegisterRequest, db: Session = Depends(db_session_dep)) -> AuthTokenResponse:
    """Register a new user with name/email/password."""
    email = _normalize_email(req.email)

    existing = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if existing:
        raise ConflictError("Email already exists")

    user = User(
        name=req.name,
        email=email,
        password_hash=hash_password(req.password),
        role=ROLE_USER,
        avatar=default_avatar_url(req.name),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration for the same email.
        db.rollback()
        raise ConflictError("Email already exists")
    db.refresh(user)

    logger.info("register: user_id=%s", user.id)
    return _token_response(user)


@router.post(
    "/login",
    response_model=AuthTokenResponse,
    summary="Login",
    description="Validates credentials and returns a JWT token with the public user profile.",
    operation_id="login_user",
)
def login(req: AuthLoginRequest, db: Session = Depends(db_session_dep)) -> AuthTokenResponse:
    """Login an existing user."""
    email = _normalize_email(req.email)

    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if not user or not verify_password(req.password, user.password_hash):
        logger.info("login_failed")
        raise AuthError("Invalid credentials")

    return _token_response(user)


@router.get(
    "/me",
    response_model=UserPublic,
    summary="Current user",
    description="Returns the public profile of the authenticated user.",
    operation_id="current_user",
)
def me(identity: Identity = Depends(get_current_identity), db: Session = Depends(db_session_dep)) -> UserPublic:
    user = db.get(User, identity.id)
    if not user:
        raise NotFound("User not found")
    return UserPublic.model_validate(user)
