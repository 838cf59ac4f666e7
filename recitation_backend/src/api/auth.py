"""
Authentication utilities: password hashing, JWT handling and authorization.

Clients send:
- Authorization: Bearer <token>

Tokens are stateless and carry {sub, email, role}; they cannot be revoked before
they expire.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from src.api.errors import AuthError, Forbidden
from src.api.models import ROLE_ADMIN

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def _bcrypt_rounds() -> int:
    try:
        return int(os.getenv("BCRYPT_ROUNDS", "10"))
    except ValueError:
        return 10


_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=_bcrypt_rounds())


def _jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise RuntimeError("JWT_SECRET env var is required.")
    return secret


def _jwt_algorithm() -> str:
    return os.getenv("JWT_ALGORITHM", "HS256")


def _jwt_exp_minutes() -> int:
    try:
        return int(os.getenv("JWT_EXPIRES_MINUTES", "1440"))  # default: 24 hours
    except ValueError:
        return 1440


@dataclass(frozen=True)
class Identity:
    """Decoded identity claim of an authenticated request."""

    id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


# PUBLIC_INTERFACE
def hash_password(password: str) -> str:
    """Hash a plain-text password."""
    return _pwd_context.hash(password)


# PUBLIC_INTERFACE
def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plain-text password against a hash."""
    return _pwd_context.verify(password, password_hash)


# PUBLIC_INTERFACE
def create_access_token(*, user_id: int, email: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token.

    Token contains:
      - sub: user id (string)
      - email
      - role
      - iat, exp

    Returns:
        JWT string.
    """
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta if expires_delta is not None else timedelta(minutes=_jwt_exp_minutes()))
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, _jwt_secret(), algorithm=_jwt_algorithm())


# PUBLIC_INTERFACE
def decode_access_token(token: str) -> Identity:
    """
    Decode and validate a token.

    Raises:
        AuthError(403): if the token is malformed, tampered with or expired.
    """
    try:
        payload = jwt.decode(token, _jwt_secret(), algorithms=[_jwt_algorithm()])
        return Identity(id=int(payload["sub"]), email=str(payload["email"]), role=str(payload["role"]))
    except (JWTError, KeyError, TypeError, ValueError):
        raise AuthError("Invalid or expired token.", status_code=403)


# PUBLIC_INTERFACE
def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Identity:
    """
    FastAPI dependency for protected routes.

    Raises 401 if the bearer token is absent and 403 if it is invalid or expired.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError("Not authenticated.")
    return decode_access_token(credentials.credentials)


# PUBLIC_INTERFACE
def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Optional[Identity]:
    """Like `get_current_identity`, but anonymous (None) instead of failing."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    try:
        return decode_access_token(credentials.credentials)
    except AuthError:
        return None


# PUBLIC_INTERFACE
def authorize(
    identity: Identity,
    *,
    owner_id: Optional[int] = None,
    role: Optional[str] = None,
    allow_admin: bool = True,
) -> None:
    """
    Raise Forbidden unless `identity` may act.

    Access is granted when the identity owns the resource (`owner_id`), holds
    `role`, or is an admin and `allow_admin` is set.
    """
    if owner_id is not None and identity.id == owner_id:
        return
    if role is not None and identity.role == role:
        return
    if allow_admin and identity.is_admin:
        return
    logger.info("authorize_denied: user_id=%s owner_id=%s role=%s", identity.id, owner_id, role)
    raise Forbidden()
