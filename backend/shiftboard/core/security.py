"""
Bearer token verification.

Tokens are issued by the identity service that owns user accounts; this
service only verifies them and reads the caller's id and role.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from jwt.exceptions import InvalidTokenError
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from shiftboard.domain.scheduling.value_objects import Role
from shiftboard.domain.shared import UnauthenticatedError

from .config import Settings


class TokenPayload(BaseModel):
    sub: str = Field(min_length=1)
    role: str | None = None


class Principal(BaseModel):
    """Authenticated caller."""

    user_id: str
    role: Role

    @property
    def is_viewer(self) -> bool:
        return self.role.is_viewer


def create_access_token(
    subject: str | Any,
    role: Role | str,
    settings: Settings,
    expires_delta: timedelta = timedelta(hours=8),
) -> str:
    """Encode a signed access token carrying the subject and role."""
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {
        "exp": expire,
        "sub": str(subject),
        "role": role.value if isinstance(role, Role) else role,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str | None, settings: Settings) -> Principal:
    """
    Verify a bearer token and resolve the caller.

    Raises:
        UnauthenticatedError: If the token is missing, expired, badly signed
            or lacks a subject
    """
    if not token:
        raise UnauthenticatedError("Not authenticated")
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        token_data = TokenPayload(**payload)
    except (InvalidTokenError, PydanticValidationError) as e:
        raise UnauthenticatedError() from e

    return Principal(user_id=token_data.sub, role=Role.parse(token_data.role))
