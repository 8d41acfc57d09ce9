"""
Security utilities for authentication.

Tokens are issued by the authentication service; this module verifies
them and exposes the claims the pipeline relies on (subject and role).
Token creation is kept for tooling and tests.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from lumaprod.core.config import get_settings
from lumaprod.core.exceptions import AuthenticationError
from lumaprod.models.enums import UserRole

ROLE_ADMIN = UserRole.ADMIN.value
ROLE_CREATOR = UserRole.CREATOR.value


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary of claims to encode in the token.
              Should include 'sub' (subject) and 'role'.
        expires_delta: Optional custom expiration time.
                      Defaults to settings.access_token_expire_minutes.

    Returns:
        Encoded JWT token string

    Example:
        ```python
        token = create_access_token(data={"sub": "42", "role": "creator"})
        ```
    """
    settings = get_settings()

    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(
            minutes=settings.access_token_expire_minutes
        )

    to_encode.update({"exp": expire, "iat": datetime.now(UTC)})

    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.algorithm,
    )
    return encoded_jwt


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode a JWT token.

    Args:
        token: The JWT token string to verify

    Returns:
        Dictionary of decoded token claims

    Raises:
        AuthenticationError: If the token is invalid, expired,
                           or cannot be decoded
    """
    settings = get_settings()

    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
        return payload
    except JWTError as e:
        raise AuthenticationError(
            message="Invalid or expired token",
            details={"error": str(e)},
        ) from e


@dataclass(frozen=True)
class Principal:
    """Authenticated caller resolved from the bearer token."""

    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
