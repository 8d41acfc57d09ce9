"""
LumaProd Core Module.

This module contains the foundational components of the application:
- Configuration management
- Logging setup
- Database connections and session handling
- Security utilities (JWT decoding)
- Custom exceptions
- Dependency injection helpers
"""

from lumaprod.core.config import Settings, get_settings
from lumaprod.core.database import Base, get_db
from lumaprod.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CreatorIncapableError,
    InvalidTransitionError,
    LumaProdException,
    NotFoundError,
    PoolExhaustedError,
    ProviderError,
    UnknownJobError,
    ValidationError,
)

__all__ = [
    "Settings",
    "get_settings",
    "Base",
    "get_db",
    "LumaProdException",
    "AuthenticationError",
    "AuthorizationError",
    "CreatorIncapableError",
    "InvalidTransitionError",
    "NotFoundError",
    "PoolExhaustedError",
    "ProviderError",
    "UnknownJobError",
    "ValidationError",
]
