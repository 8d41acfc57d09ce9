"""
FastAPI dependency injection functions.

This module provides reusable dependencies for request handling,
including authentication, role checks, database sessions, and the
service objects the routes delegate to.
"""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.orm import Session

from lumaprod.core.config import Settings, get_settings
from lumaprod.core.database import get_db
from lumaprod.core.exceptions import AuthenticationError, AuthorizationError
from lumaprod.core.security import ROLE_ADMIN, ROLE_CREATOR, Principal, verify_token
from lumaprod.models import Creator
from lumaprod.services.generation import GenerationCorrelator

# Security scheme for bearer token authentication
security = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
) -> Principal:
    """
    Dependency to extract and verify the caller from the JWT token.

    This dependency requires a valid Bearer token in the Authorization header.
    The token must carry a subject and a role claim.

    Args:
        credentials: HTTP Bearer credentials from the request

    Returns:
        Principal built from the token claims

    Raises:
        AuthenticationError: If no credentials provided or token is invalid
    """
    if credentials is None:
        raise AuthenticationError(
            message="Authentication required",
            details={"error": "No credentials provided"},
        )

    payload = verify_token(credentials.credentials)

    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationError(
            message="Invalid token",
            details={"error": "Token has no subject"},
        )

    role = payload.get("role")
    if role not in (ROLE_ADMIN, ROLE_CREATOR):
        raise AuthenticationError(
            message="Invalid token",
            details={"error": "Token has no recognised role"},
        )

    return Principal(user_id=str(user_id), role=role)


async def require_admin(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> Principal:
    """Reject callers that are not administrators."""
    if not principal.is_admin:
        raise AuthorizationError(
            message="Admin access required",
            resource="content_production",
        )
    return principal


def get_current_creator(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
) -> Creator:
    """
    Resolve the creator profile linked to the caller.

    Raises:
        AuthorizationError: If the caller has no creator profile
    """
    creator = db.execute(
        select(Creator).where(Creator.user_id == principal.user_id)
    ).scalar_one_or_none()

    if creator is None:
        raise AuthorizationError(
            message="Creator access required",
            resource="creator",
        )
    return creator


class PaginationParams:
    """
    Common pagination parameters for list endpoints.

    Attributes:
        page: Current page number (1-indexed)
        page_size: Number of items per page
        offset: Calculated offset for database queries
    """

    def __init__(
        self,
        page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
        page_size: Annotated[
            int,
            Query(ge=1, le=200, description="Items per page (max 200)"),
        ] = 50,
    ) -> None:
        self.page = page
        self.page_size = page_size

    @property
    def offset(self) -> int:
        """Calculate database offset from page number."""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Get limit (alias for page_size)."""
        return self.page_size


def get_generation_correlator(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[GenerationCorrelator, None, None]:
    """
    Correlator bound to the request session.

    The HeyGen client is created on first use and closed after the response.
    """
    with GenerationCorrelator(db, settings=settings) as correlator:
        yield correlator


# Type aliases for cleaner dependency injection
DbSession = Annotated[Session, Depends(get_db)]
CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
AdminPrincipal = Annotated[Principal, Depends(require_admin)]
CurrentCreator = Annotated[Creator, Depends(get_current_creator)]
Pagination = Annotated[PaginationParams, Depends()]
AppSettings = Annotated[Settings, Depends(get_settings)]
Correlator = Annotated[GenerationCorrelator, Depends(get_generation_correlator)]
