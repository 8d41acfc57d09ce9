"""
Admin creator management endpoints.

Provides endpoints for listing, creating, updating and deactivating
creator profiles. Deactivation is soft: the row stays, pending work is
handed back for reassignment.
"""

import logging

from fastapi import APIRouter, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from lumaprod.core.dependencies import AdminPrincipal, DbSession
from lumaprod.core.exceptions import ConflictError, NotFoundError
from lumaprod.models import Creator
from lumaprod.schemas.common import ApiResponse
from lumaprod.schemas.creator import (
    CreatorCreate,
    CreatorDeactivateResponse,
    CreatorResponse,
    CreatorUpdate,
)
from lumaprod.services.assignment import AssignmentScheduler

logger = logging.getLogger(__name__)

router = APIRouter()


def get_creator_or_404(db: Session, creator_id: int) -> Creator:
    creator = db.get(Creator, creator_id)
    if creator is None:
        raise NotFoundError("Creator", creator_id)
    return creator


@router.get(
    "",
    response_model=ApiResponse[list[CreatorResponse]],
    status_code=status.HTTP_200_OK,
    summary="List Creators",
    description="List creator profiles by name, optionally filtered by active status.",
)
async def list_creators(
    admin: AdminPrincipal,
    db: DbSession,
    active: bool | None = Query(default=None, description="Only active (true) or inactive (false)"),
) -> ApiResponse[list[CreatorResponse]]:
    """List creators ordered by name."""
    stmt = select(Creator).order_by(Creator.name, Creator.id)
    if active is not None:
        stmt = stmt.where(Creator.active.is_(active))
    creators = db.execute(stmt).scalars().all()

    return ApiResponse(
        data=[CreatorResponse.model_validate(creator) for creator in creators],
        meta={"filters_applied": {"active": active}} if active is not None else {},
    )


@router.post(
    "",
    response_model=ApiResponse[CreatorResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create Creator",
    description="Create a creator profile for a user.",
)
async def create_creator(
    creator_data: CreatorCreate,
    admin: AdminPrincipal,
    db: DbSession,
) -> ApiResponse[CreatorResponse]:
    """
    Create a creator profile.

    A user has at most one profile; a deactivated one is brought back by
    updating it with ``active: true``.

    Raises:
        ConflictError: If the user already has a profile
    """
    existing = db.execute(
        select(Creator).where(Creator.user_id == creator_data.user_id)
    ).scalar_one_or_none()
    if existing is not None:
        message = (
            "User already has an active creator profile"
            if existing.active
            else "User has a deactivated creator profile; reactivate it instead"
        )
        raise ConflictError(
            message=message,
            resource_type="Creator",
            details={"creator_id": existing.id, "active": existing.active},
        )

    creator = Creator(**creator_data.model_dump(), active=True)
    db.add(creator)
    db.commit()
    db.refresh(creator)

    logger.info(
        f"Created creator {creator.id}",
        extra={"creator_id": creator.id, "user_id": creator.user_id, "admin": admin.user_id},
    )
    return ApiResponse(data=CreatorResponse.model_validate(creator))


@router.api_route(
    "/{creator_id}",
    methods=["PUT", "PATCH"],
    response_model=ApiResponse[CreatorResponse],
    status_code=status.HTTP_200_OK,
    summary="Update Creator",
    description="Update creator profile fields. Omitted fields are left unchanged.",
)
async def update_creator(
    creator_id: int,
    creator_data: CreatorUpdate,
    admin: AdminPrincipal,
    db: DbSession,
) -> ApiResponse[CreatorResponse]:
    """
    Update a creator profile.

    Raises:
        NotFoundError: If the creator does not exist
    """
    creator = get_creator_or_404(db, creator_id)

    update_data = creator_data.changes()
    for field, value in update_data.items():
        setattr(creator, field, value)

    db.commit()
    db.refresh(creator)

    logger.info(
        f"Updated creator {creator.id}",
        extra={"creator_id": creator.id, "fields": sorted(update_data), "admin": admin.user_id},
    )
    return ApiResponse(data=CreatorResponse.model_validate(creator))


@router.delete(
    "/{creator_id}",
    response_model=ApiResponse[CreatorDeactivateResponse],
    status_code=status.HTTP_200_OK,
    summary="Deactivate Creator",
    description="Deactivate a creator and unassign their generated and assigned items.",
)
async def deactivate_creator(
    creator_id: int,
    admin: AdminPrincipal,
    db: DbSession,
) -> ApiResponse[CreatorDeactivateResponse]:
    """
    Soft-deactivate a creator.

    Raises:
        NotFoundError: If the creator does not exist
        ConflictError: If the creator is already inactive
    """
    released = AssignmentScheduler(db).deactivate_creator(creator_id)
    return ApiResponse(data=CreatorDeactivateResponse(deactivated=True, unassigned_count=released))
