"""
Admin content production endpoints.

Provides endpoints for listing and creating daily content, assigning it
to creators, reviewing submissions, triggering avatar videos, and
inspecting generation logs and the verse pool.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Query, status

from lumaprod.core.dependencies import AdminPrincipal, Correlator, DbSession, Pagination
from lumaprod.core.exceptions import ServiceUnavailableError
from lumaprod.models.enums import ContentMode, ContentStatus
from lumaprod.schemas.assignment import (
    AssignmentRequest,
    AutoAssignRequest,
    AutoAssignResponse,
    ReassignResponse,
)
from lumaprod.schemas.common import ApiResponse, PaginationMeta
from lumaprod.schemas.content import (
    ApproveRequest,
    ContentCreateRequest,
    ContentItemResponse,
    ContentListResponse,
    ReviewRequest,
)
from lumaprod.schemas.generation import (
    AvatarTriggerRequest,
    AvatarTriggerResponse,
    GenerationLogResponse,
    PoolResetResponse,
    PoolStatsResponse,
)
from lumaprod.services.assignment import AssignmentScheduler
from lumaprod.services.content_store import ContentStore
from lumaprod.services.generation_log import GenerationLog
from lumaprod.services.lifecycle import LifecycleController
from lumaprod.services.verse_selection import VerseSelector

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=ContentListResponse,
    status_code=status.HTTP_200_OK,
    summary="List Content",
    description="Get a month of daily content with optional filters.",
)
async def list_content(
    admin: AdminPrincipal,
    db: DbSession,
    pagination: Pagination,
    month: str = Query(pattern=r"^\d{4}-\d{2}$", description="Month (YYYY-MM)"),
    mode: ContentMode | None = Query(default=None, description="Filter by mode"),
    language: str | None = Query(default=None, description="Filter by language"),
    status_filter: ContentStatus | None = Query(
        default=None,
        alias="status",
        description="Filter by status",
    ),
) -> ContentListResponse:
    """
    List content items for a month.

    Returns:
        Paginated list ordered by date, language and mode
    """
    items, total = ContentStore(db).list_month(
        month,
        mode=mode,
        language=language,
        status=status_filter,
        offset=pagination.offset,
        limit=pagination.limit,
    )

    filters_applied: dict[str, Any] = {"month": month}
    if mode:
        filters_applied["mode"] = mode.value
    if language:
        filters_applied["language"] = language
    if status_filter:
        filters_applied["status"] = status_filter.value

    return ContentListResponse.create(
        items=[ContentItemResponse.model_validate(item) for item in items],
        pagination=PaginationMeta.create(
            page=pagination.page,
            page_size=pagination.page_size,
            total_items=total,
        ),
        filters_applied=filters_applied,
    )


@router.post(
    "",
    response_model=ApiResponse[ContentItemResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create Content",
    description="Create a daily content item; bible items reserve an unused verse.",
)
async def create_content(
    request: ContentCreateRequest,
    admin: AdminPrincipal,
    db: DbSession,
) -> ApiResponse[ContentItemResponse]:
    """
    Create a content item for (post_date, mode, language).

    Raises:
        ConflictError: If the item already exists
        PoolExhaustedError: If a bible item is requested and every verse is used
    """
    store = ContentStore(db)
    if request.mode is ContentMode.BIBLE:
        item = store.create_bible_item(
            request.post_date,
            request.language,
            status=request.status,
            **request.text_fields(),
        )
    else:
        item = store.create_item(
            request.post_date,
            request.mode,
            request.language,
            status=request.status,
            **request.text_fields(),
        )

    return ApiResponse(data=ContentItemResponse.model_validate(item))


@router.post(
    "/assign",
    response_model=ApiResponse[AutoAssignResponse | ReassignResponse],
    status_code=status.HTTP_200_OK,
    summary="Assign Content",
    description="Auto-assign a month round-robin, or reassign a single day.",
)
async def assign_content(
    request: Annotated[AssignmentRequest, Body(discriminator="action")],
    admin: AdminPrincipal,
    db: DbSession,
) -> ApiResponse[AutoAssignResponse | ReassignResponse]:
    """
    Run an assignment action.

    Raises:
        NotFoundError: If the item or creator does not exist
        InvalidTransitionError: If the item is already submitted or approved
        CreatorIncapableError: If the creator cannot take the item
    """
    scheduler = AssignmentScheduler(db)

    if isinstance(request, AutoAssignRequest):
        result = scheduler.auto_assign(request.month, request.mode, request.language)
        logger.info(
            f"Auto-assign {request.month} {request.mode.value}: "
            f"{result.assigned} assigned, {result.skipped} skipped",
            extra={"admin": admin.user_id, "month": request.month, "mode": request.mode.value},
        )
        return ApiResponse(data=AutoAssignResponse(assigned=result.assigned, skipped=result.skipped))

    item = scheduler.reassign_day(request.content_item_id, request.creator_id)
    return ApiResponse(
        data=ReassignResponse(content_item_id=item.id, creator_id=request.creator_id),
    )


@router.post(
    "/review",
    response_model=ApiResponse[ContentItemResponse],
    status_code=status.HTTP_200_OK,
    summary="Review Submission",
    description="Approve a submitted video, or reject it with a note for the creator.",
)
async def review_content(
    request: Annotated[ReviewRequest, Body(discriminator="action")],
    admin: AdminPrincipal,
    db: DbSession,
) -> ApiResponse[ContentItemResponse]:
    """
    Approve or reject a submitted item.

    Raises:
        NotFoundError: If the item does not exist
        InvalidTransitionError: If the item is not submitted
        ValidationError: If a rejection has no note
    """
    lifecycle = LifecycleController(db)

    if isinstance(request, ApproveRequest):
        item = lifecycle.approve(request.content_item_id, admin)
    else:
        item = lifecycle.reject(request.content_item_id, request.note, admin)

    return ApiResponse(data=ContentItemResponse.model_validate(item))


@router.get(
    "/heygen",
    response_model=ApiResponse[list[GenerationLogResponse]],
    status_code=status.HTTP_200_OK,
    summary="Pending Avatar Videos",
    description="List avatar video jobs that are waiting on HeyGen.",
)
async def list_pending_videos(
    admin: AdminPrincipal,
    db: DbSession,
) -> ApiResponse[list[GenerationLogResponse]]:
    """List ``started`` generation attempts that carry a HeyGen video id."""
    entries = GenerationLog(db).pending_jobs()
    return ApiResponse(
        data=[GenerationLogResponse.model_validate(entry) for entry in entries],
        meta={"pending_total": len(entries)},
    )


@router.post(
    "/heygen",
    response_model=ApiResponse[AvatarTriggerResponse],
    status_code=status.HTTP_200_OK,
    summary="Trigger Avatar Videos",
    description=(
        "Submit the AI avatar video for one item synchronously, or queue "
        "submission for every eligible item of a month and mode."
    ),
)
def trigger_avatar_videos(
    request: AvatarTriggerRequest,
    admin: AdminPrincipal,
    correlator: Correlator,
) -> ApiResponse[AvatarTriggerResponse]:
    """
    Trigger HeyGen avatar video generation.

    Raises:
        NotFoundError: If the single item does not exist
        ConflictError: If the item is not eligible or already pending
        ProviderError: If HeyGen rejects a single-item submission
        ServiceUnavailableError: If HeyGen or the task queue is unavailable
    """
    if request.content_item_id is not None:
        job_id = correlator.submit_for_item(request.content_item_id)
        return ApiResponse(
            data=AvatarTriggerResponse(
                queued=False,
                job_id=job_id,
                month=request.month,
                mode=request.mode,
            )
        )

    from lumaprod.workers.tasks.generation import generate_avatar_videos_for_month

    try:
        task = generate_avatar_videos_for_month.apply_async(
            kwargs={"month": request.month, "mode": request.mode.value},
        )
    except Exception as e:
        logger.exception(
            "Failed to queue avatar video submission",
            extra={"month": request.month, "mode": request.mode.value},
        )
        raise ServiceUnavailableError("Task queue is unavailable", service="Celery") from e

    logger.info(
        f"Queued avatar video submission for {request.month} {request.mode.value}",
        extra={"admin": admin.user_id, "celery_task_id": task.id},
    )
    return ApiResponse(
        data=AvatarTriggerResponse(
            queued=True,
            celery_task_id=task.id,
            month=request.month,
            mode=request.mode,
        )
    )


@router.get(
    "/verse-pool",
    response_model=ApiResponse[PoolStatsResponse],
    status_code=status.HTTP_200_OK,
    summary="Verse Pool Stats",
)
async def verse_pool_stats(
    admin: AdminPrincipal,
    db: DbSession,
) -> ApiResponse[PoolStatsResponse]:
    """Used and remaining verses."""
    stats = VerseSelector(db).stats()
    return ApiResponse(
        data=PoolStatsResponse(used=stats.used, remaining=stats.remaining, total=stats.total),
    )


@router.post(
    "/verse-pool/reset",
    response_model=ApiResponse[PoolResetResponse],
    status_code=status.HTTP_200_OK,
    summary="Reset Verse Pool",
    description="Forget every used verse so the full pool is available again.",
)
async def reset_verse_pool(
    admin: AdminPrincipal,
    db: DbSession,
) -> ApiResponse[PoolResetResponse]:
    """Operator reset once the pool is exhausted."""
    cleared = VerseSelector(db).reset_pool()
    logger.warning(
        f"Verse pool reset by {admin.user_id}",
        extra={"admin": admin.user_id, "cleared": cleared},
    )
    return ApiResponse(data=PoolResetResponse(cleared=cleared))


@router.get(
    "/{content_item_id}/generation-logs",
    response_model=ApiResponse[list[GenerationLogResponse]],
    status_code=status.HTTP_200_OK,
    summary="Generation Logs",
    description="Generation attempts for one content item, newest first.",
)
async def list_generation_logs(
    content_item_id: int,
    admin: AdminPrincipal,
    db: DbSession,
) -> ApiResponse[list[GenerationLogResponse]]:
    """
    List generation attempts for an item.

    Raises:
        NotFoundError: If the item does not exist
    """
    item = ContentStore(db).get(content_item_id)
    entries = GenerationLog(db).list_for_item(item.id)
    return ApiResponse(data=[GenerationLogResponse.model_validate(entry) for entry in entries])
