"""
Creator portal endpoints.

Provides the authenticated creator's assignments and video submission.
"""

from fastapi import APIRouter, Query, status

from lumaprod.core.dependencies import CurrentCreator, DbSession
from lumaprod.schemas.common import ApiResponse
from lumaprod.schemas.content import ContentItemResponse, SubmissionRequest
from lumaprod.services.content_store import ContentStore
from lumaprod.services.lifecycle import LifecycleController

router = APIRouter()


@router.get(
    "/assignments",
    response_model=ApiResponse[list[ContentItemResponse]],
    status_code=status.HTTP_200_OK,
    summary="My Assignments",
    description="Content items assigned to the calling creator.",
)
async def list_assignments(
    creator: CurrentCreator,
    db: DbSession,
    month: str | None = Query(
        default=None,
        pattern=r"^\d{4}-\d{2}$",
        description="Limit to one month (YYYY-MM)",
    ),
) -> ApiResponse[list[ContentItemResponse]]:
    """List the caller's items ordered by post date."""
    items = ContentStore(db).list_for_creator(creator.id, month)
    return ApiResponse(
        data=[ContentItemResponse.model_validate(item) for item in items],
        meta={"creator_id": creator.id, "month": month},
    )


@router.post(
    "/submissions",
    response_model=ApiResponse[ContentItemResponse],
    status_code=status.HTTP_200_OK,
    summary="Submit Video",
    description="Submit a recorded video for an assigned item.",
)
async def submit_video(
    request: SubmissionRequest,
    creator: CurrentCreator,
    db: DbSession,
) -> ApiResponse[ContentItemResponse]:
    """
    Submit a recording for review.

    Raises:
        NotFoundError: If the item does not exist
        AuthorizationError: If the item is assigned to someone else
        AlreadySubmittedError: If the item is awaiting review
        AlreadyApprovedError: If the item was approved
        InvalidTransitionError: If the item was never assigned
    """
    item = LifecycleController(db).submit(
        request.content_item_id,
        creator,
        request.video_url,
        request.thumbnail_url,
    )
    return ApiResponse(data=ContentItemResponse.model_validate(item))
