"""
Pydantic schemas for daily content endpoints.

Defines the content item response, the creator submission request and
the admin review requests.
"""

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, Field

from lumaprod.models.enums import ContentMode, ContentStatus
from lumaprod.schemas.common import ApiResponse, BaseResourceSchema, PaginationMeta


class ContentItemResponse(BaseResourceSchema):
    """
    Schema for a daily content item.

    Attributes:
        post_date: Day the content is published
        mode: bible or positivity
        language: Content language code
        status: Lifecycle status
        creator_id: Assigned creator
    """

    post_date: date = Field(description="Day the content is published")
    mode: ContentMode = Field(description="Content mode")
    language: str = Field(description="Content language code")
    title: str | None = Field(default=None)
    content_text: str | None = Field(default=None)
    verse_reference: str | None = Field(default=None, description="Bible reference for bible mode")
    status: ContentStatus = Field(description="Lifecycle status")
    creator_id: int | None = Field(default=None, description="Assigned creator")

    camera_script: str | None = Field(default=None)
    devotional_reflection: str | None = Field(default=None)
    meditation_script: str | None = Field(default=None)
    background_prompt: str | None = Field(default=None)

    rejection_note: str | None = Field(default=None, description="Reviewer feedback after a rejection")
    creator_video_url: str | None = Field(default=None)
    creator_video_thumbnail: str | None = Field(default=None)
    ai_video_url: str | None = Field(default=None)
    ai_video_thumbnail: str | None = Field(default=None)
    published: bool = Field(default=False)


class ContentListResponse(ApiResponse[list[ContentItemResponse]]):
    """Response schema for the content list endpoint."""

    meta: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def create(
        cls,
        items: list[ContentItemResponse],
        pagination: PaginationMeta,
        filters_applied: dict[str, Any] | None = None,
    ) -> "ContentListResponse":
        """Create a content list response with pagination."""
        meta: dict[str, Any] = {"pagination": pagination.model_dump()}
        if filters_applied:
            meta["filters_applied"] = filters_applied
        return cls(data=items, meta=meta)


class SubmissionRequest(BaseModel):
    """
    Creator video submission.

    Attributes:
        content_item_id: Item being submitted
        video_url: Uploaded recording
        thumbnail_url: Uploaded thumbnail
    """

    content_item_id: int = Field(ge=1)
    video_url: str = Field(min_length=1, max_length=1024)
    thumbnail_url: str | None = Field(default=None, max_length=1024)


class ApproveRequest(BaseModel):
    """Approve a submitted item."""

    action: Literal["approve"]
    content_item_id: int = Field(ge=1)


class RejectRequest(BaseModel):
    """Send a submitted item back to its creator."""

    action: Literal["reject"]
    content_item_id: int = Field(ge=1)
    note: str = Field(max_length=2000, description="Feedback for the creator")


ReviewRequest = ApproveRequest | RejectRequest


class ContentCreateRequest(BaseModel):
    """
    Create a daily content item.

    Bible-mode items get an unused verse; its reference becomes the title
    unless one is given.
    """

    post_date: date
    mode: ContentMode
    language: str = Field(default="en", min_length=2, max_length=10)
    status: ContentStatus = Field(default=ContentStatus.EMPTY, description="empty or generated")
    title: str | None = Field(default=None, max_length=255)
    content_text: str | None = None
    camera_script: str | None = None
    devotional_reflection: str | None = None
    meditation_script: str | None = None
    background_prompt: str | None = None

    def text_fields(self) -> dict[str, str | None]:
        return self.model_dump(
            include={
                "title",
                "content_text",
                "camera_script",
                "devotional_reflection",
                "meditation_script",
                "background_prompt",
            },
            exclude_none=True,
        )
