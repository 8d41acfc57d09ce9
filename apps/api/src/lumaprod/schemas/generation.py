"""
Pydantic schemas for avatar video generation.

Covers the HeyGen completion webhook, the admin trigger request, and the
generation log and pending-job views.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lumaprod.integrations.heygen_client import VideoStatus
from lumaprod.models.enums import ContentMode, GenerationStatus
from lumaprod.schemas.assignment import MONTH_REGEX
from lumaprod.services.generation import JobResult


class HeyGenWebhookPayload(BaseModel):
    """
    HeyGen completion callback.

    HeyGen has delivered three shapes over time: ``event_type`` with an
    ``event_data`` object, a nested ``data`` object, and a flat body.
    ``normalize`` reads whichever is present.
    """

    model_config = ConfigDict(extra="allow")

    event_type: str | None = None
    event_data: dict[str, Any] | None = None
    data: dict[str, Any] | None = None

    video_id: str | None = None
    job_id: str | None = None
    status: str | None = None
    video_url: str | None = None
    url: str | None = None
    result_url: str | None = None
    thumbnail_url: str | None = None
    error: str | dict[str, Any] | None = None

    def _body(self) -> dict[str, Any]:
        flat = self.model_dump(exclude={"event_type", "event_data", "data"}, exclude_none=True)
        nested = self.event_data or self.data or {}
        return {**flat, **{k: v for k, v in nested.items() if v is not None}}

    def job_identifier(self) -> str | None:
        body = self._body()
        value = body.get("video_id") or body.get("job_id")
        return str(value) if value else None

    def normalize(self) -> JobResult:
        """Map the payload onto a JobResult."""
        body = self._body()

        raw_status = body.get("status")
        if raw_status is None and self.event_type:
            # e.g. "avatar_video.success" / "avatar_video.fail"
            raw_status = self.event_type.rsplit(".", 1)[-1]

        error = body.get("error") or body.get("msg")
        if isinstance(error, dict):
            error = error.get("message") or error.get("detail") or str(error)

        return JobResult(
            status=VideoStatus.normalize(raw_status),
            video_url=body.get("video_url") or body.get("url") or body.get("result_url"),
            thumbnail_url=body.get("thumbnail_url"),
            error=error or None,
        )


class WebhookAck(BaseModel):
    """Webhook acknowledgement; always returned with 200."""

    ok: bool = True
    message: str | None = None


class AvatarTriggerRequest(BaseModel):
    """
    Avatar video trigger.

    Attributes:
        month: Target month (YYYY-MM)
        mode: Content mode
        content_item_id: Submit a single item synchronously instead of the month
    """

    month: str = Field(pattern=MONTH_REGEX)
    mode: ContentMode
    content_item_id: int | None = Field(default=None, ge=1)


class AvatarTriggerResponse(BaseModel):
    """Result of an avatar video trigger."""

    queued: bool = Field(description="Bulk submission was queued as a background task")
    job_id: str | None = Field(default=None, description="HeyGen video id for a single item")
    celery_task_id: str | None = None
    month: str
    mode: ContentMode


class GenerationLogResponse(BaseModel):
    """One generation attempt."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    content_item_id: int
    field: str
    translation_code: str | None = None
    status: GenerationStatus
    error_message: str | None = None
    duration_ms: int | None = None
    heygen_video_id: str | None = None
    created_at: datetime


class PoolStatsResponse(BaseModel):
    """Verse pool usage."""

    used: int
    remaining: int
    total: int


class PoolResetResponse(BaseModel):
    """Verse pool reset result."""

    cleared: int
