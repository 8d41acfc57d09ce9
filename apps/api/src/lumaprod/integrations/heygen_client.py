"""
HeyGen API client for avatar video generation.

This module provides integration with HeyGen's API for:
- Portrait talking-head video submission with a completion webhook
- Job status polling (used by the reconciliation sweep)

API Reference: https://docs.heygen.com/reference
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from lumaprod.core.config import Settings, get_settings
from lumaprod.core.exceptions import ProviderError, ServiceUnavailableError, ValidationError
from lumaprod.integrations.base_client import SyncBaseHTTPClient

logger = logging.getLogger(__name__)

# Portrait output for the daily feed
VIDEO_WIDTH = 1080
VIDEO_HEIGHT = 1920
BACKGROUND_COLOR = "#000000"


class VideoStatus(str, Enum):
    """HeyGen video generation status values."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def normalize(cls, raw: str | None) -> "VideoStatus":
        """Map the provider's status spellings onto the known set."""
        value = (raw or "").strip().lower()
        if value in ("completed", "complete", "done", "success"):
            return cls.COMPLETED
        if value in ("failed", "error", "fail"):
            return cls.FAILED
        if value in ("processing", "rendering", "in_progress", "running"):
            return cls.PROCESSING
        return cls.PENDING

    @property
    def is_terminal(self) -> bool:
        return self in (VideoStatus.COMPLETED, VideoStatus.FAILED)


@dataclass
class VideoGenerationJob:
    """
    HeyGen video generation job.

    Attributes:
        video_id: Unique video/job identifier
        status: Current job status
        video_url: URL of the rendered video (when completed)
        thumbnail_url: URL to video thumbnail
        error_message: Error details if failed
    """

    video_id: str
    status: VideoStatus = VideoStatus.PENDING
    video_url: str | None = None
    thumbnail_url: str | None = None
    error_message: str | None = None

    @classmethod
    def from_api_response(cls, video_id: str, data: dict[str, Any]) -> "VideoGenerationJob":
        """Create VideoGenerationJob from a status response body."""
        error = data.get("error")
        if isinstance(error, dict):
            error = error.get("message") or error.get("detail") or str(error)

        return cls(
            video_id=data.get("video_id") or data.get("id") or video_id,
            status=VideoStatus.normalize(data.get("status")),
            video_url=data.get("video_url"),
            thumbnail_url=data.get("thumbnail_url"),
            error_message=error or None,
        )


class HeyGenClient(SyncBaseHTTPClient):
    """
    HeyGen API client for avatar video generation.

    Example:
        ```python
        client = HeyGenClient()

        video_id = client.create_video(
            script_text="Good morning. Today's verse is John 3:16.",
            avatar_id="Anna_public_3_20240108",
            voice_id="en-US-JennyNeural",
            callback_url="https://example.com/api/v1/webhooks/heygen",
        )

        job = client.get_video_status(video_id)
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        settings: Settings | None = None,
        max_retries: int = 3,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the HeyGen client.

        Args:
            api_key: HeyGen API key (uses settings if not provided)
            settings: Application settings instance
            max_retries: Maximum number of attempts for status calls
            timeout: Request timeout in seconds (defaults to the submit timeout)
            transport: Optional httpx transport

        Raises:
            ServiceUnavailableError: If no API key is configured
        """
        settings = settings or get_settings()
        api_key = api_key or settings.heygen_api_key

        if not api_key:
            raise ServiceUnavailableError(
                "HeyGen API key is not configured",
                service="HeyGen",
            )

        super().__init__(
            base_url=settings.heygen_base_url,
            api_key=api_key,
            settings=settings,
            max_retries=max_retries,
            timeout=timeout or settings.heygen_submit_timeout_seconds,
            transport=transport,
        )

    @property
    def service_name(self) -> str:
        """Return service name for logging."""
        return "HeyGen"

    def _get_headers(self) -> dict[str, str]:
        """Return default headers for API requests."""
        return {
            "X-Api-Key": self._api_key or "",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def create_video(
        self,
        script_text: str,
        avatar_id: str,
        voice_id: str | None = None,
        callback_url: str | None = None,
        timeout: float | None = None,
        max_retries: int = 1,
    ) -> str:
        """
        Submit a portrait talking-head video.

        Submission is not retried by default; a lost submission is picked up
        by the reconciliation sweep instead.

        Args:
            script_text: Text for the avatar to speak
            avatar_id: Avatar identifier
            voice_id: Voice identifier (uses avatar's default if not specified)
            callback_url: Webhook notified on completion
            timeout: Bounded timeout for this call
            max_retries: Attempts for this call

        Returns:
            The HeyGen video id

        Raises:
            ValidationError: If script is empty
            ProviderError: If submission fails or times out
        """
        if not script_text or not script_text.strip():
            raise ValidationError(
                message="Script text cannot be empty",
                field="script_text",
            )

        voice: dict[str, Any] = {"type": "text", "input_text": script_text}
        if voice_id:
            voice["voice_id"] = voice_id

        payload: dict[str, Any] = {
            "video_inputs": [
                {
                    "character": {
                        "type": "avatar",
                        "avatar_id": avatar_id,
                        "avatar_style": "normal",
                    },
                    "voice": voice,
                    "background": {"type": "color", "value": BACKGROUND_COLOR},
                }
            ],
            "dimension": {"width": VIDEO_WIDTH, "height": VIDEO_HEIGHT},
        }
        if callback_url:
            payload["callback_url"] = callback_url

        logger.info(
            "Creating HeyGen video",
            extra={
                "avatar_id": avatar_id,
                "voice_id": voice_id,
                "script_length": len(script_text),
            },
        )

        response = self._post(
            "v2/video/generate",
            json_data=payload,
            timeout=timeout,
            max_retries=max_retries,
        )
        data = response.json()

        video_id = (data.get("data") or {}).get("video_id")
        if not video_id:
            raise ProviderError(
                service="HeyGen",
                message="No video ID returned from HeyGen API",
                original_error=str(data)[:500],
            )

        logger.info("HeyGen video job created", extra={"video_id": video_id})
        return video_id

    def get_video_status(self, video_id: str) -> VideoGenerationJob:
        """
        Get status of a video generation job.

        Args:
            video_id: Video/job identifier

        Returns:
            VideoGenerationJob with current status

        Raises:
            ProviderError: If status check fails
        """
        response = self._get("v1/video_status.get", params={"video_id": video_id})
        data = response.json()

        job = VideoGenerationJob.from_api_response(video_id, data.get("data") or {})

        logger.debug(
            "HeyGen video status",
            extra={"video_id": video_id, "status": job.status.value},
        )
        return job


def get_heygen_client(settings: Settings | None = None) -> HeyGenClient:
    """
    Factory function to create a HeyGen client.

    Args:
        settings: Optional settings override

    Returns:
        Configured HeyGenClient instance
    """
    return HeyGenClient(settings=settings)
