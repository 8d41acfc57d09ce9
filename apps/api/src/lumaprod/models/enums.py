"""
Enum definitions for LumaProd database models.

These enums define the valid values for status fields and type fields
throughout the application. They are used both in SQLAlchemy models
and Pydantic schemas for consistent validation.
"""

import enum


class ContentMode(str, enum.Enum):
    """
    Content track a daily item belongs to.

    Attributes:
        BIBLE: Faith-based devotional built around a verse
        POSITIVITY: General uplift content
    """

    BIBLE = "bible"
    POSITIVITY = "positivity"

    @property
    def label(self) -> str:
        """Human-readable label used in emails."""
        return "Bible" if self is ContentMode.BIBLE else "Positivity"


class ContentStatus(str, enum.Enum):
    """
    Content item lifecycle status values.

    Attributes:
        EMPTY: Row exists, text not generated yet
        GENERATED: Text fields generated, no creator yet
        ASSIGNED: Owned by a creator, waiting for a video
        SUBMITTED: Creator video submitted, awaiting review
        REJECTED: Review sent back with a note
        APPROVED: Review accepted; terminal
    """

    EMPTY = "empty"
    GENERATED = "generated"
    ASSIGNED = "assigned"
    SUBMITTED = "submitted"
    REJECTED = "rejected"
    APPROVED = "approved"


class GenerationStatus(str, enum.Enum):
    """
    Generation attempt status values.

    Attributes:
        STARTED: Attempt recorded, result not known yet
        SUCCESS: Attempt produced its output
        FAILED: Attempt failed (check error_message)
    """

    STARTED = "started"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not GenerationStatus.STARTED


class GenerationField(str, enum.Enum):
    """
    Content item fields produced by a generation step.

    Only HEYGEN_VIDEO is produced asynchronously by an external provider.
    """

    HEYGEN_VIDEO = "heygen_video"
    CAMERA_SCRIPT = "camera_script"
    DEVOTIONAL_REFLECTION = "devotional_reflection"
    MEDITATION_SCRIPT = "meditation_script"
    BACKGROUND_PROMPT = "background_prompt"
    TTS_AUDIO = "tts_audio"
    SRT = "srt"


class UserRole(str, enum.Enum):
    """Role claim carried by the caller's access token."""

    ADMIN = "admin"
    CREATOR = "creator"
