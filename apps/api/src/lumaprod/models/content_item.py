"""
ContentItem model for daily devotional content.

There is exactly one row per (post_date, mode, language). The row carries
the text produced by generation steps, the assigned creator, the review
state, and the creator and AI video URLs.
"""

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lumaprod.models.base import Base, TimestampMixin
from lumaprod.models.enums import ContentMode, ContentStatus

if TYPE_CHECKING:
    from lumaprod.models.creator import Creator
    from lumaprod.models.generation_log import GenerationLogEntry
    from lumaprod.models.used_verse import UsedVerse


class ContentItem(Base, TimestampMixin):
    """
    ContentItem model representing one day's content for a mode and language.

    Attributes:
        id: Primary key
        post_date: Calendar date the content is published for
        mode: Content track (bible or positivity)
        language: Language code
        title: Display title
        content_text: Main text (verse text or positivity quote)
        verse_reference: Verse reference for bible-mode items
        status: Lifecycle status
        creator_id: Assigned creator (nullable until assigned)
        camera_script: Script the presenter reads on camera
        devotional_reflection: Reflection text
        meditation_script: Narration script for the meditation audio
        background_prompt: Image/video prompt for the background
        rejection_note: Reviewer note when rejected
        creator_video_url: Video submitted by the creator
        creator_video_thumbnail: Thumbnail of the submitted video
        ai_video_url: Video produced by the avatar provider
        ai_video_thumbnail: Thumbnail of the AI video
        published: Whether the item is live
    """

    __tablename__ = "daily_content"
    __table_args__ = (
        UniqueConstraint("post_date", "mode", "language", name="uq_daily_content_date_mode_language"),
        Index("ix_daily_content_status_mode_date", "status", "mode", "post_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Key
    post_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    mode: Mapped[ContentMode] = mapped_column(
        Enum(
            ContentMode,
            name="content_mode",
            native_enum=False,
            length=20,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    language: Mapped[str] = mapped_column(String(10), nullable=False, default="en")

    # Source material
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    content_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    verse_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Lifecycle
    status: Mapped[ContentStatus] = mapped_column(
        Enum(
            ContentStatus,
            name="content_status",
            native_enum=False,
            length=20,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=ContentStatus.EMPTY,
    )
    creator_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("creators.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Generated text
    camera_script: Mapped[str | None] = mapped_column(Text, nullable=True)
    devotional_reflection: Mapped[str | None] = mapped_column(Text, nullable=True)
    meditation_script: Mapped[str | None] = mapped_column(Text, nullable=True)
    background_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Review and videos
    rejection_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    creator_video_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    creator_video_thumbnail: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    ai_video_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    ai_video_thumbnail: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    creator: Mapped["Creator | None"] = relationship(
        "Creator",
        back_populates="content_items",
    )
    generation_logs: Mapped[list["GenerationLogEntry"]] = relationship(
        "GenerationLogEntry",
        back_populates="content_item",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="GenerationLogEntry.id",
    )
    used_verse: Mapped["UsedVerse | None"] = relationship(
        "UsedVerse",
        back_populates="content_item",
        uselist=False,
    )

    def __repr__(self) -> str:
        """Return string representation of the content item."""
        return (
            f"<ContentItem {self.id} {self.post_date} "
            f"{self.mode.value}/{self.language} [{self.status.value}]>"
        )
