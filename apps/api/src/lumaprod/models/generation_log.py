"""
GenerationLogEntry model for the generation audit trail.

One row per generation attempt. Rows for asynchronous providers carry the
provider job id in a uniquely indexed column; callbacks are matched to the
attempt through that column. A row leaves ``started`` exactly once.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lumaprod.models.base import Base, as_utc, utcnow
from lumaprod.models.enums import GenerationStatus

if TYPE_CHECKING:
    from lumaprod.models.content_item import ContentItem


class GenerationLogEntry(Base):
    """
    GenerationLogEntry model tracking a single generation attempt.

    Note: entries do not carry updated_at; they are written once as
    ``started``, get their job id attached, and are settled once.

    Attributes:
        id: Primary key
        content_item_id: Content item the attempt belongs to
        field: Generated field (see GenerationField)
        translation_code: Bible translation for per-translation fields
        status: started, success or failed
        error_message: Failure details
        duration_ms: Time from start to settlement
        heygen_video_id: Provider job id used to correlate callbacks
        created_at: When the attempt started
    """

    __tablename__ = "content_generation_logs"
    __table_args__ = (
        Index("ix_content_generation_logs_status_created", "status", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    content_item_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("daily_content.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    field: Mapped[str] = mapped_column(String(50), nullable=False)
    translation_code: Mapped[str | None] = mapped_column(String(20), nullable=True)

    status: Mapped[GenerationStatus] = mapped_column(
        Enum(
            GenerationStatus,
            name="generation_status",
            native_enum=False,
            length=20,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=GenerationStatus.STARTED,
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    heygen_video_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        doc="Provider job id; attached right after submission",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    content_item: Mapped["ContentItem"] = relationship(
        "ContentItem",
        back_populates="generation_logs",
    )

    def __repr__(self) -> str:
        """Return string representation of the log entry."""
        return f"<GenerationLogEntry {self.id} [{self.field}:{self.status.value}]>"

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def elapsed_ms(self, now: datetime | None = None) -> int:
        """Milliseconds since the attempt started."""
        now = now or utcnow()
        return max(0, int((now - as_utc(self.created_at)).total_seconds() * 1000))
