"""
Creator model for people and AI avatars that produce videos.

Creators receive monthly content assignments. Capacity is a limit only;
how much of it is used is always counted from assigned content rows.
"""

from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lumaprod.models.base import Base, TimestampMixin
from lumaprod.models.enums import ContentMode

if TYPE_CHECKING:
    from lumaprod.models.content_item import ContentItem


def _split_pool(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


class Creator(Base, TimestampMixin):
    """
    Creator model representing a human presenter or AI avatar.

    Attributes:
        id: Primary key
        user_id: Subject of the creator's access token
        name: Display name
        email: Address for assignment and rejection emails
        languages: Language codes the creator records in
        monthly_capacity: Maximum items assignable per calendar month
        can_bible: Whether the creator takes bible-mode items
        can_positivity: Whether the creator takes positivity-mode items
        is_ai: Whether videos are generated by an AI avatar
        heygen_avatar_id: Comma-separated HeyGen avatar ids
        heygen_voice_id: Comma-separated HeyGen voice ids
        active: Whether the creator can receive new work
    """

    __tablename__ = "creators"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
        doc="Authenticated user id linked to this creator profile",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Capabilities
    languages: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=lambda: ["en"],
        doc="JSON: list of language codes",
    )
    monthly_capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    can_bible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    can_positivity: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # AI avatar
    is_ai: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    heygen_avatar_id: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    heygen_voice_id: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
    )

    content_items: Mapped[list["ContentItem"]] = relationship(
        "ContentItem",
        back_populates="creator",
    )

    def __repr__(self) -> str:
        """Return string representation of the creator."""
        return f"<Creator {self.id} ({self.name})>"

    def supports_language(self, language: str) -> bool:
        return language in (self.languages or [])

    def can_produce(self, mode: ContentMode | str) -> bool:
        """Check the mode capability flag for a content mode."""
        mode = ContentMode(mode)
        if mode is ContentMode.BIBLE:
            return self.can_bible
        return self.can_positivity

    @property
    def avatar_ids(self) -> list[str]:
        return _split_pool(self.heygen_avatar_id)

    @property
    def voice_ids(self) -> list[str]:
        return _split_pool(self.heygen_voice_id)

    @property
    def has_avatar(self) -> bool:
        """AI creator with at least one avatar configured."""
        return self.is_ai and bool(self.avatar_ids)
