"""
UsedVerse model recording which verses have been consumed.

A row is written once per bible-mode content item, after the item itself
has been committed. The unique (book, chapter, verse) key keeps two items
from ever sharing a verse.
"""

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lumaprod.models.base import Base, utcnow

if TYPE_CHECKING:
    from lumaprod.models.content_item import ContentItem


class UsedVerse(Base):
    """
    UsedVerse model.

    Attributes:
        id: Primary key
        book: Book name as listed in the verse pool
        chapter: Chapter number
        verse: Verse number
        reference: Display reference, e.g. "John 3:16"
        content_item_id: Content item that consumed the verse
        used_date: Post date of that content item
    """

    __tablename__ = "used_verses"
    __table_args__ = (
        UniqueConstraint("book", "chapter", "verse", name="uq_used_verses_book_chapter_verse"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    book: Mapped[str] = mapped_column(String(50), nullable=False)
    chapter: Mapped[int] = mapped_column(Integer, nullable=False)
    verse: Mapped[int] = mapped_column(Integer, nullable=False)
    reference: Mapped[str] = mapped_column(String(100), nullable=False)

    content_item_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("daily_content.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    used_date: Mapped[date] = mapped_column(Date, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    content_item: Mapped["ContentItem"] = relationship(
        "ContentItem",
        back_populates="used_verse",
    )

    def __repr__(self) -> str:
        return f"<UsedVerse {self.reference} -> {self.content_item_id}>"
