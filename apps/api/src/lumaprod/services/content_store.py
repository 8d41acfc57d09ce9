"""
Content store for daily content items.

Owns the (post_date, mode, language) uniqueness rule, month-scoped
queries, and the create-then-record ordering for bible-mode verses.
"""

import logging
import re
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lumaprod.core.exceptions import (
    ConflictError,
    NotFoundError,
    PoolExhaustedError,
    ValidationError,
)
from lumaprod.models import ContentItem, ContentMode, ContentStatus
from lumaprod.services.verse_pool import VerseKey, VerseReference
from lumaprod.services.verse_selection import VerseSelector

logger = logging.getLogger(__name__)

MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

# Attempts to reserve a verse when concurrent creates keep colliding
MAX_VERSE_ATTEMPTS = 5


def month_range(month: str) -> tuple[date, date]:
    """
    Parse a ``YYYY-MM`` string into a half-open date range.

    Returns:
        (first day of the month, first day of the next month)

    Raises:
        ValidationError: If the string is not a valid month
    """
    match = MONTH_PATTERN.match(month or "")
    if not match:
        raise ValidationError("Month must be in YYYY-MM format", field="month")

    year, month_number = int(match.group(1)), int(match.group(2))
    if not 1 <= month_number <= 12:
        raise ValidationError("Month must be between 01 and 12", field="month")

    start = date(year, month_number, 1)
    if month_number == 12:
        end = date(year + 1, 1, 1)
    else:
        end = date(year, month_number + 1, 1)
    return start, end


class ContentStore:
    """Persistence operations for ContentItem rows."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, item_id: int, for_update: bool = False) -> ContentItem:
        """
        Load a content item by id.

        Args:
            item_id: Content item id
            for_update: Take a row lock for a read-modify-write

        Raises:
            NotFoundError: If no such item exists
        """
        stmt = select(ContentItem).where(ContentItem.id == item_id)
        if for_update:
            stmt = stmt.with_for_update()

        item = self._db.execute(stmt).scalar_one_or_none()
        if item is None:
            raise NotFoundError("ContentItem", item_id)
        return item

    def list_month(
        self,
        month: str,
        mode: ContentMode | None = None,
        language: str | None = None,
        status: ContentStatus | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[ContentItem], int]:
        """
        List items whose post_date falls in ``month``.

        Returns:
            Tuple of (items ordered by date/language/mode, total count)
        """
        start, end = month_range(month)
        stmt = select(ContentItem).where(
            ContentItem.post_date >= start,
            ContentItem.post_date < end,
        )
        if mode is not None:
            stmt = stmt.where(ContentItem.mode == mode)
        if language is not None:
            stmt = stmt.where(ContentItem.language == language)
        if status is not None:
            stmt = stmt.where(ContentItem.status == status)

        total = self._db.execute(
            select(func.count()).select_from(stmt.subquery())
        ).scalar_one()

        stmt = stmt.order_by(
            ContentItem.post_date,
            ContentItem.language,
            ContentItem.mode,
            ContentItem.id,
        ).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        return list(self._db.execute(stmt).scalars().all()), total

    def list_for_creator(self, creator_id: int, month: str | None = None) -> list[ContentItem]:
        """Items assigned to a creator, optionally limited to one month."""
        stmt = select(ContentItem).where(ContentItem.creator_id == creator_id)
        if month is not None:
            start, end = month_range(month)
            stmt = stmt.where(ContentItem.post_date >= start, ContentItem.post_date < end)
        stmt = stmt.order_by(ContentItem.post_date, ContentItem.mode, ContentItem.id)
        return list(self._db.execute(stmt).scalars().all())

    def assigned_count(self, creator_id: int, month: str, mode: ContentMode | None = None) -> int:
        """
        Number of items in ``month`` currently owned by the creator.

        This is the capacity already used. Capacity is tracked per mode, so
        pass ``mode`` to count only that mode's items; languages are pooled.
        """
        start, end = month_range(month)
        stmt = select(func.count(ContentItem.id)).where(
            ContentItem.creator_id == creator_id,
            ContentItem.post_date >= start,
            ContentItem.post_date < end,
        )
        if mode is not None:
            stmt = stmt.where(ContentItem.mode == ContentMode(mode))
        return self._db.execute(stmt).scalar_one()

    def create_item(
        self,
        post_date: date,
        mode: ContentMode,
        language: str = "en",
        status: ContentStatus = ContentStatus.EMPTY,
        **fields: str | None,
    ) -> ContentItem:
        """
        Create and commit a content item.

        Args:
            post_date: Publication date
            mode: Content mode
            language: Language code
            status: Initial status (empty or generated)
            **fields: Optional text fields (title, content_text, camera_script, ...)

        Raises:
            ValidationError: For an initial status other than empty/generated
            ConflictError: If an item already exists for the key
        """
        if status not in (ContentStatus.EMPTY, ContentStatus.GENERATED):
            raise ValidationError(
                "New content must start as empty or generated",
                field="status",
            )

        item = ContentItem(
            post_date=post_date,
            mode=mode,
            language=language,
            status=status,
            **fields,
        )
        self._db.add(item)
        try:
            self._db.commit()
        except IntegrityError as e:
            self._db.rollback()
            raise ConflictError(
                f"Content already exists for {post_date} {ContentMode(mode).value}/{language}",
                resource_type="ContentItem",
                details={"post_date": post_date.isoformat(), "mode": ContentMode(mode).value, "language": language},
            ) from e

        self._db.refresh(item)
        logger.info(
            "Created content item",
            extra={"content_item_id": item.id, "post_date": str(post_date), "mode": item.mode.value},
        )
        return item

    def create_bible_item(
        self,
        post_date: date,
        language: str = "en",
        selector: VerseSelector | None = None,
        **fields: str | None,
    ) -> ContentItem:
        """
        Create a bible-mode item around a freshly selected verse.

        The item is committed before the verse is recorded, so a failed
        create never consumes a verse. If another writer records the same
        verse first, a different verse is selected and the item updated.
        When no verse can be reserved the item is deleted again.

        Raises:
            PoolExhaustedError: If no unused verse is left
            ConflictError: If the item key exists, or no verse could be reserved
        """
        selector = selector or VerseSelector(self._db)
        verse = selector.select_unused_verse()

        fields.setdefault("title", verse.reference)
        item = self.create_item(
            post_date,
            ContentMode.BIBLE,
            language,
            verse_reference=verse.reference,
            **fields,
        )
        try:
            self.reserve_verse(item, selector, verse)
        except (PoolExhaustedError, ConflictError):
            self._db.rollback()
            self._db.delete(item)
            self._db.commit()
            logger.warning(
                "Removed content item after failing to reserve a verse",
                extra={"post_date": str(post_date), "language": language},
            )
            raise
        return item

    def reserve_verse(
        self,
        item: ContentItem,
        selector: VerseSelector,
        verse: VerseReference | None = None,
    ) -> ContentItem:
        """
        Record a verse for a committed bible-mode item, retrying on collision.

        When ``verse`` is omitted a new one is selected and written onto the item.
        """
        tried: set[VerseKey] = set()
        if verse is None:
            verse = selector.select_unused_verse()
            self._apply_verse(item, None, verse)

        for attempt in range(1, MAX_VERSE_ATTEMPTS + 1):
            try:
                selector.record_usage(item, verse)
                self._db.commit()
                return item
            except IntegrityError:
                self._db.rollback()
                logger.info(
                    "Verse taken concurrently, selecting another",
                    extra={"content_item_id": item.id, "reference": verse.reference, "attempt": attempt},
                )
                tried.add(verse.key)
                previous = verse
                verse = selector.select_unused_verse(exclude=tried)
                self._apply_verse(item, previous, verse)

        raise ConflictError(
            "Could not reserve a verse for content item",
            resource_type="UsedVerse",
            details={"content_item_id": item.id},
        )

    def _apply_verse(
        self,
        item: ContentItem,
        previous: VerseReference | None,
        verse: VerseReference,
    ) -> None:
        if previous is not None and item.title == previous.reference:
            item.title = verse.reference
        elif previous is None and not item.title:
            item.title = verse.reference
        item.verse_reference = verse.reference
        self._db.commit()
