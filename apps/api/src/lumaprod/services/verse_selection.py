"""
Verse selection for bible-mode content.

Selecting a verse and recording that it was used are separate steps.
Selection never writes, so a failed content create cannot burn a verse;
usage is recorded only after the content row referencing it is committed.
"""

import logging
import random
from dataclasses import dataclass

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from lumaprod.core.exceptions import PoolExhaustedError
from lumaprod.models import ContentItem, UsedVerse
from lumaprod.services.verse_pool import VerseKey, VerseReference, verse_pool

logger = logging.getLogger(__name__)


@dataclass
class PoolStats:
    """Usage figures for the verse pool."""

    used: int
    remaining: int
    total: int


class VerseSelector:
    """
    Picks unused verses uniformly at random from the fixed pool.

    Example:
        ```python
        selector = VerseSelector(db)
        verse = selector.select_unused_verse()
        ...  # create and commit the content item
        selector.record_usage(item, verse)
        db.commit()
        ```
    """

    def __init__(
        self,
        db: Session,
        pool: tuple[VerseReference, ...] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize the selector.

        Args:
            db: SQLAlchemy database session
            pool: Verse pool override (defaults to the full pool)
            rng: Random source (defaults to the module-level generator)
        """
        self._db = db
        self._pool = pool if pool is not None else verse_pool()
        self._rng = rng or random

    def _used_keys(self) -> set[VerseKey]:
        rows = self._db.execute(select(UsedVerse.book, UsedVerse.chapter, UsedVerse.verse))
        return {(book, chapter, verse) for book, chapter, verse in rows}

    def select_unused_verse(self, exclude: set[VerseKey] | None = None) -> VerseReference:
        """
        Choose a verse that has no UsedVerse row.

        Args:
            exclude: Extra keys to skip (e.g. a verse that just lost a race)

        Returns:
            The selected verse; nothing is written

        Raises:
            PoolExhaustedError: If every verse in the pool has been used
        """
        used = self._used_keys()
        if exclude:
            used |= exclude

        remaining = [verse for verse in self._pool if verse.key not in used]
        if not remaining:
            logger.warning(
                "Verse pool exhausted",
                extra={"total": len(self._pool)},
            )
            raise PoolExhaustedError(total=len(self._pool))

        return self._rng.choice(remaining)

    def record_usage(self, item: ContentItem, verse: VerseReference) -> UsedVerse:
        """
        Record that ``verse`` was consumed by ``item``.

        The item must already be committed. The row is flushed so that a
        unique-key collision surfaces here; the caller commits.
        """
        used = UsedVerse(
            book=verse.book,
            chapter=verse.chapter,
            verse=verse.verse,
            reference=verse.reference,
            content_item_id=item.id,
            used_date=item.post_date,
        )
        self._db.add(used)
        self._db.flush()
        return used

    def reset_pool(self) -> int:
        """
        Delete every UsedVerse row so the pool can be drawn from again.

        Returns:
            Number of rows removed
        """
        result = self._db.execute(delete(UsedVerse))
        self._db.commit()
        logger.info("Verse pool reset", extra={"removed": result.rowcount})
        return result.rowcount

    def stats(self) -> PoolStats:
        total = len(self._pool)
        used = self._db.execute(select(func.count(UsedVerse.id))).scalar_one()
        return PoolStats(used=used, remaining=max(0, total - used), total=total)
