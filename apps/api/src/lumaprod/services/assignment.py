"""
Assignment scheduler for monthly content.

Distributes unassigned content items round-robin across eligible creators
in ascending id order. Remaining capacity is always counted from the
content rows a creator already owns in the month and mode; there is no
stored counter. Creator rows are locked first (ordered by id), then the candidate
items, so concurrent runs cannot double-assign an item or overfill a creator.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import Session

from lumaprod.core.exceptions import (
    ConflictError,
    CreatorIncapableError,
    InvalidTransitionError,
    NotFoundError,
)
from lumaprod.models import ContentItem, ContentMode, ContentStatus, Creator
from lumaprod.services.content_store import ContentStore, month_range
from lumaprod.services.lifecycle import ASSIGNABLE_STATUSES, LifecycleController
from lumaprod.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)


@dataclass
class AssignmentResult:
    """Outcome of an auto-assignment run."""

    assigned: int = 0
    skipped: int = 0
    per_creator: dict[int, int] = field(default_factory=dict)


class AssignmentScheduler:
    """
    Assigns content items to creators.

    Example:
        ```python
        scheduler = AssignmentScheduler(db)
        result = scheduler.auto_assign("2026-11", ContentMode.BIBLE)
        print(result.assigned, result.skipped)
        ```
    """

    def __init__(
        self,
        db: Session,
        lifecycle: LifecycleController | None = None,
        notifier: NotificationDispatcher | None = None,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            db: SQLAlchemy database session
            lifecycle: Lifecycle controller used for the assign transition
            notifier: Dispatcher for assignment emails
        """
        self._db = db
        self._store = ContentStore(db)
        self._notifier = notifier or NotificationDispatcher()
        self._lifecycle = lifecycle or LifecycleController(db, self._notifier)

    def auto_assign(
        self,
        month: str,
        mode: ContentMode | str,
        language: str | None = None,
    ) -> AssignmentResult:
        """
        Assign every unassigned item of a month and mode that a creator can take.

        Items already owned by a creator are never touched, so repeated runs
        only pick up newly eligible rows. Items no eligible creator has room
        for, and items locked by a concurrent run, are counted as skipped.

        Args:
            month: Month in ``YYYY-MM`` format
            mode: Content mode
            language: Optional language filter

        Returns:
            AssignmentResult with assigned and skipped counts

        Raises:
            ValidationError: If the month is malformed
        """
        start, end = month_range(month)
        mode = ContentMode(mode)

        creators = self._eligible_creators(mode, language)
        remaining = {
            creator.id: max(0, creator.monthly_capacity - self._store.assigned_count(creator.id, month, mode))
            for creator in creators
        }

        candidates = select(ContentItem).where(
            ContentItem.mode == mode,
            ContentItem.post_date >= start,
            ContentItem.post_date < end,
            ContentItem.creator_id.is_(None),
            ContentItem.status.in_(list(ASSIGNABLE_STATUSES)),
        )
        if language is not None:
            candidates = candidates.where(ContentItem.language == language)

        total = self._db.execute(
            select(func.count()).select_from(candidates.subquery())
        ).scalar_one()
        items = self._lock_candidates(candidates)

        # Rows held by a concurrent run are left to it and count as skipped
        result = AssignmentResult(skipped=max(0, total - len(items)))
        new_rows: dict[int, int] = defaultdict(int)
        pointer = 0

        for item in items:
            chosen = None
            for step in range(len(creators)):
                candidate = creators[(pointer + step) % len(creators)]
                if remaining[candidate.id] > 0 and candidate.supports_language(item.language):
                    chosen = candidate
                    pointer = (pointer + step + 1) % len(creators)
                    break

            if chosen is None:
                result.skipped += 1
                continue

            self._lifecycle.assign(item, chosen)
            remaining[chosen.id] -= 1
            new_rows[chosen.id] += 1
            result.assigned += 1

        self._db.commit()
        result.per_creator = dict(new_rows)

        logger.info(
            f"Auto-assigned {result.assigned} items for {month} ({mode.value})",
            extra={
                "month": month,
                "mode": mode.value,
                "language": language,
                "assigned": result.assigned,
                "skipped": result.skipped,
                "creators": len(new_rows),
            },
        )

        # One email per creator, after the assignments are durable
        for creator_id, count in sorted(new_rows.items()):
            self._notifier.notify_assignment(creator_id, month, mode.value, count)

        return result

    def reassign_day(self, content_item_id: int, creator_id: int) -> ContentItem:
        """
        Move a single item to a specific creator.

        A rejected item returns to ``assigned`` for the new creator; an
        assigned item keeps its status; an empty or generated item is
        assigned for the first time.

        Raises:
            NotFoundError: If the item or creator does not exist
            InvalidTransitionError: If the item was already submitted or approved
            CreatorIncapableError: If the creator is inactive, lacks the mode or
                language, or has no capacity left in the item's month and mode
        """
        item = self._store.get(content_item_id, for_update=True)
        creator = self._db.execute(
            select(Creator).where(Creator.id == creator_id).with_for_update()
        ).scalar_one_or_none()
        if creator is None:
            raise NotFoundError("Creator", creator_id)

        if item.status in (ContentStatus.SUBMITTED, ContentStatus.APPROVED):
            raise InvalidTransitionError(
                f"Cannot reassign: content already {item.status.value}",
                current_status=item.status.value,
                action="reassign",
            )

        self._check_capable(item, creator)

        previous_creator_id = item.creator_id
        if item.status == ContentStatus.ASSIGNED:
            item.creator_id = creator.id
        else:
            self._lifecycle.assign(item, creator)
        self._db.commit()
        self._db.refresh(item)

        logger.info(
            f"Reassigned content {item.id} to creator {creator.id}",
            extra={
                "content_item_id": item.id,
                "creator_id": creator.id,
                "previous_creator_id": previous_creator_id,
            },
        )
        return item

    def deactivate_creator(self, creator_id: int) -> int:
        """
        Mark a creator inactive and hand their pending work back.

        Items the creator holds in ``generated`` or ``assigned`` status lose
        their creator and return to ``generated``; submitted, approved and
        rejected items keep their history.

        Returns:
            Number of items released

        Raises:
            NotFoundError: If the creator does not exist
            ConflictError: If the creator is already inactive
        """
        creator = self._db.execute(
            select(Creator).where(Creator.id == creator_id).with_for_update()
        ).scalar_one_or_none()
        if creator is None:
            raise NotFoundError("Creator", creator_id)
        if not creator.active:
            raise ConflictError(
                "Creator is already deactivated",
                resource_type="Creator",
                details={"creator_id": creator_id},
            )

        creator.active = False
        released = self._db.execute(
            update(ContentItem)
            .where(
                ContentItem.creator_id == creator_id,
                ContentItem.status.in_([ContentStatus.GENERATED, ContentStatus.ASSIGNED]),
            )
            .values(creator_id=None, status=ContentStatus.GENERATED)
        ).rowcount
        self._db.commit()

        logger.info(
            f"Deactivated creator {creator_id}",
            extra={"creator_id": creator_id, "unassigned_count": released},
        )
        return released

    def _lock_candidates(self, candidates: Select) -> list[ContentItem]:
        """Lock the candidate rows, skipping any another transaction holds."""
        stmt = (
            candidates
            .order_by(ContentItem.post_date, ContentItem.language, ContentItem.id)
            .with_for_update(skip_locked=True)
        )
        return list(self._db.execute(stmt).scalars().all())

    def _eligible_creators(self, mode: ContentMode, language: str | None) -> list[Creator]:
        mode_flag = Creator.can_bible if mode is ContentMode.BIBLE else Creator.can_positivity
        creators = self._db.execute(
            select(Creator)
            .where(Creator.active.is_(True), mode_flag.is_(True))
            .order_by(Creator.id)
            .with_for_update()
        ).scalars().all()

        # Languages are a JSON list; filter in Python
        if language is not None:
            return [creator for creator in creators if creator.supports_language(language)]
        return list(creators)

    def _check_capable(self, item: ContentItem, creator: Creator) -> None:
        if not creator.active:
            raise CreatorIncapableError(
                "Creator is not active",
                creator_id=creator.id,
                reason="inactive",
            )
        if not creator.can_produce(item.mode):
            raise CreatorIncapableError(
                f"Creator cannot produce {item.mode.value} content",
                creator_id=creator.id,
                reason="mode",
            )
        if not creator.supports_language(item.language):
            raise CreatorIncapableError(
                f"Creator does not record in language '{item.language}'",
                creator_id=creator.id,
                reason="language",
            )

        if item.creator_id != creator.id:
            month = item.post_date.strftime("%Y-%m")
            if self._store.assigned_count(creator.id, month, item.mode) >= creator.monthly_capacity:
                raise CreatorIncapableError(
                    f"Creator has no {item.mode.value} capacity left for {month}",
                    creator_id=creator.id,
                    reason="capacity",
                )
