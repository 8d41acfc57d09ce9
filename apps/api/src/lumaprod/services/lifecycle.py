"""
Content lifecycle state machine.

States: empty -> generated -> assigned -> submitted -> approved | rejected,
with rejected -> submitted as the only way back. Every transition reads the
current status under a row lock in the same transaction as the write.
Illegal transitions raise typed errors; nothing is retried here.
"""

import logging

from sqlalchemy.orm import Session

from lumaprod.core.exceptions import (
    AlreadyApprovedError,
    AlreadySubmittedError,
    AuthorizationError,
    InvalidTransitionError,
    ValidationError,
)
from lumaprod.core.security import Principal
from lumaprod.models import ContentItem, ContentStatus, Creator
from lumaprod.services.content_store import ContentStore
from lumaprod.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)

# Statuses from which a creator may be (re)assigned
ASSIGNABLE_STATUSES = frozenset(
    {ContentStatus.EMPTY, ContentStatus.GENERATED, ContentStatus.REJECTED}
)

# Statuses from which a video may be submitted
SUBMITTABLE_STATUSES = frozenset({ContentStatus.ASSIGNED, ContentStatus.REJECTED})


class LifecycleController:
    """
    Applies guarded status transitions to content items.

    ``assign`` and ``submit_generated`` mutate an item inside the caller's
    unit of work. The creator- and admin-facing transitions lock, write,
    and commit on their own.
    """

    def __init__(
        self,
        db: Session,
        notifier: NotificationDispatcher | None = None,
    ) -> None:
        """
        Initialize the controller.

        Args:
            db: SQLAlchemy database session
            notifier: Dispatcher for rejection emails
        """
        self._db = db
        self._store = ContentStore(db)
        self._notifier = notifier or NotificationDispatcher()

    # -------------------------------------------------------------------------
    # Transitions applied inside a caller's transaction
    # -------------------------------------------------------------------------

    def assign(self, item: ContentItem, creator: Creator) -> None:
        """
        Give an item to a creator; the caller commits.

        Coming from ``rejected`` discards the previous review note and video.

        Raises:
            InvalidTransitionError: If the item is not in an assignable status
        """
        if item.status not in ASSIGNABLE_STATUSES:
            raise InvalidTransitionError(
                f"Cannot assign content in status '{item.status.value}'",
                current_status=item.status.value,
                action="assign",
            )

        if item.status == ContentStatus.REJECTED:
            item.rejection_note = None
            item.creator_video_url = None
            item.creator_video_thumbnail = None

        item.creator_id = creator.id
        item.status = ContentStatus.ASSIGNED

    def submit_generated(
        self,
        item: ContentItem,
        video_url: str,
        thumbnail_url: str | None = None,
    ) -> None:
        """
        Submit an AI-generated video on behalf of the item's AI creator.

        The caller commits, together with the generation log update.
        """
        self._check_submittable(item)
        self._apply_submission(item, video_url, thumbnail_url)

    # -------------------------------------------------------------------------
    # Self-committing transitions
    # -------------------------------------------------------------------------

    def mark_generated(self, item_id: int, **fields: str | None) -> ContentItem:
        """
        Store generated text and move an item from ``empty`` to ``generated``.

        Raises:
            NotFoundError: If the item does not exist
            InvalidTransitionError: If the item is not empty
        """
        item = self._store.get(item_id, for_update=True)
        if item.status != ContentStatus.EMPTY:
            raise InvalidTransitionError(
                f"Cannot mark content generated in status '{item.status.value}'",
                current_status=item.status.value,
                action="generate",
            )

        for name, value in fields.items():
            setattr(item, name, value)
        item.status = ContentStatus.GENERATED
        self._db.commit()
        self._db.refresh(item)
        return item

    def submit(
        self,
        item_id: int,
        creator: Creator,
        video_url: str,
        thumbnail_url: str | None = None,
    ) -> ContentItem:
        """
        Submit a creator's recorded video for review.

        Args:
            item_id: Content item id
            creator: The calling creator
            video_url: Uploaded video URL
            thumbnail_url: Uploaded thumbnail URL

        Returns:
            The updated item, now ``submitted``

        Raises:
            NotFoundError: If the item does not exist
            AuthorizationError: If the caller is not the assigned creator
            AlreadySubmittedError: If the item is awaiting review
            AlreadyApprovedError: If the item was approved
            InvalidTransitionError: If the item was never assigned
        """
        item = self._store.get(item_id, for_update=True)

        if item.creator_id is None or item.creator_id != creator.id:
            raise AuthorizationError(
                message="Only the assigned creator can submit this content",
                resource="content_item",
                action="submit",
            )

        self._check_submittable(item)
        self._apply_submission(item, video_url, thumbnail_url)
        self._db.commit()
        self._db.refresh(item)

        logger.info(
            f"Content {item.id} submitted for review",
            extra={"content_item_id": item.id, "creator_id": creator.id},
        )
        return item

    def approve(self, item_id: int, reviewer: Principal) -> ContentItem:
        """
        Approve a submitted item. Approval is terminal.

        Raises:
            AuthorizationError: If the reviewer is not an admin
            NotFoundError: If the item does not exist
            InvalidTransitionError: If the item is not submitted
        """
        self._require_admin(reviewer, "approve")
        item = self._store.get(item_id, for_update=True)
        self._require_submitted(item, "approve")

        item.status = ContentStatus.APPROVED
        self._db.commit()
        self._db.refresh(item)

        logger.info(
            f"Content {item.id} approved",
            extra={"content_item_id": item.id, "reviewer": reviewer.user_id},
        )
        return item

    def reject(self, item_id: int, note: str, reviewer: Principal) -> ContentItem:
        """
        Send a submitted item back to its creator with a note.

        The rejection email is queued after the commit; queueing failures
        are logged and do not affect the transition.

        Raises:
            AuthorizationError: If the reviewer is not an admin
            ValidationError: If the note is empty
            NotFoundError: If the item does not exist
            InvalidTransitionError: If the item is not submitted
        """
        self._require_admin(reviewer, "reject")
        note = (note or "").strip()
        if not note:
            raise ValidationError("A rejection note is required", field="note")

        item = self._store.get(item_id, for_update=True)
        self._require_submitted(item, "reject")

        item.status = ContentStatus.REJECTED
        item.rejection_note = note
        self._db.commit()
        self._db.refresh(item)

        logger.info(
            f"Content {item.id} rejected",
            extra={"content_item_id": item.id, "reviewer": reviewer.user_id},
        )

        if item.creator_id is not None:
            self._notifier.notify_rejection(
                item.id,
                creator_id=item.creator_id,
                post_date=item.post_date.isoformat(),
                mode=item.mode.value,
                note=note,
            )
        return item

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_submittable(item: ContentItem) -> None:
        if item.status == ContentStatus.SUBMITTED:
            raise AlreadySubmittedError()
        if item.status == ContentStatus.APPROVED:
            raise AlreadyApprovedError()
        if item.status not in SUBMITTABLE_STATUSES:
            raise InvalidTransitionError(
                f"Cannot submit content in status '{item.status.value}'",
                current_status=item.status.value,
                action="submit",
            )

    @staticmethod
    def _apply_submission(item: ContentItem, video_url: str, thumbnail_url: str | None) -> None:
        item.creator_video_url = video_url
        item.creator_video_thumbnail = thumbnail_url
        item.rejection_note = None
        item.status = ContentStatus.SUBMITTED

    @staticmethod
    def _require_admin(reviewer: Principal, action: str) -> None:
        if not reviewer.is_admin:
            raise AuthorizationError(
                message="Admin access required",
                resource="content_item",
                action=action,
            )

    @staticmethod
    def _require_submitted(item: ContentItem, action: str) -> None:
        if item.status != ContentStatus.SUBMITTED:
            raise InvalidTransitionError(
                f"Cannot {action} content in status '{item.status.value}'",
                current_status=item.status.value,
                action=action,
            )
