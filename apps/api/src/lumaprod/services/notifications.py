"""
Notification triggers for the production pipeline.

Emails are sent by Celery tasks. Triggers are fired after the state change
they describe has been committed; a failure to enqueue is logged and never
undoes that state change.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Enqueues the creator assignment and rejection emails.

    Example:
        ```python
        notifier = NotificationDispatcher()
        notifier.notify_assignment(creator_id=3, month="2026-11", mode="bible", count=12)
        ```
    """

    def notify_assignment(self, creator_id: int, month: str, mode: str, count: int) -> None:
        """Queue one assignment email covering ``count`` new items."""
        from lumaprod.workers.tasks.notifications import send_creator_assignment_email

        self._enqueue(
            send_creator_assignment_email,
            creator_id=creator_id,
            month=month,
            mode=mode,
            count=count,
        )

    def notify_rejection(
        self,
        content_item_id: int,
        creator_id: int,
        post_date: str,
        mode: str,
        note: str,
    ) -> None:
        """
        Queue the rejection email for a reviewed item.

        The recipient and the note are the ones in force when the item was
        rejected; later resubmission or reassignment does not change them.
        """
        from lumaprod.workers.tasks.notifications import send_creator_rejection_email

        self._enqueue(
            send_creator_rejection_email,
            content_item_id=content_item_id,
            creator_id=creator_id,
            post_date=post_date,
            mode=mode,
            note=note,
        )

    def _enqueue(self, task: Any, **kwargs: Any) -> None:
        try:
            result = task.apply_async(kwargs=kwargs)
        except Exception:
            logger.exception(
                f"Failed to enqueue notification '{task.name}'",
                extra={"task": task.name, **kwargs},
            )
            return

        logger.info(
            f"Enqueued notification '{task.name}'",
            extra={"task": task.name, "celery_task_id": result.id, **kwargs},
        )
