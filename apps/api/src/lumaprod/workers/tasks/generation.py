"""
Avatar video generation tasks.

- generate_avatar_videos_for_month: bulk HeyGen submission for a month/mode
- reconcile_generation_logs: periodic sweep for generation attempts that no
  callback has settled (scheduled by Celery beat)
"""

import logging
from typing import Any

from celery import shared_task

from lumaprod.core.exceptions import LumaProdException
from lumaprod.models import ContentMode
from lumaprod.services.generation import GenerationCorrelator
from lumaprod.workers.utils import format_task_result, get_db_session

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    name="lumaprod.workers.tasks.generation.generate_avatar_videos_for_month",
    acks_late=True,
)
def generate_avatar_videos_for_month(self, month: str, mode: str) -> dict[str, Any]:
    """
    Submit avatar videos for every eligible item of a month and mode.

    Not retried as a whole: items that failed to submit are left to the
    reconciliation sweep.

    Args:
        month: Target month (YYYY-MM)
        mode: Content mode
    """
    task_name = "generate_avatar_videos_for_month"
    logger.info(
        f"Starting avatar submission for {month} {mode}",
        extra={"month": month, "mode": mode, "celery_task_id": self.request.id},
    )

    try:
        with get_db_session() as db, GenerationCorrelator(db) as correlator:
            summary = correlator.submit_month(month, ContentMode(mode))
    except LumaProdException as e:
        logger.error(
            f"Avatar submission for {month} {mode} aborted: {e.message}",
            extra={"month": month, "mode": mode, "code": e.code},
        )
        return format_task_result(task_name, success=False, error=e.message, month=month, mode=mode)

    return format_task_result(task_name, month=month, mode=mode, **summary.to_dict())


@shared_task(
    bind=True,
    name="lumaprod.workers.tasks.generation.reconcile_generation_logs",
    acks_late=True,
)
def reconcile_generation_logs(self, stale_after_minutes: int | None = None) -> dict[str, Any]:
    """
    Settle stale ``started`` generation attempts.

    Args:
        stale_after_minutes: Age threshold (defaults to settings)
    """
    with get_db_session() as db, GenerationCorrelator(db) as correlator:
        summary = correlator.reconcile(stale_after_minutes)

    return format_task_result("reconcile_generation_logs", **summary.to_dict())
