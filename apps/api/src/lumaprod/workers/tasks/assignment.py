"""
Scheduled monthly assignment.

Celery beat runs ``auto_assign_next_month`` on ``auto_assign_day_of_month``
so creators have their scripts well before the month starts.
"""

import logging
from typing import Any

from celery import shared_task

from lumaprod.models import ContentMode
from lumaprod.services.assignment import AssignmentScheduler
from lumaprod.workers.utils import format_task_result, get_db_session, next_month

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    name="lumaprod.workers.tasks.assignment.auto_assign_next_month",
    acks_late=True,
)
def auto_assign_next_month(self, month: str | None = None) -> dict[str, Any]:
    """
    Run auto-assignment for every content mode.

    Args:
        month: Target month (YYYY-MM); defaults to next month
    """
    month = month or next_month()
    results: dict[str, dict[str, int]] = {}

    for mode in ContentMode:
        with get_db_session() as db:
            result = AssignmentScheduler(db).auto_assign(month, mode)
        results[mode.value] = {"assigned": result.assigned, "skipped": result.skipped}

        logger.info(
            f"Auto-assigned {result.assigned} {mode.value} items for {month}",
            extra={"month": month, "mode": mode.value, "assigned": result.assigned, "skipped": result.skipped},
        )

    return format_task_result("auto_assign_next_month", month=month, modes=results)
