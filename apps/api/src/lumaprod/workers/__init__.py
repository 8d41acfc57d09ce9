"""
Celery workers for the LumaProd content production pipeline.

This module provides the Celery infrastructure and tasks for:
- Creator notification emails (assignment, rejection)
- Bulk avatar video submission (HeyGen)
- Reconciliation of unsettled generation attempts
- Monthly auto-assignment

Generation settlement is idempotent, so redelivered generation tasks
never double-apply a result.
"""

from lumaprod.workers.celery_app import celery_app
from lumaprod.workers.tasks import (
    auto_assign_next_month,
    generate_avatar_videos_for_month,
    reconcile_generation_logs,
    send_creator_assignment_email,
    send_creator_rejection_email,
)
from lumaprod.workers.utils import get_db_session

__all__ = [
    # Celery app
    "celery_app",
    # Tasks
    "send_creator_assignment_email",
    "send_creator_rejection_email",
    "generate_avatar_videos_for_month",
    "reconcile_generation_logs",
    "auto_assign_next_month",
    # Utilities
    "get_db_session",
]
