"""
Celery application configuration for LumaProd.

This module configures the Celery app with:
- Redis broker and result backend
- Task routing for notification and generation queues
- Retry policies with linear backoff
- Serialization settings
- Beat schedule for the reconciliation sweep and monthly auto-assignment
"""

import logging
from typing import Any

from celery import Celery
from celery.schedules import crontab
from celery.signals import after_setup_logger, after_setup_task_logger

from lumaprod.core.config import get_settings
from lumaprod.core.logging import quiet_library_loggers

logger = logging.getLogger(__name__)

# Get settings
settings = get_settings()

# =============================================================================
# Celery Application Configuration
# =============================================================================

celery_app = Celery(
    "lumaprod_workers",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "lumaprod.workers.tasks.notifications",
        "lumaprod.workers.tasks.generation",
        "lumaprod.workers.tasks.assignment",
    ],
)

# =============================================================================
# Task Serialization Settings
# =============================================================================

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
)

# =============================================================================
# Task Execution Settings
# =============================================================================

celery_app.conf.update(
    # Acknowledge after execution so a crashed worker's task is redelivered
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    # Bulk avatar submission pauses between provider calls
    task_time_limit=1800,
    task_soft_time_limit=1740,
    task_track_started=True,
    task_send_sent_event=True,
)

# =============================================================================
# Retry Policy Configuration
# =============================================================================

DEFAULT_RETRY_POLICY: dict[str, Any] = {
    "max_retries": 3,
    "interval_start": 10,
    "interval_step": 30,
    "interval_max": 300,
}

RETRY_POLICIES: dict[str, dict[str, Any]] = {
    "email": {
        "max_retries": 5,
        "interval_start": 30,
        "interval_step": 60,
        "interval_max": 600,
    },
}

celery_app.conf.task_default_retry_delay = DEFAULT_RETRY_POLICY["interval_start"]

# =============================================================================
# Task Routing Configuration
# =============================================================================

celery_app.conf.task_routes = {
    "lumaprod.workers.tasks.notifications.*": {"queue": "notifications"},
    "lumaprod.workers.tasks.generation.*": {"queue": "generation"},
    "lumaprod.workers.tasks.assignment.*": {"queue": "default"},
}

celery_app.conf.task_queues = {
    "default": {
        "exchange": "default",
        "routing_key": "default",
    },
    "notifications": {
        "exchange": "notifications",
        "routing_key": "notifications",
    },
    "generation": {
        "exchange": "generation",
        "routing_key": "generation",
    },
}

celery_app.conf.task_default_queue = "default"

# =============================================================================
# Result Backend Settings
# =============================================================================

celery_app.conf.update(
    result_expires=86400,
    result_extended=True,
)

# =============================================================================
# Logging Configuration
# =============================================================================

celery_app.conf.update(
    worker_log_format="[%(asctime)s: %(levelname)s/%(processName)s] %(message)s",
    worker_task_log_format=(
        "[%(asctime)s: %(levelname)s/%(processName)s] "
        "[%(task_name)s(%(task_id)s)] %(message)s"
    ),
)


@after_setup_logger.connect
@after_setup_task_logger.connect
def _quiet_worker_loggers(**kwargs: Any) -> None:
    quiet_library_loggers()


# =============================================================================
# Celery Beat Configuration
# =============================================================================

celery_app.conf.beat_schedule = {
    "reconcile-generation-logs": {
        "task": "lumaprod.workers.tasks.generation.reconcile_generation_logs",
        "schedule": crontab(minute="*/10"),
    },
    "auto-assign-next-month": {
        "task": "lumaprod.workers.tasks.assignment.auto_assign_next_month",
        "schedule": crontab(minute=0, hour=6, day_of_month=settings.auto_assign_day_of_month),
    },
}


def get_retry_policy(kind: str) -> dict[str, Any]:
    """
    Get retry policy for a kind of task.

    Args:
        kind: Policy name (email)

    Returns:
        Dictionary with retry configuration
    """
    return RETRY_POLICIES.get(kind, DEFAULT_RETRY_POLICY)


def calculate_retry_countdown(kind: str, retry_count: int) -> int:
    """
    Calculate the countdown for the next retry.

    Args:
        kind: Policy name
        retry_count: Current retry attempt number (0-based)

    Returns:
        Number of seconds to wait before retry
    """
    policy = get_retry_policy(kind)
    countdown = policy["interval_start"] + (retry_count * policy["interval_step"])
    return min(countdown, policy["interval_max"])


__all__ = [
    "celery_app",
    "get_retry_policy",
    "calculate_retry_countdown",
    "DEFAULT_RETRY_POLICY",
    "RETRY_POLICIES",
]
