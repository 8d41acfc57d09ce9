"""
Creator notification email tasks.

Queued by NotificationDispatcher after an assignment run or a rejection
has been committed. Tasks look up the recipient, render the template
from the values captured by the trigger and send through EmailClient.
Provider errors are retried; a creator without an email address, or an
unconfigured email API, is logged and dropped.
"""

import logging
from datetime import date
from typing import Any

from celery import shared_task

from lumaprod.core.config import get_settings
from lumaprod.core.exceptions import ProviderError, ServiceUnavailableError
from lumaprod.integrations.email_client import EmailClient
from lumaprod.models import Creator
from lumaprod.services.email_templates import (
    RenderedEmail,
    creator_assignment_email,
    creator_rejection_email,
)
from lumaprod.workers.celery_app import calculate_retry_countdown, get_retry_policy
from lumaprod.workers.utils import format_task_result, get_db_session

logger = logging.getLogger(__name__)


def _deliver(task: Any, task_name: str, to: str, email: RenderedEmail, **context: Any) -> dict[str, Any]:
    """Send a rendered email, retrying the calling task on provider errors."""
    try:
        with EmailClient() as client:
            client.send(to, email.subject, email.html, headers=email.headers)
    except ServiceUnavailableError as e:
        logger.warning(
            f"Email not sent, {e.message}",
            extra={"task": task_name, **context},
        )
        return format_task_result(task_name, success=False, error=e.message, **context)
    except ProviderError as e:
        policy = get_retry_policy("email")
        if task.request.retries < policy["max_retries"]:
            countdown = calculate_retry_countdown("email", task.request.retries)
            logger.warning(
                f"Email delivery failed, retrying in {countdown}s: {e.message}",
                extra={"task": task_name, "retry_count": task.request.retries, **context},
            )
            raise task.retry(countdown=countdown, exc=e, max_retries=policy["max_retries"])

        logger.error(
            f"Email delivery failed after retries: {e.message}",
            extra={"task": task_name, **context},
        )
        return format_task_result(task_name, success=False, error=e.message, **context)

    logger.info(
        f"Sent '{email.subject}' to {to}",
        extra={"task": task_name, **context},
    )
    return format_task_result(task_name, success=True, **context)


@shared_task(
    bind=True,
    name="lumaprod.workers.tasks.notifications.send_creator_assignment_email",
    acks_late=True,
)
def send_creator_assignment_email(
    self,
    creator_id: int,
    month: str,
    mode: str,
    count: int,
) -> dict[str, Any]:
    """
    Send the batched "new scripts assigned" email to one creator.

    Args:
        creator_id: Creator that received new items
        month: Assignment month (YYYY-MM)
        mode: Content mode of the assigned items
        count: Number of items newly assigned in this run
    """
    task_name = "send_creator_assignment_email"
    context = {"creator_id": creator_id, "month": month, "count": count}

    with get_db_session() as db:
        creator = db.get(Creator, creator_id)
        if creator is None or not creator.email:
            logger.warning(
                f"Creator {creator_id} has no email address; assignment email dropped",
                extra=context,
            )
            return format_task_result(task_name, success=False, error="no email", **context)

        to = creator.email
        email = creator_assignment_email(
            creator_name=creator.name,
            month=month,
            mode=mode,
            count=count,
            app_url=get_settings().app_url,
        )

    return _deliver(self, task_name, to, email, **context)


@shared_task(
    bind=True,
    name="lumaprod.workers.tasks.notifications.send_creator_rejection_email",
    acks_late=True,
)
def send_creator_rejection_email(
    self,
    content_item_id: int,
    creator_id: int,
    post_date: str,
    mode: str,
    note: str,
) -> dict[str, Any]:
    """
    Send the "video needs re-recording" email for a rejected item.

    The note, date and mode come from the rejection itself, so a
    resubmission or reassignment before the task runs does not alter
    the message or its recipient.

    Args:
        content_item_id: The rejected content item
        creator_id: Creator who owned the item when it was rejected
        post_date: Item date (YYYY-MM-DD)
        mode: Content mode
        note: Reviewer feedback
    """
    task_name = "send_creator_rejection_email"
    context = {"content_item_id": content_item_id, "creator_id": creator_id}

    with get_db_session() as db:
        creator = db.get(Creator, creator_id)
        if creator is None or not creator.email:
            logger.warning(
                f"Creator {creator_id} has no email address; rejection email dropped",
                extra=context,
            )
            return format_task_result(task_name, success=False, error="no email", **context)

        to = creator.email
        email = creator_rejection_email(
            creator_name=creator.name,
            post_date=date.fromisoformat(post_date),
            note=note,
            mode=mode,
            app_url=get_settings().app_url,
        )

    return _deliver(self, task_name, to, email, **context)
