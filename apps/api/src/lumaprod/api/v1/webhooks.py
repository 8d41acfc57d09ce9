"""
Provider webhook endpoints.

HeyGen calls these without authentication. Every POST is acknowledged
with 200, including unknown jobs and unreadable bodies, so the provider
does not keep redelivering; problems are logged instead.
"""

import logging
from typing import Any

from fastapi import APIRouter, Request, status
from pydantic import ValidationError as PydanticValidationError

from lumaprod.core.dependencies import Correlator, DbSession
from lumaprod.core.exceptions import UnknownJobError
from lumaprod.schemas.generation import HeyGenWebhookPayload, WebhookAck

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/heygen",
    response_model=WebhookAck,
    status_code=status.HTTP_200_OK,
    summary="HeyGen Callback",
    description="Video completion callback from HeyGen.",
)
async def heygen_callback(
    request: Request,
    db: DbSession,
    correlator: Correlator,
) -> WebhookAck:
    """Settle the generation attempt the callback refers to."""
    try:
        body: Any = await request.json()
        payload = HeyGenWebhookPayload.model_validate(body)
    except (ValueError, PydanticValidationError):
        logger.warning("HeyGen callback with unreadable body")
        return WebhookAck(message="Unreadable payload")

    job_id = payload.job_identifier()
    if not job_id:
        logger.warning(
            "HeyGen callback without video_id",
            extra={"payload": payload.model_dump(exclude_none=True)},
        )
        return WebhookAck(message="No video_id found")

    result = payload.normalize()
    logger.info(
        f"HeyGen callback video_id={job_id} status={result.status.value}",
        extra={"job_id": job_id, "event_type": payload.event_type},
    )

    try:
        outcome = correlator.handle_callback(job_id, result)
    except UnknownJobError:
        return WebhookAck(message="Video not tracked")
    except Exception:
        db.rollback()
        logger.exception(
            f"Error processing HeyGen callback for {job_id}",
            extra={"job_id": job_id},
        )
        return WebhookAck(message="Error processed")

    return WebhookAck(message=outcome.value)


@router.get(
    "/heygen",
    status_code=status.HTTP_200_OK,
    summary="HeyGen Webhook Check",
    description="Verification ping for the webhook URL.",
)
async def heygen_ping() -> dict[str, Any]:
    """Answer HeyGen's URL verification."""
    return {"ok": True, "service": "heygen-webhook"}
