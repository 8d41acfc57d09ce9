"""
Generation job correlation for AI avatar videos.

A submission writes a ``started`` GenerationLogEntry, calls HeyGen with a
bounded timeout, and attaches the returned video id to that row. Completion
arrives later through the webhook (``handle_callback``) or is discovered by
the periodic ``reconcile`` sweep. Both settle the row with the same
compare-and-set, so a job produces exactly one terminal write and one
content update however many times it is reported.
"""

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from lumaprod.core.config import Settings, get_settings
from lumaprod.core.exceptions import (
    ConflictError,
    LumaProdException,
    ProviderError,
    UnknownJobError,
    ValidationError,
)
from lumaprod.integrations.heygen_client import HeyGenClient, VideoStatus, get_heygen_client
from lumaprod.models import (
    ContentItem,
    ContentMode,
    ContentStatus,
    GenerationLogEntry,
    GenerationStatus,
)
from lumaprod.models.base import as_utc, utcnow
from lumaprod.models.enums import GenerationField
from lumaprod.services.content_store import ContentStore, month_range
from lumaprod.services.generation_log import GenerationLog
from lumaprod.services.lifecycle import SUBMITTABLE_STATUSES, LifecycleController

logger = logging.getLogger(__name__)

# Items in these statuses may still receive an AI video
AVATAR_ELIGIBLE_STATUSES = frozenset({ContentStatus.ASSIGNED, ContentStatus.GENERATED})

SUBMISSION_INCOMPLETE = "Submission did not complete"
MAX_WAIT_EXCEEDED = "Provider did not finish within the maximum wait"


class CallbackOutcome(str, Enum):
    """What a reported job result did to the system."""

    SETTLED_SUCCESS = "settled_success"
    SETTLED_FAILED = "settled_failed"
    DUPLICATE = "duplicate"
    IN_PROGRESS = "in_progress"


@dataclass
class JobResult:
    """A provider-reported job result, from a webhook or a status poll."""

    status: VideoStatus
    video_url: str | None = None
    thumbnail_url: str | None = None
    error: str | None = None


@dataclass
class AvatarVideoRequest:
    """What is sent to HeyGen for one content item."""

    script_text: str
    avatar_id: str
    voice_id: str | None = None


@dataclass
class SubmissionSummary:
    """Result of a bulk month submission."""

    submitted: int = 0
    skipped: int = 0
    failed: int = 0
    job_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "submitted": self.submitted,
            "skipped": self.skipped,
            "failed": self.failed,
            "job_ids": list(self.job_ids),
        }


@dataclass
class ReconcileSummary:
    """Result of one reconciliation sweep."""

    checked: int = 0
    completed: int = 0
    failed: int = 0
    resubmitted: int = 0
    still_running: int = 0

    def to_dict(self) -> dict:
        return {
            "checked": self.checked,
            "completed": self.completed,
            "failed": self.failed,
            "resubmitted": self.resubmitted,
            "still_running": self.still_running,
        }


class GenerationCorrelator:
    """
    Submits avatar-video jobs and settles their results.

    Example:
        ```python
        with GenerationCorrelator(db) as correlator:
            job_id = correlator.submit_for_item(item_id)
        ...
        GenerationCorrelator(db).handle_callback(job_id, JobResult(status=VideoStatus.COMPLETED, video_url=url))
        ```
    """

    def __init__(
        self,
        db: Session,
        heygen_client: HeyGenClient | None = None,
        lifecycle: LifecycleController | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize the correlator.

        Args:
            db: SQLAlchemy database session
            heygen_client: HeyGen client (created from settings on first use and closed by ``close``)
            lifecycle: Lifecycle controller used for AI submissions
            settings: Application settings instance
            rng: Random source for avatar/voice selection
            sleep: Pause function used between bulk submissions
        """
        self._db = db
        self._settings = settings or get_settings()
        self._heygen = heygen_client
        self._owns_heygen = heygen_client is None
        self._lifecycle = lifecycle or LifecycleController(db)
        self._store = ContentStore(db)
        self._log = GenerationLog(db)
        self._rng = rng or random.Random()
        self._sleep = sleep

    @property
    def heygen(self) -> HeyGenClient:
        if self._heygen is None:
            self._heygen = get_heygen_client(self._settings)
        return self._heygen

    def close(self) -> None:
        """Close the HeyGen client if this correlator created it."""
        if self._owns_heygen and self._heygen is not None:
            self._heygen.close()
            self._heygen = None

    def __enter__(self) -> "GenerationCorrelator":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @property
    def log(self) -> GenerationLog:
        return self._log

    def _stale_threshold(self) -> datetime:
        return utcnow() - timedelta(minutes=self._settings.generation_stale_after_minutes)

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    def submit_job(
        self,
        content_item_id: int,
        field: GenerationField | str,
        payload: AvatarVideoRequest,
    ) -> str:
        """
        Submit one generation job and correlate it with a log row.

        The ``started`` row is committed before the provider is called. If
        the call fails or times out, the row stays ``started`` without a job
        id and is settled by the reconciliation sweep.

        Args:
            content_item_id: Content item the job is for
            field: Generated field; only ``heygen_video`` is asynchronous
            payload: Script and avatar selection

        Returns:
            Provider job id

        Raises:
            NotFoundError: If the item does not exist
            ValidationError: If the field is not submitted asynchronously
            ConflictError: If a fresh attempt for the item/field is pending
            ProviderError: If the provider call fails
        """
        field = GenerationField(field)
        if field is not GenerationField.HEYGEN_VIDEO:
            raise ValidationError(
                f"Field '{field.value}' is not generated through a provider job",
                field="field",
            )

        item = self._store.get(content_item_id)

        pending = self._log.pending_for(item.id, field, newer_than=self._stale_threshold())
        if pending is not None:
            raise ConflictError(
                "A generation job is already pending for this content",
                resource_type="GenerationLogEntry",
                details={"content_item_id": item.id, "log_id": pending.id},
            )

        client = self.heygen
        entry = self._log.start(item.id, field)
        self._db.commit()
        entry_id = entry.id

        try:
            job_id = client.create_video(
                script_text=payload.script_text,
                avatar_id=payload.avatar_id,
                voice_id=payload.voice_id,
                callback_url=self._settings.heygen_callback_url,
                timeout=self._settings.heygen_submit_timeout_seconds,
                max_retries=1,
            )
        except ProviderError as e:
            logger.warning(
                f"HeyGen submission failed for content {content_item_id}; left for reconciliation",
                extra={
                    "content_item_id": content_item_id,
                    "log_id": entry_id,
                    "timed_out": e.timed_out,
                },
            )
            raise

        self._log.attach_job_id(entry, job_id)
        self._db.commit()

        logger.info(
            f"Submitted HeyGen job {job_id} for content {content_item_id}",
            extra={"content_item_id": content_item_id, "log_id": entry_id, "job_id": job_id},
        )
        return job_id

    def eligible_for_avatar(self, item: ContentItem) -> bool:
        """Whether an item should get an AI video now."""
        creator = item.creator
        return (
            creator is not None
            and creator.active
            and creator.has_avatar
            and item.ai_video_url is None
            and item.status in AVATAR_ELIGIBLE_STATUSES
        )

    def build_avatar_payload(self, item: ContentItem) -> AvatarVideoRequest:
        """
        Pick the script and a random avatar/voice from the creator's pools.

        Raises:
            ValidationError: If the item has no creator avatar or no script
        """
        creator = item.creator
        if creator is None or not creator.has_avatar:
            raise ValidationError(
                "Content is not assigned to an AI creator with an avatar",
                field="creator_id",
            )

        script = item.camera_script or item.content_text
        if not script or not script.strip():
            raise ValidationError("Content has no script to speak", field="camera_script")

        voices = creator.voice_ids
        return AvatarVideoRequest(
            script_text=script,
            avatar_id=self._rng.choice(creator.avatar_ids),
            voice_id=self._rng.choice(voices) if voices else None,
        )

    def submit_for_item(self, content_item_id: int) -> str:
        """
        Submit the avatar video for a single item.

        Raises:
            NotFoundError: If the item does not exist
            ConflictError: If the item is not eligible or already pending
            ValidationError: If the item has no usable script
            ProviderError: If the provider call fails
        """
        item = self._store.get(content_item_id)
        if not self.eligible_for_avatar(item):
            raise ConflictError(
                "Content is not eligible for avatar video generation",
                resource_type="ContentItem",
                details={"content_item_id": item.id, "status": item.status.value},
            )

        payload = self.build_avatar_payload(item)
        return self.submit_job(item.id, GenerationField.HEYGEN_VIDEO, payload)

    def submit_month(self, month: str, mode: ContentMode) -> SubmissionSummary:
        """
        Submit avatar videos for every eligible item of a month and mode.

        Provider calls are spaced by ``generation_submit_interval_seconds``.
        A failure on one item does not stop the batch.
        """
        mode = ContentMode(mode)
        start, end = month_range(month)
        item_ids = self._db.execute(
            select(ContentItem.id)
            .where(
                ContentItem.post_date >= start,
                ContentItem.post_date < end,
                ContentItem.mode == mode,
                ContentItem.creator_id.is_not(None),
                ContentItem.ai_video_url.is_(None),
                ContentItem.status.in_(list(AVATAR_ELIGIBLE_STATUSES)),
            )
            .order_by(ContentItem.post_date, ContentItem.language, ContentItem.id)
        ).scalars().all()

        summary = SubmissionSummary()
        called_provider = False

        for item_id in item_ids:
            item = self._store.get(item_id)
            if not self.eligible_for_avatar(item):
                summary.skipped += 1
                continue

            if called_provider:
                self._sleep(self._settings.generation_submit_interval_seconds)

            try:
                payload = self.build_avatar_payload(item)
                called_provider = True
                job_id = self.submit_job(item.id, GenerationField.HEYGEN_VIDEO, payload)
            except (ConflictError, ValidationError) as e:
                summary.skipped += 1
                logger.info(
                    f"Skipped avatar video for content {item_id}: {e.message}",
                    extra={"content_item_id": item_id},
                )
                continue
            except ProviderError:
                summary.failed += 1
                continue

            summary.submitted += 1
            summary.job_ids.append(job_id)

        logger.info(
            f"Avatar submission for {month} {mode.value} complete",
            extra={"month": month, "mode": mode.value, **summary.to_dict()},
        )
        return summary

    # -------------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------------

    def handle_callback(self, job_id: str, result: JobResult) -> CallbackOutcome:
        """
        Settle a job from a provider-reported result.

        Looks up the log row by job id and writes the terminal status with a
        compare-and-set. Only the writer that wins updates the content item,
        in the same transaction as the log row.

        Args:
            job_id: Provider job id
            result: Reported status and output

        Returns:
            What the report did

        Raises:
            UnknownJobError: If no log row carries this job id
        """
        entry = self._log.find_by_job_id(job_id)
        if entry is None:
            logger.warning(
                f"Callback for unknown HeyGen job {job_id}",
                extra={"job_id": job_id},
            )
            raise UnknownJobError(job_id)

        if entry.is_terminal:
            logger.info(
                f"Ignoring duplicate result for HeyGen job {job_id}",
                extra={"job_id": job_id, "log_id": entry.id, "status": entry.status.value},
            )
            return CallbackOutcome.DUPLICATE

        if not result.status.is_terminal:
            logger.debug(
                f"HeyGen job {job_id} still {result.status.value}",
                extra={"job_id": job_id, "log_id": entry.id},
            )
            return CallbackOutcome.IN_PROGRESS

        if result.status is VideoStatus.COMPLETED and result.video_url:
            return self._settle_success(entry, result)

        error = result.error
        if not error:
            error = (
                "Provider reported completion without a video URL"
                if result.status is VideoStatus.COMPLETED
                else "Video generation failed"
            )
        return self._settle_failure(entry, error)

    def _settle_success(self, entry: GenerationLogEntry, result: JobResult) -> CallbackOutcome:
        entry_id = entry.id
        content_item_id = entry.content_item_id
        job_id = entry.heygen_video_id

        if not self._log.settle(entry_id, GenerationStatus.SUCCESS, duration_ms=entry.elapsed_ms()):
            self._db.rollback()
            logger.info(
                f"HeyGen job {job_id} was settled concurrently",
                extra={"job_id": job_id, "log_id": entry_id},
            )
            return CallbackOutcome.DUPLICATE

        item = self._store.get(content_item_id, for_update=True)
        item.ai_video_url = result.video_url
        item.ai_video_thumbnail = result.thumbnail_url

        creator = item.creator
        submitted = False
        if creator is not None and creator.is_ai and item.status in SUBMITTABLE_STATUSES:
            self._lifecycle.submit_generated(item, result.video_url, result.thumbnail_url)
            submitted = True

        self._db.commit()

        logger.info(
            f"HeyGen job {job_id} completed for content {content_item_id}",
            extra={
                "job_id": job_id,
                "log_id": entry_id,
                "content_item_id": content_item_id,
                "submitted_for_review": submitted,
            },
        )
        return CallbackOutcome.SETTLED_SUCCESS

    def _settle_failure(self, entry: GenerationLogEntry, error: str) -> CallbackOutcome:
        entry_id = entry.id
        content_item_id = entry.content_item_id
        job_id = entry.heygen_video_id

        if not self._log.settle(
            entry_id, GenerationStatus.FAILED, error_message=error, duration_ms=entry.elapsed_ms()
        ):
            self._db.rollback()
            return CallbackOutcome.DUPLICATE

        self._db.commit()

        logger.warning(
            f"HeyGen job {job_id} failed: {error}",
            extra={"job_id": job_id, "log_id": entry_id, "content_item_id": content_item_id},
        )
        return CallbackOutcome.SETTLED_FAILED

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    def reconcile(self, stale_after_minutes: int | None = None) -> ReconcileSummary:
        """
        Settle ``started`` rows that no callback has settled.

        Rows with a job id are polled and settled like a callback; rows still
        running past ``generation_max_wait_hours`` are failed. Rows without a
        job id are failed and, while attempts remain and the item is still
        eligible, submitted again.
        """
        stale_after = stale_after_minutes or self._settings.generation_stale_after_minutes
        now = utcnow()
        entries = self._log.stale_started(now - timedelta(minutes=stale_after))
        max_wait = timedelta(hours=self._settings.generation_max_wait_hours)

        summary = ReconcileSummary()
        for entry in entries:
            summary.checked += 1
            if entry.heygen_video_id:
                self._reconcile_polled(entry, now - as_utc(entry.created_at) > max_wait, summary)
            else:
                self._reconcile_unsubmitted(entry, summary)

        logger.info(
            "Generation reconciliation complete",
            extra=summary.to_dict(),
        )
        return summary

    def _reconcile_polled(
        self,
        entry: GenerationLogEntry,
        overdue: bool,
        summary: ReconcileSummary,
    ) -> None:
        job_id = entry.heygen_video_id
        try:
            job = self.heygen.get_video_status(job_id)
        except LumaProdException as e:
            logger.warning(
                f"Could not poll HeyGen job {job_id}: {e.message}",
                extra={"job_id": job_id, "log_id": entry.id},
            )
            return

        if job.status.is_terminal:
            outcome = self.handle_callback(
                job_id,
                JobResult(
                    status=job.status,
                    video_url=job.video_url,
                    thumbnail_url=job.thumbnail_url,
                    error=job.error_message,
                ),
            )
        elif overdue:
            outcome = self._settle_failure(entry, MAX_WAIT_EXCEEDED)
        else:
            summary.still_running += 1
            return

        if outcome is CallbackOutcome.SETTLED_SUCCESS:
            summary.completed += 1
        elif outcome is CallbackOutcome.SETTLED_FAILED:
            summary.failed += 1

    def _reconcile_unsubmitted(self, entry: GenerationLogEntry, summary: ReconcileSummary) -> None:
        entry_id = entry.id
        content_item_id = entry.content_item_id
        field = entry.field

        if self._settle_failure(entry, SUBMISSION_INCOMPLETE) is not CallbackOutcome.SETTLED_FAILED:
            return
        summary.failed += 1

        if field != GenerationField.HEYGEN_VIDEO.value:
            return

        attempts = self._log.attempt_count(content_item_id, field)
        if attempts >= self._settings.generation_max_attempts:
            logger.warning(
                f"Giving up on {field} for content {content_item_id} after {attempts} attempts",
                extra={"content_item_id": content_item_id, "log_id": entry_id},
            )
            return

        try:
            self.submit_for_item(content_item_id)
        except LumaProdException as e:
            logger.info(
                f"Did not resubmit content {content_item_id}: {e.message}",
                extra={"content_item_id": content_item_id, "code": e.code},
            )
            return
        summary.resubmitted += 1
