"""
Tests for avatar video submission, callback settlement and reconciliation.
"""

import random
from collections.abc import Callable
from datetime import date, timedelta
from typing import Any

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from lumaprod.core.exceptions import (
    ConflictError,
    ProviderError,
    UnknownJobError,
    ValidationError,
)
from lumaprod.integrations.heygen_client import VideoGenerationJob, VideoStatus
from lumaprod.models import (
    ContentItem,
    ContentMode,
    ContentStatus,
    Creator,
    GenerationLogEntry,
    GenerationStatus,
)
from lumaprod.models.base import utcnow
from lumaprod.services import generation as generation_service
from lumaprod.services.generation import (
    MAX_WAIT_EXCEEDED,
    SUBMISSION_INCOMPLETE,
    AvatarVideoRequest,
    CallbackOutcome,
    GenerationCorrelator,
    JobResult,
)

VIDEO_URL = "https://files.heygen.test/video.mp4"
THUMB_URL = "https://files.heygen.test/thumb.jpg"


class FakeHeyGenClient:
    """Stand-in for HeyGenClient that records submissions."""

    def __init__(self, job_ids: list[str] | None = None) -> None:
        self.job_ids = list(job_ids or ["job-1"])
        self.submissions: list[dict[str, Any]] = []
        self.statuses: dict[str, VideoGenerationJob] = {}
        self.error: Exception | None = None
        self.closed = False

    def create_video(self, **kwargs: Any) -> str:
        self.submissions.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.job_ids.pop(0)

    def get_video_status(self, video_id: str) -> VideoGenerationJob:
        return self.statuses.get(video_id, VideoGenerationJob(video_id=video_id, status=VideoStatus.PROCESSING))

    def close(self) -> None:
        self.closed = True


def success(url: str = VIDEO_URL) -> JobResult:
    return JobResult(status=VideoStatus.COMPLETED, video_url=url, thumbnail_url=THUMB_URL)


def entries_for(db: Session, item: ContentItem) -> list[GenerationLogEntry]:
    db.expire_all()
    return list(
        db.execute(
            select(GenerationLogEntry)
            .where(GenerationLogEntry.content_item_id == item.id)
            .order_by(GenerationLogEntry.id)
        ).scalars().all()
    )


@pytest.fixture
def heygen() -> FakeHeyGenClient:
    return FakeHeyGenClient()


@pytest.fixture
def correlator(db: Session, heygen: FakeHeyGenClient) -> GenerationCorrelator:
    return GenerationCorrelator(db, heygen_client=heygen, rng=random.Random(0), sleep=lambda _: None)


@pytest.fixture
def ai_item(
    make_ai_creator: Callable[..., Creator],
    make_item: Callable[..., ContentItem],
) -> ContentItem:
    """An assigned item owned by an AI creator."""
    return make_item(status=ContentStatus.ASSIGNED, creator=make_ai_creator())


class TestSubmission:
    """Tests for submitting HeyGen jobs."""

    def test_submit_for_item_correlates_job(
        self,
        db: Session,
        correlator: GenerationCorrelator,
        heygen: FakeHeyGenClient,
        ai_item: ContentItem,
    ) -> None:
        """The returned job id should be stored on a started log row."""
        job_id = correlator.submit_for_item(ai_item.id)

        assert job_id == "job-1"
        [entry] = entries_for(db, ai_item)
        assert entry.status == GenerationStatus.STARTED
        assert entry.heygen_video_id == "job-1"
        assert entry.field == "heygen_video"

        [call] = heygen.submissions
        assert call["avatar_id"] == "avatar-1"
        assert call["voice_id"] == "voice-1"
        assert call["script_text"] == ai_item.camera_script
        assert call["callback_url"] == "https://lumaprod.test/api/v1/webhooks/heygen"
        assert call["max_retries"] == 1

    def test_script_falls_back_to_content_text(
        self,
        correlator: GenerationCorrelator,
        heygen: FakeHeyGenClient,
        make_ai_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
    ) -> None:
        item = make_item(
            status=ContentStatus.ASSIGNED,
            creator=make_ai_creator(),
            camera_script=None,
            content_text="For God so loved the world",
        )
        correlator.submit_for_item(item.id)
        assert heygen.submissions[0]["script_text"] == "For God so loved the world"

    def test_provider_failure_leaves_started_row(
        self,
        db: Session,
        correlator: GenerationCorrelator,
        heygen: FakeHeyGenClient,
        ai_item: ContentItem,
    ) -> None:
        """A failed submission should leave the row for the sweep."""
        heygen.error = ProviderError(service="HeyGen", message="HeyGen API call timed out", timed_out=True)

        with pytest.raises(ProviderError):
            correlator.submit_for_item(ai_item.id)

        [entry] = entries_for(db, ai_item)
        assert entry.status == GenerationStatus.STARTED
        assert entry.heygen_video_id is None

    def test_pending_job_conflicts(
        self,
        correlator: GenerationCorrelator,
        ai_item: ContentItem,
    ) -> None:
        correlator.submit_for_item(ai_item.id)
        with pytest.raises(ConflictError):
            correlator.submit_for_item(ai_item.id)

    def test_human_creator_is_not_eligible(
        self,
        correlator: GenerationCorrelator,
        make_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
    ) -> None:
        item = make_item(status=ContentStatus.ASSIGNED, creator=make_creator())
        with pytest.raises(ConflictError):
            correlator.submit_for_item(item.id)

    def test_only_video_field_is_submitted(
        self,
        correlator: GenerationCorrelator,
        ai_item: ContentItem,
    ) -> None:
        with pytest.raises(ValidationError):
            correlator.submit_job(
                ai_item.id,
                "camera_script",
                AvatarVideoRequest(script_text="hi", avatar_id="avatar-1"),
            )

    def test_submit_month_spaces_calls(
        self,
        db: Session,
        heygen: FakeHeyGenClient,
        make_ai_creator: Callable[..., Creator],
        make_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
    ) -> None:
        """Eligible items are submitted with a pause between provider calls."""
        ai = make_ai_creator()
        human = make_creator()
        make_item(post_date=date(2026, 11, 1), status=ContentStatus.ASSIGNED, creator=ai)
        make_item(post_date=date(2026, 11, 2), status=ContentStatus.ASSIGNED, creator=human)
        make_item(post_date=date(2026, 11, 3), status=ContentStatus.ASSIGNED, creator=ai)
        make_item(post_date=date(2026, 11, 4), status=ContentStatus.SUBMITTED, creator=ai)
        heygen.job_ids = ["job-a", "job-b"]
        pauses: list[float] = []

        summary = GenerationCorrelator(
            db,
            heygen_client=heygen,
            rng=random.Random(0),
            sleep=pauses.append,
        ).submit_month("2026-11", ContentMode.BIBLE)

        assert summary.submitted == 2
        assert summary.skipped == 1
        assert summary.failed == 0
        assert summary.job_ids == ["job-a", "job-b"]
        assert len(pauses) == 1


class TestHandleCallback:
    """Tests for settling a job from a reported result."""

    def test_success_submits_ai_item(
        self,
        db: Session,
        correlator: GenerationCorrelator,
        make_log_entry: Callable[..., GenerationLogEntry],
        ai_item: ContentItem,
    ) -> None:
        """A completed video should settle the row and submit the item for review."""
        make_log_entry(ai_item, job_id="job-1")

        outcome = correlator.handle_callback("job-1", success())

        assert outcome is CallbackOutcome.SETTLED_SUCCESS
        [entry] = entries_for(db, ai_item)
        assert entry.status == GenerationStatus.SUCCESS
        assert entry.duration_ms is not None
        db.refresh(ai_item)
        assert ai_item.ai_video_url == VIDEO_URL
        assert ai_item.ai_video_thumbnail == THUMB_URL
        assert ai_item.status == ContentStatus.SUBMITTED
        assert ai_item.creator_video_url == VIDEO_URL

    def test_success_for_human_item_keeps_status(
        self,
        db: Session,
        correlator: GenerationCorrelator,
        make_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
        make_log_entry: Callable[..., GenerationLogEntry],
    ) -> None:
        item = make_item(status=ContentStatus.ASSIGNED, creator=make_creator())
        make_log_entry(item, job_id="job-1")

        correlator.handle_callback("job-1", success())

        db.refresh(item)
        assert item.ai_video_url == VIDEO_URL
        assert item.status == ContentStatus.ASSIGNED

    def test_duplicate_callback_is_ignored(
        self,
        db: Session,
        correlator: GenerationCorrelator,
        make_log_entry: Callable[..., GenerationLogEntry],
        ai_item: ContentItem,
    ) -> None:
        """A second delivery should change nothing."""
        make_log_entry(ai_item, job_id="job-1")

        first = correlator.handle_callback("job-1", success())
        second = correlator.handle_callback("job-1", success("https://files.heygen.test/other.mp4"))

        assert first is CallbackOutcome.SETTLED_SUCCESS
        assert second is CallbackOutcome.DUPLICATE
        db.refresh(ai_item)
        assert ai_item.ai_video_url == VIDEO_URL

    def test_concurrent_settlers_write_once(
        self,
        session_factory: sessionmaker,
        heygen: FakeHeyGenClient,
        make_log_entry: Callable[..., GenerationLogEntry],
        ai_item: ContentItem,
    ) -> None:
        """Two sessions that both saw the row as started produce one terminal write."""
        make_log_entry(ai_item, job_id="job-1")
        session_a = session_factory()
        session_b = session_factory()
        try:
            correlator_a = GenerationCorrelator(session_a, heygen_client=heygen)
            correlator_b = GenerationCorrelator(session_b, heygen_client=heygen)

            # B reads the row while it is still started
            stale = correlator_b.log.find_by_job_id("job-1")
            assert stale is not None and stale.status == GenerationStatus.STARTED

            assert correlator_a.handle_callback("job-1", success()) is CallbackOutcome.SETTLED_SUCCESS
            assert (
                correlator_b.handle_callback("job-1", success("https://files.heygen.test/late.mp4"))
                is CallbackOutcome.DUPLICATE
            )
        finally:
            session_a.close()
            session_b.close()

        check = session_factory()
        try:
            entries = check.execute(select(GenerationLogEntry)).scalars().all()
            assert [entry.status for entry in entries] == [GenerationStatus.SUCCESS]
            item = check.get(ContentItem, ai_item.id)
            assert item.ai_video_url == VIDEO_URL
            assert item.status == ContentStatus.SUBMITTED
        finally:
            check.close()

    def test_failure_is_recorded(
        self,
        db: Session,
        correlator: GenerationCorrelator,
        make_log_entry: Callable[..., GenerationLogEntry],
        ai_item: ContentItem,
    ) -> None:
        make_log_entry(ai_item, job_id="job-1")

        outcome = correlator.handle_callback(
            "job-1",
            JobResult(status=VideoStatus.FAILED, error="avatar not found"),
        )

        assert outcome is CallbackOutcome.SETTLED_FAILED
        [entry] = entries_for(db, ai_item)
        assert entry.status == GenerationStatus.FAILED
        assert entry.error_message == "avatar not found"
        db.refresh(ai_item)
        assert ai_item.ai_video_url is None
        assert ai_item.status == ContentStatus.ASSIGNED

    def test_completed_without_url_fails(
        self,
        db: Session,
        correlator: GenerationCorrelator,
        make_log_entry: Callable[..., GenerationLogEntry],
        ai_item: ContentItem,
    ) -> None:
        make_log_entry(ai_item, job_id="job-1")

        outcome = correlator.handle_callback("job-1", JobResult(status=VideoStatus.COMPLETED))
        assert outcome is CallbackOutcome.SETTLED_FAILED

    def test_in_progress_result_leaves_row_started(
        self,
        db: Session,
        correlator: GenerationCorrelator,
        make_log_entry: Callable[..., GenerationLogEntry],
        ai_item: ContentItem,
    ) -> None:
        make_log_entry(ai_item, job_id="job-1")

        outcome = correlator.handle_callback("job-1", JobResult(status=VideoStatus.PROCESSING))

        assert outcome is CallbackOutcome.IN_PROGRESS
        [entry] = entries_for(db, ai_item)
        assert entry.status == GenerationStatus.STARTED

    def test_unknown_job(self, correlator: GenerationCorrelator) -> None:
        with pytest.raises(UnknownJobError):
            correlator.handle_callback("job-404", success())


class TestReconcile:
    """Tests for the reconciliation sweep."""

    def test_unsubmitted_row_is_failed_and_resubmitted(
        self,
        db: Session,
        correlator: GenerationCorrelator,
        heygen: FakeHeyGenClient,
        make_log_entry: Callable[..., GenerationLogEntry],
        ai_item: ContentItem,
    ) -> None:
        """A row that never got a job id is failed and the item submitted again."""
        make_log_entry(ai_item, created_at=utcnow() - timedelta(hours=1))
        heygen.job_ids = ["job-2"]

        summary = correlator.reconcile()

        assert (summary.checked, summary.failed, summary.resubmitted) == (1, 1, 1)
        first, second = entries_for(db, ai_item)
        assert first.status == GenerationStatus.FAILED
        assert first.error_message == SUBMISSION_INCOMPLETE
        assert second.status == GenerationStatus.STARTED
        assert second.heygen_video_id == "job-2"

    def test_resubmission_stops_at_max_attempts(
        self,
        db: Session,
        correlator: GenerationCorrelator,
        heygen: FakeHeyGenClient,
        make_log_entry: Callable[..., GenerationLogEntry],
        ai_item: ContentItem,
    ) -> None:
        make_log_entry(ai_item, status=GenerationStatus.FAILED)
        make_log_entry(ai_item, status=GenerationStatus.FAILED)
        make_log_entry(ai_item, created_at=utcnow() - timedelta(hours=1))

        summary = correlator.reconcile()

        assert (summary.failed, summary.resubmitted) == (1, 0)
        assert heygen.submissions == []

    def test_fresh_rows_are_left_alone(
        self,
        db: Session,
        correlator: GenerationCorrelator,
        make_log_entry: Callable[..., GenerationLogEntry],
        ai_item: ContentItem,
    ) -> None:
        make_log_entry(ai_item)

        assert correlator.reconcile().checked == 0

    def test_polled_completion_settles_row(
        self,
        db: Session,
        correlator: GenerationCorrelator,
        heygen: FakeHeyGenClient,
        make_log_entry: Callable[..., GenerationLogEntry],
        ai_item: ContentItem,
    ) -> None:
        """A job whose callback was lost is settled from a status poll."""
        make_log_entry(ai_item, job_id="job-9", created_at=utcnow() - timedelta(hours=1))
        heygen.statuses["job-9"] = VideoGenerationJob(
            video_id="job-9",
            status=VideoStatus.COMPLETED,
            video_url=VIDEO_URL,
            thumbnail_url=THUMB_URL,
        )

        summary = correlator.reconcile()

        assert summary.completed == 1
        db.refresh(ai_item)
        assert ai_item.ai_video_url == VIDEO_URL
        assert ai_item.status == ContentStatus.SUBMITTED

    def test_running_job_within_max_wait(
        self,
        correlator: GenerationCorrelator,
        make_log_entry: Callable[..., GenerationLogEntry],
        ai_item: ContentItem,
    ) -> None:
        make_log_entry(ai_item, job_id="job-9", created_at=utcnow() - timedelta(hours=1))

        summary = correlator.reconcile()
        assert (summary.still_running, summary.failed) == (1, 0)

    def test_overdue_job_is_failed(
        self,
        db: Session,
        correlator: GenerationCorrelator,
        make_log_entry: Callable[..., GenerationLogEntry],
        ai_item: ContentItem,
    ) -> None:
        make_log_entry(ai_item, job_id="job-9", created_at=utcnow() - timedelta(hours=25))

        summary = correlator.reconcile()

        assert summary.failed == 1
        [entry] = entries_for(db, ai_item)
        assert entry.status == GenerationStatus.FAILED
        assert entry.error_message == MAX_WAIT_EXCEEDED


class TestClientLifetime:
    """Tests for releasing the HeyGen client."""

    def test_created_client_is_closed(
        self,
        db: Session,
        heygen: FakeHeyGenClient,
        ai_item: ContentItem,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(generation_service, "get_heygen_client", lambda settings: heygen)

        with GenerationCorrelator(db, rng=random.Random(0)) as correlator:
            correlator.submit_for_item(ai_item.id)
            assert heygen.closed is False

        assert heygen.closed is True

    def test_injected_client_is_left_open(self, db: Session, heygen: FakeHeyGenClient) -> None:
        """A caller-supplied client belongs to the caller."""
        GenerationCorrelator(db, heygen_client=heygen).close()
        assert heygen.closed is False

    def test_unused_client_is_never_created(self, db: Session, monkeypatch: pytest.MonkeyPatch) -> None:
        def unexpected(settings: Any) -> FakeHeyGenClient:
            pytest.fail("HeyGen client should not be created")

        monkeypatch.setattr(generation_service, "get_heygen_client", unexpected)

        with GenerationCorrelator(db) as correlator:
            correlator.reconcile()
