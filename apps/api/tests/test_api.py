"""
Tests for the content production, creator and webhook endpoints.
"""

import random
from collections.abc import Callable
from datetime import date
from typing import Any

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from lumaprod.core.database import get_db
from lumaprod.core.dependencies import get_generation_correlator
from lumaprod.integrations.heygen_client import VideoGenerationJob
from lumaprod.main import app
from lumaprod.models import (
    ContentItem,
    ContentMode,
    ContentStatus,
    Creator,
    GenerationLogEntry,
    GenerationStatus,
)
from lumaprod.services import generation as generation_service
from lumaprod.services.generation import GenerationCorrelator

BASE = "/api/v1/content-production"


class TestAuth:
    """Tests for role checks on the admin and creator routes."""

    def test_admin_route_requires_token(self, client: TestClient) -> None:
        response = client.get(BASE, params={"month": "2026-11"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_ERROR"

    def test_admin_route_rejects_creator(
        self,
        client: TestClient,
        make_creator: Callable[..., Creator],
        creator_headers: Callable[[Creator], dict[str, str]],
    ) -> None:
        creator = make_creator()
        response = client.get(BASE, params={"month": "2026-11"}, headers=creator_headers(creator))
        assert response.status_code == 403

    def test_creator_route_requires_profile(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
    ) -> None:
        response = client.get("/api/v1/creator/assignments", headers=admin_headers)
        assert response.status_code == 403


class TestContentEndpoints:
    """Tests for listing and creating content."""

    def test_list_month(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_item: Callable[..., ContentItem],
    ) -> None:
        make_item(post_date=date(2026, 11, 2))
        make_item(post_date=date(2026, 11, 1))
        make_item(post_date=date(2026, 12, 1))

        response = client.get(BASE, params={"month": "2026-11"}, headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert [item["post_date"] for item in body["data"]] == ["2026-11-01", "2026-11-02"]
        assert body["meta"]["pagination"]["total_items"] == 2

    def test_list_rejects_bad_month(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        response = client.get(BASE, params={"month": "11-2026"}, headers=admin_headers)
        assert response.status_code == 422

    def test_create_positivity_item(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        payload = {"post_date": "2026-11-05", "mode": "positivity", "content_text": "Keep going"}

        first = client.post(BASE, json=payload, headers=admin_headers)
        duplicate = client.post(BASE, json=payload, headers=admin_headers)

        assert first.status_code == 201
        assert first.json()["data"]["status"] == "empty"
        assert duplicate.status_code == 409

    def test_create_bible_item_gets_verse(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        response = client.post(
            BASE,
            json={"post_date": "2026-11-05", "mode": "bible"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["verse_reference"]
        assert data["title"] == data["verse_reference"]

        stats = client.get(f"{BASE}/verse-pool", headers=admin_headers).json()["data"]
        assert stats["used"] == 1
        assert stats["remaining"] == stats["total"] - 1


class TestAssignEndpoint:
    """Tests for the assignment endpoint."""

    def test_auto_assign(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
    ) -> None:
        make_creator(monthly_capacity=2)
        make_creator(monthly_capacity=1)
        for day in (1, 2, 3):
            make_item(post_date=date(2026, 11, day))

        response = client.post(
            f"{BASE}/assign",
            json={"action": "auto_assign", "month": "2026-11", "mode": "bible"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"assigned": 3, "skipped": 0}

    def test_reassign(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
    ) -> None:
        a = make_creator()
        b = make_creator()
        item = make_item(status=ContentStatus.ASSIGNED, creator=a)

        response = client.post(
            f"{BASE}/assign",
            json={"action": "reassign", "content_item_id": item.id, "creator_id": b.id},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"success": True, "content_item_id": item.id, "creator_id": b.id}

    def test_reassign_submitted_item_fails(
        self,
        client: TestClient,
        db: Session,
        admin_headers: dict[str, str],
        make_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
    ) -> None:
        a = make_creator()
        b = make_creator()
        item = make_item(status=ContentStatus.SUBMITTED, creator=a)

        response = client.post(
            f"{BASE}/assign",
            json={"action": "reassign", "content_item_id": item.id, "creator_id": b.id},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_TRANSITION"
        db.refresh(item)
        assert item.creator_id == a.id

    def test_unknown_action(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        response = client.post(f"{BASE}/assign", json={"action": "shuffle"}, headers=admin_headers)
        assert response.status_code == 422


class TestReviewEndpoint:
    """Tests for approve and reject."""

    def test_reject_with_note(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
        sent_notifications: list[tuple[str, dict[str, Any]]],
    ) -> None:
        item = make_item(status=ContentStatus.SUBMITTED, creator=make_creator())

        response = client.post(
            f"{BASE}/review",
            json={"action": "reject", "content_item_id": item.id, "note": "audio too quiet"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "rejected"
        assert data["rejection_note"] == "audio too quiet"
        assert len(sent_notifications) == 1

    def test_approve(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
    ) -> None:
        item = make_item(status=ContentStatus.SUBMITTED, creator=make_creator())

        response = client.post(
            f"{BASE}/review",
            json={"action": "approve", "content_item_id": item.id},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "approved"

    def test_approve_unsubmitted_item(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_item: Callable[..., ContentItem],
    ) -> None:
        item = make_item(status=ContentStatus.GENERATED)
        response = client.post(
            f"{BASE}/review",
            json={"action": "approve", "content_item_id": item.id},
            headers=admin_headers,
        )
        assert response.status_code == 400


class TestCreatorEndpoints:
    """Tests for the creator portal."""

    def test_assignments_are_scoped_to_caller(
        self,
        client: TestClient,
        make_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
        creator_headers: Callable[[Creator], dict[str, str]],
    ) -> None:
        mine = make_creator()
        other = make_creator()
        make_item(post_date=date(2026, 11, 1), status=ContentStatus.ASSIGNED, creator=mine)
        make_item(post_date=date(2026, 11, 2), status=ContentStatus.ASSIGNED, creator=other)

        response = client.get(
            "/api/v1/creator/assignments",
            params={"month": "2026-11"},
            headers=creator_headers(mine),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["creator_id"] == mine.id

    def test_submit_and_resubmit(
        self,
        client: TestClient,
        make_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
        creator_headers: Callable[[Creator], dict[str, str]],
    ) -> None:
        creator = make_creator()
        item = make_item(status=ContentStatus.ASSIGNED, creator=creator)
        payload = {"content_item_id": item.id, "video_url": "https://cdn.test/v.mp4"}

        first = client.post("/api/v1/creator/submissions", json=payload, headers=creator_headers(creator))
        second = client.post("/api/v1/creator/submissions", json=payload, headers=creator_headers(creator))

        assert first.status_code == 200
        assert first.json()["data"]["status"] == "submitted"
        assert second.status_code == 400
        assert second.json()["error"]["code"] == "ALREADY_SUBMITTED"
        assert second.json()["error"]["message"] == "Content already submitted and awaiting review"

    def test_submit_someone_elses_item(
        self,
        client: TestClient,
        make_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
        creator_headers: Callable[[Creator], dict[str, str]],
    ) -> None:
        owner = make_creator()
        intruder = make_creator()
        item = make_item(status=ContentStatus.ASSIGNED, creator=owner)

        response = client.post(
            "/api/v1/creator/submissions",
            json={"content_item_id": item.id, "video_url": "https://cdn.test/v.mp4"},
            headers=creator_headers(intruder),
        )
        assert response.status_code == 403


class TestHeyGenWebhook:
    """The webhook always acknowledges with 200."""

    def test_completion_settles_job(
        self,
        client: TestClient,
        db: Session,
        make_ai_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
        make_log_entry: Callable[..., GenerationLogEntry],
    ) -> None:
        item = make_item(status=ContentStatus.ASSIGNED, creator=make_ai_creator())
        make_log_entry(item, job_id="vid-1")
        payload = {
            "event_type": "avatar_video.success",
            "event_data": {"video_id": "vid-1", "url": "https://files.heygen.test/v.mp4"},
        }

        first = client.post("/api/v1/webhooks/heygen", json=payload)
        second = client.post("/api/v1/webhooks/heygen", json=payload)

        assert first.status_code == 200
        assert first.json() == {"ok": True, "message": "settled_success"}
        assert second.status_code == 200
        assert second.json()["message"] == "duplicate"

        db.expire_all()
        entries = db.execute(select(GenerationLogEntry)).scalars().all()
        assert [entry.status for entry in entries] == [GenerationStatus.SUCCESS]
        db.refresh(item)
        assert item.ai_video_url == "https://files.heygen.test/v.mp4"
        assert item.status == ContentStatus.SUBMITTED

    def test_unknown_job_is_acknowledged(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/webhooks/heygen",
            json={"video_id": "vid-unknown", "status": "completed", "video_url": "https://v.test/x.mp4"},
        )
        assert response.status_code == 200
        assert response.json() == {"ok": True, "message": "Video not tracked"}

    def test_missing_video_id_is_acknowledged(self, client: TestClient) -> None:
        response = client.post("/api/v1/webhooks/heygen", json={"status": "completed"})
        assert response.status_code == 200
        assert response.json()["ok"] is True

    def test_unreadable_body_is_acknowledged(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/webhooks/heygen",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Unreadable payload"

    def test_verification_ping(self, client: TestClient) -> None:
        response = client.get("/api/v1/webhooks/heygen")
        assert response.json() == {"ok": True, "service": "heygen-webhook"}


class TestAvatarTrigger:
    """Tests for triggering avatar videos and inspecting their logs."""

    def test_single_item_trigger_and_logs(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_ai_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
    ) -> None:
        item = make_item(status=ContentStatus.ASSIGNED, creator=make_ai_creator())

        class StubClient:
            def create_video(self, **kwargs: Any) -> str:
                return "vid-77"

            def get_video_status(self, video_id: str) -> VideoGenerationJob:
                return VideoGenerationJob(video_id=video_id)

        def override(db: Session = Depends(get_db)) -> GenerationCorrelator:
            return GenerationCorrelator(db, heygen_client=StubClient(), rng=random.Random(0))

        app.dependency_overrides[get_generation_correlator] = override

        response = client.post(
            f"{BASE}/heygen",
            json={"month": "2026-11", "mode": "bible", "content_item_id": item.id},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["queued"] is False
        assert data["job_id"] == "vid-77"

        pending = client.get(f"{BASE}/heygen", headers=admin_headers).json()
        assert pending["meta"]["pending_total"] == 1
        assert pending["data"][0]["heygen_video_id"] == "vid-77"

        logs = client.get(f"{BASE}/{item.id}/generation-logs", headers=admin_headers).json()["data"]
        assert [entry["status"] for entry in logs] == ["started"]

    def test_trigger_closes_heygen_client(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_ai_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        item = make_item(status=ContentStatus.ASSIGNED, creator=make_ai_creator())
        created: list[Any] = []

        class ClosingClient:
            closed = False

            def create_video(self, **kwargs: Any) -> str:
                return "vid-78"

            def close(self) -> None:
                self.closed = True

        def build(settings: Any) -> ClosingClient:
            created.append(ClosingClient())
            return created[-1]

        monkeypatch.setattr(generation_service, "get_heygen_client", build)

        response = client.post(
            f"{BASE}/heygen",
            json={"month": "2026-11", "mode": "bible", "content_item_id": item.id},
            headers=admin_headers,
        )

        assert response.json()["data"]["job_id"] == "vid-78"
        assert [stub.closed for stub in created] == [True]

    def test_generation_logs_for_missing_item(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        response = client.get(f"{BASE}/999/generation-logs", headers=admin_headers)
        assert response.status_code == 404


class TestModesInResponses:
    def test_mode_is_serialized_as_value(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_item: Callable[..., ContentItem],
    ) -> None:
        make_item(mode=ContentMode.POSITIVITY)
        data = client.get(BASE, params={"month": "2026-11"}, headers=admin_headers).json()["data"]
        assert data[0]["mode"] == "positivity"
