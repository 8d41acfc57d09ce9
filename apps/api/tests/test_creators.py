"""
Tests for the admin creator management endpoints and deactivation.
"""

from collections.abc import Callable
from datetime import date
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from lumaprod.core.exceptions import ConflictError, NotFoundError
from lumaprod.models import ContentItem, ContentStatus, Creator
from lumaprod.services.assignment import AssignmentScheduler

BASE = "/api/v1/content-production/creators"


def creator_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "user_id": "new-user",
        "name": "Grace",
        "email": "grace@example.com",
        "languages": ["en", "es"],
        "monthly_capacity": 10,
        "can_bible": True,
        "can_positivity": False,
        "is_ai": False,
    }
    payload.update(overrides)
    return payload


class TestCreatorList:
    """Tests for listing creators."""

    def test_list_is_ordered_by_name(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_creator: Callable[..., Creator],
    ) -> None:
        make_creator(name="Zoe")
        make_creator(name="Abe")

        response = client.get(BASE, headers=admin_headers)

        assert response.status_code == 200
        assert [c["name"] for c in response.json()["data"]] == ["Abe", "Zoe"]

    def test_active_filter(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_creator: Callable[..., Creator],
    ) -> None:
        active = make_creator()
        inactive = make_creator(active=False)

        only_active = client.get(BASE, params={"active": "true"}, headers=admin_headers).json()
        only_inactive = client.get(BASE, params={"active": "false"}, headers=admin_headers).json()

        assert [c["id"] for c in only_active["data"]] == [active.id]
        assert [c["id"] for c in only_inactive["data"]] == [inactive.id]
        assert only_active["meta"]["filters_applied"] == {"active": True}

    def test_requires_admin(
        self,
        client: TestClient,
        make_creator: Callable[..., Creator],
        creator_headers: Callable[[Creator], dict[str, str]],
    ) -> None:
        creator = make_creator()
        assert client.get(BASE, headers=creator_headers(creator)).status_code == 403
        assert client.post(BASE, json=creator_payload(), headers=creator_headers(creator)).status_code == 403


class TestCreatorCreate:
    """Tests for creating creator profiles."""

    def test_create(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        response = client.post(BASE, json=creator_payload(), headers=admin_headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user_id"] == "new-user"
        assert data["languages"] == ["en", "es"]
        assert data["can_positivity"] is False
        assert data["active"] is True
        assert data["heygen_voice_id"] is None

    def test_active_profile_conflicts(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_creator: Callable[..., Creator],
    ) -> None:
        existing = make_creator(user_id="new-user")

        response = client.post(BASE, json=creator_payload(), headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["error"]["details"]["creator_id"] == existing.id

    def test_deactivated_profile_conflicts(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_creator: Callable[..., Creator],
    ) -> None:
        make_creator(user_id="new-user", active=False)

        response = client.post(BASE, json=creator_payload(), headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["error"]["details"]["active"] is False

    @pytest.mark.parametrize(
        "overrides",
        [
            {"languages": []},
            {"monthly_capacity": 0},
            {"monthly_capacity": 101},
            {"name": ""},
        ],
    )
    def test_invalid_payload(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        overrides: dict[str, Any],
    ) -> None:
        response = client.post(BASE, json=creator_payload(**overrides), headers=admin_headers)
        assert response.status_code == 422


class TestCreatorUpdate:
    """Tests for updating creator profiles."""

    def test_partial_update(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_creator: Callable[..., Creator],
    ) -> None:
        creator = make_creator(monthly_capacity=5)

        response = client.patch(
            f"{BASE}/{creator.id}",
            json={"monthly_capacity": 20, "heygen_voice_id": "voice-a,voice-b"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["monthly_capacity"] == 20
        assert data["heygen_voice_id"] == "voice-a,voice-b"
        assert data["name"] == creator.name

    def test_put_clears_optional_columns_only(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_ai_creator: Callable[..., Creator],
    ) -> None:
        creator = make_ai_creator()

        response = client.put(
            f"{BASE}/{creator.id}",
            json={"heygen_avatar_id": None, "name": None},
            headers=admin_headers,
        )

        data = response.json()["data"]
        assert data["heygen_avatar_id"] is None
        assert data["name"] == creator.name

    def test_reactivate(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_creator: Callable[..., Creator],
    ) -> None:
        creator = make_creator(active=False)
        response = client.patch(f"{BASE}/{creator.id}", json={"active": True}, headers=admin_headers)
        assert response.json()["data"]["active"] is True

    def test_missing_creator(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        response = client.patch(f"{BASE}/999", json={"name": "Nobody"}, headers=admin_headers)
        assert response.status_code == 404


class TestCreatorDeactivate:
    """Tests for soft-deactivating creators."""

    def test_deactivate_releases_pending_work(
        self,
        client: TestClient,
        db: Session,
        admin_headers: dict[str, str],
        make_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
    ) -> None:
        creator = make_creator()
        assigned = make_item(post_date=date(2026, 11, 1), status=ContentStatus.ASSIGNED, creator=creator)
        generated = make_item(post_date=date(2026, 11, 2), status=ContentStatus.GENERATED, creator=creator)
        submitted = make_item(post_date=date(2026, 11, 3), status=ContentStatus.SUBMITTED, creator=creator)

        response = client.delete(f"{BASE}/{creator.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"] == {"deactivated": True, "unassigned_count": 2}

        db.expire_all()
        assert db.get(Creator, creator.id).active is False
        for item in (assigned, generated):
            assert (item.status, item.creator_id) == (ContentStatus.GENERATED, None)
        assert (submitted.status, submitted.creator_id) == (ContentStatus.SUBMITTED, creator.id)

    def test_deactivate_twice_conflicts(
        self,
        client: TestClient,
        admin_headers: dict[str, str],
        make_creator: Callable[..., Creator],
    ) -> None:
        creator = make_creator(active=False)

        response = client.delete(f"{BASE}/{creator.id}", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONFLICT"

    def test_released_items_are_reassignable(
        self,
        db: Session,
        make_creator: Callable[..., Creator],
        make_item: Callable[..., ContentItem],
    ) -> None:
        leaving = make_creator()
        staying = make_creator()
        item = make_item(status=ContentStatus.ASSIGNED, creator=leaving)
        scheduler = AssignmentScheduler(db)

        assert scheduler.deactivate_creator(leaving.id) == 1
        result = scheduler.auto_assign("2026-11", item.mode)

        db.refresh(item)
        assert result.assigned == 1
        assert item.creator_id == staying.id

    def test_missing_creator(self, db: Session) -> None:
        with pytest.raises(NotFoundError):
            AssignmentScheduler(db).deactivate_creator(999)

    def test_service_rejects_inactive(self, db: Session, make_creator: Callable[..., Creator]) -> None:
        creator = make_creator(active=False)
        with pytest.raises(ConflictError):
            AssignmentScheduler(db).deactivate_creator(creator.id)
