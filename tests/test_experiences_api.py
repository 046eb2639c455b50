"""Tests for experience, like and save API endpoints."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

import interview_board.api.routes.experiences as experience_routes
from interview_board.api.main import app
from interview_board.data.db import get_session
from interview_board.data.models import Experience, Like, User
from interview_board.services.exceptions import ReactionConflictError

EXPERIENCE_BODY = {
    "title": "Backend intern interview",
    "company": "Acme",
    "position": "Backend Intern",
    "content": "Two coding rounds, one system design discussion.",
    "difficulty": "Medium",
    "outcome": "Selected",
    "salary": "50k/month",
    "location": "Bhopal",
    "tips": "Revise graphs.",
    "isAnonymous": False,
}


@pytest.fixture
def client(api_db: None) -> TestClient:
    """Create a test client for the API."""
    return TestClient(app)


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def anon_token(client: TestClient) -> str:
    return client.post("/api/auth/anonymous").json()["accessToken"]


@pytest.fixture
def member_token(client: TestClient) -> str:
    response = client.post(
        "/api/auth/signup",
        json={"email": "member@example.com", "password": "secret1", "name": "Member"},
    )
    return response.json()["accessToken"]


@pytest.fixture
def experience_id(client: TestClient, member_token: str) -> str:
    response = client.post("/api/experiences", json=EXPERIENCE_BODY, headers=_auth(member_token))
    assert response.status_code == 201
    return response.json()["id"]


class TestCreateExperience:
    def test_requires_session(self, client: TestClient) -> None:
        response = client.post("/api/experiences", json={})

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    def test_missing_fields_are_reported_together(
        self, client: TestClient, member_token: str
    ) -> None:
        body = dict(EXPERIENCE_BODY, title="   ", outcome="")
        del body["company"]

        response = client.post("/api/experiences", json=body, headers=_auth(member_token))

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields: title, company, outcome"

    def test_wrongly_typed_field_is_a_bad_request(
        self, client: TestClient, member_token: str
    ) -> None:
        body = dict(EXPERIENCE_BODY, title=123)

        response = client.post("/api/experiences", json=body, headers=_auth(member_token))

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid fields: title"}

    def test_missing_body_is_a_bad_request(self, client: TestClient, member_token: str) -> None:
        response = client.post("/api/experiences", headers=_auth(member_token))

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid fields: body"}

    def test_creates_experience(self, client: TestClient, member_token: str) -> None:
        response = client.post(
            "/api/experiences", json=EXPERIENCE_BODY, headers=_auth(member_token)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == EXPERIENCE_BODY["title"]
        assert data["author"] == {"name": "Member", "isAnonymous": False}
        assert data["_count"] == {"likes": 0, "saves": 0}
        assert data["isAnonymous"] is False
        assert "authorId" in data
        created_at = datetime.fromisoformat(data["createdAt"].replace("Z", "+00:00"))
        assert created_at.utcoffset() == timedelta(0)

    def test_anonymous_session_post_is_always_anonymous(
        self, client: TestClient, anon_token: str
    ) -> None:
        response = client.post(
            "/api/experiences",
            json=dict(EXPERIENCE_BODY, isAnonymous=False),
            headers=_auth(anon_token),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["isAnonymous"] is True
        assert data["author"]["name"] == "Anonymous"


class TestListExperiences:
    def test_empty_listing(self, client: TestClient) -> None:
        response = client.get("/api/experiences")

        assert response.status_code == 200
        assert response.json() == {
            "experiences": [],
            "pagination": {"page": 1, "limit": 10, "total": 0, "pages": 0, "hasMore": False},
        }

    def test_pagination_over_25_items(self, client: TestClient, member_token: str) -> None:
        for i in range(25):
            client.post(
                "/api/experiences",
                json=dict(EXPERIENCE_BODY, title=f"Experience {i}"),
                headers=_auth(member_token),
            )

        page_three = client.get("/api/experiences", params={"page": 3, "limit": 10}).json()
        page_four = client.get("/api/experiences", params={"page": 4, "limit": 10}).json()

        assert page_three["pagination"]["pages"] == 3
        assert page_three["pagination"]["total"] == 25
        assert len(page_three["experiences"]) == 5
        assert page_four["experiences"] == []
        assert page_four["pagination"]["hasMore"] is False

    def test_viewer_annotation(
        self, client: TestClient, member_token: str, experience_id: str
    ) -> None:
        client.post(f"/api/experiences/{experience_id}/like", headers=_auth(member_token))

        as_member = client.get("/api/experiences", headers=_auth(member_token)).json()
        as_guest = client.get("/api/experiences").json()

        assert as_member["experiences"][0]["isLikedByUser"] is True
        assert as_member["experiences"][0]["isSavedByUser"] is False
        assert as_guest["experiences"][0]["isLikedByUser"] is False
        assert as_guest["experiences"][0]["_count"]["likes"] == 1

    def test_popular_sort(self, client: TestClient, member_token: str, anon_token: str) -> None:
        ids = []
        for title in ("first", "second", "third"):
            response = client.post(
                "/api/experiences",
                json=dict(EXPERIENCE_BODY, title=title),
                headers=_auth(member_token),
            )
            ids.append(response.json()["id"])
        client.post(f"/api/experiences/{ids[0]}/like", headers=_auth(member_token))
        client.post(f"/api/experiences/{ids[0]}/like", headers=_auth(anon_token))
        client.post(f"/api/experiences/{ids[1]}/like", headers=_auth(anon_token))

        data = client.get("/api/experiences", params={"sortBy": "popular"}).json()

        assert [e["title"] for e in data["experiences"]] == ["first", "second", "third"]

    def test_persistence_failure_degrades(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(experience_routes, "list_experiences", broken)

        response = client.get("/api/experiences")

        assert response.status_code == 500
        data = response.json()
        assert data["experiences"] == []
        assert data["pagination"]["total"] == 0
        assert data["pagination"]["pages"] == 0
        assert data["error"] == "Failed to fetch experiences"
        assert "database is locked" in data["details"]

    def test_non_integer_page_is_a_bad_request(self, client: TestClient) -> None:
        response = client.get("/api/experiences", params={"page": "abc"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid fields: page"}


class TestGetExperience:
    def test_not_found(self, client: TestClient) -> None:
        response = client.get("/api/experiences/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"error": "Experience not found"}

    def test_detail(self, client: TestClient, member_token: str, experience_id: str) -> None:
        client.post(f"/api/experiences/{experience_id}/save", headers=_auth(member_token))

        data = client.get(f"/api/experiences/{experience_id}", headers=_auth(member_token)).json()

        assert data["id"] == experience_id
        assert data["isSavedByUser"] is True
        assert data["isLikedByUser"] is False
        assert data["_count"] == {"likes": 0, "saves": 1}


class TestToggleLike:
    def test_requires_session(self, client: TestClient, experience_id: str) -> None:
        assert client.post(f"/api/experiences/{experience_id}/like").status_code == 401

    def test_toggle_symmetry(
        self, client: TestClient, member_token: str, experience_id: str
    ) -> None:
        first = client.post(f"/api/experiences/{experience_id}/like", headers=_auth(member_token))
        second = client.post(f"/api/experiences/{experience_id}/like", headers=_auth(member_token))

        assert first.json() == {"liked": True}
        assert second.json() == {"liked": False}
        with get_session() as session:
            assert session.query(Like).filter(Like.experience_id == experience_id).count() == 0

    def test_anonymous_users_can_like(
        self, client: TestClient, anon_token: str, experience_id: str
    ) -> None:
        response = client.post(f"/api/experiences/{experience_id}/like", headers=_auth(anon_token))

        assert response.status_code == 200
        assert response.json() == {"liked": True}

    def test_unknown_experience(self, client: TestClient, member_token: str) -> None:
        response = client.post("/api/experiences/missing/like", headers=_auth(member_token))

        assert response.status_code == 404
        assert response.json()["error"] == "Experience not found"

    def test_conflict_is_reported(
        self,
        client: TestClient,
        member_token: str,
        experience_id: str,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def racing(*args, **kwargs):
            raise ReactionConflictError("lost the race")

        monkeypatch.setattr(experience_routes, "toggle_like", racing)

        response = client.post(
            f"/api/experiences/{experience_id}/like", headers=_auth(member_token)
        )

        assert response.status_code == 409

    def test_identity_failure_is_a_server_error(
        self,
        client: TestClient,
        member_token: str,
        experience_id: str,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(experience_routes, "ensure_user_exists", lambda *args: None)

        response = client.post(
            f"/api/experiences/{experience_id}/like", headers=_auth(member_token)
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to create user"

    def test_purged_user_row_is_recreated(
        self, client: TestClient, experience_id: str, anon_token: str
    ) -> None:
        user_id = client.get("/api/auth/me", headers=_auth(anon_token)).json()["id"]
        with get_session() as session:
            session.query(User).filter(User.id == user_id).delete(synchronize_session=False)

        response = client.post(f"/api/experiences/{experience_id}/like", headers=_auth(anon_token))

        assert response.status_code == 200
        with get_session() as session:
            restored = session.get(User, user_id)
            assert restored is not None
            assert restored.is_anonymous is True
            assert restored.name == "Anonymous User"


class TestToggleSave:
    def test_anonymous_users_cannot_save(
        self, client: TestClient, anon_token: str, experience_id: str
    ) -> None:
        response = client.post(f"/api/experiences/{experience_id}/save", headers=_auth(anon_token))

        assert response.status_code == 403
        assert response.json()["error"] == "Anonymous users cannot save experiences"

    def test_toggle_save(self, client: TestClient, member_token: str, experience_id: str) -> None:
        first = client.post(f"/api/experiences/{experience_id}/save", headers=_auth(member_token))
        second = client.post(f"/api/experiences/{experience_id}/save", headers=_auth(member_token))

        assert first.json() == {"saved": True}
        assert second.json() == {"saved": False}

    def test_unknown_experience(self, client: TestClient, member_token: str) -> None:
        response = client.post("/api/experiences/missing/save", headers=_auth(member_token))

        assert response.status_code == 404


class TestWeeklyRanking:
    def test_window_and_order(self, client: TestClient, member_token: str) -> None:
        fans = [client.post("/api/auth/anonymous").json()["accessToken"] for _ in range(3)]
        ids = {}
        for title in ("stale", "top", "fresh"):
            response = client.post(
                "/api/experiences",
                json=dict(EXPERIENCE_BODY, title=title),
                headers=_auth(member_token),
            )
            ids[title] = response.json()["id"]
        now = datetime.now(UTC)
        with get_session() as session:
            session.get(Experience, ids["stale"]).created_at = now - timedelta(days=8)
            session.get(Experience, ids["top"]).created_at = now - timedelta(days=6)
        for token in fans:
            client.post(f"/api/experiences/{ids['stale']}/like", headers=_auth(token))
        for token in fans[:2]:
            client.post(f"/api/experiences/{ids['top']}/like", headers=_auth(token))

        response = client.get("/api/experiences/weekly-ranking", headers=_auth(fans[0]))

        assert response.status_code == 200
        data = response.json()
        assert [e["title"] for e in data] == ["top", "fresh"]
        assert data[0]["isLikedByUser"] is True
        assert data[1]["isLikedByUser"] is False

    def test_failure_returns_empty_list(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("no such table"))

        monkeypatch.setattr(experience_routes, "get_weekly_ranking", broken)

        response = client.get("/api/experiences/weekly-ranking")

        assert response.status_code == 500
        assert response.json() == []
