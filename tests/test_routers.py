"""HTTP tests for the landing, admin candidate, dashboard and auth routes."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient

from app.core.constants import RE_EDIT_CANDIDATE_KEY, RE_EDIT_REGISTRATION_KEY
from app.models.dashboard import Coordinates
from app.services.navigation import candidate_nav
from tests.factories import (
    CANDIDATE_ID,
    FakeCandidateRepository,
    form_values,
    make_candidate,
)

PHOTO = {"profileImage": ("me.png", b"\x89PNG\r\n", "image/png")}


def _recent_candidate(candidate_id: str = "fresh-1", **overrides):
    registered = datetime.now(timezone.utc) - timedelta(hours=1)
    return make_candidate(
        id=candidate_id,
        registration_date=registered,
        last_updated=registered,
        **overrides,
    )


def _ticket_cookie(candidate_id: str, registered: datetime) -> dict[str, str]:
    return {
        "Cookie": (
            f"{RE_EDIT_CANDIDATE_KEY}={candidate_id}; "
            f"{RE_EDIT_REGISTRATION_KEY}={registered.isoformat()}"
        )
    }


def _stats_table(mock_site_stats: MagicMock, visits: int, registrations: int) -> None:
    table = MagicMock()
    for method in ("select", "eq", "limit"):
        getattr(table, method).return_value = table
    table.execute.return_value = MagicMock(
        data=[{"total_visits": visits, "total_registrations": registrations}]
    )
    mock_site_stats.table.return_value = table


# ---------------------------------------------------------------------------
# Landing (public)
# ---------------------------------------------------------------------------


class TestLandingRoutes:
    """Registration and the applicant's own re-edit flow."""

    def test_visit_is_counted(
        self, app_with_repository: TestClient, mock_site_stats: MagicMock
    ) -> None:
        response = app_with_repository.post("/api/v1/landing/visit")
        assert response.status_code == 204
        mock_site_stats.rpc.assert_called_once_with(
            "increment_site_stat", {"p_field": "total_visits"}
        )

    def test_register_sets_ticket_cookies(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        response = app_with_repository.post(
            "/api/v1/landing/register",
            data=form_values(make_candidate()),
            files=PHOTO,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["candidateId"] == "new-1"
        assert body["editUntil"] is not None
        assert response.cookies.get(RE_EDIT_CANDIDATE_KEY) == "new-1"
        assert len(fake_repository.uploads) == 1

        status = app_with_repository.get("/api/v1/landing/re-edit")
        assert status.json()["canReEdit"] is True
        assert status.json()["candidateId"] == "new-1"

    def test_register_requires_photo(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        response = app_with_repository.post(
            "/api/v1/landing/register",
            data=form_values(make_candidate()),
        )
        assert response.status_code == 422
        assert response.json()["detail"]["errors"] == {"profileImage": "required"}
        assert fake_repository.created == []

    def test_register_reports_field_codes(self, app_with_repository: TestClient) -> None:
        data = form_values(make_candidate())
        data["fullName"] = "Dana"
        data["phone"] = "12345"
        response = app_with_repository.post("/api/v1/landing/register", data=data, files=PHOTO)

        assert response.status_code == 422
        assert response.json()["detail"]["errors"] == {
            "fullName": "atLeastTwoParts",
            "phone": "pattern",
        }

    def test_re_edit_without_ticket(self, app_with_repository: TestClient) -> None:
        response = app_with_repository.get("/api/v1/landing/re-edit")
        assert response.status_code == 200
        assert response.json()["canReEdit"] is False

    def test_own_record_requires_matching_ticket(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        candidate = _recent_candidate()
        fake_repository.candidates[candidate.id] = candidate
        headers = _ticket_cookie("someone-else", candidate.registration_date)

        response = app_with_repository.get(
            f"/api/v1/landing/candidates/{candidate.id}", headers=headers
        )
        assert response.status_code == 403

    def test_own_record_with_ticket(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        candidate = _recent_candidate()
        fake_repository.candidates[candidate.id] = candidate
        headers = _ticket_cookie(candidate.id, candidate.registration_date)

        response = app_with_repository.get(
            f"/api/v1/landing/candidates/{candidate.id}", headers=headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["candidate"]["fullName"] == "Dana Levi"
        assert body["editWindow"]["editable"] is True

    def test_own_edit_sends_only_changes(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        candidate = _recent_candidate()
        fake_repository.candidates[candidate.id] = candidate
        data = form_values(candidate)
        data["hobbies"] = "Chess, hiking"

        response = app_with_repository.put(
            f"/api/v1/landing/candidates/{candidate.id}",
            data=data,
            headers=_ticket_cookie(candidate.id, candidate.registration_date),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "updated"
        assert set(body["changes"]) == {"hobbies", "lastUpdated"}
        [(updated_id, changes)] = fake_repository.updates
        assert updated_id == candidate.id
        assert changes["hobbies"] == "Chess, hiking"

    def test_expired_ticket_is_refused(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        candidate = fake_repository.candidates[CANDIDATE_ID]
        response = app_with_repository.put(
            f"/api/v1/landing/candidates/{CANDIDATE_ID}",
            data=form_values(candidate),
            headers=_ticket_cookie(CANDIDATE_ID, candidate.registration_date),
        )
        assert response.status_code == 403
        assert fake_repository.updates == []


# ---------------------------------------------------------------------------
# Admin candidate management
# ---------------------------------------------------------------------------


class TestCandidateRoutes:
    """JWT-protected candidate endpoints (auth overridden)."""

    def _seed(self, repository: FakeCandidateRepository) -> None:
        repository.candidates.clear()
        for candidate_id, name, city in (
            ("a", "Avi Cohen", "Eilat"),
            ("b", "Dana Levi", "Haifa"),
            ("c", "Noa Mizrahi", "Haifa"),
        ):
            repository.candidates[candidate_id] = _recent_candidate(
                candidate_id, full_name=name, city=city
            )

    def test_list_filters_and_pages(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        self._seed(fake_repository)

        response = app_with_repository.get(
            "/api/v1/candidates",
            params={"search": "haifa", "sortBy": "fullName", "order": "desc"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert [c["id"] for c in body["candidates"]] == ["c", "b"]
        # Paging index covers the full list, not the filtered page
        assert candidate_nav.ids == ["a", "b", "c"]

    def test_detail_includes_neighbors(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        self._seed(fake_repository)
        app_with_repository.get("/api/v1/candidates")

        response = app_with_repository.get("/api/v1/candidates/b")

        assert response.status_code == 200
        body = response.json()
        assert body["neighbors"] == {"prevId": "a", "nextId": "c", "index": 1, "total": 3}
        assert body["editWindow"]["editable"] is True

    def test_detail_neighbors_survive_concurrent_navigation(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        """Another admin opening a record mid-load does not leak into this response."""
        self._seed(fake_repository)
        fake_repository.candidates["d"] = _recent_candidate("d", full_name="Yael Katz")
        app_with_repository.get("/api/v1/candidates")
        load = fake_repository.get_by_id

        def get_by_id_while_other_admin_navigates(candidate_id: str):
            candidate_nav.set_current_id("d")
            return load(candidate_id)

        with patch.object(
            fake_repository, "get_by_id", side_effect=get_by_id_while_other_admin_navigates
        ):
            response = app_with_repository.get("/api/v1/candidates/b")

        assert response.status_code == 200
        assert response.json()["neighbors"] == {
            "prevId": "a",
            "nextId": "c",
            "index": 1,
            "total": 4,
        }

    def test_detail_not_found(self, app_with_repository: TestClient) -> None:
        response = app_with_repository.get("/api/v1/candidates/missing")
        assert response.status_code == 404

    def test_admin_create_without_photo(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        response = app_with_repository.post(
            "/api/v1/candidates", data=form_values(make_candidate())
        )
        assert response.status_code == 201
        assert fake_repository.created[0].profile_image_url == ""

    def test_admin_edit_within_window(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        self._seed(fake_repository)
        data = form_values(fake_repository.candidates["b"])
        data["city"] = "Tel Aviv"

        response = app_with_repository.put("/api/v1/candidates/b", data=data)

        assert response.status_code == 200
        assert fake_repository.updates[0][1]["city"] == "Tel Aviv"

    def test_admin_edit_after_window(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        candidate = fake_repository.candidates[CANDIDATE_ID]
        data = form_values(candidate)
        data["hobbies"] = "Late change"

        response = app_with_repository.put(f"/api/v1/candidates/{CANDIDATE_ID}", data=data)

        assert response.status_code == 403
        detail = response.json()["detail"]
        assert detail["deadline"].startswith("2024-01-04T12:00:00")
        assert "expired" in detail["message"]
        assert fake_repository.updates == []

    def test_admin_edit_noop(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        self._seed(fake_repository)
        response = app_with_repository.put(
            "/api/v1/candidates/a", data=form_values(fake_repository.candidates["a"])
        )
        assert response.status_code == 200
        assert response.json() == {"status": "noop", "changes": {}}
        assert fake_repository.updates == []

    def test_delete(
        self,
        app_with_repository: TestClient,
        fake_repository: FakeCandidateRepository,
    ) -> None:
        response = app_with_repository.delete(f"/api/v1/candidates/{CANDIDATE_ID}")
        assert response.status_code == 204
        assert fake_repository.deleted == [CANDIDATE_ID]
        assert app_with_repository.delete(f"/api/v1/candidates/{CANDIDATE_ID}").status_code == 404


class TestAdminAuth:
    """Admin routes reject requests without a valid bearer token."""

    def test_missing_token(self, test_client: TestClient) -> None:
        response = test_client.get("/api/v1/candidates")
        assert response.status_code in (401, 403)

    def test_malformed_token(self, test_client: TestClient) -> None:
        response = test_client.get(
            "/api/v1/dashboard/overview",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401

    @patch("app.routers.auth.create_session_client")
    def test_login_returns_access_token(
        self, mock_create: MagicMock, test_client: TestClient
    ) -> None:
        session = MagicMock(access_token="tok", refresh_token="ref", expires_in=3600)
        mock_create.return_value.auth.sign_in_with_password.return_value = MagicMock(
            session=session
        )

        response = test_client.post(
            "/api/v1/auth/login", json={"email": "admin@example.com", "password": "pw"}
        )

        assert response.status_code == 200
        assert response.json()["access_token"] == "tok"
        mock_create.return_value.auth.sign_in_with_password.assert_called_once_with(
            {"email": "admin@example.com", "password": "pw"}
        )

    @patch("app.routers.auth.create_session_client")
    def test_login_bad_credentials(
        self, mock_create: MagicMock, test_client: TestClient
    ) -> None:
        mock_create.return_value.auth.sign_in_with_password.side_effect = Exception(
            "Invalid login credentials"
        )
        response = test_client.post(
            "/api/v1/auth/login", json={"email": "admin@example.com", "password": "bad"}
        )
        assert response.status_code == 401

    @patch("app.routers.auth.get_supabase")
    def test_logout_is_best_effort(
        self, mock_get_supabase: MagicMock, test_client: TestClient
    ) -> None:
        mock_get_supabase.return_value.auth.admin.sign_out.side_effect = Exception("gone")
        response = test_client.post(
            "/api/v1/auth/logout", headers={"Authorization": "Bearer tok"}
        )
        assert response.status_code == 204


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


class TestDashboardRoutes:
    """Charts and map data."""

    def test_overview(
        self,
        app_with_repository: TestClient,
        mock_site_stats: MagicMock,
    ) -> None:
        _stats_table(mock_site_stats, visits=50, registrations=1)

        response = app_with_repository.get("/api/v1/dashboard/overview")

        assert response.status_code == 200
        body = response.json()
        assert body["totalCandidates"] == 1
        assert body["conversion"] == [
            {"name": "Visits", "value": 50},
            {"name": "Registrations", "value": 1},
        ]
        assert body["cityDistribution"] == [{"name": "Haifa", "value": 1}]

    def test_map(self, app_with_repository: TestClient) -> None:
        fake_geocoder = AsyncMock()
        fake_geocoder.get_coordinates.return_value = Coordinates(lat=32.8, lng=35.0)
        with patch("app.routers.dashboard.geocoder", fake_geocoder):
            response = app_with_repository.get("/api/v1/dashboard/map")

        assert response.status_code == 200
        body = response.json()
        assert body["markers"] == [{"lat": 32.8, "lng": 35.0}]
        assert body["view"]["zoom"] == 10

    def test_focus(self, app_with_repository: TestClient) -> None:
        fake_geocoder = AsyncMock()
        fake_geocoder.get_coordinates.return_value = Coordinates(lat=32.8, lng=35.0)
        with patch("app.routers.dashboard.geocoder", fake_geocoder):
            response = app_with_repository.get(
                "/api/v1/dashboard/focus", params={"candidateId": CANDIDATE_ID}
            )

        assert response.status_code == 200
        assert response.json() == {
            "candidateId": CANDIDATE_ID,
            "city": "Haifa",
            "center": {"lat": 32.8, "lng": 35.0},
            "zoom": 11,
        }
        fake_geocoder.get_coordinates.assert_awaited_once_with("Haifa")

    def test_focus_unknown_candidate(self, app_with_repository: TestClient) -> None:
        response = app_with_repository.get(
            "/api/v1/dashboard/focus", params={"candidateId": "missing"}
        )
        assert response.status_code == 404
