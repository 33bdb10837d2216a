"""Shared test fixtures.

Provides a ``test_client`` for FastAPI, mock Supabase client fixtures,
an in-memory candidate repository, and an admin auth override for use
across all test modules.
"""

import os

# Settings are read at import time; these must exist before ``app`` loads.
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-key")
os.environ.setdefault("COOKIE_SECURE", "false")

from collections.abc import Generator  # noqa: E402
from unittest.mock import MagicMock, patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from tests.factories import FakeCandidateRepository, make_candidate  # noqa: E402


@pytest.fixture()
def fake_repository() -> FakeCandidateRepository:
    """Repository pre-loaded with one candidate (``CANDIDATE_ID``)."""
    return FakeCandidateRepository([make_candidate()])


@pytest.fixture()
def mock_supabase_module() -> Generator[MagicMock, None, None]:
    """Patch the Supabase client at module level in the health router."""
    mock_client = MagicMock()
    # Mock the select -> limit -> execute chain
    mock_table = MagicMock()
    mock_select = MagicMock()
    mock_limit = MagicMock()

    mock_client.table.return_value = mock_table
    mock_table.select.return_value = mock_select
    mock_select.limit.return_value = mock_limit
    mock_limit.execute.return_value = MagicMock()  # non-None result

    with patch("app.routers.health.get_supabase", return_value=mock_client):
        yield mock_client


@pytest.fixture()
def mock_supabase_disconnected() -> Generator[MagicMock, None, None]:
    """Patch ``get_supabase`` to simulate a disconnected database."""
    with patch(
        "app.routers.health.get_supabase",
        side_effect=Exception("Connection refused"),
    ):
        yield MagicMock()


@pytest.fixture()
def mock_site_stats() -> Generator[MagicMock, None, None]:
    """Patch the Supabase client used by the site counters."""
    mock_client = MagicMock()
    with patch("app.services.site_stats.get_supabase", return_value=mock_client):
        yield mock_client


@pytest.fixture()
def test_client() -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient."""
    from app.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture()
def app_with_repository(
    fake_repository: FakeCandidateRepository,
    mock_site_stats: MagicMock,
) -> Generator[TestClient, None, None]:
    """TestClient wired to ``fake_repository`` with admin auth bypassed."""
    from app.auth.verify import auth_dependency
    from app.main import app
    from app.services.candidates import get_candidate_repository
    from app.services.navigation import candidate_nav

    app.dependency_overrides[get_candidate_repository] = lambda: fake_repository
    app.dependency_overrides[auth_dependency] = lambda: {"sub": "admin-1", "role": "authenticated"}
    candidate_nav.reset()
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
        candidate_nav.reset()
