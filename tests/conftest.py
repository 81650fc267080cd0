"""
tests/conftest.py

Shared pytest fixtures for the unit test suite.
All HTTP fixtures use respx.mock and all state files live under tmp_path, so
no real network calls or system paths are touched in any test.
"""

from __future__ import annotations

import pytest
import respx

from provider.dns_provider import RecordTarget
from repositories.state_repository import StateRepository


# ---------------------------------------------------------------------------
# HTTP mock fixture: intercepts all httpx calls
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_http():
    """
    Yields a respx router that intercepts all httpx.AsyncClient calls.

    No real network traffic is allowed during tests. Use this fixture
    wherever a service or client would normally make an outbound request.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ---------------------------------------------------------------------------
# State and target fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def state_path(tmp_path):
    """Path of a state file inside a not-yet-created directory."""
    return str(tmp_path / "state" / "last_ip.txt")


@pytest.fixture()
def state_repo(state_path):
    """A StateRepository whose directory already exists."""
    repo = StateRepository(state_path)
    repo.ensure_directory()
    return repo


@pytest.fixture()
def target():
    """An unresolved RecordTarget for home.example.com."""
    return RecordTarget(domain="example.com", record_name="home", record_type="A")
