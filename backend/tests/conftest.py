"""Pytest fixtures and configuration."""

from datetime import datetime, timedelta, UTC

import pytest
from fastapi.testclient import TestClient
from backend.main import app
from backend.dependencies import get_share_service
from backend.utils.link_store import ShareLinkStore
from backend.services.parse_service import ParseService
from backend.services.share_service import ShareService
from backend.services.diagram_service import DiagramService


class FakeClock:
    """Settable clock for expiry tests."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Fresh fake clock starting at 2024-01-01 UTC."""
    return FakeClock()


@pytest.fixture
def link_store(clock):
    """Fresh ShareLinkStore with a 48 hour TTL on the fake clock."""
    return ShareLinkStore(ttl=timedelta(hours=48), key_length=10, clock=clock)


@pytest.fixture
def share_service(link_store):
    """ShareService over the fresh store."""
    return ShareService(store=link_store, base_url="http://testserver/")


@pytest.fixture
def parse_service():
    """ParseService with default options."""
    return ParseService()


@pytest.fixture
def diagram_service():
    """DiagramService with a small canvas."""
    return DiagramService(width=800, height=600)


@pytest.fixture
def client(share_service):
    """Test client for FastAPI app, with an isolated share-link store."""
    app.dependency_overrides[get_share_service] = lambda: share_service
    yield TestClient(app)
    app.dependency_overrides.clear()
