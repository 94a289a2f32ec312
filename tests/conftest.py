"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Dict, List, Optional, Sequence

import pytest
from starlette.testclient import TestClient

from service_redirector.routing.engine import RedirectEngine
from service_redirector.routing.models import CandidateBackend
from service_redirector.server import create_redirector_app
from service_redirector.shared.config import RedirectorSettings

CUSTOM_ROUTES = {
    "h": "http://home:1234",
    "h/grafana": "http://grafana:2345/graphs/index",
    "h/grafana/overview": "http://grafana:2345/graphs/12345",
    "h/graph": "http://grafana:2345/graph?id=$arg$&detail=1",
    "h/topgraph": "http://grafana:2345/graph?id=1234&detail=1",
    "h/open": "http://open:1234/open/$arg$",
    "h/play": "http://play:1234/play?v=$arg$",
}


class StaticDirectory:
    """In-memory directory keyed by (service, port type)."""

    def __init__(self, services: Optional[Dict[tuple, Sequence[CandidateBackend]]] = None,
                 error: Optional[Exception] = None, delay: float = 0.0):
        self.services = services or {}
        self.error = error
        self.delay = delay
        self.calls: List[tuple] = []
        self.closed = False

    async def query(self, service_name: str, port_type: str = '', timeout: float = 5.0):
        self.calls.append((service_name, port_type, timeout))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.services.get((service_name, port_type), []))

    async def close(self) -> None:
        self.closed = True


def build_settings(**overrides) -> RedirectorSettings:
    """Settings independent of the test process environment."""
    values = {"custom_routes": {}}
    values.update(overrides)
    return RedirectorSettings(**values)


@pytest.fixture
def make_settings():
    return build_settings


@pytest.fixture
def make_directory():
    return StaticDirectory


@pytest.fixture
def custom_routes() -> Dict[str, str]:
    return dict(CUSTOM_ROUTES)


@pytest.fixture
def directory() -> StaticDirectory:
    return StaticDirectory({
        ("grafana", ""): [CandidateBackend("node-b", ("http",), 3000)],
        ("web", ""): [
            CandidateBackend("node-b", ("https",), 8443),
            CandidateBackend("node-a", ("http",), 8080),
            CandidateBackend("node-a", (), 80),
        ],
        ("web", "https"): [CandidateBackend("node-b", ("https",), 8443)],
    })


@pytest.fixture
def settings() -> RedirectorSettings:
    return build_settings()


@pytest.fixture
def engine(settings, directory) -> RedirectEngine:
    return RedirectEngine(settings, directory)


@pytest.fixture
def client(settings, directory) -> TestClient:
    """Test client that never follows redirects."""
    app = create_redirector_app(settings, directory)
    return TestClient(app, follow_redirects=False)
