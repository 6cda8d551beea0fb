"""
Root Pytest Fixtures.

HTTP and environment fixtures shared by all tests. Requests are
served by httpx.MockTransport; nothing touches the network.
"""

from collections.abc import Callable, Iterator

import httpx
import pytest

from tfe.client import Client
from tfe.core.config import Config, get_settings


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Run every test without TFE_* variables or a .env file."""
    for name in ("TFE_ADDRESS", "TFE_TOKEN", "TFE_LOG_LEVEL", "TFE_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# HTTP Fixtures
# =============================================================================


Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def make_client() -> Iterator[Callable[[Handler], Client]]:
    """
    Build clients whose transport answers with the given handler.

    Usage:
        def test_something(make_client):
            client = make_client(lambda request: httpx.Response(204))
    """
    created: list[httpx.Client] = []

    def _make(handler: Handler, address: str = "https://tfe.example.com") -> Client:
        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        created.append(http_client)
        return Client(Config(address=address, token="secret-token", http_client=http_client))

    yield _make

    for http_client in created:
        http_client.close()

