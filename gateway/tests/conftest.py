"""
Pytest configuration for the gateway. Upstreams are either an httpx.MockTransport
or the real auth_server and product_service apps mounted over ASGITransport.
"""
import os

os.environ["SHOP_JWT_SECRET"] = "test-signing-secret-0123456789abcdefghijklmnop"
os.environ["AUTH_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AUTH_BCRYPT_ROUNDS"] = "4"
os.environ["AUTH_RATE_LIMIT_LOGIN_PER_MINUTE"] = "0"

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from gateway.main import app, get_upstream_client  # noqa: E402


@pytest.fixture
def gateway_client():
    """Yield (install, client): install(upstream_client) routes gateway traffic through it."""

    def install(upstream: httpx.AsyncClient) -> None:
        app.dependency_overrides[get_upstream_client] = lambda: upstream

    yield install, TestClient(app)
    app.dependency_overrides.pop(get_upstream_client, None)


@pytest.fixture
def recorded():
    """Mock upstream that records every request it receives and answers 200."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"upstream": str(request.url)}, headers={"x-upstream": "yes"})

    return seen, httpx.AsyncClient(transport=httpx.MockTransport(handler))
