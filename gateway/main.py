"""
Edge gateway. Checks each request against its route's coarse capability with the
shared gatekeeper, then forwards it, token untouched, to the owning service.
Port 8000.
"""
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Request

from gateway.config import UPSTREAM_TIMEOUT_SECONDS
from gateway.proxy import forward
from gateway.routing import normalize_path, resolve
from shop_common.config import LOG_LEVEL
from shop_common.errors import NotFound, install_error_handlers
from shop_common.logging_config import configure_logging
from shop_common.security import bearer_token, enforce

PROXY_METHODS = ["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """One pooled upstream client for the app's lifetime."""
    configure_logging(LOG_LEVEL)
    app.state.http_client = httpx.AsyncClient(timeout=UPSTREAM_TIMEOUT_SECONDS)
    try:
        yield
    finally:
        await app.state.http_client.aclose()


app = FastAPI(title="Gateway", version="1.0.0", lifespan=lifespan)
install_error_handlers(app)


def get_upstream_client(request: Request) -> httpx.AsyncClient:
    """Dependency: the shared upstream client (overridden in tests)."""
    return request.app.state.http_client


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "gateway"}


@app.api_route("/{path:path}", methods=PROXY_METHODS, include_in_schema=False)
async def proxy(
    request: Request,
    token: str | None = Depends(bearer_token),
    client: httpx.AsyncClient = Depends(get_upstream_client),
):
    path = normalize_path(request.url.path)
    route = resolve(path)
    if route is None:
        raise NotFound("No route for this path")
    # Coarse check only; the upstream re-verifies the same token for its own operation
    enforce(token, route.capability_for(request.method))
    return await forward(request, route, path, client)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "gateway.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
