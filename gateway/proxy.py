"""
Forward an allowed request to its upstream and relay the answer.
The Authorization header goes through byte-for-byte so the upstream can run its
own gatekeeper check on the caller's original token.
"""
import logging
from urllib.parse import quote

import httpx
from fastapi import Request, Response

from gateway.routing import Route
from shop_common.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

HOP_BY_HOP = frozenset({
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
})
# recomputed on each leg
_REQUEST_SKIP = HOP_BY_HOP | {"host", "content-length"}
_RESPONSE_SKIP = HOP_BY_HOP | {"content-length", "content-encoding"}


def upstream_url(route: Route, path: str, request: Request) -> str:
    url = route.upstream + quote(path)
    if request.url.query:
        url += "?" + request.url.query
    return url


def forwarded_headers(request: Request) -> list[tuple[bytes, bytes]]:
    """Request headers minus hop-by-hop ones, with the client appended to X-Forwarded-For."""
    headers = [
        (name, value)
        for name, value in request.headers.raw
        if name.decode("latin-1").lower() not in _REQUEST_SKIP and name.lower() != b"x-forwarded-for"
    ]
    client_host = request.client.host if request.client else None
    chain = request.headers.get("x-forwarded-for")
    if client_host:
        chain = f"{chain}, {client_host}" if chain else client_host
    if chain:
        headers.append((b"x-forwarded-for", chain.encode("latin-1")))
    return headers


async def forward(request: Request, route: Route, path: str, client: httpx.AsyncClient) -> Response:
    """Send request to route's upstream at path, which must be the path the edge check ran on."""
    url = upstream_url(route, path, request)
    try:
        upstream = await client.request(
            request.method,
            url,
            headers=forwarded_headers(request),
            content=await request.body(),
        )
    except httpx.RequestError as e:
        logger.warning("Upstream %s unavailable for %s %s: %s", route.upstream, request.method, request.url.path, e)
        raise UpstreamUnavailable() from e

    logger.debug("%s %s -> %s %s", request.method, request.url.path, url, upstream.status_code)
    response = Response(content=upstream.content, status_code=upstream.status_code)
    for name, value in upstream.headers.multi_items():
        if name.lower() not in _RESPONSE_SKIP:
            response.headers.append(name, value)
    return response
