"""
Routing table: path prefix -> upstream, plus the coarse capability the gateway
checks before forwarding. Fine-grained role checks belong to the upstreams.
"""
import posixpath
from dataclasses import dataclass

from gateway.config import AUTH_SERVICE_URL, PRODUCT_SERVICE_URL
from shop_common.gatekeeper import Capability

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

OPEN = Capability.none()
AUTHENTICATED = Capability.authenticated_only()


@dataclass(frozen=True)
class Route:
    prefix: str
    upstream: str
    read: Capability
    write: Capability

    def matches(self, path: str) -> bool:
        # segment-aware: /auth/register must not swallow /auth/register-privileged
        return path == self.prefix or path.startswith(self.prefix + "/")

    def capability_for(self, method: str) -> Capability:
        return self.read if method.upper() in SAFE_METHODS else self.write


# Most specific prefix first
ROUTES = (
    Route("/auth/login", AUTH_SERVICE_URL, read=OPEN, write=OPEN),
    Route("/auth/register", AUTH_SERVICE_URL, read=OPEN, write=OPEN),
    Route("/auth", AUTH_SERVICE_URL, read=AUTHENTICATED, write=AUTHENTICATED),
    Route("/api/products", PRODUCT_SERVICE_URL, read=OPEN, write=AUTHENTICATED),
)


def resolve(path: str, routes=ROUTES) -> Route | None:
    """First route whose prefix matches path, or None."""
    for route in routes:
        if route.matches(path):
            return route
    return None


def normalize_path(path: str) -> str:
    """Collapse dot segments and repeated slashes, so routing sees the path that gets forwarded."""
    return "/" + posixpath.normpath(path or "/").lstrip("/")
