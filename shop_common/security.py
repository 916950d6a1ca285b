"""
FastAPI dependencies around the gatekeeper. Used by the gateway and by every
resource service; none of them re-implements the decision.
"""
import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shop_common.errors import denial_to_error
from shop_common.gatekeeper import Capability, Identity, decide

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str | None:
    """Bearer token from the Authorization header, or None if absent or another scheme."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    return credentials.credentials or None


def enforce(token: str | None, required: Capability) -> Identity | None:
    """Run the gatekeeper and raise the mapped error on deny."""
    decision = decide(token, required)
    if not decision.allowed:
        logger.debug("Denied (%s): required %s", decision.reason.value, required)
        raise denial_to_error(decision.reason)
    return decision.identity


def require(required: Capability):
    """Dependency factory: the caller must satisfy required; yields the caller's Identity."""

    def _check(token: Annotated[str | None, Depends(bearer_token)]) -> Identity | None:
        return enforce(token, required)

    return Depends(_check)


RequireAuthenticated = require(Capability.authenticated_only())
