"""
Authorization decision shared by the gateway and every resource service.

decide(token, required) is pure: no I/O, no shared mutable state. The edge and the
backends import this one function so their decisions cannot drift apart.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from shop_common.tokens import (
    TokenExpired,
    TokenInvalidSignature,
    TokenMalformed,
    decode_token,
)


class DenyReason(str, Enum):
    MISSING_TOKEN = "missing_token"
    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"
    INSUFFICIENT_ROLE = "insufficient_role"

    @property
    def is_authentication_failure(self) -> bool:
        """True when the caller is not authenticated at all (401 rather than 403)."""
        return self is not DenyReason.INSUFFICIENT_ROLE


@dataclass(frozen=True)
class Identity:
    """Caller identity taken from a verified token: subject plus role snapshot."""

    subject: str
    roles: frozenset[str]

    def has_any_role(self, roles) -> bool:
        return not self.roles.isdisjoint(roles)


@dataclass(frozen=True)
class Capability:
    """What an operation requires: nothing, any valid token, or one of a set of roles."""

    authenticated: bool
    roles: frozenset[str] = frozenset()

    @classmethod
    def none(cls) -> "Capability":
        return cls(authenticated=False)

    @classmethod
    def authenticated_only(cls) -> "Capability":
        return cls(authenticated=True)

    @classmethod
    def any_of(cls, *roles: str) -> "Capability":
        if not roles:
            raise ValueError("a role capability needs at least one role")
        return cls(authenticated=True, roles=frozenset(roles))

    def __str__(self) -> str:
        if not self.authenticated:
            return "none"
        if not self.roles:
            return "authenticated"
        return "any of " + ", ".join(sorted(self.roles))


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: DenyReason | None = None
    identity: Identity | None = None

    @classmethod
    def allow(cls, identity: Identity | None = None) -> "Decision":
        return cls(allowed=True, identity=identity)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(allowed=False, reason=reason)


def decide(
    token: str | None,
    required: Capability,
    *,
    now: datetime | None = None,
    secret: bytes | None = None,
) -> Decision:
    """
    Map (token, required capability) to allow/deny.
    Deny reasons in order: missing token, codec failure (malformed, expired,
    invalid signature), insufficient role. Roles use OR semantics.
    """
    if not required.authenticated:
        return Decision.allow()
    if not token:
        return Decision.deny(DenyReason.MISSING_TOKEN)

    try:
        claims = decode_token(token, now=now, secret=secret)
    except TokenMalformed:
        return Decision.deny(DenyReason.MALFORMED)
    except TokenExpired:
        return Decision.deny(DenyReason.EXPIRED)
    except TokenInvalidSignature:
        return Decision.deny(DenyReason.INVALID_SIGNATURE)

    identity = Identity(subject=claims.subject, roles=claims.roles)
    if required.roles and not identity.has_any_role(required.roles):
        return Decision.deny(DenyReason.INSUFFICIENT_ROLE)
    return Decision.allow(identity)
