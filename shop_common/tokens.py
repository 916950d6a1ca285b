"""
Token codec: signed HS256 JWTs carrying a subject and a role snapshot.

encode_token() writes the claims in a fixed order (sub, roles, iat, exp) with
roles sorted, so the same key, subject, roles and clock give the same token.
decode_token() classifies every failure as malformed, expired or bad signature.
"""
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable

import jwt
from jwt.utils import base64url_decode

from shop_common.config import JWT_ALGORITHM, TOKEN_TTL
from shop_common.keys import get_signing_secret

_CLAIMS = ("sub", "roles", "iat", "exp")

# Signature is checked by PyJWT; time-based and registered-claim checks are ours
_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


class TokenError(Exception):
    """Base class for tokens that cannot be accepted."""

    reason = "invalid_token"


class TokenMalformed(TokenError):
    reason = "malformed"


class TokenInvalidSignature(TokenError):
    reason = "invalid_signature"


class TokenExpired(TokenError):
    reason = "expired"


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    roles: frozenset[str]
    issued_at: datetime
    expires_at: datetime


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _from_epoch(value: int) -> datetime:
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, ValueError, OSError) as e:
        raise TokenMalformed("Token timestamp is out of range") from e


def encode_token(
    subject: str,
    roles: Iterable[str],
    ttl: timedelta = TOKEN_TTL,
    *,
    now: datetime | None = None,
    secret: bytes | None = None,
) -> str:
    """Sign a claim set for subject with the given roles, valid for ttl from now."""
    if not isinstance(subject, str) or not subject:
        raise ValueError("subject must be a non-empty string")
    ttl_seconds = int(ttl.total_seconds())
    if ttl_seconds <= 0:
        raise ValueError("ttl must be positive")
    role_list = sorted(set(roles))
    if any(not isinstance(r, str) or not r for r in role_list):
        raise ValueError("roles must be non-empty strings")

    issued = int((now or _utc_now()).timestamp())
    payload = {
        "sub": subject,
        "roles": role_list,
        "iat": issued,
        "exp": issued + ttl_seconds,
    }
    token = jwt.encode(
        payload,
        secret or get_signing_secret(),
        algorithm=JWT_ALGORITHM,
        headers={"typ": "JWT"},
    )
    if isinstance(token, bytes):
        token = token.decode("utf-8")
    return token


def _load_segment(segment: str) -> dict:
    try:
        value = json.loads(base64url_decode(segment.encode("ascii")))
    except (ValueError, TypeError, UnicodeError) as e:
        raise TokenMalformed("Token segment is not base64url-encoded JSON") from e
    if not isinstance(value, dict):
        raise TokenMalformed("Token segment is not a JSON object")
    return value


def _parse_claims(payload: dict) -> TokenClaims:
    missing = [c for c in _CLAIMS if c not in payload]
    if missing:
        raise TokenMalformed(f"Token is missing claims: {', '.join(missing)}")
    sub, roles, iat, exp = (payload[c] for c in _CLAIMS)
    if not isinstance(sub, str) or not sub:
        raise TokenMalformed("Token subject must be a non-empty string")
    if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
        raise TokenMalformed("Token roles must be a list of strings")
    for value in (iat, exp):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TokenMalformed("Token timestamps must be integers")
    return TokenClaims(
        subject=sub,
        roles=frozenset(roles),
        issued_at=_from_epoch(iat),
        expires_at=_from_epoch(exp),
    )


def decode_token(
    token: str,
    *,
    now: datetime | None = None,
    secret: bytes | None = None,
) -> TokenClaims:
    """
    Verify token and return its claims.
    Raises TokenMalformed, TokenExpired or TokenInvalidSignature. Expiry is judged
    on the parsed claims before the signature, so a stale token always reads as expired.
    """
    if not isinstance(token, str) or token.count(".") != 2:
        raise TokenMalformed("Token must have three dot-separated segments")
    header_segment, payload_segment, _ = token.split(".")
    _load_segment(header_segment)
    claims = _parse_claims(_load_segment(payload_segment))

    if (now or _utc_now()) >= claims.expires_at:
        raise TokenExpired("Token expired")

    try:
        jwt.decode(
            token,
            secret or get_signing_secret(),
            algorithms=[JWT_ALGORITHM],
            options=_DECODE_OPTIONS,
        )
    except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
        raise TokenInvalidSignature("Token signature verification failed") from e
    except jwt.DecodeError as e:
        # header and claims already parsed, so only the signature segment is left
        raise TokenInvalidSignature("Token signature verification failed") from e
    except jwt.InvalidTokenError as e:
        raise TokenMalformed(str(e)) from e
    return claims
