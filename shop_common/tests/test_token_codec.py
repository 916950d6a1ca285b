"""
Tests for the token codec: round trip, canonical claims, and failure classification.
"""
import json
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from jwt.utils import base64url_decode, base64url_encode

from shop_common.config import TOKEN_TTL
from shop_common.tokens import (
    TokenClaims,
    TokenExpired,
    TokenInvalidSignature,
    TokenMalformed,
    decode_token,
    encode_token,
)

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _segment(obj) -> str:
    return base64url_encode(json.dumps(obj).encode("utf-8")).decode("ascii")


def _flip_signature_bit(token: str, bit: int) -> str:
    header, payload, signature = token.split(".")
    raw = bytearray(base64url_decode(signature.encode("ascii")))
    raw[bit // 8] ^= 1 << (bit % 8)
    return f"{header}.{payload}.{base64url_encode(bytes(raw)).decode('ascii')}"


def test_round_trip_returns_same_claims():
    token = encode_token("alice", ["User"], now=NOW)
    claims = decode_token(token, now=NOW + timedelta(minutes=5))
    assert claims == TokenClaims(
        subject="alice",
        roles=frozenset({"User"}),
        issued_at=NOW,
        expires_at=NOW + TOKEN_TTL,
    )


def test_expiry_is_issued_at_plus_24_hours():
    claims = decode_token(encode_token("bob", ["Admin"], now=NOW), now=NOW)
    assert claims.expires_at - claims.issued_at == timedelta(hours=24)


def test_encoding_is_deterministic_and_canonical():
    a = encode_token("carol", ["User", "Admin", "User"], now=NOW)
    b = encode_token("carol", ("Admin", "User"), now=NOW)
    assert a == b
    payload = json.loads(base64url_decode(a.split(".")[1].encode("ascii")))
    assert list(payload) == ["sub", "roles", "iat", "exp"]
    assert payload["roles"] == ["Admin", "User"]
    header = jwt.get_unverified_header(a)
    assert header["alg"] == "HS256"
    assert header["typ"] == "JWT"


def test_token_has_three_base64url_segments():
    token = encode_token("dave", ["User"], now=NOW)
    parts = token.split(".")
    assert len(parts) == 3
    assert all(parts)
    assert "=" not in token


def test_every_single_bit_flip_in_signature_is_rejected():
    token = encode_token("erin", ["User"], now=NOW)
    signature_bits = len(base64url_decode(token.split(".")[2].encode("ascii"))) * 8
    for bit in range(signature_bits):
        with pytest.raises(TokenInvalidSignature):
            decode_token(_flip_signature_bit(token, bit), now=NOW)


def test_tampered_roles_are_rejected():
    token = encode_token("frank", ["User"], now=NOW)
    header, payload, signature = token.split(".")
    claims = json.loads(base64url_decode(payload.encode("ascii")))
    claims["roles"] = ["Admin"]
    forged = f"{header}.{_segment(claims)}.{signature}"
    with pytest.raises(TokenInvalidSignature):
        decode_token(forged, now=NOW)


def test_other_secret_is_rejected():
    token = encode_token("gina", ["User"], now=NOW, secret=b"another-secret-another-secret-0123456789")
    with pytest.raises(TokenInvalidSignature):
        decode_token(token, now=NOW)


def test_alg_none_is_rejected():
    token = encode_token("hank", ["Admin"], now=NOW)
    _, payload, _ = token.split(".")
    unsigned = f"{_segment({'alg': 'none', 'typ': 'JWT'})}.{payload}."
    with pytest.raises(TokenInvalidSignature):
        decode_token(unsigned, now=NOW)


@pytest.mark.parametrize(
    "token",
    [
        "",
        "not-a-token",
        "only.two",
        "a.b.c.d",
        "%%%.###.sig",
        f"{_segment([1, 2])}.{_segment({'sub': 'x'})}.sig",
    ],
)
def test_structurally_broken_tokens_are_malformed(token):
    with pytest.raises(TokenMalformed):
        decode_token(token, now=NOW)


@pytest.mark.parametrize(
    "claims",
    [
        {"sub": "x", "roles": ["User"], "iat": 1},
        {"sub": "", "roles": ["User"], "iat": 1, "exp": 2},
        {"sub": "x", "roles": "User", "iat": 1, "exp": 2},
        {"sub": "x", "roles": ["User"], "iat": "1", "exp": 2},
        {"sub": "x", "roles": ["User"], "iat": 0, "exp": 10**20},
        {"sub": "x", "roles": ["User"], "iat": 0, "exp": 2534023008000},
        {"sub": "x", "roles": ["User"], "iat": -(10**20), "exp": 2},
    ],
)
def test_missing_or_ill_typed_claims_are_malformed(claims):
    token = jwt.encode(claims, "test-signing-secret-0123456789abcdefghijklmnop", algorithm="HS256")
    with pytest.raises(TokenMalformed):
        decode_token(token, now=NOW)


def test_expired_at_exact_expiry_instant():
    token = encode_token("ivy", ["User"], now=NOW)
    decode_token(token, now=NOW + TOKEN_TTL - timedelta(seconds=1))
    with pytest.raises(TokenExpired):
        decode_token(token, now=NOW + TOKEN_TTL)


def test_expired_token_reports_expired_even_with_bad_signature():
    token = encode_token("jack", ["User"], now=NOW)
    with pytest.raises(TokenExpired):
        decode_token(_flip_signature_bit(token, 0), now=NOW + timedelta(days=2))


def test_expired_token_from_real_clock():
    token = encode_token("kate", ["User"], now=datetime.now(timezone.utc) - timedelta(days=2))
    with pytest.raises(TokenExpired):
        decode_token(token)


def test_encode_rejects_bad_arguments():
    with pytest.raises(ValueError):
        encode_token("", ["User"])
    with pytest.raises(ValueError):
        encode_token("leo", ["User"], timedelta(0))
    with pytest.raises(ValueError):
        encode_token("leo", [""])
