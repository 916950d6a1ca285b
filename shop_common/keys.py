"""
Shared HMAC signing secret for tokens.
Taken from SHOP_JWT_SECRET, else loaded from a file, else generated and persisted
so that services started from the same directory agree on it.
"""
import logging
import secrets
from pathlib import Path

from shop_common.config import JWT_SECRET, JWT_SECRET_PATH, MIN_SECRET_BYTES

logger = logging.getLogger(__name__)

_secret: bytes | None = None


def _check_length(secret: bytes, source: str) -> bytes:
    if len(secret) < MIN_SECRET_BYTES:
        raise ValueError(
            f"Signing secret from {source} must be at least {MIN_SECRET_BYTES} bytes"
        )
    return secret


def load_or_create_signing_secret(path: str | None) -> bytes:
    """Read the secret from path, or generate one and save it there."""
    if not path:
        path = ".shop_signing_secret"
    p = Path(path)
    if p.exists():
        secret = p.read_bytes().strip()
        return _check_length(secret, path)
    secret = secrets.token_urlsafe(48).encode("ascii")
    try:
        p.write_bytes(secret)
        logger.info("Generated and saved signing secret to %s", path)
    except OSError as e:
        logger.warning("Could not save signing secret to %s: %s", path, e)
    return secret


def get_signing_secret() -> bytes:
    """Return the process-wide signing secret, loading it on first use."""
    global _secret
    if _secret is None:
        if JWT_SECRET:
            _secret = _check_length(JWT_SECRET.encode("utf-8"), "SHOP_JWT_SECRET")
        else:
            _secret = load_or_create_signing_secret(JWT_SECRET_PATH)
    return _secret
