"""
Password hashing with bcrypt (salted, adaptive cost).
"""
import base64
import hashlib

import bcrypt

from auth_server.config import BCRYPT_ROUNDS


def _prepare_password(password: str) -> bytes:
    """Bcrypt has a 72-byte limit. Pre-hash longer passwords with SHA256."""
    encoded = password.encode("utf-8")
    if len(encoded) > 72:
        return base64.b64encode(hashlib.sha256(encoded).digest())
    return encoded


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_prepare_password(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_prepare_password(plain), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Checked against when the username is unknown, so a miss costs as much as a wrong password
DUMMY_HASH = hash_password("localshop-timing-equalizer")
