"""
Pytest configuration for auth_server. In-memory SQLite so tests don't touch the filesystem,
a fixed signing secret, cheap bcrypt and no login rate limiting.
"""
import os

# In-memory SQLite; database.py uses StaticPool so all connections share the same DB
os.environ["AUTH_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SHOP_JWT_SECRET"] = "test-signing-secret-0123456789abcdefghijklmnop"
os.environ["AUTH_BCRYPT_ROUNDS"] = "4"
os.environ["AUTH_RATE_LIMIT_LOGIN_PER_MINUTE"] = "0"
# Avoid seeding an Admin from the developer's environment during tests
for name in ("AUTH_SEED_ADMIN_USER", "AUTH_SEED_ADMIN_PASSWORD", "AUTH_SEED_ADMIN_EMAIL"):
    os.environ.pop(name, None)

import pytest  # noqa: E402

from auth_server.database import SessionLocal, engine, init_db  # noqa: E402
from auth_server.models import Base  # noqa: E402


@pytest.fixture
def db():
    """Fresh schema with seeded roles for every test."""
    Base.metadata.drop_all(bind=engine)
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
