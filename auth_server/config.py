"""
Identity service configuration. Credentials come from env or the DB, never from code.
Token settings are shared with the other services; see shop_common.config.
"""
import os

# SQLite for development; any SQLAlchemy URL works
DATABASE_URL = os.environ.get("AUTH_DATABASE_URL", "sqlite:///./auth_server.db")

# bcrypt cost factor (2^rounds iterations). Tests lower this.
BCRYPT_ROUNDS = int(os.environ.get("AUTH_BCRYPT_ROUNDS", "12"))

# Input limits (match the credential store column sizes)
USERNAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 100
EMAIL_MAX_LEN = 100

# Login rate limiting: per-IP, per minute. 0 disables.
RATE_LIMIT_LOGIN_PER_MINUTE = int(os.environ.get("AUTH_RATE_LIMIT_LOGIN_PER_MINUTE", "20"))

# Optional Admin account created at startup (no default credentials)
SEED_ADMIN_USER = os.environ.get("AUTH_SEED_ADMIN_USER", "").strip() or None
SEED_ADMIN_PASSWORD = os.environ.get("AUTH_SEED_ADMIN_PASSWORD") or None
SEED_ADMIN_EMAIL = os.environ.get("AUTH_SEED_ADMIN_EMAIL", "").strip() or None
