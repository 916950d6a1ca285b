"""
Seed the fixed role set and, optionally, an Admin account from environment.
Set AUTH_SEED_ADMIN_USER + AUTH_SEED_ADMIN_PASSWORD to get an Admin on first start.
"""
import logging

from sqlalchemy.orm import Session

from auth_server.config import SEED_ADMIN_EMAIL, SEED_ADMIN_PASSWORD, SEED_ADMIN_USER
from auth_server.models import Role, User
from shop_common.roles import ADMIN, SEEDED_ROLES

logger = logging.getLogger(__name__)


def seed_roles(db: Session) -> None:
    """Create any missing role from the seeded set."""
    existing = {name for (name,) in db.query(Role.name).all()}
    missing = [name for name in SEEDED_ROLES if name not in existing]
    for name in missing:
        db.add(Role(name=name, description=SEEDED_ROLES[name]))
    if missing:
        db.commit()
        logger.info("Seeded roles: %s", ", ".join(missing))


def seed_admin_from_env(db: Session) -> None:
    """Create the Admin user from env if set and not already present."""
    from auth_server.identity import register

    if not (SEED_ADMIN_USER and SEED_ADMIN_PASSWORD):
        return
    if db.query(User).filter(User.username == SEED_ADMIN_USER).first() is not None:
        logger.debug("User already exists: %s", SEED_ADMIN_USER)
        return
    register(db, SEED_ADMIN_USER, SEED_ADMIN_PASSWORD, email=SEED_ADMIN_EMAIL, role=ADMIN)
    logger.info("Seeded admin user: %s", SEED_ADMIN_USER)
