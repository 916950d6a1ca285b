"""
Identity service: credential checks, token issuance, registration and user lookups.

Every function takes an explicit Session. Authorization preconditions (e.g. only an
Admin may call register_privileged) are enforced by the route's gatekeeper dependency
before these functions run, never in here.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth_server.models import Role, User, UserRole
from auth_server.passwords import DUMMY_HASH, hash_password, verify_password
from shop_common.config import TOKEN_TTL
from shop_common.errors import (
    AuthenticationFailure,
    Conflict,
    DuplicateEmail,
    DuplicateUsername,
    NotFound,
    ValidationFailure,
)
from shop_common.roles import DEFAULT_ROLE
from shop_common.tokens import encode_token

logger = logging.getLogger(__name__)


@dataclass
class UserProfile:
    user_id: int
    username: str
    email: str | None
    roles: list[str]


@dataclass
class LoginResult:
    token: str
    username: str
    roles: list[str]
    expires_at: datetime


def _profile(user: User) -> UserProfile:
    return UserProfile(
        user_id=user.id,
        username=user.username,
        email=user.email,
        roles=user.role_names,
    )


def _normalize_email(email: str | None) -> str | None:
    if email is None or not email.strip():
        return None
    return email.strip().lower()


def _active_user(db: Session, *criteria) -> User | None:
    return db.query(User).filter(User.is_active.is_(True), *criteria).first()


def authenticate(db: Session, username: str, password: str) -> LoginResult:
    """
    Verify credentials and issue a token carrying the user's current roles.
    Unknown user, inactive user and wrong password all raise the same AuthenticationFailure.
    """
    user = _active_user(db, User.username == username)
    if user is None:
        # Same bcrypt cost as a real check so timing does not reveal whether the user exists
        verify_password(password, DUMMY_HASH)
        logger.info("Login failed for username=%s", username)
        raise AuthenticationFailure()
    if not verify_password(password, user.password_hash):
        logger.info("Login failed for username=%s", username)
        raise AuthenticationFailure()

    roles = user.role_names
    now = datetime.now(timezone.utc).replace(microsecond=0)
    token = encode_token(user.username, roles, TOKEN_TTL, now=now)
    logger.info("Login ok for username=%s roles=%s", user.username, roles)
    return LoginResult(
        token=token,
        username=user.username,
        roles=roles,
        expires_at=now + TOKEN_TTL,
    )


def _find_conflict(db: Session, username: str, email: str | None) -> Conflict | None:
    if db.query(User.id).filter(User.username == username).first() is not None:
        return DuplicateUsername()
    if email and db.query(User.id).filter(User.email == email).first() is not None:
        return DuplicateEmail()
    return None


def register(
    db: Session,
    username: str,
    password: str,
    email: str | None = None,
    role: str = DEFAULT_ROLE,
) -> UserProfile:
    """
    Create an active user holding role. The user row and its role assignment are
    committed together; on any conflict nothing is persisted.
    """
    email = _normalize_email(email)
    role_row = db.query(Role).filter(Role.name == role).first()
    if role_row is None:
        raise ValidationFailure(
            f"Unknown role: {role}",
            errors=[{"field": "role", "message": f"Unknown role: {role}"}],
        )

    conflict = _find_conflict(db, username, email)
    if conflict is not None:
        logger.info("Registration rejected for username=%s: %s", username, conflict.message)
        raise conflict

    user = User(
        username=username,
        password_hash=hash_password(password),
        email=email,
        is_active=True,
    )
    user.user_roles.append(UserRole(role=role_row))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent registration won the unique constraint
        db.rollback()
        conflict = _find_conflict(db, username, email) or Conflict()
        logger.info("Registration lost race for username=%s: %s", username, conflict.message)
        raise conflict
    db.refresh(user)
    logger.info("Registered username=%s role=%s", username, role)
    return _profile(user)


def register_privileged(
    db: Session,
    username: str,
    password: str,
    email: str | None,
    role: str,
) -> UserProfile:
    """Same as register, with a caller-chosen role. The caller must already be an Admin."""
    return register(db, username, password, email=email, role=role)


def get_by_id(db: Session, user_id: int) -> UserProfile:
    user = _active_user(db, User.id == user_id)
    if user is None:
        raise NotFound("User not found")
    return _profile(user)


def get_by_username(db: Session, username: str) -> UserProfile:
    user = _active_user(db, User.username == username)
    if user is None:
        raise NotFound("User not found")
    return _profile(user)


def deactivate(db: Session, user_id: int) -> UserProfile:
    """
    Mark a user inactive. They can no longer log in or be looked up; tokens already
    issued stay valid until they expire.
    """
    user = _active_user(db, User.id == user_id)
    if user is None:
        raise NotFound("User not found")
    user.is_active = False
    db.commit()
    db.refresh(user)
    logger.info("Deactivated username=%s", user.username)
    return _profile(user)
