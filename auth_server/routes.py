"""
/auth endpoints: login, registration, profile and Admin user management.
Role requirements are declared per route with shop_common.security.require.
"""
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from auth_server import identity as identity_service
from auth_server import rate_limit
from auth_server.audit import (
    EVENT_DEACTIVATE,
    EVENT_LOGIN_FAIL,
    EVENT_LOGIN_OK,
    EVENT_REGISTER,
    EVENT_REGISTER_PRIVILEGED,
    OUTCOME_FAIL,
    get_client_ip,
    log_audit,
)
from auth_server.config import RATE_LIMIT_LOGIN_PER_MINUTE
from auth_server.database import get_db
from auth_server.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PrivilegedRegisterRequest,
    RegisterRequest,
    UserResponse,
)
from shop_common.errors import AuthenticationFailure
from shop_common.gatekeeper import Capability, Identity
from shop_common.roles import ADMIN
from shop_common.security import RequireAuthenticated, require

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth")

RequireAdmin = require(Capability.any_of(ADMIN))


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, request: Request, db: Session = Depends(get_db)):
    """Exchange username + password for a signed token. Failures never say which check failed."""
    ip = get_client_ip(request)
    rate_limit.enforce(f"login:{ip}", RATE_LIMIT_LOGIN_PER_MINUTE)
    try:
        result = identity_service.authenticate(db, body.username, body.password)
    except AuthenticationFailure:
        log_audit(db, EVENT_LOGIN_FAIL, username=body.username, ip=ip, outcome=OUTCOME_FAIL)
        raise
    log_audit(db, EVENT_LOGIN_OK, username=result.username, ip=ip)
    return LoginResponse.model_validate(result)


@router.post("/register", response_model=MessageResponse)
def register(body: RegisterRequest, request: Request, db: Session = Depends(get_db)):
    """Self-service registration; always grants the default User role."""
    profile = identity_service.register(db, body.username, body.password, email=body.email)
    log_audit(db, EVENT_REGISTER, username=profile.username, user_id=profile.user_id, ip=get_client_ip(request))
    return MessageResponse(message="User registered successfully")


@router.post("/register-privileged", response_model=MessageResponse)
def register_privileged(
    body: PrivilegedRegisterRequest,
    request: Request,
    caller: Identity = RequireAdmin,
    db: Session = Depends(get_db),
):
    """Admin-only registration with an explicit role."""
    profile = identity_service.register_privileged(
        db, body.username, body.password, email=body.email, role=body.role
    )
    log_audit(
        db,
        EVENT_REGISTER_PRIVILEGED,
        username=profile.username,
        user_id=profile.user_id,
        ip=get_client_ip(request),
    )
    logger.info("%s registered %s with role %s", caller.subject, profile.username, body.role)
    return MessageResponse(message=f"User registered successfully with role {body.role}")


@router.get("/profile", response_model=UserResponse)
def profile(caller: Identity = RequireAuthenticated, db: Session = Depends(get_db)):
    """Profile of the token's subject."""
    return UserResponse.model_validate(identity_service.get_by_username(db, caller.subject))


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: int, caller: Identity = RequireAdmin, db: Session = Depends(get_db)):
    return UserResponse.model_validate(identity_service.get_by_id(db, user_id))


@router.post("/users/{user_id}/deactivate", response_model=UserResponse)
def deactivate_user(
    user_id: int,
    request: Request,
    caller: Identity = RequireAdmin,
    db: Session = Depends(get_db),
):
    """Deactivate a user. Their outstanding tokens stay valid until expiry."""
    profile = identity_service.deactivate(db, user_id)
    log_audit(db, EVENT_DEACTIVATE, username=profile.username, user_id=profile.user_id, ip=get_client_ip(request))
    return UserResponse.model_validate(profile)
