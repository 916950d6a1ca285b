"""
Audit logging. Security-relevant events only; no tokens, passwords, or request bodies.
GET /auth/audit lists recent events for Admins.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from auth_server.database import get_db
from auth_server.models import AuditLog
from shop_common.gatekeeper import Capability, Identity
from shop_common.roles import ADMIN
from shop_common.security import require

EVENT_LOGIN_OK = "login_ok"
EVENT_LOGIN_FAIL = "login_fail"
EVENT_REGISTER = "register"
EVENT_REGISTER_PRIVILEGED = "register_privileged"
EVENT_DEACTIVATE = "deactivate"

OUTCOME_SUCCESS = "success"
OUTCOME_FAIL = "fail"


def get_client_ip(request: Request | None) -> str | None:
    """Client IP if available (request.client.host). Forwarding headers are not trusted."""
    if request is None or request.client is None:
        return None
    return getattr(request.client, "host", None)


def log_audit(
    db: Session,
    event_type: str,
    *,
    username: str | None = None,
    user_id: int | None = None,
    ip: str | None = None,
    outcome: str = OUTCOME_SUCCESS,
) -> None:
    """Append one audit record. Never log tokens or passwords."""
    db.add(
        AuditLog(
            event_type=event_type,
            username=username,
            user_id=user_id,
            ip=ip,
            outcome=outcome,
        )
    )
    db.commit()


router = APIRouter(tags=["audit"])


@router.get("/auth/audit")
def list_audit_logs(
    limit: int = 100,
    event_type: str | None = None,
    outcome: str | None = None,
    username: str | None = None,
    caller: Identity = require(Capability.any_of(ADMIN)),
    db: Session = Depends(get_db),
):
    """List recent audit events, most recent first. Admin only."""
    q = db.query(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    if event_type:
        q = q.filter(AuditLog.event_type == event_type)
    if outcome:
        q = q.filter(AuditLog.outcome == outcome)
    if username:
        q = q.filter(AuditLog.username == username)
    rows = q.limit(min(max(1, limit), 500)).all()
    return [
        {
            "createdAt": r.created_at.isoformat() if r.created_at else None,
            "eventType": r.event_type,
            "username": r.username,
            "userId": r.user_id,
            "ip": r.ip,
            "outcome": r.outcome,
        }
        for r in rows
    ]
