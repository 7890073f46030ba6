from typing import Optional

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.orm import Session

from ..core.database import get_db, utcnow
from ..core.errors import NotFoundError
from ..core.security import get_current_user
from ..models.user import User
from ..models.user_session import UserSession
from ..schemas.session import SessionLoginResponse, SessionLogoutRequest, SessionLogoutResponse

router = APIRouter(prefix="/session", tags=["session"])


def _client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.headers.get("x-real-ip") or "Unknown"


@router.post("/login", response_model=SessionLoginResponse)
def track_login(request: Request, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    record = UserSession(
        user_id=user.id,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent") or "Unknown",
        login_at=utcnow(),
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return SessionLoginResponse(session_id=record.id)


@router.post("/logout", response_model=SessionLogoutResponse)
def track_logout(
    payload: Optional[SessionLogoutRequest] = Body(default=None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Close the given session, or the caller's most recent open one."""
    query = db.query(UserSession).filter(UserSession.user_id == user.id)
    if payload and payload.session_id is not None:
        record = query.filter(UserSession.id == payload.session_id).first()
        if not record:
            raise NotFoundError("Session not found")
    else:
        record = (
            query.filter(UserSession.logout_at.is_(None))
            .order_by(UserSession.login_at.desc(), UserSession.id.desc())
            .first()
        )

    if record:
        record.logout_at = utcnow()
        db.commit()
    return SessionLogoutResponse()
