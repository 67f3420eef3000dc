"""FastAPI dependencies: DB session and the current session context.

The session token is accepted from:
1. Authorization header (for API clients)
2. httpOnly cookie (for the web frontend)
"""
from datetime import datetime
from typing import Generator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.context import SessionContext
from app.core.exceptions import BusinessError
from app.db.session import SessionLocal
from app.models.user import User
from app.models.user_session import UserSession

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Header takes precedence over cookie."""
    if credentials:
        return credentials.credentials
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise BusinessError.unauthorized("no session token")
    return token


def get_current_session(
    db: Session = Depends(get_db),
    token: str = Depends(get_session_token),
) -> SessionContext:
    """Resolve the token to a live session. Expired sessions are removed."""
    row = db.query(UserSession).filter(UserSession.token == token).first()
    if not row:
        raise BusinessError.unauthorized("unknown session token")

    if row.expires_at <= datetime.utcnow():
        db.delete(row)
        db.commit()
        raise BusinessError.unauthorized("expired session")

    return SessionContext(
        user_id=row.user_id,
        username=row.user.username,
        token=row.token,
        expires_at=row.expires_at,
    )


def get_current_user(
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
) -> User:
    """Load current user from DB."""
    user = db.query(User).filter(User.id == session.user_id).first()
    if not user:
        raise BusinessError.unauthorized("session user missing")
    return user
