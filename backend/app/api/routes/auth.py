"""Auth: register, login and logout with server-side sessions.

SECURITY FEATURES:
- Password hashing with bcrypt
- Session token is random and stored server-side, so logout really ends it
- httpOnly, Secure, SameSite cookies
"""
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_session, get_current_user
from app.core.audit import AuditLog
from app.core.config import settings
from app.core.context import SessionContext
from app.core.exceptions import BusinessError
from app.core.security import get_password_hash, new_session_token, session_expiry, verify_password
from app.models.user import User
from app.models.user_session import UserSession
from app.schemas.user import Token, UserCreate, UserLogin, UserResponse

router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def validate_password_strength(password: str) -> None:
    if len(password) < settings.MIN_PASSWORD_LENGTH:
        raise BusinessError.bad_request(
            f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
        )


@router.post("/register", response_model=UserResponse)
def register(data: UserCreate, request: Request, db: Session = Depends(get_db)):
    """Register a new account. Usernames are unique."""
    if db.query(User).filter(User.username == data.username).first():
        AuditLog.log_authentication("register", data.username, _client_ip(request), False, reason="Username taken")
        raise BusinessError.conflict("Username already exists")

    validate_password_strength(data.password)

    user = User(username=data.username, hashed_password=get_password_hash(data.password))
    db.add(user)
    db.commit()
    db.refresh(user)

    AuditLog.log_authentication("register", user.username, _client_ip(request), True)
    return user


@router.post("/login", response_model=Token)
def login(data: UserLogin, request: Request, response: Response, db: Session = Depends(get_db)):
    """
    Start a session. The token is set as an httpOnly cookie and also
    returned for API clients that send it as a Bearer header.
    """
    user = db.query(User).filter(User.username == data.username).first()
    if not user or not verify_password(data.password, user.hashed_password):
        AuditLog.log_authentication("failed_login", data.username, _client_ip(request), False, reason="Invalid credentials")
        # Generic error: don't specify which field is wrong
        raise BusinessError.unauthorized("invalid credentials")

    row = UserSession(user_id=user.id, token=new_session_token(), expires_at=session_expiry())
    db.add(row)
    db.commit()

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=row.token,
        max_age=settings.SESSION_EXPIRE_HOURS * 3600,
        secure=settings.SECURE_COOKIES,
        httponly=True,
        samesite=settings.SAME_SITE_COOKIE,
    )

    AuditLog.log_authentication("login", user.username, _client_ip(request), True)
    return Token(access_token=row.token, expires_at=row.expires_at)


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_current_session),
):
    """Destroy the session row and clear the cookie."""
    db.query(UserSession).filter(UserSession.token == session.token).delete()
    db.commit()

    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        secure=settings.SECURE_COOKIES,
        httponly=True,
        samesite=settings.SAME_SITE_COOKIE,
    )
    AuditLog.log_authentication("logout", session.username, _client_ip(request), True)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user."""
    return current_user
