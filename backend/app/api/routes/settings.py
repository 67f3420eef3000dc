"""Account settings and the clear-all-data action."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_current_user
from app.api.routes.auth import validate_password_strength
from app.core.audit import AuditLog
from app.core.exceptions import BusinessError
from app.core.security import get_password_hash, verify_password
from app.models.output import Output
from app.models.process import Process, ProcessMaterial
from app.models.sale import Sale
from app.models.user import User
from app.models.voucher import Voucher
from app.schemas.settings import ChangePassword, ChangeUsername, PasswordCheck, SettingsResponse, ViewPasswordToggle

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_password(user: User, password: str) -> None:
    if not password or not verify_password(password, user.hashed_password):
        AuditLog.log_security_event("password_check_failed", user.username)
        raise BusinessError.bad_request("Incorrect password")


@router.get("", response_model=SettingsResponse)
def get_settings(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/username", response_model=SettingsResponse)
def change_username(
    data: ChangeUsername,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _require_password(current_user, data.password)

    new_username = data.new_username.strip()
    if any(c.isspace() for c in new_username):
        raise BusinessError.bad_request("Username cannot contain spaces")
    taken = db.query(User).filter(User.username == new_username, User.id != current_user.id).first()
    if taken:
        raise BusinessError.conflict("Username already exists")

    old_username = current_user.username
    current_user.username = new_username
    db.commit()
    db.refresh(current_user)

    AuditLog.log_security_event("username_changed", new_username, details=f"was {old_username}")
    return current_user


@router.patch("/password")
def change_password(
    data: ChangePassword,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _require_password(current_user, data.current_password)
    validate_password_strength(data.new_password)

    current_user.hashed_password = get_password_hash(data.new_password)
    db.commit()

    AuditLog.log_security_event("password_changed", current_user.username)
    return {"message": "Password changed successfully"}


@router.patch("/view-password", response_model=SettingsResponse)
def toggle_view_password(
    data: ViewPasswordToggle,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Turning the password prompt off needs the password; turning it on does not."""
    if not data.enabled:
        _require_password(current_user, data.password)

    current_user.view_password_enabled = data.enabled
    db.commit()
    db.refresh(current_user)

    event = "view_password_enabled" if data.enabled else "view_password_disabled"
    AuditLog.log_security_event(event, current_user.username)
    return current_user


@router.post("/verify-password")
def verify_view_password(data: PasswordCheck, current_user: User = Depends(get_current_user)):
    """Check the password before showing protected screens."""
    _require_password(current_user, data.password)
    return {"valid": True}


@router.delete("/data")
def clear_all_data(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Remove every voucher, process, output and sale of this account. The account stays."""
    user_id = current_user.id
    try:
        counts = {
            "vouchers": db.query(Voucher).filter(Voucher.user_id == user_id).delete(synchronize_session=False),
            "sales": db.query(Sale).filter(Sale.user_id == user_id).delete(synchronize_session=False),
            "outputs": db.query(Output).filter(Output.user_id == user_id).delete(synchronize_session=False),
        }
        process_ids = select(Process.id).where(Process.user_id == user_id)
        db.query(ProcessMaterial).filter(ProcessMaterial.process_id.in_(process_ids)).delete(synchronize_session=False)
        counts["processes"] = db.query(Process).filter(Process.user_id == user_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise BusinessError.server_error(e)

    AuditLog.log_action("clear", "account", user_id, current_user.username, changes=counts)
    logger.info(f"Cleared all transaction data for user {user_id}")
    return {"message": "All data cleared successfully.", "deleted": counts}
