"""Create all tables. Run on app startup.

SECURITY: The default admin gets a random password (not hardcoded).
The owner must change it after first login.
"""
import logging
import secrets

from app.db.base import Base
from app.db.session import engine, SessionLocal
from app.models import User  # noqa: F401 - registers every model on Base.metadata
from app.core.security import get_password_hash

logger = logging.getLogger(__name__)

DEFAULT_USERNAME = "admin"


def init_db(bind=None):
    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    db = SessionLocal(bind=bind)
    try:
        if db.query(User).count() == 0:
            default_password = secrets.token_urlsafe(16)
            db.add(User(username=DEFAULT_USERNAME, hashed_password=get_password_hash(default_password)))
            db.commit()

            # Shown once, on initial setup only
            logger.warning(
                "Default account created. Username: %s Password: %s "
                "Change this password immediately after first login.",
                DEFAULT_USERNAME,
                default_password,
            )
    finally:
        db.close()
