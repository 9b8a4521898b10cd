import logging
import os

from sqlalchemy.orm import Session

from backend.app.core.security import get_password_hash
from backend.app.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_DEV_EMAIL = "admin@invoiceapp.com"
DEFAULT_DEV_PASSWORD = "admin123"
DEFAULT_DEV_NAME = "Admin User"


def ensure_default_dev_user(db: Session) -> None:
    """
    Create a default login for local development when the user table is empty.
    Skips execution when running under pytest to avoid altering test expectations.
    """
    if os.getenv("PYTEST_CURRENT_TEST"):
        return
    if db.query(User).first() is not None:
        return

    db.add(
        User(
            email=DEFAULT_DEV_EMAIL,
            name=DEFAULT_DEV_NAME,
            hashed_password=get_password_hash(DEFAULT_DEV_PASSWORD),
        )
    )
    db.commit()
    logger.warning("Created default user %s; change its password outside local development", DEFAULT_DEV_EMAIL)
