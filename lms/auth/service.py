"""Credential checks for admin and learner login lookups."""
import logging
from typing import Callable, Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Admin, Learner
from ..models.user import name_key

logger = logging.getLogger(__name__)

PasswordCheck = Callable[[str, str], bool]


def hash_password(password: str) -> str:
    """Hash a plain-text password with a fresh salt."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Verify the provided password against the stored hash."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def authenticate_admin(
    db: Session,
    email: str,
    password: str,
    verify: PasswordCheck = verify_password,
) -> Optional[Admin]:
    """Return the admin for ``email`` if ``verify`` accepts the password."""
    admin = db.scalars(select(Admin).where(Admin.email == email)).first()
    if not admin or not verify(password, admin.password_hash):
        logger.info(f"Admin login refused for {email}")
        return None
    return admin


def find_learner(db: Session, first_name: str, last_name: str, code: str) -> Optional[Learner]:
    """Look a learner up by natural identity.

    Names compare by their casefolded keys, the code compares exactly.
    """
    if not first_name or not last_name or not code:
        return None
    stmt = (
        select(Learner)
        .where(
            Learner.first_name_key == name_key(first_name),
            Learner.last_name_key == name_key(last_name),
            Learner.code == code.strip(),
        )
        .order_by(Learner.id)
    )
    return db.scalars(stmt).first()
