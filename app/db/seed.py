# app/db/seed.py
import logging
from datetime import datetime
from sqlalchemy.orm import Session
from app.core.config import ADMIN_EMAIL, ADMIN_NAME, ADMIN_PASSWORD
from app.models.enums import AppRole
from app.models.user import User
from app.utils.helpers import hash_password
from app.utils.validation_functions import normalize_email

logger = logging.getLogger(__name__)


def seed_admin(db: Session, name=ADMIN_NAME, email=ADMIN_EMAIL, password=ADMIN_PASSWORD):
    """Create the bootstrap administrator when configured and not present yet."""
    if not email or not password:
        logger.debug("No bootstrap admin configured")
        return None

    email = normalize_email(email)
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        return existing

    now = datetime.utcnow()
    admin = User(
        name=name,
        email=email,
        hashed_password=hash_password(password),
        role=AppRole.admin,
        created_at=now,
        updated_at=now
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)

    logger.info("Created bootstrap admin %s", admin.email)
    return admin
