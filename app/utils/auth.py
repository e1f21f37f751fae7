# app/utils/auth.py

import uuid
import bcrypt
import jwt
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.db.get_db import get_db
from app.models.user import User
from app.core.config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from app.core.exceptions import InvalidToken, TokenExpired, Unauthenticated
from app.utils.helpers import BCRYPT_MAX_BYTES

security = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare plain password with a bcrypt hash"""
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES],
            hashed_password.encode("utf-8")
        )
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """
    Generate JWT token for user
    Claims: {"userId": <uuid>, "email": <email>, "role": <AppRole value>, "exp": ...}
    """
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {
        "userId": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "exp": expire,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Check signature and expiry, return the claims."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    except jwt.InvalidTokenError:
        raise InvalidToken()

    if not payload.get("userId"):
        raise InvalidToken()
    return payload


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the caller from the bearer token.
    The user row is re-read on every request so deleted users lose access
    even while their token is still valid.
    """
    if not credentials or not credentials.credentials:
        raise Unauthenticated()

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = uuid.UUID(payload["userId"])
    except (TypeError, ValueError):
        raise InvalidToken()

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise Unauthenticated("User not found")

    return user


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()
