# app/utils/helpers.py
from typing import Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import BCRYPT_ROUNDS
from app.core.exceptions import Forbidden, NotFound
from app.models.enums import AppRole
from app.models.store import Store
from app.models.user import User


# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def success_response(message=None, pagination=None, **payload):
    response = {"success": True}
    if message is not None:
        response["message"] = message
    response.update(payload)
    if pagination is not None:
        response["pagination"] = pagination
    return response


def error_response(code, message, details=None):
    response = {"success": False, "error": message, "code": code}
    if details is not None:
        response["details"] = details
    return response


def hash_password(password: str) -> str:
    password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def round_average(value, digits: int = 1) -> float:
    """Round an aggregate that may be NULL; no ratings means 0."""
    if value is None:
        return 0.0
    return round(float(value), digits)


def user_to_dict(user: User, store_rating: Optional[float] = None) -> dict:
    data = {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "address": user.address,
        "role": user.role.value,
        "created_at": user.created_at.isoformat(),
        "updated_at": user.updated_at.isoformat(),
    }
    if store_rating is not None:
        data["store_rating"] = round_average(store_rating, 2)
    return data


def store_to_dict(store: Store, average_rating=None, total_ratings=None) -> dict:
    data = {
        "id": str(store.id),
        "name": store.name,
        "email": store.email,
        "address": store.address,
        "owner_id": str(store.owner_id),
        "created_at": store.created_at.isoformat(),
        "updated_at": store.updated_at.isoformat(),
    }
    if total_ratings is not None:
        data["average_rating"] = round_average(average_rating)
        data["total_ratings"] = int(total_ratings)
    return data


def verify_store_access(db: Session, store_id, current_user: User) -> Optional[Store]:
    """
    Ownership gate for store-scoped operations.
    Admins pass through (the store may still be missing, callers decide on 404).
    Store owners must own the store, anyone else gets 403.
    """
    if current_user.role == AppRole.admin:
        return db.query(Store).filter(Store.id == store_id).first()

    if current_user.role != AppRole.store_owner:
        raise Forbidden("Store owner access required")

    store = db.query(Store).filter(
        Store.id == store_id,
        Store.owner_id == current_user.id
    ).first()
    if not store:
        raise Forbidden("Access denied. You can only access your own store.")
    return store


def get_store_or_404(db: Session, store_id) -> Store:
    store = db.query(Store).filter(Store.id == store_id).first()
    if not store:
        raise NotFound("Store not found")
    return store


def get_user_or_404(db: Session, user_id) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def integrity_error_kind(exc: IntegrityError) -> str:
    """
    Classify a database integrity violation as "unique", "foreign_key",
    "not_null" or "other". Reads the Postgres SQLSTATE when present and
    falls back to the driver message (SQLite).
    """
    pgcode = getattr(exc.orig, "pgcode", None)
    if pgcode == "23505":
        return "unique"
    if pgcode == "23503":
        return "foreign_key"
    if pgcode == "23502":
        return "not_null"

    message = str(exc.orig).lower()
    if "unique" in message or "duplicate" in message:
        return "unique"
    if "foreign key" in message:
        return "foreign_key"
    if "not null" in message:
        return "not_null"
    return "other"
