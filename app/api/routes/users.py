import logging
import uuid
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from app.db.get_db import get_db
from app.models.user import User
from app.models.enums import AppRole
from app.core.exceptions import DuplicateEmail, Forbidden, InvalidRole
from app.core.permissions import Capability, require_capability
from app.schemas.users import UserCreateRequest, UserUpdateRequest
from app.utils.aggregates import owner_average_ratings
from app.utils.auth import get_user_by_email
from app.utils.helpers import get_user_or_404, hash_password, success_response, user_to_dict
from app.utils.query_builder import ListQuery, Pagination, SortOptions, pagination_params
from app.utils.validation_functions import validate_role

logger = logging.getLogger(__name__)

router = APIRouter()

admin_only = require_capability(Capability.manage_users)

USER_SORT = SortOptions(
    columns={
        "name": User.name,
        "email": User.email,
        "role": User.role,
        "created_at": User.created_at,
    },
    default="name",
)


def parse_role(role: Optional[str]) -> Optional[AppRole]:
    if not role:
        return None
    if not validate_role(role):
        raise InvalidRole()
    return AppRole(role)


def with_store_rating(db: Session, users):
    owner_ids = [u.id for u in users if u.role == AppRole.store_owner]
    ratings = owner_average_ratings(db, owner_ids)
    return [
        user_to_dict(u, ratings.get(u.id, 0.0) if u.role == AppRole.store_owner else None)
        for u in users
    ]


# List users with filtering, sorting and pagination
@router.get("")
def list_users(
    name: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    address: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    sort_by: str = Query("name", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder"),
    pagination: Pagination = Depends(pagination_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    listing = (
        ListQuery(db.query(User), USER_SORT, tiebreaker=User.id)
        .contains(User.name, name)
        .contains(User.email, email)
        .contains(User.address, address)
        .equals(User.role, parse_role(role))
    )

    total_count = listing.count()
    users = listing.page(pagination, sort_by, sort_order)

    return success_response(
        users=with_store_rating(db, users),
        pagination=pagination.to_dict(total_count)
    )


@router.post("")
def create_user(
    payload: UserCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    role = parse_role(payload.role) or AppRole.user

    if get_user_by_email(db, payload.email):
        raise DuplicateEmail()

    now = datetime.utcnow()
    user = User(
        name=payload.name,
        email=payload.email,
        hashed_password=hash_password(payload.password),
        address=payload.address,
        role=role,
        created_at=now,
        updated_at=now
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Admin %s created user %s with role %s", current_user.id, user.id, role.value)
    return JSONResponse(
        status_code=201,
        content=success_response(message="User created successfully", user=user_to_dict(user))
    )


@router.get("/{user_id}")
def get_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    user = get_user_or_404(db, user_id)
    return success_response(user=with_store_rating(db, [user])[0])


@router.put("/{user_id}")
def update_user(
    user_id: uuid.UUID,
    payload: UserUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    user = get_user_or_404(db, user_id)
    role = parse_role(payload.role)

    if payload.email is not None:
        taken = db.query(User).filter(User.email == payload.email, User.id != user.id).first()
        if taken:
            raise DuplicateEmail("Email is already taken")
        user.email = payload.email

    if payload.name is not None:
        user.name = payload.name
    if payload.address is not None:
        user.address = payload.address
    if role is not None:
        user.role = role

    user.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(user)

    return success_response(
        message="User updated successfully",
        user=with_store_rating(db, [user])[0]
    )


@router.delete("/{user_id}")
def delete_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only)
):
    user = get_user_or_404(db, user_id)

    if user.role == AppRole.admin:
        raise Forbidden("Cannot delete admin users")

    # Owned stores and given ratings go with the user
    db.delete(user)
    db.commit()

    logger.info("Admin %s deleted user %s", current_user.id, user_id)
    return success_response(message="User deleted successfully")
