import logging
import uuid
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from app.db.get_db import get_db
from app.models.rating import Rating
from app.models.store import Store
from app.models.user import User
from app.models.enums import AppRole
from app.core.exceptions import DuplicateEmail, NotFound, OwnerNotFound
from app.core.permissions import Capability, require_capability
from app.schemas.stores import StoreCreateRequest, StoreUpdateRequest
from app.utils.aggregates import average_rating_column, store_rating_query
from app.utils.auth import get_current_user
from app.utils.helpers import get_store_or_404, store_to_dict, success_response, verify_store_access
from app.utils.query_builder import ListQuery, Pagination, SortOptions, pagination_params

logger = logging.getLogger(__name__)

router = APIRouter()


def caller_ratings(db: Session, user: User, store_ids) -> dict:
    """The caller's own rating per store id, for the stores on the current page."""
    if not store_ids:
        return {}
    rows = db.query(Rating.store_id, Rating.rating).filter(
        Rating.user_id == user.id,
        Rating.store_id.in_(store_ids)
    ).all()
    return {store_id: value for store_id, value in rows}


def rated_store_to_dict(row, user_ratings: dict) -> dict:
    store, average_rating, total_ratings = row[0], row[1], row[2]
    data = store_to_dict(store, average_rating, total_ratings)
    data["user_rating"] = user_ratings.get(store.id)
    return data


# List all stores with their rating aggregate
@router.get("")
def list_stores(
    name: Optional[str] = Query(None),
    address: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort_by: str = Query("name", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder"),
    pagination: Pagination = Depends(pagination_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    sort = SortOptions(
        columns={
            "name": Store.name,
            "address": Store.address,
            "average_rating": average_rating_column(),
            "created_at": Store.created_at,
        },
        default="name",
    )
    listing = ListQuery(store_rating_query(db), sort, tiebreaker=Store.id)

    # search covers both fields and replaces the individual filters
    if search:
        listing.contains_any([Store.name, Store.address], search)
    else:
        listing.contains(Store.name, name).contains(Store.address, address)

    total_count = listing.count()
    rows = listing.page(pagination, sort_by, sort_order)
    user_ratings = caller_ratings(db, current_user, [row[0].id for row in rows])

    return success_response(
        stores=[rated_store_to_dict(row, user_ratings) for row in rows],
        pagination=pagination.to_dict(total_count)
    )


# Stores owned by the current store owner
@router.get("/my-stores")
def list_my_stores(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.view_own_stores))
):
    rows = (
        store_rating_query(db)
        .filter(Store.owner_id == current_user.id)
        .order_by(Store.name)
        .all()
    )
    return success_response(
        stores=[store_to_dict(store, avg, count) for store, avg, count in rows]
    )


@router.post("")
def create_store(
    payload: StoreCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.manage_stores))
):
    if db.query(Store).filter(Store.email == payload.email).first():
        raise DuplicateEmail("Store with this email already exists")

    owner = db.query(User).filter(User.id == payload.owner_id).first()
    if not owner:
        raise OwnerNotFound()

    now = datetime.utcnow()
    if owner.role != AppRole.store_owner:
        logger.info("Promoting user %s from %s to store_owner", owner.id, owner.role.value)
        owner.role = AppRole.store_owner
        owner.updated_at = now

    store = Store(
        name=payload.name,
        email=payload.email,
        address=payload.address,
        owner_id=owner.id,
        created_at=now,
        updated_at=now
    )
    db.add(store)
    db.commit()
    db.refresh(store)

    logger.info("Admin %s created store %s for owner %s", current_user.id, store.id, owner.id)
    return JSONResponse(
        status_code=201,
        content=success_response(message="Store created successfully", store=store_to_dict(store))
    )


@router.get("/{store_id}")
def get_store(
    store_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    row = store_rating_query(db).filter(Store.id == store_id).first()
    if not row:
        raise NotFound("Store not found")

    return success_response(
        store=rated_store_to_dict(row, caller_ratings(db, current_user, [store_id]))
    )


@router.put("/{store_id}")
def update_store(
    store_id: uuid.UUID,
    payload: StoreUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.edit_store))
):
    store = verify_store_access(db, store_id, current_user)
    if not store:
        raise NotFound("Store not found")

    if payload.email is not None:
        taken = db.query(Store).filter(Store.email == payload.email, Store.id != store.id).first()
        if taken:
            raise DuplicateEmail("Email is already taken")
        store.email = payload.email

    if payload.name is not None:
        store.name = payload.name
    if payload.address is not None:
        store.address = payload.address

    store.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(store)

    return success_response(message="Store updated successfully", store=store_to_dict(store))


@router.delete("/{store_id}")
def delete_store(
    store_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.manage_stores))
):
    store = get_store_or_404(db, store_id)

    # Ratings cascade with the store
    db.delete(store)
    db.commit()

    logger.info("Admin %s deleted store %s", current_user.id, store_id)
    return success_response(message="Store deleted successfully")
