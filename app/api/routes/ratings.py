import logging
import uuid
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.db.get_db import get_db
from app.models.rating import Rating
from app.models.store import Store
from app.models.user import User
from app.core.exceptions import AlreadyRated, NotFound, ValidationFailed
from app.core.permissions import Capability, require_capability
from app.schemas.ratings import RatingRequest
from app.utils.helpers import get_store_or_404, integrity_error_kind, success_response
from app.utils.query_builder import ListQuery, Pagination, SortOptions, pagination_params
from app.utils.validation_functions import RATING_MAX, RATING_MIN

logger = logging.getLogger(__name__)

router = APIRouter()

rater = require_capability(Capability.rate_stores)


def rating_to_dict(rating: Rating) -> dict:
    return {
        "id": str(rating.id),
        "store_id": str(rating.store_id),
        "rating": rating.rating,
        "created_at": rating.created_at.isoformat(),
        "updated_at": rating.updated_at.isoformat(),
    }


def rating_value(value: str) -> int:
    number = int(value)
    if not RATING_MIN <= number <= RATING_MAX:
        raise ValueError(value)
    return number


def optional_filter(value: Optional[str], convert, field: str):
    """Empty query values mean no filter; anything else must convert cleanly."""
    if not value:
        return None
    try:
        return convert(value)
    except ValueError:
        raise ValidationFailed(details=[{"field": field, "message": f"Invalid {field} filter"}])


def find_own_rating(db: Session, user: User, store_id) -> Optional[Rating]:
    return db.query(Rating).filter(
        Rating.user_id == user.id,
        Rating.store_id == store_id
    ).first()


@router.post("")
def submit_rating(
    payload: RatingRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(rater)
):
    get_store_or_404(db, payload.store_id)

    now = datetime.utcnow()
    rating = Rating(
        user_id=current_user.id,
        store_id=payload.store_id,
        rating=payload.rating,
        created_at=now,
        updated_at=now
    )
    db.add(rating)
    # One rating per (user, store) is a table constraint; the insert itself decides
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if integrity_error_kind(exc) == "unique":
            raise AlreadyRated()
        raise
    db.refresh(rating)

    logger.info("User %s rated store %s with %s", current_user.id, payload.store_id, payload.rating)
    return JSONResponse(
        status_code=201,
        content=success_response(message="Rating submitted successfully", rating=rating_to_dict(rating))
    )


@router.put("")
def update_rating(
    payload: RatingRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(rater)
):
    rating = find_own_rating(db, current_user, payload.store_id)
    if not rating:
        raise NotFound("Rating not found. Submit a new rating instead.")

    rating.rating = payload.rating
    rating.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(rating)

    return success_response(message="Rating updated successfully", rating=rating_to_dict(rating))


@router.get("/my-ratings")
def list_my_ratings(
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    pagination: Pagination = Depends(pagination_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(rater)
):
    sort = SortOptions(
        columns={
            "rating": Rating.rating,
            "created_at": Rating.created_at,
            "store_name": Store.name,
        },
        default="created_at",
        default_order="desc",
    )
    query = (
        db.query(Rating, Store.name, Store.address)
        .join(Store, Rating.store_id == Store.id)
        .filter(Rating.user_id == current_user.id)
    )
    listing = ListQuery(query, sort, tiebreaker=Rating.id)

    total_count = listing.count()
    ratings = []
    for rating, store_name, store_address in listing.page(pagination, sort_by, sort_order):
        item = rating_to_dict(rating)
        item["store_name"] = store_name
        item["store_address"] = store_address
        ratings.append(item)

    return success_response(ratings=ratings, pagination=pagination.to_dict(total_count))


@router.get("/all")
def list_all_ratings(
    store_id: Optional[str] = Query(None, alias="storeId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    rating: Optional[str] = Query(None),
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    pagination: Pagination = Depends(pagination_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.view_all_ratings))
):
    sort = SortOptions(
        columns={
            "rating": Rating.rating,
            "created_at": Rating.created_at,
            "user_name": User.name,
            "store_name": Store.name,
        },
        default="created_at",
        default_order="desc",
    )
    query = (
        db.query(Rating, User.name, Store.name)
        .join(User, Rating.user_id == User.id)
        .join(Store, Rating.store_id == Store.id)
    )
    listing = (
        ListQuery(query, sort, tiebreaker=Rating.id)
        .equals(Rating.store_id, optional_filter(store_id, uuid.UUID, "storeId"))
        .equals(Rating.user_id, optional_filter(user_id, uuid.UUID, "userId"))
        .equals(Rating.rating, optional_filter(rating, rating_value, "rating"))
    )

    total_count = listing.count()
    ratings = []
    for item_rating, user_name, store_name in listing.page(pagination, sort_by, sort_order):
        item = rating_to_dict(item_rating)
        item["user_id"] = str(item_rating.user_id)
        item["user_name"] = user_name
        item["store_name"] = store_name
        ratings.append(item)

    return success_response(ratings=ratings, pagination=pagination.to_dict(total_count))


@router.get("/store/{store_id}")
def list_store_ratings(
    store_id: uuid.UUID,
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    pagination: Pagination = Depends(pagination_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(rater)
):
    sort = SortOptions(
        columns={"rating": Rating.rating, "created_at": Rating.created_at},
        default="created_at",
        default_order="desc",
    )
    query = (
        db.query(Rating, User.name)
        .join(User, Rating.user_id == User.id)
        .filter(Rating.store_id == store_id)
    )
    listing = ListQuery(query, sort, tiebreaker=Rating.id)

    total_count = listing.count()
    ratings = []
    for rating, user_name in listing.page(pagination, sort_by, sort_order):
        item = rating_to_dict(rating)
        item["user_name"] = user_name
        ratings.append(item)

    return success_response(ratings=ratings, pagination=pagination.to_dict(total_count))


@router.delete("/store/{store_id}")
def delete_rating(
    store_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(rater)
):
    rating = find_own_rating(db, current_user, store_id)
    if not rating:
        raise NotFound("Rating not found")

    db.delete(rating)
    db.commit()

    logger.info("User %s deleted rating for store %s", current_user.id, store_id)
    return success_response(message="Rating deleted successfully")
