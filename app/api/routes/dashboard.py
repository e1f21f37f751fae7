import uuid
from fastapi import APIRouter, Depends
from sqlalchemy import desc, func
from sqlalchemy.orm import Session
from app.db.get_db import get_db
from app.models.rating import Rating
from app.models.store import Store
from app.models.user import User
from app.models.enums import AppRole
from app.core.config import (
    ADMIN_RECENT_RATINGS_LIMIT,
    OWNER_RECENT_RATINGS_LIMIT,
    TOP_STORES_LIMIT,
    USER_RECENT_RATINGS_LIMIT,
)
from app.core.exceptions import NotFound
from app.core.permissions import Capability, require_capability
from app.utils.aggregates import monthly_trend, rating_distribution, store_rating_query
from app.utils.helpers import round_average, store_to_dict, success_response, verify_store_access

router = APIRouter()


def recent_ratings(db: Session, limit: int, *criteria):
    rows = (
        db.query(Rating, User.name, Store.name)
        .join(User, Rating.user_id == User.id)
        .join(Store, Rating.store_id == Store.id)
        .filter(*criteria)
        .order_by(desc(Rating.created_at), Rating.id)
        .limit(limit)
        .all()
    )
    return [
        {
            "id": str(rating.id),
            "rating": rating.rating,
            "created_at": rating.created_at.isoformat(),
            "user_name": user_name,
            "store_id": str(rating.store_id),
            "store_name": store_name,
        }
        for rating, user_name, store_name in rows
    ]


@router.get("/admin")
def admin_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.admin_dashboard))
):
    total_users = db.query(func.count(User.id)).scalar()
    total_stores = db.query(func.count(Store.id)).scalar()
    total_ratings, average_rating = db.query(func.count(Rating.id), func.avg(Rating.rating)).one()

    role_counts = dict(db.query(User.role, func.count(User.id)).group_by(User.role).all())

    top_stores = (
        store_rating_query(db)
        .order_by(desc("average_rating"), desc("total_ratings"), Store.name)
        .limit(TOP_STORES_LIMIT)
        .all()
    )

    return success_response(
        totalUsers=total_users,
        totalStores=total_stores,
        totalRatings=total_ratings,
        averageRating=round_average(average_rating, 2),
        userBreakdown={
            "admins": role_counts.get(AppRole.admin, 0),
            "normalUsers": role_counts.get(AppRole.user, 0),
            "storeOwners": role_counts.get(AppRole.store_owner, 0),
        },
        topStores=[store_to_dict(store, avg, count) for store, avg, count in top_stores],
        recentRatings=recent_ratings(db, ADMIN_RECENT_RATINGS_LIMIT),
        ratingDistribution=rating_distribution(db),
    )


@router.get("/store-owner")
def store_owner_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.owner_dashboard))
):
    rows = (
        store_rating_query(db)
        .filter(Store.owner_id == current_user.id)
        .order_by(Store.name)
        .all()
    )
    total_ratings, overall_average = (
        db.query(func.count(Rating.id), func.avg(Rating.rating))
        .join(Store, Rating.store_id == Store.id)
        .filter(Store.owner_id == current_user.id)
        .one()
    )

    return success_response(
        stores=[store_to_dict(store, avg, count) for store, avg, count in rows],
        totalStores=len(rows),
        totalRatings=total_ratings,
        overallAverageRating=round_average(overall_average, 2),
        recentRatings=recent_ratings(db, OWNER_RECENT_RATINGS_LIMIT, Store.owner_id == current_user.id),
        ratingDistribution=[
            {
                "store_id": str(store.id),
                "store_name": store.name,
                "distribution": rating_distribution(db, Rating.store_id == store.id),
            }
            for store, _, _ in rows
        ],
    )


@router.get("/store/{store_id}")
def store_stats(
    store_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.store_dashboard))
):
    verify_store_access(db, store_id, current_user)

    row = store_rating_query(db).filter(Store.id == store_id).first()
    if not row:
        raise NotFound("Store not found")

    store, average_rating, total_ratings = row
    store_data = store_to_dict(store, average_rating, total_ratings)
    store_data["owner_name"] = store.owner.name

    ratings = (
        db.query(Rating, User.name, User.email)
        .join(User, Rating.user_id == User.id)
        .filter(Rating.store_id == store_id)
        .order_by(desc(Rating.created_at), Rating.id)
        .all()
    )

    return success_response(
        store=store_data,
        ratings=[
            {
                "id": str(rating.id),
                "rating": rating.rating,
                "created_at": rating.created_at.isoformat(),
                "updated_at": rating.updated_at.isoformat(),
                "user_name": user_name,
                "user_email": user_email,
            }
            for rating, user_name, user_email in ratings
        ],
        ratingDistribution=rating_distribution(db, Rating.store_id == store_id),
        monthlyTrends=monthly_trend(db, store_id),
    )


@router.get("/user")
def user_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_capability(Capability.user_dashboard))
):
    total_ratings, average_given, lowest, highest = (
        db.query(
            func.count(Rating.id),
            func.avg(Rating.rating),
            func.min(Rating.rating),
            func.max(Rating.rating),
        )
        .filter(Rating.user_id == current_user.id)
        .one()
    )

    recent = (
        db.query(Rating, Store.name, Store.address)
        .join(Store, Rating.store_id == Store.id)
        .filter(Rating.user_id == current_user.id)
        .order_by(desc(Rating.created_at), Rating.id)
        .limit(USER_RECENT_RATINGS_LIMIT)
        .all()
    )

    return success_response(
        totalRatings=total_ratings,
        averageRatingGiven=round_average(average_given, 2),
        lowestRatingGiven=lowest,
        highestRatingGiven=highest,
        recentRatings=[
            {
                "id": str(rating.id),
                "rating": rating.rating,
                "created_at": rating.created_at.isoformat(),
                "updated_at": rating.updated_at.isoformat(),
                "store_id": str(rating.store_id),
                "store_name": store_name,
                "store_address": store_address,
            }
            for rating, store_name, store_address in recent
        ],
        ratingDistribution=rating_distribution(db, Rating.user_id == current_user.id),
    )
