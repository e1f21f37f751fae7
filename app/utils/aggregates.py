# app/utils/aggregates.py
"""Rating aggregates shared by the store, user and dashboard routes."""

import calendar
from collections import OrderedDict
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import TREND_MONTHS
from app.models.rating import Rating
from app.models.store import Store
from app.utils.helpers import round_average
from app.utils.validation_functions import RATING_MAX, RATING_MIN


def average_rating_column():
    return func.coalesce(func.avg(Rating.rating), 0).label("average_rating")


def total_ratings_column():
    return func.count(Rating.id).label("total_ratings")


def store_rating_query(db: Session):
    """
    Stores joined with their rating aggregate. Rows are
    (Store, average_rating, total_ratings); unrated stores come back with 0 and 0.
    """
    return (
        db.query(Store, average_rating_column(), total_ratings_column())
        .outerjoin(Rating, Rating.store_id == Store.id)
        .group_by(Store.id)
    )


def owner_average_ratings(db: Session, owner_ids: Iterable) -> Dict:
    """Average rating across all stores of each owner, 0 when nothing is rated."""
    owner_ids = list(owner_ids)
    if not owner_ids:
        return {}
    rows = (
        db.query(Store.owner_id, func.avg(Rating.rating))
        .outerjoin(Rating, Rating.store_id == Store.id)
        .filter(Store.owner_id.in_(owner_ids))
        .group_by(Store.owner_id)
        .all()
    )
    return {owner_id: float(avg) if avg is not None else 0.0 for owner_id, avg in rows}


def rating_distribution(db: Session, *criteria) -> List[dict]:
    """Count of ratings per value 1..5, zero-filled."""
    rows = (
        db.query(Rating.rating, func.count(Rating.id))
        .filter(*criteria)
        .group_by(Rating.rating)
        .all()
    )
    counts = {value: count for value, count in rows}
    return [
        {"rating": value, "count": counts.get(value, 0)}
        for value in range(RATING_MIN, RATING_MAX + 1)
    ]


def months_before(moment: datetime, months: int) -> datetime:
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month0 = divmod(month_index, 12)
    day = min(moment.day, calendar.monthrange(year, month0 + 1)[1])
    return moment.replace(year=year, month=month0 + 1, day=day)


def monthly_trend(db: Session, store_id, now: Optional[datetime] = None, months: int = TREND_MONTHS) -> List[dict]:
    """
    Rating count and average per calendar month over the trailing window.
    Months without ratings are left out. Bucketing happens here rather than
    in SQL because month truncation is dialect specific.
    """
    now = now or datetime.utcnow()
    since = months_before(now, months)
    rows = (
        db.query(Rating.created_at, Rating.rating)
        .filter(Rating.store_id == store_id, Rating.created_at >= since)
        .order_by(Rating.created_at)
        .all()
    )

    buckets = OrderedDict()
    for created_at, value in rows:
        key = f"{created_at.year:04d}-{created_at.month:02d}"
        buckets.setdefault(key, []).append(value)

    return [
        {
            "month": month,
            "ratingCount": len(values),
            "averageRating": round_average(sum(values) / len(values), 2),
        }
        for month, values in buckets.items()
    ]
