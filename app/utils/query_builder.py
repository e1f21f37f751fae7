# app/utils/query_builder.py
"""
Filter, sort and pagination composition for list endpoints.

Each endpoint declares the columns it can sort by as a name -> column map.
Client input only ever selects a key from that map; unknown keys fall back
to the endpoint default. Filter values are bound as parameters.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from fastapi import Query
from sqlalchemy import asc, desc, or_
from sqlalchemy.orm import Query as OrmQuery

from app.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

SORT_ORDERS = ("asc", "desc")


@dataclass
class Pagination:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def to_dict(self, total_count: int) -> dict:
        return {
            "currentPage": self.page,
            "totalPages": (total_count + self.limit - 1) // self.limit,
            "totalCount": total_count,
            "limit": self.limit,
        }


def pagination_params(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> Pagination:
    return Pagination(page=page, limit=limit)


@dataclass
class SortOptions:
    columns: Dict[str, Any]
    default: str
    default_order: str = "asc"

    def resolve(self, sort_by: Optional[str], sort_order: Optional[str]):
        key = sort_by if sort_by in self.columns else self.default
        order = sort_order.lower() if sort_order and sort_order.lower() in SORT_ORDERS else self.default_order
        column = self.columns[key]
        return asc(column) if order == "asc" else desc(column)


class ListQuery:
    """Wraps an ORM query with the filters, ordering and paging of a list endpoint."""

    def __init__(self, query: OrmQuery, sort: SortOptions, tiebreaker=None):
        self.query = query
        self.sort = sort
        self.tiebreaker = tiebreaker

    def contains(self, column, value: Optional[str]) -> "ListQuery":
        """Case-insensitive substring match, skipped when value is empty."""
        if value:
            self.query = self.query.filter(column.ilike(f"%{value}%"))
        return self

    def contains_any(self, columns: Iterable, value: Optional[str]) -> "ListQuery":
        if value:
            pattern = f"%{value}%"
            self.query = self.query.filter(or_(*[column.ilike(pattern) for column in columns]))
        return self

    def equals(self, column, value) -> "ListQuery":
        if value is not None:
            self.query = self.query.filter(column == value)
        return self

    def count(self) -> int:
        return self.query.order_by(None).count()

    def page(self, pagination: Pagination, sort_by: Optional[str] = None, sort_order: Optional[str] = None) -> List:
        ordering = [self.sort.resolve(sort_by, sort_order)]
        if self.tiebreaker is not None:
            ordering.append(self.tiebreaker)
        return (
            self.query.order_by(*ordering)
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )
