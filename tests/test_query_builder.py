from datetime import datetime

import pytest

from app.models.user import User
from app.utils.aggregates import months_before
from app.utils.query_builder import Pagination, SortOptions


@pytest.mark.parametrize(
    "total, expected_pages",
    [(0, 0), (1, 1), (10, 1), (11, 2), (25, 3)],
)
def test_pagination_total_pages(total, expected_pages):
    assert Pagination(page=1, limit=10).to_dict(total)["totalPages"] == expected_pages


def test_pagination_offset():
    assert Pagination(page=3, limit=20).offset == 40


def test_sort_options_fall_back_to_defaults():
    sort = SortOptions(columns={"name": User.name, "email": User.email}, default="name")

    assert str(sort.resolve("password", "sideways")) == str(User.name.asc())
    assert str(sort.resolve("email", "DESC")) == str(User.email.desc())
    assert str(sort.resolve(None, None)) == str(User.name.asc())


@pytest.mark.parametrize(
    "moment, months, expected",
    [
        (datetime(2024, 6, 15), 12, datetime(2023, 6, 15)),
        (datetime(2024, 1, 15), 1, datetime(2023, 12, 15)),
        (datetime(2024, 3, 31), 1, datetime(2024, 2, 29)),
        (datetime(2023, 3, 31), 1, datetime(2023, 2, 28)),
    ],
)
def test_months_before(moment, months, expected):
    assert months_before(moment, months) == expected
