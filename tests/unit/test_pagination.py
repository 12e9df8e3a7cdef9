"""
Name: Pagination Helpers Tests

Responsibilities:
  - Validate PageParams bounds and offset math
  - Validate totalPages and the Page envelope serialization
  - Validate sortBy whitelisting (unknown fields fall back to the default)
"""

import pytest

from app.crosscutting.pagination import (
    MAX_PAGE_SIZE,
    PageParams,
    SortOrder,
    build_page,
    resolve_sort,
    total_pages,
)

pytestmark = pytest.mark.unit


class TestPageParams:
    def test_defaults(self):
        params = PageParams()

        assert params.page == 1
        assert params.limit == 20
        assert params.offset == 0
        assert params.descending is True

    def test_offset(self):
        assert PageParams(page=3, limit=25).offset == 50

    def test_ascending(self):
        assert PageParams(sort_order=SortOrder.ASC).descending is False

    @pytest.mark.parametrize(
        "page, limit", [(0, 10), (1, 0), (1, MAX_PAGE_SIZE + 1)]
    )
    def test_rejects_out_of_range(self, page, limit):
        with pytest.raises(ValueError):
            PageParams(page=page, limit=limit)


@pytest.mark.parametrize(
    "total, limit, expected", [(0, 20, 0), (1, 20, 1), (40, 20, 2), (41, 20, 3)]
)
def test_total_pages(total, limit, expected):
    assert total_pages(total, limit) == expected


def test_build_page_serializes_camel_case():
    page = build_page(["a", "b"], 5, PageParams(page=2, limit=2))

    assert page.model_dump(by_alias=True) == {
        "data": ["a", "b"],
        "pagination": {"page": 2, "limit": 2, "total": 5, "totalPages": 3},
    }


class TestResolveSort:
    ALLOWED = {"fullName": "full_name", "createdAt": "created_at"}

    def test_known_field(self):
        assert resolve_sort("fullName", self.ALLOWED, "createdAt") == "full_name"

    @pytest.mark.parametrize("sort_by", [None, "", "password_hash; DROP TABLE"])
    def test_unknown_field_falls_back(self, sort_by):
        assert resolve_sort(sort_by, self.ALLOWED, "createdAt") == "created_at"
