"""Tests for catalog/pagination.py pure functions."""

import math

import pytest

from catalog.pagination import (
    PAGINATION_LIMITS,
    NormalizedPagination,
    PaginationParams,
    clamp,
    normalize_pagination,
    parse_int_param,
)


class TestNormalizePagination:
    def test_empty_params_use_defaults(self):
        assert normalize_pagination(PaginationParams()) == NormalizedPagination(page=1, limit=35, offset=0)

    def test_no_argument_uses_defaults(self):
        assert normalize_pagination() == NormalizedPagination(page=1, limit=35, offset=0)

    def test_limit_clamped_to_max(self):
        assert normalize_pagination(PaginationParams(limit=500)).limit == 100

    def test_limit_clamped_to_min(self):
        assert normalize_pagination(PaginationParams(limit=0)).limit == 1
        assert normalize_pagination(PaginationParams(limit=-7)).limit == 1

    def test_explicit_limit_kept(self):
        assert normalize_pagination(PaginationParams(limit=20)).limit == 20

    def test_page_only_gets_default_limit(self):
        result = normalize_pagination(PaginationParams(page=3))
        assert result == NormalizedPagination(page=3, limit=35, offset=0)

    def test_page_floored_at_one(self):
        assert normalize_pagination(PaginationParams(page=0)).page == 1
        assert normalize_pagination(PaginationParams(page=-4)).page == 1

    def test_page_unbounded_above(self):
        assert normalize_pagination(PaginationParams(page=10_000_000)).page == 10_000_000

    @pytest.mark.parametrize("offset, expected", [
        (-1, 0),
        (0, 0),
        (250, 250),
        (5000, 5000),
        (5001, 5000),
        (99999, 5000),
    ])
    def test_offset_clamped(self, offset, expected):
        assert normalize_pagination(PaginationParams(offset=offset)).offset == expected

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_treated_as_missing(self, value):
        result = normalize_pagination(PaginationParams(page=value, limit=value, offset=value))
        assert result == NormalizedPagination(page=1, limit=35, offset=0)

    @pytest.mark.parametrize("page, limit, offset", [
        (None, None, None),
        (-100, -100, -100),
        (0, 0, 0),
        (1, 1, 1),
        (7, 101, 4999),
        (10**9, 10**9, 10**9),
    ])
    def test_output_always_in_bounds(self, page, limit, offset):
        result = normalize_pagination(PaginationParams(page=page, limit=limit, offset=offset))
        assert 1 <= result.limit <= 100
        assert result.page >= 1
        assert 0 <= result.offset <= 5000


class TestLimitsTable:
    def test_values(self):
        assert PAGINATION_LIMITS["DEFAULT_LIMIT"] == 35
        assert PAGINATION_LIMITS["MAX_LIMIT"] == 100
        assert PAGINATION_LIMITS["MAX_OFFSET"] == 5000

    def test_read_only(self):
        with pytest.raises(TypeError):
            PAGINATION_LIMITS["MAX_LIMIT"] = 1000


class TestClamp:
    def test_inside(self):
        assert clamp(5, 1, 10) == 5

    def test_edges(self):
        assert clamp(0, 1, 10) == 1
        assert clamp(11, 1, 10) == 10


class TestParseIntParam:
    @pytest.mark.parametrize("raw, expected", [
        ("12", 12),
        ("  7", 7),
        ("12abc", 12),
        ("-3", -3),
        ("+4", 4),
        ("3.9", 3),
    ])
    def test_valid(self, raw, expected):
        assert parse_int_param(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", "NaN", "  ", "-"])
    def test_invalid(self, raw):
        assert parse_int_param(raw) is None
