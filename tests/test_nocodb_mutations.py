"""Tests for nocodb/mutations.py."""

import math

import pytest

from nocodb.mutations import (
    build_update_payload,
    normalize_importance_rating,
    normalize_personal_comment,
)


class TestNormalizeImportanceRating:
    @pytest.mark.parametrize("value, expected", [
        (1, 1),
        (5, 5),
        (3.0, 3),
        ("4", 4),
        (" 2 ", 2),
        ("3abc", 3),
        ("5.0", 5),
    ])
    def test_valid(self, value, expected):
        assert normalize_importance_rating(value) == expected

    @pytest.mark.parametrize("value", [
        None, 0, 6, -1, 2.5, "2.5", "", "abc", "1e999", math.nan, math.inf, True, [3], {"v": 3},
    ])
    def test_invalid_clears(self, value):
        assert normalize_importance_rating(value) is None


class TestNormalizePersonalComment:
    @pytest.mark.parametrize("value, expected", [
        ("  worth a rewatch ", "worth a rewatch"),
        ("", None),
        ("   ", None),
        (None, None),
        (42, None),
    ])
    def test_values(self, value, expected):
        assert normalize_personal_comment(value) == expected


class TestBuildUpdatePayload:
    def test_normalizes_present_keys(self):
        payload = build_update_payload({"ImportanceRating": "4", "PersonalComment": " ok "})
        assert payload == {"ImportanceRating": 4, "PersonalComment": "ok"}

    def test_absent_keys_stay_absent(self):
        assert build_update_payload({"Title": "New"}) == {"Title": "New"}

    def test_invalid_rating_becomes_null(self):
        assert build_update_payload({"ImportanceRating": 9}) == {"ImportanceRating": None}

    def test_read_only_columns_dropped(self):
        payload = build_update_payload({"Id": 99, "CreatedAt": "x", "UpdatedAt": "y", "Title": "T"})
        assert payload == {"Title": "T"}

    def test_input_not_mutated(self):
        data = {"PersonalComment": "  hi  ", "Id": 1}
        build_update_payload(data)
        assert data == {"PersonalComment": "  hi  ", "Id": 1}
