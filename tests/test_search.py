"""Tests for catalog/search.py."""

import pytest

from catalog.search import SEARCHABLE_FIELDS, fields_for_categories, search_videos, sort_videos


def ids(videos):
    return [v["Id"] for v in videos]


class TestFieldsForCategories:
    def test_all_fields_when_no_categories(self):
        fields = fields_for_categories()
        assert "Title" in fields and "TickerSymbol" in fields
        assert len(fields) == len(SEARCHABLE_FIELDS)

    def test_selected_categories(self):
        assert fields_for_categories(["title", "person"]) == ["Title", "Persons"]

    def test_unknown_category_contributes_nothing(self):
        assert fields_for_categories(["nope"]) == []

    def test_duplicates_dropped(self):
        assert fields_for_categories(["title", "title"]) == ["Title"]


class TestSearchVideos:
    def test_empty_query(self, videos):
        assert search_videos(videos, "   ") == []

    def test_case_insensitive_substring(self, videos):
        assert ids(search_videos(videos, "BITCOIN")) == [1]

    def test_every_term_must_match(self, videos):
        assert ids(search_videos(videos, "bitcoin alice")) == [1]
        assert search_videos(videos, "bitcoin bob") == []

    def test_linked_records_searched(self, videos):
        assert ids(search_videos(videos, "acme")) == [1]

    def test_category_restriction(self, videos):
        assert ids(search_videos(videos, "foo", ["channel"])) == [1, 3]
        assert search_videos(videos, "foo", ["title"]) == []

    def test_unknown_category_matches_nothing(self, videos):
        assert search_videos(videos, "bitcoin", ["nope"]) == []


class TestSortVideos:
    def test_newest_first(self, videos):
        assert ids(sort_videos(videos, "-CreatedAt")) == [2, 1, 3]

    def test_oldest_first(self, videos):
        assert ids(sort_videos(videos, "CreatedAt")) == [3, 1, 2]

    @pytest.mark.parametrize("sort, expected", [
        ("Title", [1, 2, 3]),
        ("-Title", [3, 2, 1]),
    ])
    def test_title(self, videos, sort, expected):
        assert ids(sort_videos(videos, sort)) == expected

    def test_unknown_sort_keeps_order(self, videos):
        assert ids(sort_videos(videos, "Views")) == [1, 2, 3]

    def test_missing_created_at_sorts_last_when_newest_first(self, videos):
        extra = {"Id": 4, "Title": "No date"}
        assert ids(sort_videos(videos + [extra], "-CreatedAt"))[-1] == 4
