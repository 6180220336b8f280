"""Free-text search across video metadata, plus the sort orders the list views offer."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from catalog.filters import comparable_label, get_field

SEARCHABLE_FIELDS: dict[str, tuple[str, ...]] = {
    "title": ("Title",),
    "description": ("Description",),
    "channel": ("Channel",),
    "speaker": ("Speaker",),
    "genre": ("VideoGenre",),
    "topic": ("MainTopic",),
    "hashtag": ("Hashtags",),
    "person": ("Persons",),
    "company": ("Companies",),
    "indicator": ("Indicators",),
    "trend": ("Trends",),
    "asset": ("InvestableAssets",),
    "institution": ("Institutions",),
    "event": ("EventsFairs",),
    "doi": ("DOIs",),
    "source": ("PrimarySources",),
    "technical": ("TechnicalTerms",),
    "ticker": ("TickerSymbol",),
}

SORT_OPTIONS = ("-CreatedAt", "CreatedAt", "Title", "-Title")

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def fields_for_categories(categories: Iterable[str] = ()) -> list[str]:
    """Record fields to search; no categories means every searchable field."""
    categories = [c for c in categories if c]
    if categories:
        groups = [SEARCHABLE_FIELDS.get(c, ()) for c in categories]
    else:
        groups = list(SEARCHABLE_FIELDS.values())
    # dict.fromkeys keeps first-seen order while dropping duplicates
    return list(dict.fromkeys(name for group in groups for name in group))


def _value_contains(value: Any, term: str) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, tuple)):
        for item in value:
            label = comparable_label(item)
            if isinstance(label, str) and term in label.lower():
                return True
        return False
    if isinstance(value, str):
        return term in value.lower()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return term in str(value)
    return False


def search_videos(videos: list, query: str, categories: Iterable[str] = ()) -> list:
    """Records where every whitespace-separated term appears in some searched field.

    Matching is a case-insensitive substring test. An empty query returns [].
    """
    terms = query.lower().split()
    if not terms:
        return []
    fields = fields_for_categories(categories)
    return [
        v for v in videos
        if all(any(_value_contains(get_field(v, name), term) for name in fields) for term in terms)
    ]


def _created_at(video: Any) -> datetime:
    value = get_field(video, "CreatedAt")
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return _EPOCH
    if not isinstance(value, datetime):
        return _EPOCH
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def sort_videos(videos: list, sort: str) -> list:
    """Sort by one of SORT_OPTIONS; any other value keeps the input order."""
    if sort == "-CreatedAt":
        return sorted(videos, key=_created_at, reverse=True)
    if sort == "CreatedAt":
        return sorted(videos, key=_created_at)
    if sort == "Title":
        return sorted(videos, key=lambda v: (get_field(v, "Title") or "").lower())
    if sort == "-Title":
        return sorted(videos, key=lambda v: (get_field(v, "Title") or "").lower(), reverse=True)
    return list(videos)
