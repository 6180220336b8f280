"""Facet filters: URL token (de)serialization and conjunctive filtering of video records.

Records are read-only snapshots from NocoDB. They may be plain dicts (raw API
rows) or pydantic models (validated rows); fields are looked up by their
NocoDB column name either way.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal, Optional, get_args
from urllib.parse import quote, unquote

FilterType = Literal[
    "person", "company", "genre", "indicator", "trend", "asset", "ticker",
    "institution", "event", "doi", "hashtag", "mainTopic", "primarySource",
    "sentiment", "sentimentReason", "channel", "description", "technicalTerm",
    "speaker",
]

FILTER_TYPES: tuple[str, ...] = get_args(FilterType)

TOKEN_DELIMITER = "|"

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"

# Match kinds
SCALAR = "scalar"
SENTIMENT = "sentiment"
LINKED = "linked"   # elements are str or {Title|name}
STRINGS = "strings"  # elements are plain str

FACETS: Mapping[str, tuple[str, str]] = {
    "person": ("Persons", LINKED),
    "company": ("Companies", LINKED),
    "genre": ("VideoGenre", SCALAR),
    "indicator": ("Indicators", LINKED),
    "trend": ("Trends", LINKED),
    "asset": ("InvestableAssets", STRINGS),
    "ticker": ("TickerSymbol", SCALAR),
    "institution": ("Institutions", LINKED),
    "event": ("EventsFairs", STRINGS),
    "doi": ("DOIs", STRINGS),
    "hashtag": ("Hashtags", STRINGS),
    "mainTopic": ("MainTopic", SCALAR),
    "primarySource": ("PrimarySources", STRINGS),
    "sentiment": ("Sentiment", SENTIMENT),
    "sentimentReason": ("SentimentReason", SCALAR),
    "channel": ("Channel", SCALAR),
    "description": ("Description", SCALAR),
    "technicalTerm": ("TechnicalTerms", STRINGS),
    "speaker": ("Speaker", SCALAR),
}


@dataclass(frozen=True)
class FilterOption:
    """One active facet predicate. ``label`` is display text only."""
    type: str
    value: str
    label: str = field(default="", compare=False)

    def to_dict(self) -> dict:
        return {"type": self.type, "value": self.value, "label": self.label or self.value}


def get_field(video: Any, name: str) -> Any:
    """Read a column from a dict row or an attribute-style record."""
    if isinstance(video, Mapping):
        return video.get(name)
    return getattr(video, name, None)


def comparable_label(element: Any) -> Optional[str]:
    """Comparable form of a linked-record element: the string itself, else Title, else name."""
    if isinstance(element, str):
        return element
    if element is None:
        return None
    if isinstance(element, Mapping):
        return element.get("Title") or element.get("name")
    return getattr(element, "Title", None) or getattr(element, "name", None)


def js_string(value: Any) -> str:
    """Render a scalar like JavaScript's String(): None -> "", 1.0 -> "1", True -> "true"."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def serialize_filters(filters: Iterable[FilterOption]) -> str:
    """Encode filters as ``type:value|type:value`` with each half percent-encoded."""
    return TOKEN_DELIMITER.join(
        f"{quote(f.type, safe=_URI_COMPONENT_SAFE)}:{quote(f.value, safe=_URI_COMPONENT_SAFE)}"
        for f in filters
    )


def deserialize_filters(token: Optional[str]) -> list[FilterOption]:
    """Inverse of serialize_filters. Empty or missing token -> []."""
    if not token:
        return []
    result = []
    for part in token.split(TOKEN_DELIMITER):
        type_part, _, value_part = part.partition(":")
        result.append(FilterOption(type=unquote(type_part), value=unquote(value_part)))
    return result


def matches_filter(video: Any, option: FilterOption) -> bool:
    """Evaluate one facet predicate against one record.

    Unknown facet types match everything; a missing field matches nothing.
    """
    facet = FACETS.get(option.type)
    if facet is None:
        return True
    field_name, kind = facet
    value = get_field(video, field_name)

    if kind == SENTIMENT:
        return js_string(value) == option.value
    if value is None:
        return False
    if kind == SCALAR:
        return value == option.value
    if not isinstance(value, (list, tuple)):
        return False
    if kind == LINKED:
        return any(comparable_label(el) == option.value for el in value)
    return option.value in value


def filter_videos(videos: list, filters: Iterable[FilterOption]) -> list:
    """Keep the records that satisfy every filter, in their original order.

    An empty filter list returns ``videos`` itself.
    """
    filters = list(filters)
    if not filters:
        return videos
    return [v for v in videos if all(matches_filter(v, f) for f in filters)]


def _facet_values(video: Any, field_name: str, kind: str) -> list[str]:
    value = get_field(video, field_name)
    if kind == SENTIMENT:
        text = js_string(value)
        return [text] if text else []
    if value is None:
        return []
    if kind == SCALAR:
        return [value] if isinstance(value, str) and value else []
    if not isinstance(value, (list, tuple)):
        return []
    if kind == LINKED:
        labels = (comparable_label(el) for el in value)
        return [label for label in labels if label]
    return [el for el in value if isinstance(el, str) and el]


def collect_filter_options(videos: Iterable[Any]) -> list[FilterOption]:
    """Distinct facet values present in ``videos``, ordered by facet then value."""
    seen: dict[str, set[str]] = {t: set() for t in FILTER_TYPES}
    for video in videos:
        for facet_type in FILTER_TYPES:
            field_name, kind = FACETS[facet_type]
            seen[facet_type].update(_facet_values(video, field_name, kind))
    return [
        FilterOption(type=facet_type, value=value, label=value)
        for facet_type in FILTER_TYPES
        for value in sorted(seen[facet_type])
    ]
