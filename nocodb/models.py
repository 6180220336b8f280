"""Pydantic models for NocoDB video rows.

NocoDB is inconsistent about the shape of multi-value columns: the same field
can arrive as a list, a newline- or comma-separated string, or an empty
object. The ``mode="before"`` validators normalize those into lists.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _is_empty_object(val: Any) -> bool:
    return isinstance(val, dict) and not val


def string_to_list(val: Any) -> Any:
    """Newline-separated string -> list of trimmed, non-empty strings.

    Lists pass through, ``{}`` becomes ``[]`` and any other shape (NocoDB
    sometimes sends a bare count) becomes None.
    """
    if isinstance(val, str):
        return [s.strip() for s in val.split("\n") if s.strip()]
    if isinstance(val, list):
        return val
    if _is_empty_object(val):
        return []
    return None


def string_to_linked_records(val: Any) -> Any:
    """Comma-separated titles -> [{"Title": t, "name": t}, ...]; same fallbacks as string_to_list."""
    if isinstance(val, str):
        return [{"Title": s.strip(), "name": s.strip()} for s in val.split(",") if s.strip()]
    if isinstance(val, list):
        return val
    if _is_empty_object(val):
        return []
    return None


def empty_object_to_none(val: Any) -> Any:
    return None if _is_empty_object(val) else val


def extract_attachment_url(val: Any) -> Optional[str]:
    """First http(s) URL from a NocoDB attachment array; plain strings pass through."""
    if isinstance(val, list) and val and isinstance(val[0], dict) and isinstance(val[0].get("url"), str):
        url = val[0]["url"]
        if urlparse(url).scheme in ("http", "https"):
            return url
        return None
    if isinstance(val, str):
        return val
    return None


def parse_sentiment(val: Any) -> Optional[float]:
    """Numeric sentiment; a blank string counts as 0, unparseable text as None."""
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str) and not val.strip():
        return 0.0
    try:
        num = float(val)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(num) else num


class LinkedRecord(BaseModel):
    """A reference to a row in a linked NocoDB table."""
    model_config = ConfigDict(extra="allow")

    Id: Optional[Union[int, str]] = None
    Title: Optional[str] = None
    name: Optional[str] = None


LinkedList = Optional[list[Union[str, LinkedRecord]]]
StringList = Optional[list[str]]


class VideoListItem(BaseModel):
    """The subset of a video row shown in grids and used for filtering."""

    Id: int
    rowId: Optional[str] = None
    VideoID: Optional[str] = None
    Title: Optional[str] = None
    ThumbHigh: Optional[str] = None
    Channel: Optional[str] = None
    Description: Optional[str] = None
    VideoGenre: Optional[str] = None
    Persons: LinkedList = Field(default_factory=list)
    Companies: LinkedList = Field(default_factory=list)
    Indicators: LinkedList = Field(default_factory=list)
    Trends: LinkedList = Field(default_factory=list)
    InvestableAssets: StringList = Field(default_factory=list)
    TickerSymbol: Optional[str] = None
    Institutions: LinkedList = Field(default_factory=list)
    EventsFairs: StringList = Field(default_factory=list)
    DOIs: StringList = Field(default_factory=list)
    Hashtags: StringList = Field(default_factory=list)
    MainTopic: Optional[str] = None
    PrimarySources: StringList = Field(default_factory=list)
    Sentiment: Optional[float] = None
    SentimentReason: Optional[str] = None
    TechnicalTerms: StringList = Field(default_factory=list)
    Speaker: Optional[str] = None
    CreatedAt: Optional[datetime] = None

    @field_validator("ThumbHigh", mode="before")
    @classmethod
    def normalize_thumb(cls, val):
        return extract_attachment_url(val)

    @field_validator("Persons", "Companies", "Indicators", "Trends", "Institutions", mode="before")
    @classmethod
    def normalize_linked(cls, val):
        return string_to_linked_records(val)

    @field_validator("InvestableAssets", "Hashtags", "PrimarySources", "TechnicalTerms", mode="before")
    @classmethod
    def normalize_strings(cls, val):
        return string_to_list(val)

    @field_validator("EventsFairs", "DOIs", mode="before")
    @classmethod
    def normalize_objects(cls, val):
        return empty_object_to_none(val)

    @field_validator("Sentiment", mode="before")
    @classmethod
    def normalize_sentiment(cls, val):
        return parse_sentiment(val)


class Video(VideoListItem):
    """A full video row as shown on the detail page."""
    model_config = ConfigDict(extra="allow")

    URL: Optional[str] = None
    ImportanceRating: Optional[int] = Field(default=None, ge=1, le=5)
    PersonalComment: Optional[str] = None
    UpdatedAt: Optional[datetime] = None
    PublishedAt: Optional[datetime] = None
    Tags: Optional[list[LinkedRecord]] = Field(default_factory=list)

    @field_validator("Tags", mode="before")
    @classmethod
    def normalize_tags(cls, val):
        return empty_object_to_none(val)


class PageInfo(BaseModel):
    totalRows: int = 0
    page: int = 1
    pageSize: int = 25
    isFirstPage: Optional[bool] = None
    isLastPage: bool = True
    hasNextPage: Optional[bool] = None
    hasPreviousPage: Optional[bool] = None


class RecordsResponse(BaseModel):
    """Envelope of GET /api/v2/tables/{id}/records. Rows are validated separately."""
    rows: list[dict[str, Any]] = Field(alias="list")
    pageInfo: PageInfo


# Column projection requested for list views
VIDEO_LIST_FIELDS: tuple[str, ...] = (
    "Id", "rowId", "VideoID", "Title", "ThumbHigh", "Channel", "Description",
    "VideoGenre", "Persons", "Companies", "Indicators", "Trends",
    "InvestableAssets", "TickerSymbol", "Institutions", "EventsFairs", "DOIs",
    "Hashtags", "MainTopic", "PrimarySources", "Sentiment", "SentimentReason",
    "TechnicalTerms", "Speaker", "CreatedAt",
)
