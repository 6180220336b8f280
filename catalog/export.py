"""Markdown rendering of a single video record for download."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any
from urllib.parse import quote

from catalog.filters import get_field, js_string

# (column, heading) for free-text sections, in output order
TEXT_SECTIONS = (
    ("TLDR", "TL;DR"),
    ("MainSummary", "Main Summary"),
    ("KeyExamples", "Key Examples"),
    ("KeyNumbersData", "Key Numbers & Data"),
    ("ActionableAdvice", "Actionable Advice"),
    ("DetailedNarrativeFlow", "Detailed Narrative Flow"),
    ("MemorableQuotes", "Memorable Quotes"),
    ("MemorableTakeaways", "Memorable Takeaways"),
    ("BookMediaRecommendations", "Book/Media Recommendations"),
    ("Description", "Description"),
    ("Transcript", "Transcript"),
)

LIST_SECTIONS = (
    ("RelatedURLs", "Related URLs"),
    ("Persons", "Persons"),
    ("Companies", "Companies"),
    ("Indicators", "Indicators"),
    ("Trends", "Trends"),
    ("InvestableAssets", "Investable Assets"),
    ("TickerSymbol", "Ticker Symbols"),
    ("Institutions", "Institutions"),
    ("EventsFairs", "Events/Fairs"),
    ("DOIs", "DOIs"),
    ("Hashtags", "Hashtags"),
    ("PrimarySources", "Primary Sources"),
    ("TechnicalTerms", "Technical Terms"),
)

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')


def _format_date(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    return str(value)


def _list_item(item: Any) -> str | None:
    if isinstance(item, str):
        return f"- [{item}]({item})" if item.startswith("http") else f"- {item}"
    title = item.get("Title") if isinstance(item, dict) else getattr(item, "Title", None)
    return f"- {title}" if isinstance(title, str) else None


def video_to_markdown(video: Any) -> str:
    """Render a video record (model or dict) as a markdown document.

    Empty columns are skipped; the metadata block is always present.
    """
    title = get_field(video, "Title")
    lines = [f"# {title or 'Untitled Video'}", ""]

    url = get_field(video, "URL")
    if url:
        lines.append(f"**URL:** [{url}]({url})")
    if get_field(video, "Channel"):
        lines.append(f"**Channel:** {get_field(video, 'Channel')}")
    if get_field(video, "PublishedAt"):
        lines.append(f"**Published:** {_format_date(get_field(video, 'PublishedAt'))}")
    if get_field(video, "VideoGenre"):
        lines.append(f"**Genre:** {get_field(video, 'VideoGenre')}")
    lines.append("")

    rating = get_field(video, "ImportanceRating")
    if isinstance(rating, int) and 1 <= rating <= 5:
        lines += ["## Importance Rating", f"{'★' * rating}{'☆' * (5 - rating)} ({rating}/5)", ""]

    comment = get_field(video, "PersonalComment")
    if comment:
        lines += ["## Personal Note", comment, ""]

    for column, heading in TEXT_SECTIONS:
        value = get_field(video, column)
        if isinstance(value, str) and value.strip():
            lines += [f"## {heading}", value, ""]

    for column, heading in LIST_SECTIONS:
        value = get_field(video, column)
        if isinstance(value, (list, tuple)) and value:
            lines.append(f"## {heading}")
            lines += [entry for entry in map(_list_item, value) if entry]
            lines.append("")

    # 0 counts as no sentiment
    sentiment = get_field(video, "Sentiment")
    if sentiment:
        lines += ["## Sentiment", f"**Sentiment:** {js_string(sentiment)}"]
        reason = get_field(video, "SentimentReason")
        if reason:
            lines.append(f"**Reason:** {reason}")
        lines.append("")

    for column, heading in (("Speaker", "Speaker"), ("MainTopic", "Main Topic")):
        value = get_field(video, column)
        if value:
            lines += [f"## {heading}", str(value), ""]

    created = get_field(video, "CreatedAt")
    updated = get_field(video, "UpdatedAt")
    lines += [
        "## Metadata",
        f"**Video ID:** {get_field(video, 'VideoID') or 'N/A'}",
        f"**Created:** {_format_date(created) if created else 'N/A'}",
        f"**Last Updated:** {_format_date(updated) if updated else 'N/A'}",
    ]
    return "\n".join(lines)


def export_filename(video: Any) -> str:
    """``Title.md`` with characters unsafe in file names replaced."""
    title = _UNSAFE_FILENAME_RE.sub("_", get_field(video, "Title") or "").strip() or "video"
    return f"{title}.md"


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and the UTF-8 name (RFC 6266)."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
