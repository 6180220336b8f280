"""Pagination normalizer: clamps raw page/limit/offset into a bounded triple."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

PAGINATION_LIMITS = MappingProxyType({
    "MIN_LIMIT": 1,
    "MAX_LIMIT": 100,
    "MIN_OFFSET": 0,
    "MAX_OFFSET": 5000,
    "DEFAULT_LIMIT": 35,
    "DEFAULT_PAGE": 1,
    "DEFAULT_OFFSET": 0,
})

_LEADING_INT_RE = re.compile(r'^\s*([+-]?\d+)')


@dataclass(frozen=True)
class PaginationParams:
    page: Optional[float] = None
    limit: Optional[float] = None
    offset: Optional[float] = None


@dataclass(frozen=True)
class NormalizedPagination:
    page: int
    limit: int
    offset: int


def clamp(value, lo, hi):
    return min(max(value, lo), hi)


def _supplied(value) -> Optional[int]:
    """Return value as an int, or None when absent or not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_int_param(raw: Optional[str]) -> Optional[int]:
    """Parse a query-string value the way a browser's parseInt does.

    Leading whitespace and trailing garbage are tolerated ("12abc" -> 12);
    anything without a leading integer yields None.
    """
    if not raw:
        return None
    m = _LEADING_INT_RE.match(raw)
    if not m:
        return None
    return int(m.group(1))


def normalize_pagination(params: Optional[PaginationParams] = None) -> NormalizedPagination:
    """Clamp and default caller-supplied paging values. Never raises.

    The limit defaults to DEFAULT_LIMIT both when only a page is given and
    when nothing is given, so ``normalize_pagination()`` is always
    ``(page=1, limit=35, offset=0)``.
    """
    params = params or PaginationParams()
    page = _supplied(params.page)
    limit = _supplied(params.limit)
    offset = _supplied(params.offset)

    if limit is not None:
        raw_limit = limit
    elif page is not None:
        raw_limit = PAGINATION_LIMITS["DEFAULT_LIMIT"]
    else:
        raw_limit = None
    raw_page = page if page is not None else PAGINATION_LIMITS["DEFAULT_PAGE"]
    raw_offset = offset if offset is not None else PAGINATION_LIMITS["DEFAULT_OFFSET"]

    if raw_limit is not None:
        final_limit = clamp(raw_limit, PAGINATION_LIMITS["MIN_LIMIT"], PAGINATION_LIMITS["MAX_LIMIT"])
    else:
        final_limit = PAGINATION_LIMITS["DEFAULT_LIMIT"]

    return NormalizedPagination(
        page=max(raw_page, 1),
        limit=final_limit,
        offset=clamp(raw_offset, PAGINATION_LIMITS["MIN_OFFSET"], PAGINATION_LIMITS["MAX_OFFSET"]),
    )
