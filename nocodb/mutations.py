"""Normalization of user edits before they are written back to NocoDB."""

import math
import re
from typing import Any, Optional

# parseFloat-style leading number: "4", " 3.0", "2abc"
_LEADING_NUMBER_RE = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')

# Columns the client never lets an update overwrite
READ_ONLY_FIELDS = frozenset({"Id", "CreatedAt", "UpdatedAt"})


def normalize_importance_rating(value: Any) -> Optional[int]:
    """A whole number from 1 to 5, or None to clear the rating."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        match = _LEADING_NUMBER_RE.match(value)
        if not match:
            return None
        value = float(match.group(1))
    if not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value != int(value) or not 1 <= value <= 5:
        return None
    return int(value)


def normalize_personal_comment(value: Any) -> Optional[str]:
    """Trimmed comment text; blank or non-string values clear the comment."""
    if not isinstance(value, str):
        return None
    return value.strip() or None


def build_update_payload(data: dict) -> dict:
    """Copy of ``data`` with rating/comment normalized and read-only columns dropped.

    A key that is absent stays absent, so only the submitted columns change.
    """
    payload = {k: v for k, v in data.items() if k not in READ_ONLY_FIELDS}
    if "ImportanceRating" in payload:
        payload["ImportanceRating"] = normalize_importance_rating(payload["ImportanceRating"])
    if "PersonalComment" in payload:
        payload["PersonalComment"] = normalize_personal_comment(payload["PersonalComment"])
    return payload
