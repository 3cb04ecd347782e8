"""Parsing helpers shared by RFP scrapers."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union

from dateutil import parser as date_parser
from dateutil import tz

_WHITESPACE_RE = re.compile(r"\s+")
_NIGP_CODE_RE = re.compile(r"\b(\d{3,11})\b")
_MAILTO_RE = re.compile(r"^mailto:", re.IGNORECASE)


def clean_text(value: Optional[str]) -> Optional[str]:
    """Collapse runs of whitespace and strip; empty results become None."""
    if value is None:
        return None
    text = _WHITESPACE_RE.sub(" ", value).strip()
    return text or None


def ensure_list(value: Optional[Union[str, Sequence[str]]]) -> List[str]:
    """Ensure input is a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def normalize_email(value: Optional[str]) -> Optional[str]:
    """Strip a ``mailto:`` prefix, query string and surrounding whitespace."""
    if not value:
        return None
    email = _MAILTO_RE.sub("", value.strip())
    email = email.split("?", 1)[0].strip()
    return email or None


def extract_nigp_codes(value: Optional[Union[str, Sequence[str]]]) -> List[str]:
    """Pull numeric NIGP commodity codes out of free text, keeping order."""
    codes: List[str] = []
    for chunk in ensure_list(value):
        for match in _NIGP_CODE_RE.findall(chunk):
            if match not in codes:
                codes.append(match)
    return codes


def normalize_datetime(
    value: Optional[Union[str, datetime]],
    *,
    default_timezone: Union[str, tz.tzfile, None] = "UTC",
) -> Optional[str]:
    """Normalize a date or timestamp to ISO8601 UTC with a Z suffix.

    Unparseable input yields None rather than raising.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = date_parser.parse(value)
        except (ValueError, OverflowError):
            return None

    if dt.tzinfo is None:
        tzinfo = tz.gettz(default_timezone) if isinstance(default_timezone, str) else default_timezone
        if tzinfo is None:
            tzinfo = timezone.utc
        dt = dt.replace(tzinfo=tzinfo)

    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    iso = dt_utc.isoformat()
    if iso.endswith("+00:00"):
        iso = iso[:-6] + "Z"
    return iso
