"""Broadcast date, video URL and clock-format helpers."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Callable
from urllib.parse import parse_qs, urlparse

VIDEO_ID_PATTERN = re.compile(r"^[\w-]{6,}$")

_TITLE_DATE_PATTERNS: list[tuple[re.Pattern[str], Callable[[re.Match[str]], date]]] = [
    (
        re.compile(r"(\d{4})년\s*(\d{1,2})월\s*(\d{1,2})일"),
        lambda match: date(int(match.group(1)), int(match.group(2)), int(match.group(3))),
    ),
    (
        re.compile(r"(\d{4})[.\-/](\d{1,2})[.\-/](\d{1,2})"),
        lambda match: date(int(match.group(1)), int(match.group(2)), int(match.group(3))),
    ),
    (
        re.compile(r"(\d{1,2})[.\-/](\d{1,2})[.\-/](\d{4})"),
        lambda match: date(int(match.group(3)), int(match.group(1)), int(match.group(2))),
    ),
    (
        re.compile(r"(\d{2})\.(\d{1,2})\.(\d{1,2})"),
        lambda match: date(_expand_year(int(match.group(1)), pivot=50), int(match.group(2)), int(match.group(3))),
    ),
]


def extract_video_id(video_url: str) -> str | None:
    url = video_url.strip()
    if not url:
        return None
    if VIDEO_ID_PATTERN.match(url) and "/" not in url:
        return url
    parsed = urlparse(url if "://" in url else f"https://{url}")
    host = (parsed.hostname or "").lower()
    if host.endswith("youtu.be"):
        candidate = parsed.path.strip("/").split("/")[0]
        return candidate or None
    if not host.endswith("youtube.com"):
        return None
    if parsed.path == "/watch":
        values = parse_qs(parsed.query).get("v")
        return values[0] if values and values[0] else None
    segments = [segment for segment in parsed.path.split("/") if segment]
    if len(segments) >= 2 and segments[0] in {"live", "shorts", "embed"}:
        return segments[1]
    return None


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def format_seconds(seconds: int) -> str:
    if seconds < 0:
        return "0:00"
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def date_from_title(title: str) -> date | None:
    for pattern, build in _TITLE_DATE_PATTERNS:
        match = pattern.search(title)
        if not match:
            continue
        try:
            return build(match)
        except ValueError:
            continue
    return None


def normalize_sung_date(value: str | date, *, today: date | None = None) -> date:
    """Parse a broadcast date string into a date no later than today.

    Accepts ISO dates and datetimes, ``YYYY.MM.DD`` and ``YY.MM.DD`` (two-digit
    years up to 30 are 20xx, the rest 19xx) and ``YYYY/MM/DD``. Raises
    ``ValueError`` for anything else.
    """
    today = today or date.today()
    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    else:
        parsed = _parse_date_string(str(value).strip())
    return min(parsed, today)


def _parse_date_string(text: str) -> date:
    if not text:
        raise ValueError("empty date")
    if "T" in text or text.endswith("Z"):
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    for separator in (".", "-", "/"):
        if separator not in text:
            continue
        parts = [part for part in text.split(separator) if part]
        if len(parts) != 3:
            raise ValueError(f"invalid date: {text}")
        year, month, day = (int(part) for part in parts)
        if year < 100:
            year = _expand_year(year, pivot=31)
        return date(year, month, day)
    raise ValueError(f"invalid date: {text}")


def _expand_year(year: int, *, pivot: int) -> int:
    return 2000 + year if year < pivot else 1900 + year
