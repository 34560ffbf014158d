"""Parse `time artist - title` lines out of free-text timestamp comments."""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Iterable, List

from clipworker.models import TimestampEntry

logger = logging.getLogger(__name__)

TIMESTAMP_PATTERN = re.compile(r"(?P<timestamp>\d{1,2}:\d{2}(?::\d{2})?)")
ARTIST_TITLE_PATTERN = re.compile(r"^(?P<artist>.+?)\s*[-–]\s*(?P<title>.+)$")


def parse_time_token(value: str) -> int | None:
    parts = value.split(":")
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        return None
    if len(numbers) == 2:
        minutes, seconds = numbers
        return minutes * 60 + seconds
    if len(numbers) == 3:
        hours, minutes, seconds = numbers
        return hours * 3600 + minutes * 60 + seconds
    return None


def parse_line(line: str) -> TimestampEntry | None:
    match = TIMESTAMP_PATTERN.search(line)
    if not match:
        return None
    start_seconds = parse_time_token(match.group("timestamp"))
    if start_seconds is None:
        return None
    remainder = line[match.end() :].strip()
    artist_title = ARTIST_TITLE_PATTERN.match(remainder)
    if not artist_title:
        return None
    artist = artist_title.group("artist").strip()
    title = artist_title.group("title").strip()
    if not artist or not title:
        return None
    return TimestampEntry(
        raw_time=match.group("timestamp"),
        start_seconds=start_seconds,
        end_seconds=None,
        artist=artist,
        title=title,
        raw_text=line.strip(),
    )


def chain_end_times(entries: List[TimestampEntry]) -> List[TimestampEntry]:
    chained: list[TimestampEntry] = []
    for index, entry in enumerate(entries):
        if index + 1 < len(entries):
            chained.append(replace(entry, end_seconds=entries[index + 1].start_seconds))
        else:
            chained.append(replace(entry, end_seconds=None))
    return chained


def extract_timestamps(text: str) -> List[TimestampEntry]:
    entries: list[TimestampEntry] = []
    dropped = 0
    for line in text.splitlines():
        if not line.strip():
            continue
        entry = parse_line(line)
        if entry is None:
            dropped += 1
            logger.debug("Dropped non-timeline line: %r", line[:80])
            continue
        entries.append(entry)
    logger.info("Parsed %d timeline entries (%d lines dropped).", len(entries), dropped)
    return chain_end_times(entries)


def select_timeline_comment(raw_comments: Iterable[str]) -> str | None:
    best_text: str | None = None
    best_count = 0
    total = 0
    for text in raw_comments:
        total += 1
        if not text:
            continue
        count = sum(1 for line in text.splitlines() if parse_line(line) is not None)
        if count > best_count:
            best_text, best_count = text, count
    logger.info(
        "Selected timeline comment with %d entries out of %d comments.", best_count, total
    )
    return best_text
