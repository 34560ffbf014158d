"""Start-time window duplicate detection against already stored clips."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, List

from clipworker.models import ClipRecord, ExistingClipRef

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SEC = 30


def is_duplicate(
    candidate: ClipRecord,
    existing: Iterable[ExistingClipRef],
    window_sec: int = DEFAULT_WINDOW_SEC,
) -> bool:
    return any(
        ref.video_id == candidate.video_id
        and abs(ref.start_seconds - candidate.start_seconds) <= window_sec
        for ref in existing
    )


class DuplicateIndex:
    """Existing start times grouped by video id.

    Must be built from the complete clip set of a video; a partial snapshot
    lets duplicates through.
    """

    def __init__(self, existing: Iterable[ExistingClipRef], window_sec: int = DEFAULT_WINDOW_SEC):
        self.window_sec = window_sec
        self._starts: dict[str, list[int]] = defaultdict(list)
        for ref in existing:
            self._starts[ref.video_id].append(ref.start_seconds)

    def __len__(self) -> int:
        return sum(len(starts) for starts in self._starts.values())

    def contains(self, record: ClipRecord) -> bool:
        return any(
            abs(start - record.start_seconds) <= self.window_sec
            for start in self._starts.get(record.video_id, ())
        )

    def add(self, record: ClipRecord) -> None:
        self._starts[record.video_id].append(record.start_seconds)


@dataclass(frozen=True)
class DedupOutcome:
    unique: List[ClipRecord]
    duplicates: List[ClipRecord]


def partition_duplicates(
    records: Iterable[ClipRecord],
    existing: Iterable[ExistingClipRef],
    window_sec: int = DEFAULT_WINDOW_SEC,
    *,
    within_batch: bool = False,
) -> DedupOutcome:
    index = DuplicateIndex(existing, window_sec)
    unique: list[ClipRecord] = []
    duplicates: list[ClipRecord] = []
    for record in records:
        if index.contains(record):
            duplicates.append(record)
            continue
        unique.append(record)
        if within_batch:
            index.add(record)
    logger.info(
        "중복검사 완료: 기존 클립=%s 중복=%s 업로드 대상=%s",
        len(index) - (len(unique) if within_batch else 0),
        len(duplicates),
        len(unique),
    )
    return DedupOutcome(unique=unique, duplicates=duplicates)
