"""Turn classified timeline matches into insertable clip records and a run report."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence

from clipworker.clips.dedup import partition_duplicates
from clipworker.config import MatchingConfig
from clipworker.matching.catalog import find_song
from clipworker.matching.fuzzy import score_song
from clipworker.models import (
    BatchReport,
    CatalogSong,
    ClipRecord,
    ExistingClipRef,
    MatchCandidate,
    MatchReason,
    MatchResult,
    MatchStatus,
    TimestampEntry,
    UploadOutcome,
)
from clipworker.timeline.dates import extract_video_id, format_seconds, normalize_sung_date

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "타임스탬프 파서로 자동 등록"

StorageCall = Callable[[Sequence[ClipRecord]], Sequence[UploadOutcome]]
Resolver = Callable[[int, MatchResult], Optional[str]]


class ClipValidationError(ValueError):
    """A matched entry that cannot become a clip record."""


@dataclass(frozen=True)
class ReviewItem:
    index: int
    entry: TimestampEntry
    candidates: tuple[MatchCandidate, ...]


@dataclass(frozen=True)
class PreparedBatch:
    total: int
    records: List[ClipRecord]
    duplicates: List[ClipRecord]
    invalid: List[tuple[int, str]] = field(default_factory=list)

    @property
    def errors(self) -> List[str]:
        return [message for _, message in self.invalid]


class CandidateCache:
    """Review candidates keyed by entry index."""

    def __init__(self) -> None:
        self._entries: dict[int, tuple[MatchCandidate, ...]] = {}

    def __contains__(self, index: object) -> bool:
        return index in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, index: int) -> tuple[MatchCandidate, ...] | None:
        return self._entries.get(index)

    def put(self, index: int, candidates: Iterable[MatchCandidate]) -> None:
        self._entries[index] = tuple(candidates)

    def invalidate(self, index: int) -> None:
        self._entries.pop(index, None)

    def keys(self) -> List[int]:
        return sorted(self._entries)


class BatchPackager:
    def __init__(
        self,
        results: Sequence[MatchResult],
        video_url: str,
        sung_date: str | date,
        description: str | None = None,
        config: MatchingConfig | None = None,
        *,
        catalog: Sequence[CatalogSong] | None = None,
    ) -> None:
        self.video_url = video_url.strip()
        self.video_id = extract_video_id(self.video_url)
        self.sung_date = sung_date
        self.description = (description or "").strip() or DEFAULT_DESCRIPTION
        self.config = config or MatchingConfig()
        self.catalog = tuple(catalog) if catalog is not None else None
        self.cache = CandidateCache()
        self._results: list[MatchResult] = list(results)
        for index, result in enumerate(self._results):
            if result.status is MatchStatus.NEEDS_REVIEW:
                self.cache.put(index, result.candidates)

    @property
    def results(self) -> List[MatchResult]:
        return list(self._results)

    def review_items(self) -> List[ReviewItem]:
        return [
            ReviewItem(index=index, entry=self._results[index].entry, candidates=self.cache.get(index) or ())
            for index in self.cache.keys()
        ]

    def confirm(self, index: int, song_id: str) -> MatchResult:
        result = self._results[index]
        candidates = self.cache.get(index) or result.candidates
        selected = next((item for item in candidates if item.song_id == song_id), None)
        if selected is None:
            selected = self._manual_candidate(result.entry, song_id)
        updated = replace(result, status=MatchStatus.RESOLVED, selected=selected)
        self._results[index] = updated
        self.cache.invalidate(index)
        logger.debug("Entry %s resolved to %s (%s)", index, song_id, selected.reason.value)
        return updated

    def reject(self, index: int) -> MatchResult:
        result = self._results[index]
        updated = replace(result, status=MatchStatus.UNMATCHED, selected=None)
        self._results[index] = updated
        self.cache.invalidate(index)
        return updated

    def retract(self, index: int) -> MatchResult:
        result = self._results[index]
        if not result.candidates:
            return self.reject(index)
        updated = replace(result, status=MatchStatus.NEEDS_REVIEW, selected=None)
        self._results[index] = updated
        self.cache.put(index, result.candidates)
        return updated

    def resolve(self, resolver: Resolver) -> int:
        resolved = 0
        for item in self.review_items():
            song_id = resolver(item.index, self._results[item.index])
            if song_id is None:
                self.reject(item.index)
                continue
            self.confirm(item.index, song_id)
            resolved += 1
        logger.info("수동 매칭 처리: 확정=%s 남은 검토=%s", resolved, len(self.cache))
        return resolved

    def build_record(self, index: int) -> ClipRecord:
        result = self._results[index]
        entry = result.entry
        song_id = result.selected.song_id if result.selected else ""
        if not song_id:
            raise ClipValidationError("곡 ID가 없습니다.")
        if entry.end_seconds is not None and entry.end_seconds <= entry.start_seconds:
            raise ClipValidationError(
                f"종료 시간({entry.end_seconds})이 시작 시간({entry.start_seconds})보다 늦어야 합니다."
            )
        if not self.video_id:
            raise ClipValidationError(f"영상 URL에서 비디오 ID를 추출할 수 없습니다. ({self.video_url})")
        try:
            sung_date = normalize_sung_date(self.sung_date)
        except ValueError as exc:
            raise ClipValidationError(f"올바른 날짜 형식이 아닙니다. ({self.sung_date})") from exc
        return ClipRecord(
            song_id=song_id,
            video_url=self.video_url,
            video_id=self.video_id,
            sung_date=sung_date.isoformat(),
            description=self.description,
            start_seconds=entry.start_seconds,
            end_seconds=entry.end_seconds,
        )

    def prepare(self, existing: Iterable[ExistingClipRef]) -> PreparedBatch:
        matched = [index for index, result in enumerate(self._results) if result.is_matched]
        valid: list[ClipRecord] = []
        invalid: list[tuple[int, str]] = []
        for index in matched:
            try:
                valid.append(self.build_record(index))
            except ClipValidationError as exc:
                invalid.append((index, f"{self._label(index)}: {exc}"))
        dedup = partition_duplicates(
            valid,
            existing,
            self.config.dedup_window_sec,
            within_batch=self.config.dedup_within_batch,
        )
        if invalid:
            logger.warning("검증 실패 항목 %s개가 배치에서 제외되었습니다.", len(invalid))
        return PreparedBatch(
            total=len(matched),
            records=dedup.unique,
            duplicates=dedup.duplicates,
            invalid=invalid,
        )

    def upload(self, prepared: PreparedBatch, storage: StorageCall) -> BatchReport:
        outcomes = _call_storage(prepared.records, storage)
        uploaded = sum(1 for outcome in outcomes if outcome.ok)
        storage_errors = [
            f"클립 {outcome.record.song_id}@{outcome.record.start_seconds}s: {outcome.error or '등록 실패'}"
            for outcome in outcomes
            if not outcome.ok
        ]
        report = BatchReport(
            total=prepared.total,
            uploaded=uploaded,
            duplicates=len(prepared.duplicates),
            failed=len(prepared.invalid) + (len(prepared.records) - uploaded),
            errors=prepared.errors + storage_errors,
        )
        logger.info(
            "배치 업로드 완료: 성공 %s개, 실패 %s개, 중복 %s개 (전체 %s개)",
            report.uploaded,
            report.failed,
            report.duplicates,
            report.total,
        )
        return report

    def run(self, existing: Iterable[ExistingClipRef], storage: StorageCall) -> BatchReport:
        return self.upload(self.prepare(existing), storage)

    def _manual_candidate(self, entry: TimestampEntry, song_id: str) -> MatchCandidate:
        song = find_song(self.catalog, song_id) if self.catalog is not None and song_id else None
        if song is not None:
            return replace(score_song(entry, song, self.config), reason=MatchReason.MANUAL)
        return MatchCandidate(
            song_id=song_id,
            title="",
            artist="",
            overall_similarity=0.0,
            title_similarity=0.0,
            artist_similarity=0.0,
            reason=MatchReason.MANUAL,
        )

    def _label(self, index: int) -> str:
        entry = self._results[index].entry
        text = entry.raw_text or f"{format_seconds(entry.start_seconds)} {entry.artist} - {entry.title}"
        return f"클립 {index + 1} ({text})"


def _call_storage(records: Sequence[ClipRecord], storage: StorageCall) -> List[UploadOutcome]:
    if not records:
        return []
    try:
        outcomes = list(storage(records))
    except Exception as exc:  # noqa: BLE001
        logger.exception("배치 업로드 오류")
        return [UploadOutcome(record=record, ok=False, error=f"배치 업로드 오류: {exc}") for record in records]
    if len(outcomes) > len(records):
        logger.warning("Storage returned %d outcomes for %d records.", len(outcomes), len(records))
        outcomes = outcomes[: len(records)]
    for record in records[len(outcomes) :]:
        outcomes.append(UploadOutcome(record=record, ok=False, error="저장 결과가 없습니다."))
    return outcomes
