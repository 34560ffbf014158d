"""Shared dataclasses for the timeline-to-clip stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class TimestampEntry:
    raw_time: str
    start_seconds: int
    end_seconds: int | None
    artist: str
    title: str
    raw_text: str = ""


@dataclass(frozen=True)
class CatalogSong:
    song_id: str
    title: str
    artist: str
    title_aliases: tuple[str, ...] = ()
    artist_aliases: tuple[str, ...] = ()
    search_tags: tuple[str, ...] = ()
    mr_links: tuple[str, ...] = ()


class MatchReason(str, Enum):
    TAG_TITLE_ARTIST_EXACT = "tag_title_artist_exact"
    TAG_TITLE_EXACT = "tag_title_exact"
    TAG_ARTIST_EXACT = "tag_artist_exact"
    TITLE_ARTIST_EXACT = "title_artist_exact"
    TITLE_EXACT = "title_exact"
    TITLE_SIMILAR_ARTIST = "title_similar_artist"
    TITLE_SIMILAR = "title_similar"
    ARTIST_EXACT = "artist_exact"
    TAG_PARTIAL = "tag_partial"
    PARTIAL = "partial"
    MANUAL = "manual"

    @property
    def label(self) -> str:
        return _REASON_LABELS[self]


_REASON_LABELS = {
    MatchReason.TAG_TITLE_ARTIST_EXACT: "태그 제목과 아티스트 정확 매칭",
    MatchReason.TAG_TITLE_EXACT: "태그 제목 정확 매칭",
    MatchReason.TAG_ARTIST_EXACT: "태그 아티스트 정확 매칭",
    MatchReason.TITLE_ARTIST_EXACT: "제목과 아티스트 정확 매칭",
    MatchReason.TITLE_EXACT: "제목 정확 매칭",
    MatchReason.TITLE_SIMILAR_ARTIST: "제목 유사, 아티스트 매칭",
    MatchReason.TITLE_SIMILAR: "제목 유사 매칭",
    MatchReason.ARTIST_EXACT: "아티스트 정확 매칭",
    MatchReason.TAG_PARTIAL: "태그 부분 매칭",
    MatchReason.PARTIAL: "부분 매칭",
    MatchReason.MANUAL: "수동 선택",
}


@dataclass(frozen=True)
class MatchCandidate:
    song_id: str
    title: str
    artist: str
    overall_similarity: float
    title_similarity: float
    artist_similarity: float
    reason: MatchReason


class MatchStatus(str, Enum):
    UNMATCHED = "unmatched"
    AUTO_MATCHED = "auto_matched"
    NEEDS_REVIEW = "needs_review"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class MatchResult:
    entry: TimestampEntry
    status: MatchStatus
    candidates: tuple[MatchCandidate, ...] = ()
    selected: MatchCandidate | None = None

    @property
    def is_matched(self) -> bool:
        return self.status in (MatchStatus.AUTO_MATCHED, MatchStatus.RESOLVED)


@dataclass(frozen=True)
class ExistingClipRef:
    video_id: str
    start_seconds: int


@dataclass(frozen=True)
class ClipRecord:
    song_id: str
    video_url: str
    video_id: str
    sung_date: str
    description: str
    start_seconds: int
    end_seconds: int | None = None


@dataclass(frozen=True)
class UploadOutcome:
    record: ClipRecord
    ok: bool
    error: str | None = None


@dataclass(frozen=True)
class BatchReport:
    total: int
    uploaded: int
    duplicates: int
    failed: int
    errors: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.total != self.uploaded + self.duplicates + self.failed:
            raise ValueError(
                f"batch report counts do not add up: total={self.total} "
                f"uploaded={self.uploaded} duplicates={self.duplicates} failed={self.failed}"
            )
