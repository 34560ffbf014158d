"""Sequential, rate-limited external lookups that stop on quota exhaustion."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from clipworker.config import MatchingConfig
from clipworker.models import CatalogSong
from clipworker.search.youtube import ExternalServiceError, QuotaExhaustedError, SearchResult

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class RunStatus(str, Enum):
    COMPLETED = "completed"
    QUOTA_EXHAUSTED = "quota_exhausted"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class LookupOutcome(Generic[T, R]):
    item: T
    result: Optional[R] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class LookupRun(Generic[T, R]):
    status: RunStatus
    total: int
    outcomes: List[LookupOutcome[T, R]] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    @property
    def found(self) -> List[LookupOutcome[T, R]]:
        return [outcome for outcome in self.outcomes if outcome.result is not None]

    @property
    def failed(self) -> List[LookupOutcome[T, R]]:
        return [outcome for outcome in self.outcomes if outcome.error is not None]

    @property
    def is_partial(self) -> bool:
        return self.status is not RunStatus.COMPLETED


def run_lookups(
    items: Sequence[T],
    lookup: Callable[[T], Optional[R]],
    *,
    delay_sec: float = 0.2,
    should_stop: Callable[[], bool] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> LookupRun[T, R]:
    outcomes: list[LookupOutcome[T, R]] = []
    status = RunStatus.COMPLETED
    total = len(items)
    for index, item in enumerate(items):
        if should_stop is not None and should_stop():
            status = RunStatus.CANCELLED
            logger.info("외부 검색 중단 요청: %s/%s 처리됨", index, total)
            break
        if index > 0 and delay_sec > 0:
            sleep(delay_sec)
        try:
            result = lookup(item)
        except QuotaExhaustedError as exc:
            status = RunStatus.QUOTA_EXHAUSTED
            logger.warning("API 할당량 초과로 검색 중단 (%s/%s 처리됨): %s", index, total, exc)
            break
        except ExternalServiceError as exc:
            logger.warning("[%s/%s] 외부 검색 실패: %s", index + 1, total, exc)
            outcomes.append(LookupOutcome(item=item, error=str(exc)))
            continue
        outcomes.append(LookupOutcome(item=item, result=result))
    return LookupRun(status=status, total=total, outcomes=outcomes)


def songs_missing_links(catalog: Sequence[CatalogSong]) -> List[CatalogSong]:
    return [song for song in catalog if not song.mr_links]


def autofill_mr_links(
    catalog: Sequence[CatalogSong],
    search: Callable[[str, str], Optional[SearchResult]],
    *,
    config: MatchingConfig | None = None,
    on_found: Callable[[CatalogSong, SearchResult], Optional[bool]] | None = None,
    should_stop: Callable[[], bool] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> LookupRun[CatalogSong, SearchResult]:
    config = config or MatchingConfig()
    targets = songs_missing_links(catalog)

    def lookup(song: CatalogSong) -> Optional[SearchResult]:
        title = song.title_aliases[0] if song.title_aliases else song.title
        artist = song.artist_aliases[0] if song.artist_aliases else song.artist
        result = search(title, artist)
        if result is None or on_found is None:
            return result
        try:
            saved = on_found(song, result)
        except Exception as exc:  # noqa: BLE001
            raise ExternalServiceError(f"MR 링크 저장 실패: {exc}") from exc
        if saved is False:
            raise ExternalServiceError(f"MR 링크 저장 실패: song_id={song.song_id}")
        return result

    run = run_lookups(
        targets,
        lookup,
        delay_sec=config.search_delay_sec,
        should_stop=should_stop,
        sleep=sleep,
    )
    logger.info(
        "MR 링크 일괄 추가 %s! 성공: %s곡, 결과 없음: %s곡, 실패: %s곡 (대상 %s곡)",
        "완료" if run.status is RunStatus.COMPLETED else "중단",
        len(run.found),
        run.processed - len(run.found) - len(run.failed),
        len(run.failed),
        run.total,
    )
    return run
