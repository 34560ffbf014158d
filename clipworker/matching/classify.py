"""Auto-match / review / no-match decision for ranked candidates."""

from __future__ import annotations

import logging
from typing import List, Sequence

from clipworker.config import MatchingConfig
from clipworker.models import MatchCandidate, MatchResult, MatchStatus, TimestampEntry

logger = logging.getLogger(__name__)


def classify(
    entry: TimestampEntry,
    candidates: Sequence[MatchCandidate],
    config: MatchingConfig | None = None,
) -> MatchResult:
    config = config or MatchingConfig()
    ranked = tuple(candidates)
    if not ranked:
        return MatchResult(entry=entry, status=MatchStatus.UNMATCHED)
    best = ranked[0]
    if best.overall_similarity >= config.auto_match_threshold:
        return MatchResult(
            entry=entry,
            status=MatchStatus.AUTO_MATCHED,
            candidates=ranked,
            selected=best,
        )
    return MatchResult(entry=entry, status=MatchStatus.NEEDS_REVIEW, candidates=ranked)


def classify_all(
    entries: Sequence[TimestampEntry],
    candidate_lists: Sequence[Sequence[MatchCandidate]],
    config: MatchingConfig | None = None,
) -> List[MatchResult]:
    if len(entries) != len(candidate_lists):
        raise ValueError(
            f"entry/candidate length mismatch: {len(entries)} != {len(candidate_lists)}"
        )
    results = [classify(entry, candidates, config) for entry, candidates in zip(entries, candidate_lists)]
    summary = {status: 0 for status in MatchStatus}
    for result in results:
        summary[result.status] += 1
    logger.info(
        "분류 완료: 자동 매칭=%s 검토 필요=%s 매칭 없음=%s",
        summary[MatchStatus.AUTO_MATCHED],
        summary[MatchStatus.NEEDS_REVIEW],
        summary[MatchStatus.UNMATCHED],
    )
    return results
