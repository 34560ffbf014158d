"""Title/artist fuzzy matching of timeline entries against the song catalog."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Iterable, List, Sequence

from rapidfuzz.distance import Levenshtein

from clipworker.config import MatchingConfig
from clipworker.matching.normalize import normalize
from clipworker.models import CatalogSong, MatchCandidate, MatchReason, TimestampEntry

logger = logging.getLogger(__name__)

# reason thresholds, explanation only
EXACT_TITLE = 0.9
EXACT_ARTIST = 0.8
SIMILAR_TITLE = 0.7


@dataclass(frozen=True)
class _TagSignals:
    title_exact: bool = False
    artist_exact: bool = False
    title_partial: bool = False
    artist_partial: bool = False


def similarity(left: str, right: str) -> float:
    if left == right:
        return 1.0
    if not left or not right:
        return 0.0
    max_len = max(len(left), len(right))
    distance = Levenshtein.distance(left, right)
    return (max_len - distance) / max_len


def best_similarity(term: str, fields: Iterable[str]) -> float:
    best = 0.0
    for value in fields:
        if not value:
            continue
        if value == term:
            return 1.0
        best = max(best, similarity(term, value))
    return best


def score_song(
    entry: TimestampEntry,
    song: CatalogSong,
    config: MatchingConfig | None = None,
) -> MatchCandidate:
    config = config or MatchingConfig()
    title_term = normalize(entry.title)
    artist_term = normalize(entry.artist)
    tags = _tag_signals(title_term, artist_term, song.search_tags)

    if tags.title_exact:
        title_score = 1.0
    else:
        title_score = best_similarity(
            title_term, (normalize(value) for value in (song.title, *song.title_aliases))
        )
    if tags.artist_exact:
        artist_score = 1.0
    else:
        artist_score = best_similarity(
            artist_term, (normalize(value) for value in (song.artist, *song.artist_aliases))
        )

    if tags.title_partial:
        title_score = max(title_score, config.tag_boost)
    if tags.artist_partial:
        artist_score = max(artist_score, config.tag_boost)

    overall = config.title_weight * title_score + config.artist_weight * artist_score
    return MatchCandidate(
        song_id=song.song_id,
        title=song.title,
        artist=song.artist,
        overall_similarity=overall,
        title_similarity=title_score,
        artist_similarity=artist_score,
        reason=_match_reason(title_score, artist_score, tags, config),
    )


def is_candidate(candidate: MatchCandidate, config: MatchingConfig | None = None) -> bool:
    config = config or MatchingConfig()
    title = candidate.title_similarity
    if title < config.title_floor:
        return False
    return (
        candidate.overall_similarity >= config.overall_floor
        or title >= config.strong_title
        or (candidate.artist_similarity >= config.strong_artist and title >= config.loose_title)
    )


def rank_candidates(
    candidates: Iterable[MatchCandidate],
    config: MatchingConfig | None = None,
) -> List[MatchCandidate]:
    config = config or MatchingConfig()

    def compare(left: MatchCandidate, right: MatchCandidate) -> int:
        gap = left.title_similarity - right.title_similarity
        if abs(gap) > config.title_sort_gap:
            return -1 if gap > 0 else 1
        diff = left.overall_similarity - right.overall_similarity
        if diff > 0:
            return -1
        if diff < 0:
            return 1
        return 0

    return sorted(candidates, key=cmp_to_key(compare))


def find_candidates(
    entry: TimestampEntry,
    catalog: Sequence[CatalogSong],
    config: MatchingConfig | None = None,
) -> List[MatchCandidate]:
    config = config or MatchingConfig()
    scored = (score_song(entry, song, config) for song in catalog)
    ranked = rank_candidates((item for item in scored if is_candidate(item, config)), config)
    top = ranked[: config.max_candidates]
    if top:
        logger.debug(
            "Matched %r - %r: %d candidates, best=%s (%.3f)",
            entry.artist,
            entry.title,
            len(ranked),
            top[0].song_id,
            top[0].overall_similarity,
        )
    else:
        logger.debug("No catalog candidates for %r - %r", entry.artist, entry.title)
    return top


def match_entries(
    entries: Sequence[TimestampEntry],
    catalog: Sequence[CatalogSong],
    config: MatchingConfig | None = None,
    *,
    max_workers: int = 1,
) -> List[List[MatchCandidate]]:
    config = config or MatchingConfig()
    if max_workers <= 1 or len(entries) <= 1:
        return [find_candidates(entry, catalog, config) for entry in entries]
    # executor.map yields in submission order, so results line up with entries
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(lambda entry: find_candidates(entry, catalog, config), entries))


def _tag_signals(title_term: str, artist_term: str, search_tags: Iterable[str]) -> _TagSignals:
    title_exact = artist_exact = title_partial = artist_partial = False
    for tag in search_tags:
        normalized_tag = normalize(tag)
        if not normalized_tag:
            continue
        if title_term:
            if normalized_tag == title_term:
                title_exact = title_partial = True
            elif normalized_tag in title_term or title_term in normalized_tag:
                title_partial = True
        if artist_term:
            if normalized_tag == artist_term:
                artist_exact = artist_partial = True
            elif normalized_tag in artist_term or artist_term in normalized_tag:
                artist_partial = True
    return _TagSignals(
        title_exact=title_exact,
        artist_exact=artist_exact,
        title_partial=title_partial,
        artist_partial=artist_partial,
    )


def _match_reason(
    title_score: float,
    artist_score: float,
    tags: _TagSignals,
    config: MatchingConfig,
) -> MatchReason:
    if tags.title_exact and tags.artist_exact:
        return MatchReason.TAG_TITLE_ARTIST_EXACT
    if tags.title_exact:
        return MatchReason.TAG_TITLE_EXACT
    if tags.artist_exact:
        return MatchReason.TAG_ARTIST_EXACT
    if title_score >= EXACT_TITLE and artist_score >= EXACT_ARTIST:
        return MatchReason.TITLE_ARTIST_EXACT
    if title_score >= EXACT_TITLE:
        return MatchReason.TITLE_EXACT
    if title_score >= SIMILAR_TITLE and artist_score >= EXACT_ARTIST:
        return MatchReason.TITLE_SIMILAR_ARTIST
    if title_score >= SIMILAR_TITLE:
        return MatchReason.TITLE_SIMILAR
    if artist_score >= config.strong_artist and title_score >= config.loose_title:
        return MatchReason.ARTIST_EXACT
    if tags.title_partial or tags.artist_partial:
        return MatchReason.TAG_PARTIAL
    return MatchReason.PARTIAL
