"""Tests for catalog scoring, candidate filtering and ranking."""

import pytest
from conftest import make_candidate, make_entry

from clipworker.config import MatchingConfig
from clipworker.matching.fuzzy import (
    best_similarity,
    find_candidates,
    is_candidate,
    match_entries,
    rank_candidates,
    score_song,
    similarity,
)
from clipworker.models import CatalogSong, MatchReason


class TestSimilarity:

    def test_identical(self):
        assert similarity("abc", "abc") == 1.0

    def test_one_edit(self):
        assert similarity("abc", "abd") == pytest.approx(2 / 3)

    def test_empty_side(self):
        assert similarity("", "abc") == 0.0
        assert similarity("", "") == 1.0

    def test_best_over_fields_skips_empty(self):
        assert best_similarity("abc", ["", "xyz", "abc"]) == 1.0
        assert best_similarity("abc", ["", ""]) == 0.0


class TestScoreSong:

    def test_exact_match_scores_one(self, catalog):
        candidate = score_song(make_entry(597), catalog[0])
        assert candidate.overall_similarity == 1.0
        assert candidate.reason is MatchReason.TITLE_ARTIST_EXACT

    def test_alias_match(self, catalog):
        entry = make_entry(0, artist="톤즈 앤 아이", title="댄스 몽키")
        candidate = score_song(entry, catalog[2])
        assert candidate.title_similarity == 1.0
        assert candidate.artist_similarity == 1.0

    def test_normalized_comparison(self, catalog):
        entry = make_entry(0, artist="tones   and -i", title="DANCE-MONKEY")
        assert score_song(entry, catalog[2]).overall_similarity == 1.0

    def test_weighted_overall(self):
        song = CatalogSong(song_id="x", title="abcd", artist="zzzz")
        candidate = score_song(make_entry(0, artist="yyyy", title="abcd"), song)
        assert candidate.title_similarity == 1.0
        assert candidate.artist_similarity == 0.0
        assert candidate.overall_similarity == pytest.approx(0.7)
        assert candidate.reason is MatchReason.TITLE_EXACT

    def test_tag_exact_promotes_title(self, catalog):
        entry = make_entry(0, artist="IU", title="Through the Night")
        candidate = score_song(entry, catalog[3])
        assert candidate.title_similarity == 1.0
        assert candidate.reason is MatchReason.TAG_TITLE_EXACT

    def test_tag_partial_boosts_to_floor(self):
        song = CatalogSong(song_id="x", title="완전히다른제목", artist="가수", search_tags=("봄노래",))
        candidate = score_song(make_entry(0, artist="가수", title="봄"), song)
        assert candidate.title_similarity == pytest.approx(0.8)

    def test_empty_tag_never_matches(self):
        song = CatalogSong(song_id="x", title="완전히다른제목", artist="가수", search_tags=("", "  "))
        candidate = score_song(make_entry(0, artist="가수", title="봄"), song)
        assert candidate.title_similarity < 0.8
        assert candidate.reason is not MatchReason.TAG_PARTIAL


class TestIsCandidate:

    def test_title_floor(self):
        assert not is_candidate(make_candidate("a", 0.9, title_similarity=0.59))

    def test_overall_floor(self):
        assert is_candidate(make_candidate("a", 0.7, title_similarity=0.65, artist_similarity=0.8))

    def test_strong_title(self):
        assert is_candidate(make_candidate("a", 0.56, title_similarity=0.8, artist_similarity=0.0))

    def test_rejected_between_floors(self):
        assert not is_candidate(make_candidate("a", 0.6, title_similarity=0.65, artist_similarity=0.5))


class TestRankCandidates:

    def test_large_title_gap_wins(self):
        a = make_candidate("a", 0.7, title_similarity=0.9)
        b = make_candidate("b", 0.9, title_similarity=0.7)
        assert [c.song_id for c in rank_candidates([b, a])] == ["a", "b"]

    def test_small_title_gap_falls_back_to_overall(self):
        a = make_candidate("a", 0.8, title_similarity=0.9)
        c = make_candidate("c", 0.9, title_similarity=0.85)
        assert [x.song_id for x in rank_candidates([a, c])] == ["c", "a"]


class TestFindCandidates:

    def test_exact_match_first(self, catalog):
        candidates = find_candidates(make_entry(597), catalog)
        assert candidates[0].song_id == "s1"
        assert candidates[0].overall_similarity == 1.0

    def test_unrelated_entry_has_no_candidates(self, catalog):
        assert find_candidates(make_entry(0, artist="qqqq", title="zzzzzz"), catalog) == []

    def test_capped_at_max_candidates(self):
        songs = [CatalogSong(song_id=str(i), title="난춘", artist="새소년") for i in range(8)]
        assert len(find_candidates(make_entry(0), songs)) == 5
        config = MatchingConfig(max_candidates=2)
        assert len(find_candidates(make_entry(0), songs, config)) == 2


class TestMatchEntries:

    def test_threaded_matches_sequential(self, catalog):
        entries = [
            make_entry(0),
            make_entry(60, artist="이무진", title="청춘만화"),
            make_entry(120, artist="qqqq", title="zzzzzz"),
        ]
        sequential = match_entries(entries, catalog)
        threaded = match_entries(entries, catalog, max_workers=3)
        assert threaded == sequential
        assert [len(c) > 0 for c in threaded] == [True, True, False]
