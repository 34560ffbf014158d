"""Tests for auto-match / review / unmatched classification."""

import pytest
from conftest import make_candidate, make_entry

from clipworker.config import MatchingConfig
from clipworker.matching.classify import classify, classify_all
from clipworker.models import MatchStatus


class TestClassify:

    def test_no_candidates_is_unmatched(self):
        result = classify(make_entry(0), [])
        assert result.status is MatchStatus.UNMATCHED
        assert result.selected is None
        assert not result.is_matched

    def test_threshold_is_inclusive(self):
        result = classify(make_entry(0), [make_candidate("a", 0.95)])
        assert result.status is MatchStatus.AUTO_MATCHED
        assert result.selected.song_id == "a"
        assert result.is_matched

    def test_below_threshold_needs_review(self):
        candidates = [make_candidate("a", 0.94), make_candidate("b", 0.8)]
        result = classify(make_entry(0), candidates)
        assert result.status is MatchStatus.NEEDS_REVIEW
        assert [c.song_id for c in result.candidates] == ["a", "b"]
        assert result.selected is None

    def test_custom_threshold(self):
        result = classify(make_entry(0), [make_candidate("a", 0.9)], MatchingConfig(auto_match_threshold=0.9))
        assert result.status is MatchStatus.AUTO_MATCHED


class TestClassifyAll:

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            classify_all([make_entry(0)], [])

    def test_order_preserved(self):
        entries = [make_entry(0), make_entry(10)]
        results = classify_all(entries, [[], [make_candidate("a", 1.0)]])
        assert [r.status for r in results] == [MatchStatus.UNMATCHED, MatchStatus.AUTO_MATCHED]
        assert results[1].entry.start_seconds == 10
