"""Tests for the title/artist comparison form."""

import pytest

from clipworker.matching.normalize import normalize


class TestNormalize:

    def test_case_whitespace_and_punctuation_insensitive(self):
        assert normalize("Tones And I") == normalize("tones   and -i")
        assert normalize("Tones And I") == "tonesandi"

    @pytest.mark.parametrize("value", ["Dance Monkey!", "밤 편지", "ＡＢＣ１２３", "a_b.c·d,e"])
    def test_idempotent(self, value):
        once = normalize(value)
        assert normalize(once) == once

    def test_full_width_is_folded(self):
        assert normalize("ＩＵ") == "iu"
        assert normalize("ＡＢＣ１２３") == "abc123"

    def test_hangul_is_kept(self):
        assert normalize("청춘 만화!") == "청춘만화"

    def test_separators_are_removed(self):
        assert normalize("a_b.c·d,e-f") == "abcdef"

    def test_empty(self):
        assert normalize("") == ""
        assert normalize("  - ") == ""
