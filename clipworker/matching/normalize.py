"""Canonical string form used for title/artist comparison."""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[-_.·,]")
_NON_WORD = re.compile(r"[^\w]|_")

_FULL_WIDTH_OFFSET = 0xFEE0
_FULL_WIDTH_RANGES = (("０", "９"), ("Ａ", "Ｚ"), ("ａ", "ｚ"))
_FULL_WIDTH_TABLE = {
    code: code - _FULL_WIDTH_OFFSET
    for start, end in _FULL_WIDTH_RANGES
    for code in range(ord(start), ord(end) + 1)
}


def normalize(value: str) -> str:
    if not value:
        return ""
    folded = value.translate(_FULL_WIDTH_TABLE).lower()
    collapsed = _WHITESPACE.sub("", folded)
    collapsed = _PUNCTUATION.sub("", collapsed)
    return _NON_WORD.sub("", collapsed)
