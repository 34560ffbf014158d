"""Tests for timeline line parsing and end-time chaining."""

from clipworker.timeline.extract import (
    chain_end_times,
    extract_timestamps,
    parse_line,
    parse_time_token,
    select_timeline_comment,
)


class TestParseTimeToken:

    def test_minutes_seconds(self):
        assert parse_time_token("9:57") == 597
        assert parse_time_token("14:08") == 848

    def test_hours_minutes_seconds(self):
        assert parse_time_token("1:02:03") == 3723

    def test_rejects_garbage(self):
        assert parse_time_token("a:b") is None
        assert parse_time_token("1:2:3:4") is None


class TestParseLine:

    def test_artist_title_split_on_first_dash(self):
        entry = parse_line("9:57 새소년 - 난춘")
        assert entry.start_seconds == 597
        assert entry.artist == "새소년"
        assert entry.title == "난춘"
        assert entry.raw_time == "9:57"
        assert entry.end_seconds is None

    def test_title_keeps_later_dashes(self):
        entry = parse_line("3:00 Artist - Title - Live ver.")
        assert entry.artist == "Artist"
        assert entry.title == "Title - Live ver."

    def test_en_dash_separator(self):
        entry = parse_line("1:00:00 아이유 – 밤편지")
        assert entry.start_seconds == 3600
        assert entry.artist == "아이유"

    def test_prefix_before_timestamp_is_ignored(self):
        entry = parse_line("▶ 02:15 이무진 - 청춘만화")
        assert entry.start_seconds == 135

    def test_line_without_separator_is_dropped(self):
        assert parse_line("00:00 방송 시작") is None

    def test_line_without_timestamp_is_dropped(self):
        assert parse_line("새소년 - 난춘") is None


class TestExtractTimestamps:

    def test_reference_scenario(self):
        entries = extract_timestamps("9:57 새소년 - 난춘\n14:08 이무진 - 청춘만화")
        assert [(e.start_seconds, e.end_seconds) for e in entries] == [(597, 848), (848, None)]

    def test_noise_lines_are_dropped(self):
        text = "오늘 방송 타임라인\n\n0:00 시작\n1:10 A - B\n감사합니다\n2:20 C - D\n"
        entries = extract_timestamps(text)
        assert [(e.artist, e.title) for e in entries] == [("A", "B"), ("C", "D")]
        assert entries[0].end_seconds == 140

    def test_empty_text(self):
        assert extract_timestamps("") == []

    def test_single_entry_has_open_end(self):
        entries = extract_timestamps("5:00 A - B")
        assert entries[0].end_seconds is None


class TestChainEndTimes:

    def test_chains_in_source_order(self):
        entries = extract_timestamps("1:00 A - B\n0:30 C - D\n2:00 E - F")
        chained = chain_end_times(entries)
        # unsorted input is chained as-is
        assert [e.end_seconds for e in chained] == [30, 120, None]


class TestSelectTimelineComment:

    def test_picks_comment_with_most_entries(self):
        comments = [
            "좋은 방송 감사합니다",
            "1:00 A - B",
            "1:00 A - B\n2:00 C - D\n3:00 E - F",
        ]
        assert select_timeline_comment(comments) == comments[2]

    def test_returns_none_without_timeline(self):
        assert select_timeline_comment(["hello", "", "0:00 시작"]) is None
