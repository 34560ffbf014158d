"""Shared fixtures for clipworker tests."""

import pytest

from clipworker.models import (
    CatalogSong,
    MatchCandidate,
    MatchReason,
    TimestampEntry,
)


@pytest.fixture
def catalog():
    """Small catalog covering exact, alias and tag matches."""
    return (
        CatalogSong(song_id="s1", title="난춘", artist="새소년"),
        CatalogSong(song_id="s2", title="청춘만화", artist="이무진"),
        CatalogSong(
            song_id="s3",
            title="Dance Monkey",
            artist="Tones And I",
            title_aliases=("댄스 몽키",),
            artist_aliases=("톤즈 앤 아이",),
        ),
        CatalogSong(
            song_id="s4",
            title="밤편지",
            artist="아이유",
            artist_aliases=("IU",),
            search_tags=("through the night",),
        ),
    )


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "clips.db"


def make_entry(start, end=None, *, artist="새소년", title="난춘"):
    """Build a timeline entry without going through the parser."""
    minutes, seconds = divmod(start, 60)
    return TimestampEntry(
        raw_time=f"{minutes}:{seconds:02d}",
        start_seconds=start,
        end_seconds=end,
        artist=artist,
        title=title,
    )


def make_candidate(song_id, overall, *, title_similarity=None, artist_similarity=1.0,
                   reason=MatchReason.PARTIAL):
    return MatchCandidate(
        song_id=song_id,
        title=f"title-{song_id}",
        artist=f"artist-{song_id}",
        overall_similarity=overall,
        title_similarity=overall if title_similarity is None else title_similarity,
        artist_similarity=artist_similarity,
        reason=reason,
    )
