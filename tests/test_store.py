"""Tests for the SQLite clip table."""

from clipworker.clips.store import insert_clips, load_existing_clips, sqlite_storage
from clipworker.models import ClipRecord, ExistingClipRef


def make_record(start, end=None, video_id="abcdefghijk"):
    return ClipRecord(
        song_id="s1",
        video_url=f"https://www.youtube.com/watch?v={video_id}",
        video_id=video_id,
        sung_date="2024-05-01",
        description="",
        start_seconds=start,
        end_seconds=end,
    )


class TestClipStore:

    def test_empty_database(self, db_path):
        assert load_existing_clips("abcdefghijk", db_path) == []

    def test_insert_and_load_snapshot(self, db_path):
        outcomes = insert_clips([make_record(300, 400), make_record(100)], db_path)
        assert all(outcome.ok for outcome in outcomes)
        insert_clips([make_record(50, video_id="other000001")], db_path)
        assert load_existing_clips("abcdefghijk", db_path) == [
            ExistingClipRef(video_id="abcdefghijk", start_seconds=100),
            ExistingClipRef(video_id="abcdefghijk", start_seconds=300),
        ]

    def test_constraint_violation_is_per_record(self, db_path):
        outcomes = insert_clips([make_record(100, 50), make_record(200, 260)], db_path)
        assert [outcome.ok for outcome in outcomes] == [False, True]
        assert outcomes[0].error
        assert len(load_existing_clips("abcdefghijk", db_path)) == 1

    def test_storage_callable(self, db_path):
        store = sqlite_storage(db_path)
        outcomes = store([make_record(10, 20)])
        assert outcomes[0].ok
        assert load_existing_clips("abcdefghijk", db_path)[0].start_seconds == 10
