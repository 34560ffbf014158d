"""SQLite clip table: full existing-clip snapshots and the reference bulk insert."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import List, Sequence

from clipworker.config import DEFAULT_DB_PATH
from clipworker.models import ClipRecord, ExistingClipRef, UploadOutcome

logger = logging.getLogger(__name__)


def _connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(db_path)
    connection.row_factory = sqlite3.Row
    _ensure_schema(connection)
    return connection


def _ensure_schema(connection: sqlite3.Connection) -> None:
    cursor = connection.cursor()
    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS clips (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            song_id TEXT NOT NULL,
            video_id TEXT NOT NULL,
            video_url TEXT NOT NULL,
            sung_date TEXT NOT NULL,
            description TEXT,
            start_sec INTEGER NOT NULL,
            end_sec INTEGER,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            CHECK (end_sec IS NULL OR end_sec > start_sec)
        )
        """
    )
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_clips_video_start ON clips (video_id, start_sec)")
    connection.commit()


def load_existing_clips(video_id: str, db_path: Path | None = None) -> List[ExistingClipRef]:
    connection = _connect(db_path or DEFAULT_DB_PATH)
    try:
        rows = connection.execute(
            "SELECT video_id, start_sec FROM clips WHERE video_id = ? ORDER BY start_sec",
            (video_id,),
        ).fetchall()
    finally:
        connection.close()
    logger.info("기존 클립 %s개 로드 완료: video_id=%s", len(rows), video_id)
    return [ExistingClipRef(video_id=row["video_id"], start_seconds=int(row["start_sec"])) for row in rows]


def insert_clips(records: Sequence[ClipRecord], db_path: Path | None = None) -> List[UploadOutcome]:
    connection = _connect(db_path or DEFAULT_DB_PATH)
    outcomes: list[UploadOutcome] = []
    try:
        for record in records:
            try:
                connection.execute(
                    """
                    INSERT INTO clips (song_id, video_id, video_url, sung_date, description, start_sec, end_sec)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.song_id,
                        record.video_id,
                        record.video_url,
                        record.sung_date,
                        record.description,
                        record.start_seconds,
                        record.end_seconds,
                    ),
                )
                connection.commit()
            except sqlite3.Error as exc:
                connection.rollback()
                logger.warning(
                    "클립 등록 실패: song_id=%s start_sec=%s error=%s",
                    record.song_id,
                    record.start_seconds,
                    exc,
                )
                outcomes.append(UploadOutcome(record=record, ok=False, error=str(exc)))
                continue
            outcomes.append(UploadOutcome(record=record, ok=True))
    finally:
        connection.close()
    return outcomes


def sqlite_storage(db_path: Path | None = None):
    def store(records: Sequence[ClipRecord]) -> List[UploadOutcome]:
        return insert_clips(records, db_path=db_path)

    return store
