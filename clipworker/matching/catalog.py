"""Song catalog snapshot backed by a relational store or a JSON export."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Iterable, Sequence

from clipworker.config import DEFAULT_DB_PATH
from clipworker.models import CatalogSong

logger = logging.getLogger(__name__)


def _connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(db_path)
    connection.row_factory = sqlite3.Row
    return connection


def _ensure_schema(connection: sqlite3.Connection) -> None:
    connection.execute(
        """
        CREATE TABLE IF NOT EXISTS songs (
            song_id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            artist TEXT NOT NULL,
            title_aliases TEXT NOT NULL DEFAULT '[]',
            artist_aliases TEXT NOT NULL DEFAULT '[]',
            search_tags TEXT NOT NULL DEFAULT '[]',
            mr_links TEXT NOT NULL DEFAULT '[]'
        )
        """
    )
    connection.commit()


def _parse_json_list(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed JSON list column: %r", raw[:80])
        return ()
    if isinstance(data, list):
        return tuple(str(item) for item in data if item)
    if isinstance(data, str) and data:
        return (data,)
    return ()


def _as_tuple(value: object) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value if item)
    return ()


def load_catalog(db_path: Path | None = None) -> tuple[CatalogSong, ...]:
    path = db_path or DEFAULT_DB_PATH
    with _connect(path) as connection:
        _ensure_schema(connection)
        rows = connection.execute(
            """
            SELECT song_id, title, artist, title_aliases, artist_aliases, search_tags, mr_links
            FROM songs
            ORDER BY song_id
            """
        ).fetchall()
    songs = tuple(
        CatalogSong(
            song_id=row["song_id"],
            title=row["title"],
            artist=row["artist"],
            title_aliases=_parse_json_list(row["title_aliases"]),
            artist_aliases=_parse_json_list(row["artist_aliases"]),
            search_tags=_parse_json_list(row["search_tags"]),
            mr_links=_parse_json_list(row["mr_links"]),
        )
        for row in rows
    )
    logger.info("Loaded %d catalog songs from %s", len(songs), path)
    return songs


def load_catalog_json(path: Path) -> tuple[CatalogSong, ...]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("songs", [])
    songs: list[CatalogSong] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        song_id = item.get("song_id") or item.get("id") or item.get("_id")
        title = item.get("title")
        artist = item.get("artist")
        if not song_id or not title or not artist:
            logger.warning("Skipping catalog entry without id/title/artist: %r", item)
            continue
        aliases = item.get("aliases") if isinstance(item.get("aliases"), dict) else {}
        songs.append(
            CatalogSong(
                song_id=str(song_id),
                title=str(title),
                artist=str(artist),
                title_aliases=_as_tuple(item.get("title_aliases") or aliases.get("title_aliases")),
                artist_aliases=_as_tuple(item.get("artist_aliases") or aliases.get("artist_aliases")),
                search_tags=_as_tuple(item.get("search_tags")),
                mr_links=_as_tuple(item.get("mr_links")),
            )
        )
    logger.info("Loaded %d catalog songs from %s", len(songs), path)
    return tuple(songs)


def upsert_songs(songs: Iterable[CatalogSong], db_path: Path | None = None) -> None:
    path = db_path or DEFAULT_DB_PATH
    with _connect(path) as connection:
        _ensure_schema(connection)
        connection.executemany(
            """
            INSERT INTO songs (song_id, title, artist, title_aliases, artist_aliases, search_tags, mr_links)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(song_id)
            DO UPDATE SET title = excluded.title,
                          artist = excluded.artist,
                          title_aliases = excluded.title_aliases,
                          artist_aliases = excluded.artist_aliases,
                          search_tags = excluded.search_tags,
                          mr_links = excluded.mr_links
            """,
            [
                (
                    song.song_id,
                    song.title,
                    song.artist,
                    _to_json(song.title_aliases),
                    _to_json(song.artist_aliases),
                    _to_json(song.search_tags),
                    _to_json(song.mr_links),
                )
                for song in songs
            ],
        )
        connection.commit()


def add_mr_link(song_id: str, url: str, db_path: Path | None = None) -> bool:
    path = db_path or DEFAULT_DB_PATH
    with _connect(path) as connection:
        _ensure_schema(connection)
        row = connection.execute(
            "SELECT mr_links FROM songs WHERE song_id = ?", (song_id,)
        ).fetchone()
        if row is None:
            return False
        links = list(_parse_json_list(row["mr_links"]))
        if url not in links:
            links.append(url)
        connection.execute(
            "UPDATE songs SET mr_links = ? WHERE song_id = ?", (_to_json(links), song_id)
        )
        connection.commit()
    return True


def find_song(catalog: Sequence[CatalogSong], song_id: str) -> CatalogSong | None:
    return next((song for song in catalog if song.song_id == song_id), None)


def _to_json(values: Iterable[str]) -> str:
    return json.dumps(list(values), ensure_ascii=False)
