"""Tunable matching and dedup constants."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path

DEFAULT_DB_PATH = Path(os.getenv("CLIPWORKER_DB_PATH", "clipworker/clips.db"))
ENV_PREFIX = "CLIPWORKER_"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchingConfig:
    auto_match_threshold: float = 0.95
    title_floor: float = 0.6
    overall_floor: float = 0.7
    strong_title: float = 0.8
    strong_artist: float = 0.9
    loose_title: float = 0.3
    tag_boost: float = 0.8
    title_weight: float = 0.7
    artist_weight: float = 0.3
    title_sort_gap: float = 0.1
    max_candidates: int = 5
    dedup_window_sec: int = 30
    dedup_within_batch: bool = False
    search_delay_sec: float = 0.2

    @classmethod
    def from_env(cls) -> "MatchingConfig":
        overrides: dict[str, object] = {}
        for item in fields(cls):
            raw = os.getenv(f"{ENV_PREFIX}{item.name.upper()}")
            if raw is None or not raw.strip():
                continue
            value = _coerce(raw.strip(), item.type)
            if value is None:
                logger.warning(
                    "Ignoring invalid %s%s value %r.", ENV_PREFIX, item.name.upper(), raw
                )
                continue
            overrides[item.name] = value
        return cls(**overrides)


def _coerce(raw: str, type_name: object) -> object | None:
    # annotations are strings under `from __future__ import annotations`
    name = type_name if isinstance(type_name, str) else getattr(type_name, "__name__", "")
    if name == "bool":
        lowered = raw.lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        return None
    try:
        if name == "int":
            return int(raw)
        return float(raw)
    except ValueError:
        return None
