"""YouTube Data API search used to look up MR (backing track) videos."""

from __future__ import annotations

import json
import logging
import os
import time
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass

logger = logging.getLogger(__name__)

API_BASE_URL = "https://www.googleapis.com/youtube/v3"
QUOTA_REASONS = frozenset({"quotaExceeded", "dailyLimitExceeded"})


class ExternalServiceError(RuntimeError):
    """The search service failed for a reason other than an empty result."""


class QuotaExhaustedError(ExternalServiceError):
    """The API quota for the current period is used up."""


@dataclass(frozen=True)
class SearchResult:
    video_id: str
    title: str
    url: str
    channel_title: str = ""


def build_mr_query(title: str, artist: str) -> str:
    return f"{title} {artist} karaoke MR"


class YouTubeSearchClient:
    def __init__(self, api_key: str | None = None, *, timeout: float = 10.0, max_results: int = 5):
        self.api_key = api_key or os.getenv("YOUTUBE_API_KEY", "")
        self.timeout = timeout
        self.max_results = max_results

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def search(self, title: str, artist: str) -> SearchResult | None:
        if not self.configured:
            raise ExternalServiceError("YOUTUBE_API_KEY is not set")
        response = self._request(
            "search",
            {
                "q": build_mr_query(title, artist),
                "part": "snippet",
                "maxResults": str(self.max_results),
                "type": "video",
                "order": "relevance",
            },
        )
        for item in response.get("items") or []:
            video_id = item.get("id", {}).get("videoId")
            if not video_id:
                continue
            snippet = item.get("snippet", {})
            return SearchResult(
                video_id=video_id,
                title=snippet.get("title", ""),
                url=f"https://www.youtube.com/watch?v={video_id}",
                channel_title=snippet.get("channelTitle", ""),
            )
        return None

    def _request(self, endpoint: str, params: dict[str, str]) -> dict:
        query = urllib.parse.urlencode({**params, "key": self.api_key})
        url = f"{API_BASE_URL}/{endpoint}?{query}"
        last_error: Exception | None = None
        for attempt in range(1, 4):
            try:
                with urllib.request.urlopen(url, timeout=self.timeout) as response:
                    payload = response.read().decode("utf-8")
            except urllib.error.HTTPError as exc:
                _raise_for_api_error(exc)
            except urllib.error.URLError as exc:
                logger.warning("YouTube API URL error on attempt %s: %s", attempt, exc)
                last_error = exc
                if attempt < 3:
                    time.sleep(2**attempt)
                continue
            try:
                data = json.loads(payload)
            except json.JSONDecodeError as exc:
                raise ExternalServiceError(f"YouTube API JSON decode error: {exc}") from exc
            if isinstance(data, dict) and data.get("error"):
                _raise_for_error_payload(data["error"])
            return data if isinstance(data, dict) else {}
        raise ExternalServiceError(f"YouTube API unreachable: {last_error}")


def _raise_for_api_error(exc: urllib.error.HTTPError) -> None:
    try:
        body = json.loads(exc.read().decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError, OSError):
        body = {}
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        _raise_for_error_payload(error, status=exc.code)
    raise ExternalServiceError(f"YouTube API HTTP {exc.code}: {exc.reason}") from exc


def _raise_for_error_payload(error: dict, status: int | None = None) -> None:
    reasons = {item.get("reason") for item in error.get("errors") or [] if isinstance(item, dict)}
    message = error.get("message") or "Unknown error"
    if reasons & QUOTA_REASONS:
        logger.warning("YouTube API 할당량 초과: %s", message)
        raise QuotaExhaustedError(message)
    raise ExternalServiceError(f"YouTube API error ({status or error.get('code')}): {message}")
