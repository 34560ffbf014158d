"""Fetch raw comment texts of a replay video with yt-dlp."""

from __future__ import annotations

import logging
from typing import List

import yt_dlp

from clipworker.timeline.dates import watch_url

logger = logging.getLogger(__name__)


def fetch_comment_texts(video_id: str, max_comments: int | None = None) -> List[str]:
    options: dict[str, object] = {"quiet": True, "skip_download": True, "getcomments": True}
    if max_comments is not None:
        options["extractor_args"] = {"youtube": {"max_comments": [str(max_comments)]}}
    with yt_dlp.YoutubeDL(options) as ydl:
        try:
            info = ydl.extract_info(watch_url(video_id), download=False)
        except yt_dlp.utils.DownloadError as exc:
            logger.warning("yt-dlp failed to fetch comments for %s: %s", video_id, exc)
            return []
    comments = (info or {}).get("comments") or []
    texts = [comment.get("text", "") for comment in comments if isinstance(comment, dict)]
    logger.info("Fetched %d comments for %s", len(texts), video_id)
    return [text for text in texts if text]
