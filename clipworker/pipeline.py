"""Timestamp comment to clip batch pipeline and its command line entry point."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from clipworker.clips.packager import BatchPackager, Resolver, StorageCall
from clipworker.clips.store import load_existing_clips, sqlite_storage
from clipworker.config import MatchingConfig
from clipworker.matching.catalog import add_mr_link, load_catalog, load_catalog_json
from clipworker.matching.classify import classify_all
from clipworker.matching.fuzzy import match_entries
from clipworker.models import BatchReport, CatalogSong, ExistingClipRef, MatchResult
from clipworker.search.autofill import LookupRun, autofill_mr_links
from clipworker.search.youtube import ExternalServiceError, SearchResult, YouTubeSearchClient
from clipworker.timeline.comments import fetch_comment_texts
from clipworker.timeline.dates import date_from_title, extract_video_id
from clipworker.timeline.extract import extract_timestamps, select_timeline_comment

logger = logging.getLogger(__name__)


def match_timeline(
    text: str,
    catalog: Sequence[CatalogSong],
    config: MatchingConfig | None = None,
    *,
    max_workers: int = 1,
) -> List[MatchResult]:
    config = config or MatchingConfig()
    entries = extract_timestamps(text)
    if not entries:
        logger.warning("타임스탬프를 찾을 수 없습니다.")
        return []
    candidate_lists = match_entries(entries, catalog, config, max_workers=max_workers)
    return classify_all(entries, candidate_lists, config)


def accept_top_candidate(index: int, result: MatchResult) -> Optional[str]:
    return result.candidates[0].song_id if result.candidates else None


def upload_timeline(
    text: str,
    catalog: Sequence[CatalogSong],
    video_url: str,
    sung_date: str | date,
    storage: StorageCall,
    existing: Iterable[ExistingClipRef] = (),
    *,
    description: str | None = None,
    config: MatchingConfig | None = None,
    resolver: Resolver | None = None,
    max_workers: int = 1,
) -> BatchReport:
    config = config or MatchingConfig()
    results = match_timeline(text, catalog, config, max_workers=max_workers)
    packager = BatchPackager(results, video_url, sung_date, description, config, catalog=catalog)
    if resolver is not None:
        packager.resolve(resolver)
    elif packager.review_items():
        logger.info("검토가 필요한 항목 %s개는 업로드에서 제외됩니다.", len(packager.review_items()))
    return packager.run(existing, storage)


def autofill_catalog(
    catalog: Sequence[CatalogSong],
    client: YouTubeSearchClient,
    config: MatchingConfig | None = None,
    db_path: Path | None = None,
) -> LookupRun[CatalogSong, SearchResult]:
    if not client.configured:
        raise ExternalServiceError("YOUTUBE_API_KEY is not set")

    def persist(song: CatalogSong, result: SearchResult) -> bool:
        return add_mr_link(song.song_id, result.url, db_path=db_path)

    return autofill_mr_links(catalog, client.search, config=config, on_found=persist)


def _result_payload(result: MatchResult) -> dict:
    payload = asdict(result)
    payload["status"] = result.status.value
    payload["reason_label"] = result.selected.reason.label if result.selected else None
    return payload


def _load_timeline_text(args: argparse.Namespace) -> str:
    if args.timeline_file:
        return Path(args.timeline_file).read_text(encoding="utf-8")
    if args.fetch_comments:
        video_id = extract_video_id(args.video_url or "")
        if not video_id:
            raise SystemExit("오류: 댓글을 가져오려면 올바른 --video-url이 필요합니다.")
        return select_timeline_comment(fetch_comment_texts(video_id)) or ""
    return sys.stdin.read()


def _resolve_sung_date(args: argparse.Namespace) -> str | date:
    if args.sung_date:
        return args.sung_date
    if args.video_title:
        from_title = date_from_title(args.video_title)
        if from_title is not None:
            return from_title
    return date.today()


def _load_catalog(args: argparse.Namespace, db_path: Path | None) -> tuple[CatalogSong, ...]:
    if args.catalog_json:
        return load_catalog_json(Path(args.catalog_json))
    return load_catalog(db_path)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    parser = argparse.ArgumentParser(
        description="Timestamp comment to clip batch pipeline",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--stage",
        choices=("parse", "match", "upload", "autofill"),
        default="match",
        help=(
            "실행 단계 선택: parse(타임스탬프 파싱) | match(곡 매칭) | upload(클립 일괄 등록) "
            "| autofill(MR 링크 자동 추가)."
        ),
    )
    parser.add_argument("--timeline-file", help="타임라인 텍스트 파일 경로. 미지정 시 stdin에서 읽음.")
    parser.add_argument(
        "--fetch-comments",
        action="store_true",
        help="--video-url 영상의 댓글을 yt-dlp로 가져와 타임라인 댓글을 자동 선택.",
    )
    parser.add_argument("--video-url", help="원본 영상 URL.")
    parser.add_argument("--video-title", help="영상 제목 (부른 날짜 추출용).")
    parser.add_argument("--sung-date", help="부른 날짜 (YYYY-MM-DD, YY.MM.DD 등).")
    parser.add_argument("--description", help="클립 설명 (기본: 타임스탬프 파서로 자동 등록).")
    parser.add_argument("--catalog-json", help="곡 카탈로그 JSON 파일 경로. 미지정 시 DB에서 로드.")
    parser.add_argument(
        "--db-path",
        help="SQLite DB 파일 경로 (기본: 환경변수 CLIPWORKER_DB_PATH 또는 clipworker/clips.db).",
    )
    parser.add_argument(
        "--accept-top-candidate",
        action="store_true",
        help="검토가 필요한 항목에 1순위 후보를 자동 확정.",
    )
    parser.add_argument("--workers", type=int, default=1, help="매칭 스레드 수.")
    parser.add_argument("--output", help="결과 JSON을 저장할 파일 경로. 미지정 시 stdout에 출력.")
    args = parser.parse_args()

    db_path = Path(args.db_path) if args.db_path else None
    config = MatchingConfig.from_env()
    started_at = datetime.now(timezone.utc).isoformat()
    payload: dict[str, object] = {"requested_at": started_at, "stage": args.stage}

    if args.stage == "autofill":
        client = YouTubeSearchClient()
        if not client.configured:
            raise SystemExit("오류: YOUTUBE_API_KEY 환경변수가 필요합니다.")
        catalog = _load_catalog(args, db_path)
        run = autofill_catalog(catalog, client, config, db_path=db_path)
        payload["outputs"] = {
            "status": run.status.value,
            "total": run.total,
            "processed": run.processed,
            "found": [
                {"song_id": outcome.item.song_id, "url": outcome.result.url}
                for outcome in run.found
                if outcome.result is not None
            ],
            "failed": [
                {"song_id": outcome.item.song_id, "error": outcome.error} for outcome in run.failed
            ],
        }
    elif args.stage == "parse":
        entries = extract_timestamps(_load_timeline_text(args))
        payload["outputs"] = [asdict(entry) for entry in entries]
    elif args.stage == "match":
        catalog = _load_catalog(args, db_path)
        results = match_timeline(_load_timeline_text(args), catalog, config, max_workers=args.workers)
        payload["outputs"] = [_result_payload(result) for result in results]
    else:
        video_url = (args.video_url or "").strip()
        if not video_url:
            raise SystemExit("오류: --video-url이 필요합니다.")
        catalog = _load_catalog(args, db_path)
        video_id = extract_video_id(video_url) or ""
        report = upload_timeline(
            _load_timeline_text(args),
            catalog,
            video_url,
            _resolve_sung_date(args),
            sqlite_storage(db_path),
            load_existing_clips(video_id, db_path) if video_id else [],
            description=args.description,
            config=config,
            resolver=accept_top_candidate if args.accept_top_candidate else None,
            max_workers=args.workers,
        )
        payload["video_url"] = video_url
        payload["outputs"] = asdict(report)

    rendered = json.dumps(payload, ensure_ascii=False, indent=2, default=str)
    if args.output:
        Path(args.output).write_text(rendered, encoding="utf-8")
    print(rendered)


if __name__ == "__main__":
    main()
