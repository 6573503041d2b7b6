"""YouTube Data API v3 search fetcher for educational debate videos.

API Documentation: https://developers.google.com/youtube/v3/docs/search/list
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

import requests

from ..models import CategoryKind, RawItem
from ..pipeline.lexicon import DEFAULT_LEXICON, SafetyLexicon
from ..text_utils import clean_text, truncate
from .base_fetcher import BaseFetcher, FetchAttempt, FetchError, get_section

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
DESCRIPTION_LIMIT = 200

_session = requests.Session()


def _redact(message: str, secret: str) -> str:
    """requests puts the full query string (including key=) into its messages."""
    if secret:
        message = message.replace(secret, "***")
    return message


def _api_error_reason(response: Any) -> str:
    """Best-effort reason string from a YouTube API error body, e.g. 'quotaExceeded'."""
    try:
        body = response.json()
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""
    error = body.get("error") or {}
    errors = error.get("errors") if isinstance(error, dict) else None
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        return str(errors[0].get("reason", ""))
    return ""


def map_search_record(record: Dict[str, Any]) -> Optional[RawItem]:
    """Map one search result record to a RawItem, or None when it has no video id or snippet."""
    if not isinstance(record, dict):
        return None
    id_block = record.get("id")
    video_id = id_block.get("videoId") if isinstance(id_block, dict) else None
    if not video_id:
        return None

    snippet = record.get("snippet") or {}
    if not isinstance(snippet, dict):
        return None
    title = clean_text(snippet.get("title")) or ""
    description = clean_text(snippet.get("description")) or ""
    channel = clean_text(snippet.get("channelTitle")) or ""
    published_at = snippet.get("publishedAt") or ""

    return RawItem(
        category=CategoryKind.EDUCATIONAL_VIDEO,
        title=title,
        content=truncate(description, DESCRIPTION_LIMIT),
        source_name=channel,
        url=WATCH_URL.format(video_id=video_id),
        published_date=published_at.split("T")[0] if isinstance(published_at, str) else "",
        author=channel,
        summary=title,
    )


def rank_candidates(items: List[RawItem], lexicon: SafetyLexicon, limit: int) -> List[RawItem]:
    """
    Order candidates by education score (highest first) and keep the top `limit`.

    Ties keep API order since sorted() is stable.
    """
    ranked = sorted(
        items,
        key=lambda item: lexicon.education_score(item.title or "", item.source_name or ""),
        reverse=True,
    )
    return [
        replace(item, item_id=f"youtube-{i}")
        for i, item in enumerate(ranked[:limit])
    ]


class YouTubeFetcher(BaseFetcher):
    """Search educational videos for a debate topic."""

    def __init__(self, source_config: Dict[str, Any], api_key: str, lexicon: SafetyLexicon = DEFAULT_LEXICON):
        super().__init__(source_config)
        self.api_key = api_key
        self.lexicon = lexicon
        self.engine = get_section({"video_engine": source_config}, "video_engine")

    def attempt_chain(self) -> List[FetchAttempt]:
        # Single attempt, no fallback paths
        return [FetchAttempt(
            name="direct",
            url=self.engine["url"],
            timeout=float(self.engine["timeout_seconds"]),
        )]

    def build_params(self, query: str) -> Dict[str, Any]:
        return {
            "part": "snippet",
            "q": query,
            "type": "video",
            "maxResults": self.engine["max_results"],
            "order": "relevance",
            "regionCode": self.engine["region_code"],
            "relevanceLanguage": self.engine["relevance_language"],
            "key": self.api_key,
        }

    def _fetch_impl(self, attempt: FetchAttempt, query: str) -> List[RawItem]:
        """Fetch, map and rank video candidates for query.

        Returns:
            Up to max_candidates RawItems, best educational match first
        """
        try:
            response = _session.get(attempt.url, params=self.build_params(query), timeout=attempt.timeout)
        except requests.RequestException as e:
            raise FetchError(self.source_id, _redact(f"YouTube search failed: {e}", self.api_key), e) from e

        if not response.ok:
            reason = _api_error_reason(response)
            message = f"YouTube search returned HTTP {response.status_code}"
            if reason:
                message += f" ({reason})"
            raise FetchError(self.source_id, message)

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(self.source_id, "YouTube search returned a non-JSON body", e) from e

        records = data.get("items") if isinstance(data, dict) else None
        mapped = []
        for record in records or []:
            item = map_search_record(record)
            if item is None:
                logger.debug("Skipping malformed YouTube record")
                continue
            mapped.append(item)

        ranked = rank_candidates(mapped, self.lexicon, int(self.engine["max_candidates"]))
        logger.info(f"{self.source_id}: {len(mapped)} videos mapped, kept top {len(ranked)}")
        return ranked
