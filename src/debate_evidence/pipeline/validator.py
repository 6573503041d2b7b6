"""
Result validation and reliability scoring.

validate() is total: every RawItem either becomes an EvidenceItem or is
dropped (None). Nothing here raises on malformed input.

URL policy by category:
- news articles: relay links are unwrapped, then the URL must point at a
  non-root path on a trusted news domain. Portal links (Naver, Daum) must
  look like article permalinks. A failing URL is cleared; the item stays.
- educational videos: the URL must be a canonical watch link or the item
  is dropped.
- legacy categories: any well-formed http(s) URL is kept.
"""

import logging
import math
import re
from datetime import date
from typing import Any, Iterable, List, Optional
from urllib.parse import unquote, urlparse, parse_qs

from ..models import CategoryKind, EvidenceItem, RawItem, StanceDirection
from .lexicon import DEFAULT_LEXICON, SafetyLexicon

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 5
MIN_CONTENT_LENGTH = 20
SUMMARY_LENGTH = 100

DEFAULT_TEXT_RELIABILITY = 75
DEFAULT_VIDEO_RELIABILITY = 80
EDUCATIONAL_BONUS = 10

CANONICAL_VIDEO_URL_RE = re.compile(r"^https://www\.youtube\.com/watch\?v=[A-Za-z0-9_-]{11}$")
ROOT_PATHS = frozenset({"", "/", "/index.html", "/index.htm"})

NAVER_DOMAIN = "naver.com"
NAVER_MIN_SEGMENTS = 3
DAUM_DOMAIN = "daum.net"
DAUM_MIN_PATH_LENGTH = 15

_PATH_RELAY_RE = re.compile(r"^https?://[^/?#]+/(?:fetch/)?(https?://.+)$", re.IGNORECASE)
_DATE_RE = re.compile(r"^(\d{4})[-./](\d{1,2})[-./](\d{1,2})")


def unwrap_relay_url(url: str) -> str:
    """
    Recover the target of a link echoed back through a relay path.

    Handles ?url=<encoded>, ?<encoded> and /<target> style relays; any
    other URL is returned unchanged.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    inner = parse_qs(parsed.query).get("url")
    if inner and inner[0].lower().startswith(("http://", "https://")):
        return inner[0]
    query = unquote(parsed.query)
    if query.lower().startswith(("http://", "https://")):
        return query
    match = _PATH_RELAY_RE.match(url)
    if match:
        return match.group(1)
    return url


def is_http_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        # e.g. unbalanced brackets: "Invalid IPv6 URL"
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _matches_domain(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def normalize_date(value: Optional[str]) -> str:
    """ISO date (YYYY-MM-DD) from the leading date of value, or ''."""
    if not value:
        return ""
    match = _DATE_RE.match(value.strip())
    if not match:
        return ""
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3))).isoformat()
    except ValueError:
        return ""


def _clamp(score: float) -> int:
    return max(0, min(100, int(round(score))))


def _parse_hint(hint: Any) -> Optional[float]:
    if isinstance(hint, bool):
        return None
    if isinstance(hint, (int, float)):
        value = float(hint)
    elif isinstance(hint, str):
        try:
            value = float(hint.strip().rstrip("%"))
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


class ResultValidator:
    """Validates RawItems and assigns reliability scores."""

    def __init__(self, lexicon: SafetyLexicon = DEFAULT_LEXICON):
        self.lexicon = lexicon

    def check_news_url(self, url: Optional[str]) -> str:
        """Return the cleaned article URL, or '' when it fails the policy."""
        if not url:
            return ""
        url = unwrap_relay_url(url.strip())
        if not is_http_url(url):
            return ""

        try:
            parsed = urlparse(url)
            host = (parsed.hostname or "").lower()
        except ValueError:
            return ""
        path = parsed.path or ""
        if path in ROOT_PATHS:
            return ""
        if not self.lexicon.is_trusted_news_host(host):
            return ""

        if _matches_domain(host, NAVER_DOMAIN):
            segments = [s for s in path.split("/") if s]
            if "/article/" not in path or len(segments) < NAVER_MIN_SEGMENTS:
                return ""
        if _matches_domain(host, DAUM_DOMAIN):
            if "/v/" not in path or len(path) < DAUM_MIN_PATH_LENGTH:
                return ""
        return url

    def check_video_url(self, url: Optional[str]) -> bool:
        return bool(url) and CANONICAL_VIDEO_URL_RE.match(url.strip()) is not None

    def score(self, item: RawItem) -> int:
        """Hint (clamped) or per-category default, plus the educational bonus."""
        hint = _parse_hint(item.reliability_hint)
        if hint is None:
            if item.category is CategoryKind.EDUCATIONAL_VIDEO:
                base = DEFAULT_VIDEO_RELIABILITY
            else:
                base = DEFAULT_TEXT_RELIABILITY
        else:
            base = _clamp(hint)
        if item.is_educational:
            base += EDUCATIONAL_BONUS
        return _clamp(base)

    def validate(self, item: RawItem, index: int = 0) -> Optional[EvidenceItem]:
        """
        Validate one item.

        Returns:
            EvidenceItem, or None when the item must be dropped
        """
        label = item.item_id or f"item-{index}"
        title = (item.title or "").strip()
        content = (item.content or "").strip()
        source_name = (item.source_name or "").strip()

        if not title or not content or not source_name:
            logger.debug(f"Dropping {label}: missing title, content or source")
            return None
        if len(title) < MIN_TITLE_LENGTH or len(content) < MIN_CONTENT_LENGTH:
            logger.debug(f"Dropping {label}: title or content too short")
            return None

        category = item.category or CategoryKind.NEWS_ARTICLE
        if category is CategoryKind.NEWS_ARTICLE:
            url = self.check_news_url(item.url)
            if item.url and not url:
                logger.debug(f"Cleared untrusted URL on {label}")
        elif category is CategoryKind.EDUCATIONAL_VIDEO:
            if not self.check_video_url(item.url):
                logger.debug(f"Dropping {label}: not a canonical video URL")
                return None
            url = item.url.strip()
        else:
            url = (item.url or "").strip()
            if url and not is_http_url(url):
                url = ""

        summary = (item.summary or "").strip() or content[:SUMMARY_LENGTH] + "..."

        return EvidenceItem(
            id=item.item_id or f"evidence-{index}",
            category=category,
            title=title,
            content=content,
            source_name=source_name,
            url=url,
            reliability=self.score(item),
            published_date=normalize_date(item.published_date),
            author=(item.author or "").strip(),
            summary=summary,
            stance=StanceDirection.from_label(item.stance),
            key_points=list(item.key_points),
            is_educational=item.is_educational,
        )

    def validate_all(self, items: Iterable[RawItem]) -> List[EvidenceItem]:
        validated = []
        for index, item in enumerate(items):
            evidence = self.validate(item, index)
            if evidence is not None:
                validated.append(evidence)
        return validated
