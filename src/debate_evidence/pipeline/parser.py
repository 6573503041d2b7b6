"""
Response parser for the text engine.

Turns the engine's free-text reply into RawItems. The reply is supposed to
be a single JSON document but in practice arrives wrapped in markdown
fences, prefixed with prose, or truncated. parse_response never raises:
when nothing usable can be recovered it returns a single degraded item
telling the user that no evidence was found.
"""

import json
import logging
import re
from typing import Any, List, Optional

import jsonschema

from ..models import CategoryKind, RawItem
from ..text_utils import clean_text

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\n?(.*?)```", re.DOTALL)

ITEMS_ENVELOPE_SCHEMA = {
    "type": "object",
    "required": ["items"],
    "properties": {
        "items": {
            "type": "array",
        },
    },
}

DEGRADED_TITLE = "검색 결과를 찾을 수 없음"
DEGRADED_CONTENT = (
    "현재 해당 주제에 대한 구체적인 근거자료를 찾지 못했습니다. "
    "다른 키워드로 다시 검색해보세요."
)
DEGRADED_SOURCE = "시스템"
DEGRADED_SUMMARY = "검색 결과 없음"
DEGRADED_RELIABILITY = 50


def degraded_item() -> RawItem:
    """The single placeholder item returned when a reply cannot be parsed."""
    return RawItem(
        category=CategoryKind.NEWS_ARTICLE,
        title=DEGRADED_TITLE,
        content=DEGRADED_CONTENT,
        source_name=DEGRADED_SOURCE,
        url="",
        reliability_hint=DEGRADED_RELIABILITY,
        summary=DEGRADED_SUMMARY,
        item_id="news-0",
    )


def extract_fenced_block(text: str) -> Optional[str]:
    """Inner content of the first ``` fenced block, if any."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return None


def find_balanced_json(text: str) -> Optional[str]:
    """
    Locate the first top-level {...} or [...] span in text.

    Brackets inside JSON strings (including escaped quotes) are ignored.
    Returns None when no bracket opens or the span never closes.
    """
    closers = {"{": "}", "[": "]"}
    start = None
    for i, ch in enumerate(text):
        if ch in closers:
            start = i
            break
    if start is None:
        return None

    stack = []
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch in closers:
            stack.append(closers[ch])
        elif ch in ("}", "]"):
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return text[start:i + 1]
    return None


def _loads(text: Optional[str]) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def normalize_envelope(document: Any) -> Optional[List[dict]]:
    """
    Coerce a parsed document to its list of item dicts.

    Accepts {"items": [...]}, the legacy {"evidences": [...]} and a bare array.
    Returns None when the document does not match ITEMS_ENVELOPE_SCHEMA.
    """
    if document is None:
        return None
    if isinstance(document, list):
        document = {"items": document}
    elif isinstance(document, dict) and "items" not in document and isinstance(document.get("evidences"), list):
        document = {"items": document["evidences"]}

    try:
        jsonschema.validate(document, ITEMS_ENVELOPE_SCHEMA)
    except jsonschema.ValidationError as e:
        logger.warning(f"Text-engine reply failed envelope schema: {e.message}")
        return None
    return document["items"]


def _first(entry: dict, *keys: str) -> Any:
    for key in keys:
        value = entry.get(key)
        if value not in (None, ""):
            return value
    return None


def _key_points(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    points = []
    for point in value:
        cleaned = clean_text(point) if isinstance(point, (str, int, float)) else None
        if cleaned:
            points.append(cleaned)
    return points


def entry_to_raw_item(entry: dict, index: int) -> RawItem:
    """Map one upstream entry to a RawItem with the stable id news-<index>."""
    category = CategoryKind.from_label(_first(entry, "category", "type")) or CategoryKind.NEWS_ARTICLE
    content = clean_text(_first(entry, "content"))
    summary = clean_text(_first(entry, "summary"))
    url = _first(entry, "url")

    return RawItem(
        category=category,
        title=clean_text(_first(entry, "title")),
        content=content or summary,
        source_name=clean_text(_first(entry, "source", "source_name")),
        url=url.strip() if isinstance(url, str) else None,
        published_date=clean_text(_first(entry, "published_date", "publishedDate")),
        author=clean_text(_first(entry, "author")),
        reliability_hint=entry.get("reliability"),
        summary=summary,
        stance=clean_text(_first(entry, "stance")),
        key_points=_key_points(_first(entry, "key_points", "keyPoints")),
        item_id=f"news-{index}",
    )


def parse_response(raw_text: str) -> List[RawItem]:
    """
    Parse a text-engine reply into RawItems.

    Args:
        raw_text: Assistant message content

    Returns:
        Parsed items (possibly empty when the engine returned an empty list),
        or a single degraded item when no JSON envelope could be recovered
    """
    text = raw_text or ""
    candidate = extract_fenced_block(text) or text

    entries = normalize_envelope(_loads(candidate))
    if entries is None:
        span = find_balanced_json(candidate)
        if span is not None:
            entries = normalize_envelope(_loads(span))

    if entries is None:
        logger.warning("Could not parse text-engine reply, returning degraded payload")
        return [degraded_item()]

    items = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.debug(f"Skipping non-object entry news-{index}")
            continue
        item = entry_to_raw_item(entry, index)
        if item.category is CategoryKind.EDUCATIONAL_VIDEO:
            # Videos only come from the video API
            logger.debug(f"Discarding text-engine video entry news-{index}")
            continue
        items.append(item)

    logger.info(f"Parsed {len(items)} items from text-engine reply")
    return items
