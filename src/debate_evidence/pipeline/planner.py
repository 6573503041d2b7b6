"""
Query planner: turns a SearchRequest into the text-engine prompts and the
video-search query string.

Pure functions only, so plans can be asserted on directly in tests.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet

from ..models import CategoryKind, SearchRequest, StanceDirection


# Categories the text engine is asked for. Videos come from the video API.
TEXT_ENGINE_CATEGORIES: FrozenSet[CategoryKind] = frozenset({CategoryKind.NEWS_ARTICLE})

# Stance suffix is only appended while topic + suffix fits this limit
VIDEO_QUERY_SUFFIX_LIMIT = 32
MAX_VIDEO_QUERY_LENGTH = 80
MIN_VIDEO_QUERY_LENGTH = 2

VIDEO_STANCE_SUFFIX = {
    StanceDirection.SUPPORTING: "장점",
    StanceDirection.OPPOSING: "단점",
}

ITEM_FIELDS = (
    "category", "title", "content", "source", "url", "published_date",
    "author", "summary", "reliability", "stance", "key_points",
)

SYSTEM_INSTRUCTION = (
    "당신은 초등학생 토론 수업을 돕는 자료 조사 도우미입니다. "
    "실제로 존재하는 자료만 추천하고, 확실하지 않은 값은 추측하지 말고 빈 문자열(\"\")로 두세요. "
    "응답은 반드시 JSON 하나만 출력하세요. 마크다운이나 추가 설명은 쓰지 마세요."
)

SIMPLIFIED_SYSTEM_INSTRUCTION = (
    "뉴스 기사 3개를 찾아 JSON만 출력하세요. "
    '형식: {"items": [{"category": "news_article", "title": "", "content": "", '
    '"source": "", "url": "", "summary": "", "reliability": 80}]} '
    "모르는 값은 빈 문자열로 두세요."
)

_CATEGORY_PROMPT_TEXT = {
    CategoryKind.NEWS_ARTICLE: (
        "최신 뉴스 기사 (2020년 이후, 네이버 뉴스, 다음 뉴스, 조선일보, 중앙일보, 동아일보, "
        "한겨레, 경향신문, YTN, KBS, MBC, SBS 등 주요 언론사) - 실제 기사 전체 링크와 "
        "본문 핵심 문단 인용"
    ),
}


@dataclass(frozen=True)
class QueryPlan:
    """Everything the retrieval stage needs for one request."""
    text_prompt: str
    simplified_prompt: str
    video_query: str
    text_categories: FrozenSet[CategoryKind]

    @property
    def wants_text(self) -> bool:
        return bool(self.text_categories)


def stance_labels(direction: StanceDirection):
    """Display strings for the primary and opposite direction."""
    if direction is StanceDirection.NONE:
        return "", ""
    return direction.display_label, direction.opposite.display_label


def build_text_prompt(request: SearchRequest) -> str:
    """Full retrieval prompt for the primary text-engine attempt."""
    primary, opposite = stance_labels(request.stance_direction)
    categories = sorted(request.requested_categories & TEXT_ENGINE_CATEGORIES, key=lambda c: c.value)
    category_lines = "\n".join(
        f"- {c.value}: {_CATEGORY_PROMPT_TEXT[c]}" for c in categories
    )
    allowed = " | ".join(f'"{c.value}"' for c in categories)
    example_category = categories[0].value if categories else ""

    if request.stance_direction is StanceDirection.NONE:
        balance = (
            "- 자료는 총 4-6개로 구성하고, 찬성 입장과 반대 입장 자료를 고르게 섞으세요.\n"
            '- 각 자료의 stance는 "supporting" 또는 "opposing"으로 표시하세요.'
        )
    else:
        balance = (
            f"- 자료는 총 4-6개로 구성하세요. 약 70%는 {primary} 입장을 뒷받침하는 자료, "
            f"약 30%는 {opposite} 입장 자료(반박 준비용)로 나누세요.\n"
            f'- 각 자료의 stance는 {primary} 입장 자료면 "{request.stance_direction.value}", '
            f'{opposite} 입장 자료면 "{request.stance_direction.opposite.value}"로 표시하세요.'
        )

    fields = ", ".join(ITEM_FIELDS)
    return f"""토론 근거자료 검색 (초등교육용)

- 토론 주제: {request.topic}
- 사용자 입장: {request.stance_label or "미정"}
- 입장 분류: {primary + " 입장" if primary else "중립"}
- 대상: 초등학생 (8-12세)

검색할 자료 유형 (아래 유형만 포함하세요):
{category_lines}

구성 규칙:
{balance}
- 초등학생이 이해할 수 있는 쉽고 바른 말로 설명하세요. 어려운 용어는 피하세요.
- 주제와 직접 관련된 실제 자료만 선택하세요. 가상의 URL이나 내용은 절대 만들지 마세요.
- 뉴스 기사 URL은 기사 본문으로 바로 연결되는 전체 주소만 쓰세요. 언론사 메인 페이지 주소는 금지입니다.
- 확실하지 않은 값은 모두 빈 문자열("")로 두세요. 추측하지 마세요.

출력 형식:
- JSON만 출력하세요. 최상위 객체에는 "items" 배열 하나만 둡니다.
- 각 항목은 정확히 다음 필드만 가집니다: {fields}
- category는 {allowed} 중 하나, reliability는 0-100 정수, published_date는 YYYY-MM-DD 또는 "",
  key_points는 문자열 배열입니다.

{{"items": [{{"category": "{example_category}", "title": "", "content": "", "source": "", "url": "", "published_date": "", "author": "", "summary": "", "reliability": 80, "stance": "", "key_points": []}}]}}"""


def build_simplified_prompt(request: SearchRequest) -> str:
    """Shorter prompt for fallback attempts: news only, three items, compact contract."""
    primary, _ = stance_labels(request.stance_direction)
    stance_line = f"입장: {primary}\n" if primary else ""
    return (
        f"토론 주제: {request.topic}\n"
        f"{stance_line}"
        "초등학생이 이해할 수 있는 뉴스 기사 3개를 찾아주세요. "
        "확실하지 않은 URL은 빈 문자열로 두세요."
    )


def sanitize_video_query(topic: str) -> str:
    """Replace anything other than letters, digits and whitespace; collapse spaces."""
    cleaned = "".join(ch if ch.isalnum() or ch.isspace() else " " for ch in topic)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if len(cleaned) < MIN_VIDEO_QUERY_LENGTH:
        cleaned = topic.strip()
    return cleaned


def build_video_query(request: SearchRequest) -> str:
    """Video-search query: sanitized topic plus an optional stance suffix."""
    query = sanitize_video_query(request.topic)
    suffix = VIDEO_STANCE_SUFFIX.get(request.stance_direction)
    if suffix and len(query) + 1 + len(suffix) <= VIDEO_QUERY_SUFFIX_LIMIT:
        query = f"{query} {suffix}"
    return query[:MAX_VIDEO_QUERY_LENGTH].strip()


def plan_queries(request: SearchRequest) -> QueryPlan:
    """Build the complete query plan for a request."""
    return QueryPlan(
        text_prompt=build_text_prompt(request),
        simplified_prompt=build_simplified_prompt(request),
        video_query=build_video_query(request),
        text_categories=frozenset(request.requested_categories & TEXT_ENGINE_CATEGORIES),
    )
