"""
Data models for the evidence search pipeline.

SearchRequest and EvidenceItem are the only types the caller sees. RawItem is
the loosely-typed intermediate shape produced by the sources and consumed by
the filter and validator.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional


class CategoryKind(Enum):
    """Evidence categories. Only ACTIVE_CATEGORIES are retrieved."""
    NEWS_ARTICLE = "news_article"
    EDUCATIONAL_VIDEO = "educational_video"
    # Legacy members, kept for payloads that still carry them
    ACADEMIC_PAPER = "academic_paper"
    STATISTIC = "statistic"

    @classmethod
    def from_label(cls, label: Any) -> Optional["CategoryKind"]:
        """Map a UI or upstream category string to a member (None if unknown)."""
        if isinstance(label, CategoryKind):
            return label
        if not isinstance(label, str):
            return None
        key = label.strip().lower().replace("-", " ").replace("_", " ")
        return _CATEGORY_ALIASES.get(key)

    @property
    def display_label(self) -> str:
        return _CATEGORY_DISPLAY[self]


_CATEGORY_ALIASES = {
    "news article": CategoryKind.NEWS_ARTICLE,
    "newsarticle": CategoryKind.NEWS_ARTICLE,
    "news": CategoryKind.NEWS_ARTICLE,
    "article": CategoryKind.NEWS_ARTICLE,
    "뉴스 기사": CategoryKind.NEWS_ARTICLE,
    "뉴스": CategoryKind.NEWS_ARTICLE,
    "educational video": CategoryKind.EDUCATIONAL_VIDEO,
    "educationalvideo": CategoryKind.EDUCATIONAL_VIDEO,
    "video": CategoryKind.EDUCATIONAL_VIDEO,
    "youtube": CategoryKind.EDUCATIONAL_VIDEO,
    "youtube video": CategoryKind.EDUCATIONAL_VIDEO,
    "유튜브 영상": CategoryKind.EDUCATIONAL_VIDEO,
    "academic paper": CategoryKind.ACADEMIC_PAPER,
    "academicpaper": CategoryKind.ACADEMIC_PAPER,
    "학술 자료": CategoryKind.ACADEMIC_PAPER,
    "statistic": CategoryKind.STATISTIC,
    "statistics": CategoryKind.STATISTIC,
    "통계 자료": CategoryKind.STATISTIC,
}

_CATEGORY_DISPLAY = {
    CategoryKind.NEWS_ARTICLE: "뉴스 기사",
    CategoryKind.EDUCATIONAL_VIDEO: "유튜브 영상",
    CategoryKind.ACADEMIC_PAPER: "학술 자료",
    CategoryKind.STATISTIC: "통계 자료",
}

ACTIVE_CATEGORIES: FrozenSet[CategoryKind] = frozenset({
    CategoryKind.NEWS_ARTICLE,
    CategoryKind.EDUCATIONAL_VIDEO,
})


class StanceDirection(Enum):
    """Which side of the debate an item (or the caller) is on."""
    SUPPORTING = "supporting"
    OPPOSING = "opposing"
    NONE = "none"

    @classmethod
    def from_label(cls, label: Any) -> "StanceDirection":
        if isinstance(label, StanceDirection):
            return label
        if not isinstance(label, str):
            return cls.NONE
        return _STANCE_ALIASES.get(label.strip().lower(), cls.NONE)

    @property
    def display_label(self) -> str:
        return {"supporting": "찬성", "opposing": "반대"}.get(self.value, "")

    @property
    def opposite(self) -> "StanceDirection":
        if self is StanceDirection.SUPPORTING:
            return StanceDirection.OPPOSING
        if self is StanceDirection.OPPOSING:
            return StanceDirection.SUPPORTING
        return StanceDirection.NONE


_STANCE_ALIASES = {
    "supporting": StanceDirection.SUPPORTING,
    "positive": StanceDirection.SUPPORTING,
    "for": StanceDirection.SUPPORTING,
    "pro": StanceDirection.SUPPORTING,
    "찬성": StanceDirection.SUPPORTING,
    "opposing": StanceDirection.OPPOSING,
    "negative": StanceDirection.OPPOSING,
    "against": StanceDirection.OPPOSING,
    "con": StanceDirection.OPPOSING,
    "반대": StanceDirection.OPPOSING,
}


@dataclass(frozen=True)
class SearchRequest:
    """One evidence search. Immutable once constructed."""
    topic: str
    stance_label: str = ""
    stance_direction: StanceDirection = StanceDirection.NONE
    requested_categories: FrozenSet[CategoryKind] = ACTIVE_CATEGORIES

    def __post_init__(self):
        if not isinstance(self.topic, str) or not self.topic.strip():
            raise ValueError("topic must be a non-empty string")
        object.__setattr__(self, "topic", self.topic.strip())
        categories = frozenset(self.requested_categories or ())
        if not categories:
            categories = ACTIVE_CATEGORIES
        object.__setattr__(self, "requested_categories", categories)

    @classmethod
    def create(
        cls,
        topic: str,
        stance_label: str = "",
        categories: Optional[Iterable[Any]] = None,
        stance_direction: Optional[Any] = None,
    ) -> "SearchRequest":
        """
        Build a request from UI-edge values.

        Args:
            topic: Debate topic
            stance_label: Free-text stance shown to the user ("찬성", "positive", ...)
            categories: Category labels or CategoryKind members; unknown labels are ignored
            stance_direction: Explicit direction; derived from stance_label when omitted

        Returns:
            SearchRequest
        """
        kinds = set()
        for label in categories or ():
            kind = CategoryKind.from_label(label)
            if kind is not None:
                kinds.add(kind)

        direction = StanceDirection.from_label(
            stance_direction if stance_direction is not None else stance_label
        )
        return cls(
            topic=topic,
            stance_label=stance_label or "",
            stance_direction=direction,
            requested_categories=frozenset(kinds),
        )

    def wants(self, category: CategoryKind) -> bool:
        return category in self.requested_categories

    @property
    def active_categories(self) -> FrozenSet[CategoryKind]:
        return self.requested_categories & ACTIVE_CATEGORIES


@dataclass(frozen=True)
class RawItem:
    """Payload as received from a source, before validation. Every field is optional."""
    category: Optional[CategoryKind] = None
    title: Optional[str] = None
    content: Optional[str] = None
    source_name: Optional[str] = None
    url: Optional[str] = None
    published_date: Optional[str] = None
    author: Optional[str] = None
    reliability_hint: Any = None
    summary: Optional[str] = None
    stance: Optional[str] = None
    key_points: List[str] = field(default_factory=list)
    is_educational: bool = False
    item_id: str = ""


@dataclass(frozen=True)
class EvidenceItem:
    """A validated, citable evidence item."""
    id: str
    category: CategoryKind
    title: str
    content: str
    source_name: str
    url: str
    reliability: int
    published_date: str = ""
    author: str = ""
    summary: str = ""
    stance: StanceDirection = StanceDirection.NONE
    key_points: List[str] = field(default_factory=list)
    is_educational: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the UI collaborator (category as its display label)."""
        d = asdict(self)
        d["category"] = self.category.value
        d["type"] = self.category.display_label
        d["stance"] = self.stance.value
        d["reliability_grade"] = reliability_grade(self.reliability)["grade"]
        return d


def reliability_grade(reliability: int) -> Dict[str, str]:
    """Letter grade for a 0-100 reliability score."""
    if reliability >= 90:
        return {"grade": "A+", "description": "매우 신뢰할 수 있음"}
    elif reliability >= 80:
        return {"grade": "A", "description": "신뢰할 수 있음"}
    elif reliability >= 70:
        return {"grade": "B", "description": "보통 신뢰도"}
    elif reliability >= 60:
        return {"grade": "C", "description": "주의 깊게 검토 필요"}
    else:
        return {"grade": "D", "description": "추가 검증 필요"}
