"""Tests for request/item models and label translation."""

import dataclasses

import pytest

from debate_evidence.models import (
    ACTIVE_CATEGORIES,
    CategoryKind,
    EvidenceItem,
    SearchRequest,
    StanceDirection,
    reliability_grade,
)


class TestSearchRequest:
    """Tests for SearchRequest construction."""

    def test_empty_topic_rejected(self):
        with pytest.raises(ValueError):
            SearchRequest(topic="")

    def test_whitespace_topic_rejected(self):
        with pytest.raises(ValueError):
            SearchRequest(topic="   \n")

    def test_topic_is_stripped(self):
        request = SearchRequest(topic="  급식 잔반 줄이기  ")
        assert request.topic == "급식 잔반 줄이기"

    def test_empty_categories_default_to_active(self):
        request = SearchRequest(topic="주제", requested_categories=frozenset())
        assert request.requested_categories == ACTIVE_CATEGORIES

    def test_request_is_immutable(self):
        request = SearchRequest(topic="주제")
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.topic = "다른 주제"

    def test_create_maps_ui_labels(self):
        """create() should accept UI stance and category strings."""
        request = SearchRequest.create(
            "학교에서 스마트폰 사용을 허용해야 한다",
            stance_label="찬성",
            categories=["뉴스 기사", "educational_video", "unknown"],
        )
        assert request.stance_direction is StanceDirection.SUPPORTING
        assert request.requested_categories == frozenset({
            CategoryKind.NEWS_ARTICLE, CategoryKind.EDUCATIONAL_VIDEO,
        })

    def test_create_explicit_direction_wins(self):
        request = SearchRequest.create("주제", stance_label="찬성", stance_direction="negative")
        assert request.stance_direction is StanceDirection.OPPOSING
        assert request.stance_label == "찬성"

    def test_create_unknown_categories_fall_back_to_active(self):
        request = SearchRequest.create("주제", categories=["podcast"])
        assert request.requested_categories == ACTIVE_CATEGORIES

    def test_active_categories_excludes_legacy(self):
        request = SearchRequest(
            topic="주제",
            requested_categories=frozenset({CategoryKind.STATISTIC, CategoryKind.NEWS_ARTICLE}),
        )
        assert request.active_categories == frozenset({CategoryKind.NEWS_ARTICLE})
        assert request.wants(CategoryKind.STATISTIC)
        assert not request.wants(CategoryKind.EDUCATIONAL_VIDEO)


class TestLabels:
    """Tests for enum label translation."""

    @pytest.mark.parametrize("label,expected", [
        ("news_article", CategoryKind.NEWS_ARTICLE),
        ("NEWS_ARTICLE", CategoryKind.NEWS_ARTICLE),
        ("News-Article", CategoryKind.NEWS_ARTICLE),
        ("유튜브 영상", CategoryKind.EDUCATIONAL_VIDEO),
        ("통계 자료", CategoryKind.STATISTIC),
        ("podcast", None),
        (None, None),
        (3, None),
    ])
    def test_category_from_label(self, label, expected):
        assert CategoryKind.from_label(label) is expected

    def test_category_display_labels(self):
        assert CategoryKind.NEWS_ARTICLE.display_label == "뉴스 기사"
        assert CategoryKind.EDUCATIONAL_VIDEO.display_label == "유튜브 영상"

    @pytest.mark.parametrize("label,expected", [
        ("positive", StanceDirection.SUPPORTING),
        ("찬성", StanceDirection.SUPPORTING),
        ("Against", StanceDirection.OPPOSING),
        ("반대", StanceDirection.OPPOSING),
        ("", StanceDirection.NONE),
        (None, StanceDirection.NONE),
        ("maybe", StanceDirection.NONE),
    ])
    def test_stance_from_label(self, label, expected):
        assert StanceDirection.from_label(label) is expected

    def test_stance_opposite(self):
        assert StanceDirection.SUPPORTING.opposite is StanceDirection.OPPOSING
        assert StanceDirection.OPPOSING.opposite is StanceDirection.SUPPORTING
        assert StanceDirection.NONE.opposite is StanceDirection.NONE


class TestReliabilityGrade:
    """Tests for letter grades."""

    @pytest.mark.parametrize("score,grade", [
        (100, "A+"), (90, "A+"), (89, "A"), (80, "A"),
        (79, "B"), (70, "B"), (60, "C"), (59, "D"), (0, "D"),
    ])
    def test_grade_boundaries(self, score, grade):
        assert reliability_grade(score)["grade"] == grade

    def test_grade_has_description(self):
        assert reliability_grade(85)["description"]


class TestEvidenceItemSerialization:
    """Tests for EvidenceItem.to_dict()."""

    def test_to_dict_uses_plain_values(self):
        item = EvidenceItem(
            id="news-0",
            category=CategoryKind.NEWS_ARTICLE,
            title="스마트폰 사용 시간 조사",
            content="초등학생 스마트폰 사용 시간이 늘어나고 있다는 조사 결과가 나왔다.",
            source_name="연합뉴스",
            url="",
            reliability=82,
            stance=StanceDirection.SUPPORTING,
            key_points=["사용 시간 증가"],
        )
        d = item.to_dict()

        assert d["category"] == "news_article"
        assert d["type"] == "뉴스 기사"
        assert d["stance"] == "supporting"
        assert d["reliability_grade"] == "A"
        assert d["key_points"] == ["사용 시간 증가"]
