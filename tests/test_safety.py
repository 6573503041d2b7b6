"""Tests for the safety lexicon and the appropriateness filter."""

import pytest

from debate_evidence.models import CategoryKind, RawItem
from debate_evidence.pipeline.lexicon import DEFAULT_LEXICON, SafetyLexicon
from debate_evidence.pipeline.safety import SafetyFilter


def _news(title, content="학생들의 생활 습관에 대한 자세한 기사 내용입니다.", item_id="news-0"):
    return RawItem(
        category=CategoryKind.NEWS_ARTICLE,
        title=title,
        content=content,
        source_name="연합뉴스",
        item_id=item_id,
    )


def _video(title, channel, item_id="youtube-0"):
    return RawItem(
        category=CategoryKind.EDUCATIONAL_VIDEO,
        title=title,
        content="영상 설명이 여기에 들어갑니다. 충분히 긴 설명입니다.",
        source_name=channel,
        url="https://www.youtube.com/watch?v=abcdefghijk",
        item_id=item_id,
    )


class TestSafetyLexicon:
    """Tests for lexicon lookups."""

    def test_blocked_keyword_case_insensitive(self):
        assert DEFAULT_LEXICON.blocked_keyword_in("This clip is NSFW") == "nsfw"

    def test_common_words_not_blocked(self):
        """Substrings like 술 in 기술 must not trigger the blocklist."""
        assert DEFAULT_LEXICON.blocked_keyword_in("인공지능 기술과 학교 성적 향상") == ""

    def test_education_score(self):
        # 초등 2 + 토론 2 + 교육 2 + trusted channel 3
        assert DEFAULT_LEXICON.education_score("초등 토론 교육", "EBS") == 9

    def test_education_score_untrusted_channel(self):
        assert DEFAULT_LEXICON.education_score("어린이 과학", "Random Vlog") == 1

    @pytest.mark.parametrize("host,expected", [
        ("naver.com", True),
        ("n.news.naver.com", True),
        ("WWW.CHOSUN.COM", True),
        ("evilnaver.com", False),
        ("naver.com.evil.io", False),
        ("", False),
    ])
    def test_trusted_news_host(self, host, expected):
        assert DEFAULT_LEXICON.is_trusted_news_host(host) is expected

    def test_custom_lexicon_injected(self):
        lexicon = SafetyLexicon(blocked_keywords=("브로콜리",))
        assert lexicon.blocked_keyword_in("브로콜리 급식") == "브로콜리"
        assert lexicon.blocked_keyword_in("nsfw") == ""


class TestSafetyFilter:
    """Tests for SafetyFilter.apply()."""

    def test_blocked_title_dropped(self):
        items = [_news("청소년 도박 문제 심각", item_id="news-0"), _news("급식 잔반 줄이기 캠페인", item_id="news-1")]

        kept = SafetyFilter().apply(items)

        assert [i.item_id for i in kept] == ["news-1"]

    def test_blocked_content_dropped(self):
        item = _news("평범한 제목입니다", content="기사 본문에 음란 표현이 포함되어 있습니다.")
        assert SafetyFilter().apply([item]) == []

    def test_order_preserved(self):
        items = [_news(f"안전한 기사 제목 {i}", item_id=f"news-{i}") for i in range(4)]
        kept = SafetyFilter().apply(items)
        assert [i.item_id for i in kept] == ["news-0", "news-1", "news-2", "news-3"]

    def test_trusted_channel_video_flagged(self):
        original = _video("분리수거 잘하는 법", "EBS 초등")

        kept = SafetyFilter().apply([original])

        assert kept[0].is_educational is True
        # Input is not mutated
        assert original.is_educational is False

    def test_educational_title_flagged(self):
        kept = SafetyFilter().apply([_video("교육 다큐: 물의 순환", "Nature Clips")])
        assert kept[0].is_educational is True

    def test_untrusted_video_not_flagged(self):
        kept = SafetyFilter().apply([_video("고양이 브이로그", "Cat Daily")])
        assert kept[0].is_educational is False

    def test_news_never_flagged_educational(self):
        item = RawItem(
            category=CategoryKind.NEWS_ARTICLE,
            title="EBS 교육 뉴스",
            content="교육 관련 뉴스 기사 본문 내용입니다.",
            source_name="EBS",
        )
        assert SafetyFilter().apply([item])[0].is_educational is False
