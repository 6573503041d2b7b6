"""Tests for result validation, URL policy and reliability scoring."""

import pytest

from debate_evidence.models import CategoryKind, RawItem, StanceDirection
from debate_evidence.pipeline.parser import degraded_item
from debate_evidence.pipeline.validator import (
    DEFAULT_TEXT_RELIABILITY,
    DEFAULT_VIDEO_RELIABILITY,
    EDUCATIONAL_BONUS,
    ResultValidator,
    is_http_url,
    normalize_date,
    unwrap_relay_url,
)

CONTENT = "학교에서 스마트폰 사용을 허용해야 하는지에 대한 논쟁이 이어지고 있다."


def _news(url="", **overrides):
    fields = dict(
        category=CategoryKind.NEWS_ARTICLE,
        title="스마트폰 사용 허용 논쟁",
        content=CONTENT,
        source_name="한겨레",
        url=url,
        item_id="news-0",
    )
    fields.update(overrides)
    return RawItem(**fields)


def _video(url="https://www.youtube.com/watch?v=dQw4w9WgXcQ", **overrides):
    fields = dict(
        category=CategoryKind.EDUCATIONAL_VIDEO,
        title="초등 토론 수업 영상",
        content="초등학생을 위한 토론 수업 방법을 소개하는 영상입니다.",
        source_name="EBS 초등",
        url=url,
        item_id="youtube-0",
    )
    fields.update(overrides)
    return RawItem(**fields)


@pytest.fixture
def validator():
    return ResultValidator()


class TestRequiredFields:
    """Tests for required-field and length checks."""

    def test_valid_item_passes(self, validator):
        item = validator.validate(_news())
        assert item is not None
        assert item.id == "news-0"
        assert item.title == "스마트폰 사용 허용 논쟁"

    @pytest.mark.parametrize("overrides", [
        {"title": None},
        {"content": "   "},
        {"source_name": ""},
        {"title": "짧은제목"},
        {"content": "스무 글자가 안 되는 본문"},
    ])
    def test_invalid_item_dropped(self, validator, overrides):
        assert validator.validate(_news(**overrides)) is None

    def test_lengths_measured_after_strip(self, validator):
        assert validator.validate(_news(title="   짧은제목   ")) is None

    def test_validate_all_preserves_order(self, validator):
        items = [_news(item_id="news-0"), _news(title=None, item_id="news-1"), _news(item_id="news-2")]
        assert [i.id for i in validator.validate_all(items)] == ["news-0", "news-2"]

    def test_degraded_item_survives(self, validator):
        item = validator.validate(degraded_item())
        assert item is not None
        assert item.reliability == 50
        assert item.url == ""


class TestNewsUrlPolicy:
    """Tests for the news URL allowlist."""

    def test_root_url_cleared_item_kept(self, validator):
        item = validator.validate(_news(url="https://example.com/"))
        assert item is not None
        assert item.url == ""

    @pytest.mark.parametrize("url", [
        "https://www.chosun.com/national/education/2024/03/15/ABCDEF/",
        "https://n.news.naver.com/mnews/article/001/0014512345",
        "https://n.news.naver.com/article/001/0014512345",
        "https://v.daum.net/v/20240315123456789",
        "https://www.hani.co.kr/arti/society/schooling/1234567.html",
    ])
    def test_trusted_article_url_kept(self, validator, url):
        assert validator.validate(_news(url=url)).url == url

    @pytest.mark.parametrize("url", [
        "https://www.chosun.com/",
        "https://www.donga.com/index.html",
        "https://example.com/news/2024/03/15/article",
        "https://chosun.com.evil.io/national/2024/03/15/",
        "https://n.news.naver.com/main/ranking/popularDay",
        "https://n.news.naver.com/article/001",
        "https://v.daum.net/v/123",
        "ftp://www.chosun.com/national/1",
        "not a url",
    ])
    def test_untrusted_url_cleared(self, validator, url):
        item = validator.validate(_news(url=url))
        assert item is not None
        assert item.url == ""

    @pytest.mark.parametrize("url", [
        "https://[www.yna.co.kr/view/AKR1",
        "https://api.allorigins.win/raw?url=https%3A%2F%2F%5Bwww.yna.co.kr%2Fview",
    ])
    def test_malformed_url_cleared_item_kept(self, validator, url):
        item = validator.validate(_news(url=url))
        assert item is not None
        assert item.url == ""

    def test_relay_url_unwrapped(self, validator):
        wrapped = "https://api.allorigins.win/raw?url=https%3A%2F%2Fwww.hani.co.kr%2Farti%2Fsociety%2F1234.html"
        assert validator.validate(_news(url=wrapped)).url == "https://www.hani.co.kr/arti/society/1234.html"

    @pytest.mark.parametrize("wrapped,expected", [
        ("https://thingproxy.freeboard.io/fetch/https://www.ytn.co.kr/_ln/0103_202403151234",
         "https://www.ytn.co.kr/_ln/0103_202403151234"),
        ("https://cors-anywhere.herokuapp.com/https://www.mk.co.kr/news/society/10967890",
         "https://www.mk.co.kr/news/society/10967890"),
        ("https://corsproxy.io/?https%3A%2F%2Fwww.yna.co.kr%2Fview%2FAKR20240315",
         "https://www.yna.co.kr/view/AKR20240315"),
        ("https://www.chosun.com/national/2024/", "https://www.chosun.com/national/2024/"),
    ])
    def test_unwrap_relay_url(self, wrapped, expected):
        assert unwrap_relay_url(wrapped) == expected

    def test_unwrap_malformed_url_unchanged(self):
        assert unwrap_relay_url("https://[broken/path") == "https://[broken/path"

    def test_is_http_url_rejects_malformed(self):
        assert is_http_url("https://[www.yna.co.kr/view") is False


class TestVideoUrlPolicy:
    """Tests for video watch-link checks."""

    def test_canonical_watch_url_kept(self, validator):
        assert validator.validate(_video()).url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    @pytest.mark.parametrize("url", [
        "https://youtu.be/dQw4w9WgXcQ",
        "https://www.youtube.com/watch?v=short",
        "https://www.youtube.com/channel/UC123",
        "",
        None,
    ])
    def test_non_canonical_video_dropped(self, validator, url):
        assert validator.validate(_video(url=url)) is None

    def test_legacy_category_keeps_http_url(self, validator):
        item = validator.validate(_news(category=CategoryKind.STATISTIC, url="https://kosis.kr/statHtml/1"))
        assert item.url == "https://kosis.kr/statHtml/1"

    def test_legacy_category_clears_bad_url(self, validator):
        item = validator.validate(_news(category=CategoryKind.STATISTIC, url="kosis.kr"))
        assert item.url == ""


class TestScoring:
    """Tests for reliability scoring."""

    @pytest.mark.parametrize("hint,expected", [
        (85, 85),
        ("72", 72),
        ("90%", 90),
        (150, 100),
        (-5, 0),
        (None, DEFAULT_TEXT_RELIABILITY),
        ("high", DEFAULT_TEXT_RELIABILITY),
        (True, DEFAULT_TEXT_RELIABILITY),
        (float("nan"), DEFAULT_TEXT_RELIABILITY),
    ])
    def test_text_scores(self, validator, hint, expected):
        assert validator.validate(_news(reliability_hint=hint)).reliability == expected

    def test_video_default(self, validator):
        assert validator.validate(_video()).reliability == DEFAULT_VIDEO_RELIABILITY

    def test_educational_bonus(self, validator):
        item = validator.validate(_video(is_educational=True))
        assert item.reliability == DEFAULT_VIDEO_RELIABILITY + EDUCATIONAL_BONUS

    def test_bonus_clamped(self, validator):
        assert validator.validate(_video(is_educational=True, reliability_hint=97)).reliability == 100


class TestNormalization:
    """Tests for summary, date and stance normalization."""

    def test_summary_fallback(self, validator):
        content = "가" * 150
        item = validator.validate(_news(content=content, summary=None))
        assert item.summary == "가" * 100 + "..."

    def test_given_summary_kept(self, validator):
        assert validator.validate(_news(summary="핵심 요약")).summary == "핵심 요약"

    @pytest.mark.parametrize("value,expected", [
        ("2024-03-15", "2024-03-15"),
        ("2024-03-15T10:00:00Z", "2024-03-15"),
        ("2024.3.5", "2024-03-05"),
        ("2024-02-30", ""),
        ("어제", ""),
        (None, ""),
    ])
    def test_normalize_date(self, value, expected):
        assert normalize_date(value) == expected

    def test_stance_and_key_points_carried(self, validator):
        item = validator.validate(_news(stance="opposing", key_points=["비용 부담"]))
        assert item.stance is StanceDirection.OPPOSING
        assert item.key_points == ["비용 부담"]

    def test_validation_is_deterministic(self, validator):
        raw = _news(url="https://example.com/", reliability_hint="88")
        assert validator.validate(raw) == validator.validate(raw)
