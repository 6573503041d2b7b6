"""
Safety lexicon: read-only keyword and domain tables.

A SafetyLexicon is built once and injected into SafetyFilter and
ResultValidator. Every table is a tuple, so a shared instance can be read
from concurrent searches without locking.
"""

from dataclasses import dataclass
from typing import Tuple


# Unsafe topics for an elementary-school audience. Matched as
# case-insensitive substrings of title + content, so single-syllable Korean
# words that occur inside common words (술 in 기술, 성적 as "grades") are
# listed in a longer, unambiguous form.
INAPPROPRIATE_KEYWORDS: Tuple[str, ...] = (
    "19금", "성인물", "성인용", "도박", "음주", "술자리", "담배", "폭력",
    "욕설", "혐오", "자살", "자해", "마약", "선정적", "섹스", "음란",
    "야한", "불법", "해킹", "사기꾼", "협박", "살인",
    "porn", "nsfw", "xxx", "gambling", "suicide", "self-harm", "cocaine",
    "heroin", "gore",
)

# Channel-name substrings of known educational broadcasters and institutions
TRUSTED_CHANNELS: Tuple[str, ...] = (
    "ebs", "kbs", "edu", "교육", "학교",
    "ebs 초등", "ebs교육", "kbs 교육", "ytn 사이언스", "과학쿠키", "안될과학",
    "북튜브", "교육부", "교육청", "어린이tv", "키즈",
)

# Title keywords and their ranking weight for video candidates
EDUCATIONAL_KEYWORD_WEIGHTS: Tuple[Tuple[str, int], ...] = (
    ("교육", 2),
    ("초등", 2),
    ("학교", 1),
    ("토론", 2),
    ("학습", 1),
    ("아이", 1),
    ("어린이", 1),
)

TRUSTED_CHANNEL_WEIGHT = 3

TRUSTED_NEWS_DOMAINS: Tuple[str, ...] = (
    "naver.com", "daum.net", "chosun.com", "donga.com", "joongang.co.kr",
    "hani.co.kr", "khan.co.kr", "mt.co.kr", "mk.co.kr", "ytn.co.kr",
    "kbs.co.kr", "mbc.co.kr", "sbs.co.kr", "jtbc.co.kr", "news1.kr",
    "newsis.com", "yonhapnews.co.kr", "yna.co.kr", "edaily.co.kr", "seoul.co.kr",
    "hankyung.com", "hankookilbo.com", "sisain.co.kr", "ohmynews.com",
    "pressian.com", "moneytoday.co.kr", "etnews.com", "zdnet.co.kr",
)


@dataclass(frozen=True)
class SafetyLexicon:
    """Immutable lookup tables consulted by the filter and validator."""
    blocked_keywords: Tuple[str, ...] = INAPPROPRIATE_KEYWORDS
    trusted_channels: Tuple[str, ...] = TRUSTED_CHANNELS
    educational_keywords: Tuple[Tuple[str, int], ...] = EDUCATIONAL_KEYWORD_WEIGHTS
    trusted_channel_weight: int = TRUSTED_CHANNEL_WEIGHT
    trusted_news_domains: Tuple[str, ...] = TRUSTED_NEWS_DOMAINS

    def blocked_keyword_in(self, text: str) -> str:
        """Return the first blocklisted keyword found in text, or ''."""
        lowered = (text or "").lower()
        for keyword in self.blocked_keywords:
            if keyword.lower() in lowered:
                return keyword
        return ""

    def is_trusted_channel(self, channel_name: str) -> bool:
        lowered = (channel_name or "").lower()
        return any(channel.lower() in lowered for channel in self.trusted_channels)

    def education_score(self, title: str, channel_name: str) -> int:
        """Coarse ranking score for a video candidate."""
        lowered = (title or "").lower()
        score = sum(weight for keyword, weight in self.educational_keywords if keyword in lowered)
        if self.is_trusted_channel(channel_name):
            score += self.trusted_channel_weight
        return score

    def is_trusted_news_host(self, host: str) -> bool:
        """True if host equals, or is a subdomain of, a trusted news domain."""
        host = (host or "").lower().rstrip(".")
        if not host:
            return False
        return any(host == domain or host.endswith("." + domain) for domain in self.trusted_news_domains)


DEFAULT_LEXICON = SafetyLexicon()
