"""Small text helpers shared by the fetchers and the parser."""

import re
import warnings
from typing import Any, Optional

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(value: Any) -> Optional[str]:
    """
    Strip HTML tags and entities from an upstream string and collapse whitespace.

    Returns None for None, and str(value) for non-string scalars.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    if "<" in value or "&" in value:
        with warnings.catch_warnings():
            # Plain strings that look like URLs or paths trigger a bs4 hint
            warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
            value = BeautifulSoup(value, "html.parser").get_text(" ")
    return _WHITESPACE_RE.sub(" ", value).strip()


def truncate(text: str, limit: int, marker: str = "...") -> str:
    """Cut text to limit characters, appending marker only when something was cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + marker
