"""Safety and appropriateness filter for an elementary-school audience."""

import logging
from dataclasses import replace
from typing import Iterable, List

from ..models import CategoryKind, RawItem
from .lexicon import DEFAULT_LEXICON, SafetyLexicon

logger = logging.getLogger(__name__)


class SafetyFilter:
    """Drops blocklisted items and flags videos from educational channels."""

    def __init__(self, lexicon: SafetyLexicon = DEFAULT_LEXICON):
        self.lexicon = lexicon

    def is_educational(self, item: RawItem) -> bool:
        if item.category is not CategoryKind.EDUCATIONAL_VIDEO:
            return False
        return self.lexicon.is_trusted_channel(item.source_name or "") or \
            self.lexicon.is_trusted_channel(item.title or "")

    def apply(self, items: Iterable[RawItem]) -> List[RawItem]:
        """
        Filter items in order.

        Returns:
            New list; flagged videos are copies with is_educational=True
        """
        kept = []
        for item in items:
            keyword = self.lexicon.blocked_keyword_in(f"{item.title or ''}\n{item.content or ''}")
            if keyword:
                logger.info(f"Blocked {item.item_id or 'item'}: matched '{keyword}'")
                continue
            if self.is_educational(item) and not item.is_educational:
                item = replace(item, is_educational=True)
            kept.append(item)
        return kept
