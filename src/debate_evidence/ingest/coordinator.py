"""
Retrieval coordinator.

Runs the text-engine branch and the video branch concurrently and joins
both. Each branch is independent: one failing or timing out never affects
the other, and neither failure is raised to the caller.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..models import CategoryKind, RawItem, SearchRequest
from ..pipeline.lexicon import DEFAULT_LEXICON, SafetyLexicon
from ..pipeline.planner import QueryPlan
from .base_fetcher import get_section
from .fetch_perplexity import PerplexityFetcher
from .fetch_youtube import YouTubeFetcher

logger = logging.getLogger(__name__)

TEXT_SOURCE_ID = "perplexity"
VIDEO_SOURCE_ID = "youtube"


@dataclass
class RetrievalResult:
    """Joined output of both branches."""
    text_payload: Optional[str] = None
    video_items: List[RawItem] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    attempts: Dict[str, int] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)


class RetrievalCoordinator:
    """
    Schedules the two source branches on a two-worker thread pool.

    Fetchers are built per call, so a coordinator can be shared between
    concurrent searches.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        perplexity_key: Optional[str] = None,
        youtube_key: Optional[str] = None,
        lexicon: SafetyLexicon = DEFAULT_LEXICON,
    ):
        self.config = config or {}
        self.perplexity_key = perplexity_key
        self.youtube_key = youtube_key
        self.lexicon = lexicon

    def _text_fetcher(self) -> PerplexityFetcher:
        source_config = {"id": TEXT_SOURCE_ID, "name": "Perplexity", **get_section(self.config, "text_engine")}
        return PerplexityFetcher(source_config, self.perplexity_key)

    def _video_fetcher(self) -> YouTubeFetcher:
        source_config = {"id": VIDEO_SOURCE_ID, "name": "YouTube", **get_section(self.config, "video_engine")}
        return YouTubeFetcher(source_config, self.youtube_key, self.lexicon)

    def _run_branch(self, source_id: str, build_fetcher, argument) -> Tuple[Any, Optional[str], int]:
        """Run one branch to completion; every failure is converted to an error string."""
        try:
            fetcher = build_fetcher()
            payload, error = fetcher.fetch(argument)
            return payload, error, fetcher.attempts_made
        except Exception as e:
            logger.error(f"{source_id} branch crashed: {e}", exc_info=True)
            return None, str(e), 0

    def retrieve(self, request: SearchRequest, plan: QueryPlan) -> RetrievalResult:
        """
        Fetch from every requested, configured source in parallel.

        Args:
            request: The search request (decides which branches run)
            plan: Prompts and video query from the planner

        Returns:
            RetrievalResult; text_payload is None when the text branch was
            skipped or every attempt failed
        """
        result = RetrievalResult()

        run_text = plan.wants_text
        if run_text and not self.perplexity_key:
            logger.warning(f"{TEXT_SOURCE_ID}: API key missing, skipping text branch")
            run_text = False
        if not run_text:
            result.skipped.append(TEXT_SOURCE_ID)

        run_video = request.wants(CategoryKind.EDUCATIONAL_VIDEO)
        if run_video and not self.youtube_key:
            logger.warning(f"{VIDEO_SOURCE_ID}: API key missing, skipping video branch")
            run_video = False
        if not run_video:
            result.skipped.append(VIDEO_SOURCE_ID)

        futures = {}
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="evidence") as executor:
            if run_text:
                futures[TEXT_SOURCE_ID] = executor.submit(
                    self._run_branch, TEXT_SOURCE_ID, self._text_fetcher, plan
                )
            if run_video:
                futures[VIDEO_SOURCE_ID] = executor.submit(
                    self._run_branch, VIDEO_SOURCE_ID, self._video_fetcher, plan.video_query
                )
            outcomes = {source_id: future.result() for source_id, future in futures.items()}

        for source_id, (payload, error, attempts) in outcomes.items():
            result.attempts[source_id] = attempts
            if error:
                result.errors[source_id] = error
            if source_id == TEXT_SOURCE_ID:
                result.text_payload = payload
            else:
                result.video_items = list(payload or [])

        logger.info(
            f"Retrieval done: text={'yes' if result.text_payload else 'no'}, "
            f"videos={len(result.video_items)}, errors={len(result.errors)}"
        )
        return result
