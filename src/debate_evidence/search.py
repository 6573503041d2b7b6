"""
Evidence search entry point.

Wires the stages together in a fixed order:

    request -> planner -> coordinator (text + video in parallel)
            -> parser (text) -> safety filter -> validator -> aggregator

Usage:
    from debate_evidence import SearchRequest, search_evidence

    request = SearchRequest.create("초등학생 휴대폰 사용", stance_label="찬성")
    items = search_evidence(request, progress=lambda stage, label: print(stage, label))
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .config.secrets import (
    MissingAPIKeyError,
    PERPLEXITY_KEY_NAME,
    YOUTUBE_KEY_NAME,
    get_perplexity_key,
    get_youtube_key,
)
from .errors import ServiceUnavailableError
from .ingest.base_fetcher import get_section, load_evidence_config
from .ingest.coordinator import RetrievalCoordinator
from .models import CategoryKind, EvidenceItem, SearchRequest
from .pipeline.aggregator import (
    MAX_RESULTS,
    STAGE_DONE,
    STAGE_PREPARING,
    STAGE_PROCESSING,
    STAGE_QUERYING,
    STAGE_VALIDATING,
    ProgressReporter,
    SinkLike,
    aggregate,
)
from .pipeline.lexicon import DEFAULT_LEXICON, SafetyLexicon
from .pipeline.parser import parse_response
from .pipeline.planner import plan_queries
from .pipeline.safety import SafetyFilter
from .pipeline.validator import ResultValidator

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "검색 결과가 없습니다. 다른 키워드로 다시 검색해보세요."


def _resolve_key(getter) -> Optional[str]:
    try:
        return getter()
    except MissingAPIKeyError as e:
        logger.warning(str(e))
        return None


class EvidenceSearchPipeline:
    """
    Reusable search pipeline.

    Holds only read-only collaborators (config, keys, lexicon), so one
    instance can serve concurrent searches.
    """

    def __init__(
        self,
        perplexity_key: Optional[str] = None,
        youtube_key: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
        lexicon: SafetyLexicon = DEFAULT_LEXICON,
        load_keys: bool = True,
    ):
        """
        Args:
            perplexity_key: Text-engine key; read from the environment when omitted
            youtube_key: Video API key; read from the environment when omitted
            config: Parsed evidence config; config/evidence.yaml when omitted
            lexicon: Safety tables shared by the filter, validator and ranking
            load_keys: Set False to use only the keys passed in
        """
        if perplexity_key is None and load_keys:
            perplexity_key = _resolve_key(get_perplexity_key)
        if youtube_key is None and load_keys:
            youtube_key = _resolve_key(get_youtube_key)

        self.perplexity_key = perplexity_key or None
        self.youtube_key = youtube_key or None
        self.config = config if config is not None else load_evidence_config()
        self.lexicon = lexicon
        self.max_items = int(get_section(self.config, "aggregation").get("max_items", MAX_RESULTS))

        self.coordinator = RetrievalCoordinator(
            config=self.config,
            perplexity_key=self.perplexity_key,
            youtube_key=self.youtube_key,
            lexicon=lexicon,
        )
        self.safety_filter = SafetyFilter(lexicon)
        self.validator = ResultValidator(lexicon)

    def check_configuration(self, request: SearchRequest) -> None:
        """
        Raise ServiceUnavailableError when no requested active source has a key.

        A request whose categories are all legacy (never retrieved) passes.
        """
        wanted = request.active_categories
        if not wanted:
            return

        sources = []
        if CategoryKind.NEWS_ARTICLE in wanted:
            sources.append((PERPLEXITY_KEY_NAME, self.perplexity_key))
        if CategoryKind.EDUCATIONAL_VIDEO in wanted:
            sources.append((YOUTUBE_KEY_NAME, self.youtube_key))

        missing = [name for name, key in sources if not key]
        if len(missing) == len(sources):
            raise ServiceUnavailableError(
                f"No evidence source is configured (missing: {', '.join(missing)})",
                missing=missing,
            )

    def search(self, request: SearchRequest, progress: Optional[SinkLike] = None) -> List[EvidenceItem]:
        """
        Run one evidence search.

        Args:
            request: What to search for
            progress: ProgressSink or callable(stage, label) receiving stages 1-5

        Returns:
            Up to 10 validated items, text-engine items first. Empty when
            every source came back empty or failed.

        Raises:
            ServiceUnavailableError: no requested source is configured
        """
        self.check_configuration(request)
        reporter = ProgressReporter(progress)

        reporter.stage(STAGE_PREPARING)
        plan = plan_queries(request)
        logger.info(
            f"Searching evidence: topic='{request.topic}' stance={request.stance_direction.value} "
            f"categories={sorted(c.value for c in request.requested_categories)}"
        )

        reporter.stage(STAGE_QUERYING)
        retrieval = self.coordinator.retrieve(request, plan)
        for source_id, error in retrieval.errors.items():
            logger.warning(f"{source_id} returned no data: {error}")

        reporter.stage(STAGE_PROCESSING)
        text_raw = parse_response(retrieval.text_payload) if retrieval.text_payload is not None else []
        text_safe = self.safety_filter.apply(text_raw)
        video_safe = self.safety_filter.apply(retrieval.video_items)

        reporter.stage(STAGE_VALIDATING)
        text_valid = self.validator.validate_all(text_safe)
        video_valid = self.validator.validate_all(video_safe)

        reporter.stage(STAGE_DONE)
        items = aggregate(text_valid, video_valid, self.max_items)
        logger.info(
            f"Evidence search done: {len(items)} items "
            f"(text {len(text_raw)}->{len(text_valid)}, video {len(retrieval.video_items)}->{len(video_valid)})"
        )
        return items


def search_evidence(
    request: SearchRequest,
    progress: Optional[SinkLike] = None,
    *,
    pipeline: Optional[EvidenceSearchPipeline] = None,
) -> List[EvidenceItem]:
    """Run a search with a default pipeline (keys from the environment)."""
    pipeline = pipeline or EvidenceSearchPipeline()
    return pipeline.search(request, progress)


def build_response(request: SearchRequest, items: List[EvidenceItem]) -> Dict[str, Any]:
    """Response envelope for the UI collaborator."""
    response = {
        "evidences": [item.to_dict() for item in items],
        "totalCount": len(items),
        "searchQuery": request.topic,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if not items:
        response["message"] = NO_RESULTS_MESSAGE
    return response
