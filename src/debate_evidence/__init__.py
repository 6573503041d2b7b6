"""
Debate evidence search.

Retrieves news articles and educational videos for an elementary-school
debate topic, filters them for age-appropriateness, validates and scores
them, and returns at most ten citable items.

Modules:
    models - Request, item and enum types
    search - Pipeline entry point and response envelope
    ingest - Upstream fetchers and the parallel retrieval coordinator
    pipeline - Planner, parser, safety filter, validator and aggregator
    config - API key handling
    cli - Command-line interface
"""

from .errors import EvidenceSearchError, ServiceUnavailableError
from .models import (
    ACTIVE_CATEGORIES,
    CategoryKind,
    EvidenceItem,
    RawItem,
    SearchRequest,
    StanceDirection,
    reliability_grade,
)
from .pipeline.aggregator import ProgressSink
from .search import EvidenceSearchPipeline, build_response, search_evidence

__all__ = [
    "ACTIVE_CATEGORIES",
    "CategoryKind",
    "EvidenceItem",
    "EvidenceSearchError",
    "EvidenceSearchPipeline",
    "ProgressSink",
    "RawItem",
    "SearchRequest",
    "ServiceUnavailableError",
    "StanceDirection",
    "build_response",
    "reliability_grade",
    "search_evidence",
]
