"""Abstract base class for upstream source fetchers with an ordered attempt chain."""

import copy
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)


# Default configuration (can be overridden by config/evidence.yaml)
DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "text_engine": {
        "url": "https://api.perplexity.ai/chat/completions",
        "model": "sonar",
        "primary_timeout_seconds": 25,
        "fallback_timeout_seconds": 10,
        "max_tokens": 2000,
        "fallback_max_tokens": 1000,
        "temperature": 0.2,
        "fallback_paths": [
            "https://api.allorigins.win/raw?url=",
            "https://cors-anywhere.herokuapp.com/",
            "https://corsproxy.io/?",
            "https://thingproxy.freeboard.io/fetch/",
        ],
    },
    "video_engine": {
        "url": "https://www.googleapis.com/youtube/v3/search",
        "timeout_seconds": 15,
        "max_results": 50,
        "max_candidates": 10,
        "region_code": "KR",
        "relevance_language": "ko",
    },
    "aggregation": {
        "max_items": 10,
    },
}

CONFIG_FILENAME = "config/evidence.yaml"


def load_evidence_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load pipeline configuration from config/evidence.yaml.

    Args:
        path: Explicit config path; when omitted the working directory and
            the repository root are searched

    Returns:
        Config dict or empty dict if file not found
    """
    if path is not None:
        config_paths = [path]
    else:
        config_paths = [
            CONFIG_FILENAME,
            str(Path(__file__).resolve().parents[3] / CONFIG_FILENAME),
        ]

    for candidate in config_paths:
        if os.path.exists(candidate):
            try:
                with open(candidate, "r", encoding="utf-8") as f:
                    return yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load evidence config from {candidate}: {e}")

    return {}


def get_section(config: Optional[Dict[str, Any]], section: str) -> Dict[str, Any]:
    """
    Merge one config section over its defaults.

    Args:
        config: Loaded config dict (may be None or empty)
        section: Section name, e.g. "text_engine"

    Returns:
        Dict with every default key present
    """
    merged = copy.deepcopy(DEFAULT_CONFIG.get(section, {}))
    overrides = (config or {}).get(section) or {}
    if isinstance(overrides, dict):
        merged.update(overrides)
    return merged


class FetchError(Exception):
    """Exception raised when a single fetch attempt fails."""
    def __init__(self, source_id: str, message: str, original_error: Optional[Exception] = None):
        self.source_id = source_id
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_id}: {message}")


@dataclass(frozen=True)
class FetchAttempt:
    """One entry in a fetcher's attempt chain."""
    name: str
    url: str
    timeout: float
    simplified: bool = False


class BaseFetcher(ABC):
    """Abstract base for upstream fetchers with a sequential attempt chain."""

    def __init__(self, source_config: Dict[str, Any]):
        self.source_id = source_config["id"]
        self.name = source_config.get("name", self.source_id)
        self.config = source_config
        self.attempts_made = 0

    @abstractmethod
    def attempt_chain(self) -> List[FetchAttempt]:
        """Ordered attempts; the first success wins."""
        pass

    @abstractmethod
    def _fetch_impl(self, attempt: FetchAttempt, *args, **kwargs) -> Any:
        """
        Internal fetch implementation for one attempt - to be overridden by subclasses.

        Returns:
            The fetched payload

        Raises:
            FetchError on failure
        """
        pass

    def fetch(self, *args, **kwargs) -> Tuple[Any, Optional[str]]:
        """
        Run the attempt chain strictly in order, stopping at the first success.

        Returns:
            Tuple of (payload, error_message)
            - On success: (payload, None)
            - On failure of every attempt: (None, last error message)
        """
        last_error = None
        chain = self.attempt_chain()

        for index, attempt in enumerate(chain, start=1):
            self.attempts_made = index
            try:
                payload = self._fetch_impl(attempt, *args, **kwargs)
                if index > 1:
                    logger.info(f"{self.source_id}: succeeded on attempt {index}/{len(chain)} ({attempt.name})")
                return payload, None
            except Exception as e:
                last_error = str(e)
                if index < len(chain):
                    logger.warning(f"Attempt {index}/{len(chain)} ({attempt.name}) failed for {self.source_id}: {e}")
                else:
                    logger.error(f"All {len(chain)} attempts failed for {self.source_id}: {e}")

        return None, last_error
