"""Text-engine (Perplexity chat completions) fetcher.

The first attempt calls the API directly with the full prompt. When that
fails, each configured relay path is tried in order with the simplified
prompt and a shorter timeout.

API Documentation: https://docs.perplexity.ai/api-reference/chat-completions
"""

import logging
import os
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from ..pipeline.planner import QueryPlan, SIMPLIFIED_SYSTEM_INSTRUCTION, SYSTEM_INSTRUCTION
from .base_fetcher import BaseFetcher, FetchAttempt, FetchError, get_section

logger = logging.getLogger(__name__)

MODEL_ENV_VAR = "PERPLEXITY_MODEL"

_session = requests.Session()


def relay_url(prefix: str, target: str) -> str:
    """Route target through a relay prefix; query-style prefixes get the URL encoded."""
    if prefix.endswith(("=", "?")):
        return prefix + quote(target, safe="")
    return prefix + target


def extract_message_content(data: Any) -> Optional[str]:
    """Pull choices[0].message.content out of a chat-completions reply."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str) or not content.strip():
        return None
    return content


class PerplexityFetcher(BaseFetcher):
    """Fetch a raw evidence text blob from the text engine."""

    def __init__(self, source_config: Dict[str, Any], api_key: str):
        super().__init__(source_config)
        self.api_key = api_key
        # source_config carries the text_engine settings; missing keys fall back to defaults
        self.engine = get_section({"text_engine": source_config}, "text_engine")
        self.model = os.environ.get(MODEL_ENV_VAR, "").strip() or self.engine["model"]

    def attempt_chain(self) -> List[FetchAttempt]:
        url = self.engine["url"]
        chain = [
            FetchAttempt(
                name="direct",
                url=url,
                timeout=float(self.engine["primary_timeout_seconds"]),
                simplified=False,
            )
        ]
        for i, prefix in enumerate(self.engine.get("fallback_paths") or [], start=1):
            chain.append(FetchAttempt(
                name=f"relay-{i}",
                url=relay_url(prefix, url),
                timeout=float(self.engine["fallback_timeout_seconds"]),
                simplified=True,
            ))
        return chain

    def build_payload(self, plan: QueryPlan, simplified: bool) -> Dict[str, Any]:
        if simplified:
            system, prompt = SIMPLIFIED_SYSTEM_INSTRUCTION, plan.simplified_prompt
            max_tokens = self.engine["fallback_max_tokens"]
        else:
            system, prompt = SYSTEM_INSTRUCTION, plan.text_prompt
            max_tokens = self.engine["max_tokens"]
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": self.engine["temperature"],
        }

    def _fetch_impl(self, attempt: FetchAttempt, plan: QueryPlan) -> str:
        """Run one attempt and return the assistant message text.

        Raises:
            FetchError: on timeout, transport error, non-2xx status,
                non-JSON body or a reply without content
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = self.build_payload(plan, attempt.simplified)

        try:
            response = _session.post(attempt.url, json=payload, headers=headers, timeout=attempt.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(self.source_id, f"{attempt.name} request failed: {e}", e) from e

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(self.source_id, f"{attempt.name} returned a non-JSON body", e) from e

        content = extract_message_content(data)
        if content is None:
            raise FetchError(self.source_id, f"{attempt.name} reply has no message content")

        logger.info(f"{self.source_id}: received {len(content)} chars via {attempt.name}")
        return content
