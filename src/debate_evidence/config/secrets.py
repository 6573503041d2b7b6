"""
Secret management for upstream API keys.

Usage:
    from debate_evidence.config.secrets import get_perplexity_key, get_youtube_key

    # Will raise if key is missing
    key = get_perplexity_key()

CLI check:
    python -m debate_evidence.config.secrets --check
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Find .env file - walk up from this file to repo root
_current = Path(__file__).resolve()
_repo_root = _current.parents[3]  # src/debate_evidence/config/secrets.py -> repo root
_env_path = _repo_root / ".env"

if _env_path.exists():
    load_dotenv(_env_path)
else:
    # Also try current working directory
    load_dotenv()


PERPLEXITY_KEY_NAME = "PERPLEXITY_API_KEY"
YOUTUBE_KEY_NAME = "YOUTUBE_API_KEY"


class MissingAPIKeyError(Exception):
    """Raised when a required API key is not configured."""

    def __init__(self, key_name: str, message: str = ""):
        self.key_name = key_name
        super().__init__(message or f"{key_name} not found. Copy .env.example to .env and add your key.")


def _get_key(key_name: str) -> str:
    key = os.environ.get(key_name, "").strip()
    if not key:
        raise MissingAPIKeyError(key_name)
    return key


def get_perplexity_key() -> str:
    """
    Get the text-engine (Perplexity) API key from environment.

    Returns:
        str: The API key

    Raises:
        MissingAPIKeyError: If PERPLEXITY_API_KEY is not set
    """
    return _get_key(PERPLEXITY_KEY_NAME)


def get_youtube_key() -> str:
    """
    Get the YouTube Data API v3 key from environment.

    Returns:
        str: The API key

    Raises:
        MissingAPIKeyError: If YOUTUBE_API_KEY is not set
    """
    return _get_key(YOUTUBE_KEY_NAME)


def check_keys() -> dict:
    """
    Check which API keys are configured.

    Returns:
        dict: Status of each key ("OK" or "MISSING")
    """
    status = {}
    for key_name in (PERPLEXITY_KEY_NAME, YOUTUBE_KEY_NAME):
        status[key_name] = "OK" if os.environ.get(key_name, "").strip() else "MISSING"
    return status


def _cli_check():
    """CLI entry point for --check flag."""
    status = check_keys()
    all_ok = True

    for key_name, key_status in status.items():
        print(f"{key_name}: {key_status}")
        if key_status == "MISSING":
            all_ok = False

    if not all_ok:
        print("\nTo configure keys:")
        print("  1. Copy .env.example to .env")
        print("  2. Add your API keys to .env")
        print("  YouTube keys: https://developers.google.com/youtube/v3/getting-started")
        sys.exit(1)
    else:
        print("\nAll keys configured.")
        sys.exit(0)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(
        description="Check API key configuration"
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check if API keys are configured"
    )

    args = parser.parse_args()

    if args.check:
        _cli_check()
    else:
        parser.print_help()
