"""
Command-line interface for the evidence search pipeline.

Subcommands:
    search  Run one evidence search and print the results
    keys    Report which API keys are configured
"""

import argparse
import json
import logging
import sys
from typing import Optional

from .config.secrets import check_keys
from .errors import ServiceUnavailableError
from .ingest.base_fetcher import load_evidence_config
from .logging_config import configure_logging
from .models import SearchRequest
from .search import EvidenceSearchPipeline, build_response


def _print_progress(stage: int, label: str) -> None:
    print(f"[{stage}/5] {label}", file=sys.stderr)


def cmd_search(args: argparse.Namespace) -> int:
    """Run a search for the given topic."""
    try:
        request = SearchRequest.create(args.topic, stance_label=args.stance, categories=args.categories)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config = load_evidence_config(args.config) if args.config else None
    pipeline = EvidenceSearchPipeline(config=config)
    progress = None if args.quiet else _print_progress

    try:
        items = pipeline.search(request, progress)
    except ServiceUnavailableError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(build_response(request, items), ensure_ascii=False, indent=2))
        return 0

    if not items:
        print("No evidence found.")
        return 0

    for item in items:
        print(f"[{item.category.display_label}] {item.title} ({item.source_name}, {item.reliability})")
        if item.url:
            print(f"  {item.url}")
        if args.verbose:
            print(f"  {item.summary}")
    return 0


def cmd_keys(args: argparse.Namespace) -> int:
    """Show API key status."""
    status = check_keys()
    for key_name, key_status in status.items():
        print(f"{key_name}: {key_status}")
    return 0 if all(s == "OK" for s in status.values()) else 1


def main(argv: Optional[list] = None) -> int:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="debate-evidence",
        description="Debate evidence search for elementary classrooms"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    search_parser = subparsers.add_parser("search", help="Search evidence for a debate topic")
    search_parser.add_argument("topic", help="Debate topic")
    search_parser.add_argument("--stance", default="", help="Stance label, e.g. 찬성 / 반대 / positive")
    search_parser.add_argument("--categories", nargs="*", default=None,
                               help="Categories (news_article, educational_video); default: all")
    search_parser.add_argument("--config", help="Path to evidence.yaml")
    search_parser.add_argument("--json", action="store_true", help="Print the JSON response envelope")
    search_parser.add_argument("-q", "--quiet", action="store_true", help="Hide progress stages")
    search_parser.set_defaults(func=cmd_search)

    keys_parser = subparsers.add_parser("keys", help="Check API key configuration")
    keys_parser.set_defaults(func=cmd_keys)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
