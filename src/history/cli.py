#!/usr/bin/env python3
"""CLI interface for the history module."""

import argparse
import json
import sys
from pathlib import Path

from common.constants import DEFAULT_CHUNK_SIZE, DEFAULT_PAGE_SIZE
from common.logger import error, get_logger, setup_logging
from common.progress import event_to_sse, format_sse

from .git_utils import GitError
from .models import PaginationOptions
from .service import (
    get_commit_details,
    get_commits_paginated,
    get_repository_metadata,
    iter_stream_events,
    stream_commits,
)

logger = get_logger(__name__)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


def cmd_stats(args):
    """Print branches, tags and size stats for a repository."""
    _print_json(get_repository_metadata(args.repo).to_dict())
    return 0


def cmd_page(args):
    """Print one page of history."""
    options = PaginationOptions(
        max_count=args.max_count,
        skip=args.skip,
        first_parent=args.first_parent,
        since=args.since,
        until=args.until,
    )
    _print_json(get_commits_paginated(args.repo, options).to_dict())
    return 0


def cmd_stream(args):
    """Stream history in chunks, as JSON lines or server-sent events."""
    if args.sse:
        for event in iter_stream_events(args.repo, args.chunk_size, args.first_parent):
            frame = event_to_sse(event) if event.is_terminal else format_sse(event.step, event.data)
            sys.stdout.write(frame)
            sys.stdout.flush()
            if event.step == "error":
                return 1
        return 0

    for chunk in stream_commits(args.repo, chunk_size=args.chunk_size, first_parent=args.first_parent):
        print(json.dumps(chunk.to_dict()))
        sys.stdout.flush()
        logger.debug(f"{chunk.progress}% of {chunk.total} commits")
    return 0


def cmd_show(args):
    """Print a single commit."""
    commit = get_commit_details(args.repo, args.hash)
    if commit is None:
        error(f"Commit not found: {args.hash}")
        return 1
    _print_json(commit.to_dict())
    return 0


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Read git history as structured data")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    stats_parser = subparsers.add_parser("stats", help="Show branches, tags and commit counts")
    stats_parser.add_argument("repo", type=Path, help="Path to git repository")
    stats_parser.set_defaults(func=cmd_stats)

    page_parser = subparsers.add_parser("page", help="Show one page of commits")
    page_parser.add_argument("repo", type=Path, help="Path to git repository")
    page_parser.add_argument(
        "--max-count",
        type=int,
        default=DEFAULT_PAGE_SIZE,
        help=f"Commits per page (default: {DEFAULT_PAGE_SIZE})",
    )
    page_parser.add_argument("--skip", type=int, default=0, help="Commits to skip (default: 0)")
    page_parser.add_argument(
        "--first-parent", action="store_true", help="Follow only first parents"
    )
    page_parser.add_argument("--since", default=None, help="Only commits after this date")
    page_parser.add_argument("--until", default=None, help="Only commits before this date")
    page_parser.set_defaults(func=cmd_page)

    stream_parser = subparsers.add_parser("stream", help="Stream all commits in chunks")
    stream_parser.add_argument("repo", type=Path, help="Path to git repository")
    stream_parser.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        help=f"Commits per chunk (default: {DEFAULT_CHUNK_SIZE})",
    )
    stream_parser.add_argument(
        "--first-parent", action="store_true", help="Follow only first parents"
    )
    stream_parser.add_argument(
        "--sse", action="store_true", help="Write server-sent events instead of JSON lines"
    )
    stream_parser.set_defaults(func=cmd_stream)

    show_parser = subparsers.add_parser("show", help="Show a single commit")
    show_parser.add_argument("repo", type=Path, help="Path to git repository")
    show_parser.add_argument("hash", help="Commit hash or revision")
    show_parser.set_defaults(func=cmd_show)

    args = parser.parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        return args.func(args)
    except GitError as e:
        error(str(e))
        return 1
    except ValueError as e:
        error(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
