"""CLI for GitHub enrichment of commits."""

import argparse
import json
import sys
from pathlib import Path

from rich.markup import escape

from common.logger import error, get_logger, progress, setup_logging, success, warning
from common.progress import ProgressEvent, event_to_sse

from .clients.base import EnrichmentError, NoMatchError
from .clients.github import GitHubConfig
from .orchestrator import EnrichmentOrchestrator
from .pipeline import iter_commit_lookup

logger = get_logger(__name__)

REAUTH_HINT = "Check GITHUB_TOKEN or pass --token."


def _config(args) -> GitHubConfig:
    if getattr(args, "token", None):
        return GitHubConfig.from_env(token=args.token)
    return GitHubConfig.from_env()


def _is_auth_failure(event: ProgressEvent) -> bool:
    return event.status == "error" and (event.data or {}).get("statusCode") == 401


def _render(event: ProgressEvent) -> None:
    """Print one progress event as a console status line."""
    line = f"{escape(f'[{event.step}]')} {escape(event.message)}"
    if event.status == "success":
        success(line)
    elif event.status == "error":
        warning(line)
        if _is_auth_failure(event):
            warning(REAUTH_HINT)
    else:
        progress(f"[dim]{line}[/dim]")


def cmd_commit(args):
    """Look up pull requests and linked issues for a commit."""
    with EnrichmentOrchestrator(config=_config(args)) as orchestrator:
        for event in iter_commit_lookup(args.repo, args.hash, orchestrator):
            if args.sse:
                sys.stdout.write(event_to_sse(event))
                sys.stdout.flush()
                continue

            if event.step == "complete":
                print(json.dumps(event.data, indent=2))
            elif event.step == "error":
                error(event.message)
                return 1
            else:
                _render(event)
    return 0


def cmd_remote(args):
    """Show the owner/repo a remote URL resolves to."""
    try:
        with EnrichmentOrchestrator(config=GitHubConfig.from_env()) as orchestrator:
            repo_ref = orchestrator.resolve_repo(args.url)
    except NoMatchError as e:
        warning(f"{args.url}: {e}")
        print(json.dumps({"isGitHub": False, "owner": None, "repo": None}))
        return 1
    print(json.dumps(repo_ref.to_dict()))
    return 0


def cmd_rate_limit(args):
    """Show the remaining GitHub API quota."""
    with EnrichmentOrchestrator(config=_config(args)) as orchestrator:
        status = orchestrator.get_rate_limit_status()
    if status is None:
        error("Could not read rate limit status")
        return 1
    print(json.dumps(status.to_dict(), indent=2))
    return 0


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Enrich commits with GitHub PRs and issues")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    commit_parser = subparsers.add_parser("commit", help="Find PRs and issues for a commit")
    commit_parser.add_argument("repo", type=Path, help="Path to local git repository")
    commit_parser.add_argument("hash", help="Commit hash or revision")
    commit_parser.add_argument("--token", default=None, help="GitHub token (default: GITHUB_TOKEN)")
    commit_parser.add_argument(
        "--sse", action="store_true", help="Write server-sent events instead of console output"
    )
    commit_parser.set_defaults(func=cmd_commit)

    remote_parser = subparsers.add_parser("remote", help="Resolve a remote URL to owner/repo")
    remote_parser.add_argument("url", help="Remote URL")
    remote_parser.set_defaults(func=cmd_remote)

    rate_parser = subparsers.add_parser("rate-limit", help="Show remaining API quota")
    rate_parser.add_argument("--token", default=None, help="GitHub token (default: GITHUB_TOKEN)")
    rate_parser.set_defaults(func=cmd_rate_limit)

    args = parser.parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        return args.func(args)
    except EnrichmentError as e:
        error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
