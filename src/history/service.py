"""Repository history: full loads, exact pagination and chunked streaming."""

from collections.abc import Iterator
from pathlib import Path

from common.constants import DEFAULT_CHUNK_SIZE, HUGE_REPO_THRESHOLD, LARGE_REPO_THRESHOLD
from common.logger import get_logger
from common.progress import ProgressEvent, complete_event, error_event

from .git_utils import (
    GitError,
    count_commits,
    ensure_repository,
    get_current_branch,
    git_log,
    is_repository,
    list_branches,
    list_tags,
)
from .models import (
    Commit,
    CommitChunk,
    PaginatedResult,
    PaginationOptions,
    RecommendedMode,
    RepoStats,
    Repository,
    RepositoryMetadata,
)

logger = get_logger(__name__)


def validate_repository(repo_path: Path | str) -> bool:
    """Check whether ``repo_path`` is a git working copy."""
    return is_repository(repo_path)


def repository_name(repo_path: Path | str) -> str:
    """Display name of a repository: its last path component."""
    parts = [p for p in str(repo_path).replace("\\", "/").split("/") if p]
    return parts[-1] if parts else "repository"


def get_repository(repo_path: Path | str) -> Repository:
    """Load every commit, branch and tag of a repository.

    Commits span all refs and are ordered most recent first.

    Raises:
        InvalidRepositoryError: If the path is not a git working copy
    """
    ensure_repository(repo_path)

    commits = git_log(repo_path, ["--all", "--date-order"])
    logger.debug(f"Loaded {len(commits)} commits from {repo_path}")

    return Repository(
        path=str(repo_path),
        name=repository_name(repo_path),
        current_branch=get_current_branch(repo_path),
        commits=tuple(commits),
        branches=tuple(list_branches(repo_path)),
        tags=tuple(list_tags(repo_path)),
    )


def _recommended_mode(total: int) -> RecommendedMode:
    if total > HUGE_REPO_THRESHOLD:
        return "simplified"
    if total > LARGE_REPO_THRESHOLD:
        return "paginated"
    return "full"


def get_repo_stats(repo_path: Path | str) -> RepoStats:
    """Summarise repository size so callers can choose a loading strategy.

    Raises:
        InvalidRepositoryError: If the path is not a git working copy
    """
    ensure_repository(repo_path)
    total = count_commits(repo_path)
    return RepoStats(
        total_commits=total,
        is_large_repo=total > LARGE_REPO_THRESHOLD,
        recommended_mode=_recommended_mode(total),
    )


def get_repository_metadata(repo_path: Path | str) -> RepositoryMetadata:
    """Load branches, tags and stats without walking the commit history.

    Raises:
        InvalidRepositoryError: If the path is not a git working copy
    """
    stats = get_repo_stats(repo_path)
    return RepositoryMetadata(
        path=str(repo_path),
        name=repository_name(repo_path),
        current_branch=get_current_branch(repo_path),
        branches=tuple(list_branches(repo_path)),
        tags=tuple(list_tags(repo_path)),
        stats=stats,
    )


def _page(repo_path: Path | str, options: PaginationOptions) -> tuple[list[Commit], bool]:
    """Fetch one page plus a sentinel record to learn whether more exist."""
    args = [
        "--all",
        "--date-order",
        f"--max-count={options.max_count + 1}",
        f"--skip={options.skip}",
    ]
    if options.first_parent:
        args.append("--first-parent")
    if options.since:
        args.append(f"--since={options.since}")
    if options.until:
        args.append(f"--until={options.until}")

    commits = git_log(repo_path, args)
    has_more = len(commits) > options.max_count
    return commits[: options.max_count], has_more


def _validate_options(options: PaginationOptions) -> None:
    if options.max_count < 1:
        raise ValueError(f"max_count must be at least 1, got {options.max_count}")
    if options.skip < 0:
        raise ValueError(f"skip must not be negative, got {options.skip}")


def get_commits_paginated(
    repo_path: Path | str, options: PaginationOptions | None = None
) -> PaginatedResult:
    """Fetch one page of history across all refs, most recent first.

    The page query over-fetches by one record; ``has_more`` is true exactly when
    that sentinel came back. ``total`` comes from a separate count query that
    honours the same date filters.

    Args:
        repo_path: Path to git repository
        options: Page size, offset and filters (defaults: 500 commits from 0)

    Returns:
        PaginatedResult with at most ``options.max_count`` commits

    Raises:
        InvalidRepositoryError: If the path is not a git working copy
        ValueError: If max_count < 1 or skip < 0
    """
    options = options or PaginationOptions()
    _validate_options(options)
    ensure_repository(repo_path)

    commits, has_more = _page(repo_path, options)
    total = count_commits(repo_path, since=options.since, until=options.until)

    return PaginatedResult(commits=tuple(commits), total=total, has_more=has_more)


def stream_commits(
    repo_path: Path | str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    first_parent: bool = False,
) -> Iterator[CommitChunk]:
    """Lazily yield history in chunks of ``chunk_size`` commits.

    Nothing is read until the first chunk is requested, and each following page
    is only queried once the consumer asks for it. The iterator is finite and
    one-shot; call again to re-scan from the start.

    Raises:
        InvalidRepositoryError: If the path is not a git working copy
        ValueError: If chunk_size < 1
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
    return _stream(repo_path, chunk_size, first_parent)


def _stream(repo_path: Path | str, chunk_size: int, first_parent: bool) -> Iterator[CommitChunk]:
    ensure_repository(repo_path)
    total = count_commits(repo_path)
    if total == 0:
        logger.debug(f"No commits to stream in {repo_path}")
        return

    skip = 0
    while True:
        commits, has_more = _page(
            repo_path,
            PaginationOptions(max_count=chunk_size, skip=skip, first_parent=first_parent),
        )
        if not commits:
            break

        seen = skip + len(commits)
        percent = min(100, round(seen / total * 100))
        logger.debug(f"Streaming chunk at {skip}: {len(commits)} commits ({percent}%)")
        yield CommitChunk(commits=tuple(commits), progress=percent, total=total)

        if not has_more:
            break
        skip += chunk_size


def get_commit_details(repo_path: Path | str, commit_hash: str) -> Commit | None:
    """Look up a single commit.

    Returns:
        The commit, or None when the hash does not resolve (not an error)
    """
    if not commit_hash or commit_hash.startswith("-"):
        return None
    try:
        commits = git_log(repo_path, ["-1", commit_hash, "--"])
    except GitError as e:
        logger.debug(f"Commit {commit_hash} not found in {repo_path}: {e}")
        return None
    return commits[0] if commits else None


def iter_stream_events(
    repo_path: Path | str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    first_parent: bool = False,
) -> Iterator[ProgressEvent]:
    """Stream a repository load as progress events.

    Emits a ``metadata`` event (branches, tags, stats), one ``commits`` event
    per chunk, then a terminal ``complete`` event. Any failure ends the stream
    with a terminal ``error`` event carrying the message.
    """
    try:
        metadata = get_repository_metadata(repo_path)
        yield ProgressEvent(
            "metadata", "info", f"Loaded metadata for {metadata.name}", metadata.to_dict()
        )

        for chunk in stream_commits(repo_path, chunk_size=chunk_size, first_parent=first_parent):
            yield ProgressEvent(
                "commits",
                "info",
                f"Loaded {len(chunk.commits)} commits ({chunk.progress}%)",
                chunk.to_dict(),
            )

        yield complete_event({}, message="History loaded")
    except (GitError, ValueError) as e:
        logger.error(f"History stream failed: {e}")
        yield error_event(str(e))
