"""End-to-end commit lookup: repository checks, remote discovery, enrichment.

``iter_commit_lookup`` is what a streaming transport serves for "show me the
GitHub context of this commit". It always ends with exactly one terminal
event: ``complete`` carrying the result, or ``error`` carrying the message of
whatever stopped it.
"""

from collections.abc import Generator, Iterator
from pathlib import Path

from common.logger import get_logger
from common.progress import ProgressEvent, complete_event, error_event
from history.git_utils import GitError, list_remotes, pick_remote_url
from history.service import get_commit_details, validate_repository

from .clients.base import EnrichmentError, NoMatchError
from .models import CommitGitHubInfo
from .orchestrator import EnrichmentOrchestrator

logger = get_logger(__name__)


def iter_commit_lookup(
    repo_path: Path | str, commit_hash: str, orchestrator: EnrichmentOrchestrator
) -> Iterator[ProgressEvent]:
    """Stream the full lookup for one commit of a local repository.

    Steps: ``validate``, ``commit``, ``remote``, then the orchestrator's
    enrichment steps. A repository without a GitHub remote is not an error:
    the ``remote`` step reports it and the lookup completes with no results.

    Args:
        repo_path: Path to the local git repository
        commit_hash: Commit to look up (any revision git can resolve)
        orchestrator: Enrichment orchestrator holding the API client

    Yields:
        ProgressEvent values, the last of which is terminal
    """
    empty = CommitGitHubInfo().to_dict()

    try:
        yield ProgressEvent("validate", "start", "Validating repository...")
        if not validate_repository(repo_path):
            yield error_event("Not a valid git repository")
            return
        yield ProgressEvent("validate", "success", "Repository validated")

        yield ProgressEvent("commit", "start", "Loading commit details...")
        commit = get_commit_details(repo_path, commit_hash)
        if commit is None:
            yield error_event("Commit not found")
            return
        yield ProgressEvent("commit", "success", f"Loaded commit {commit.short_hash}")

        yield ProgressEvent("remote", "start", "Checking remote URLs...")
        remote_url = pick_remote_url(list_remotes(repo_path))
        if not remote_url:
            yield ProgressEvent("remote", "error", "No remote URL found")
            yield complete_event(empty, message="No remote URL found")
            return

        try:
            repo_ref = orchestrator.resolve_repo(remote_url)
        except NoMatchError as e:
            logger.info(f"Skipping GitHub lookup for {remote_url}: {e}")
            yield ProgressEvent("remote", "error", str(e))
            yield complete_event(empty, message=str(e))
            return
        yield ProgressEvent(
            "remote", "success", f"Found GitHub repo: {repo_ref.full_name}"
        )

        enrichment = orchestrator.iter_enrichment(repo_ref.owner, repo_ref.repo, commit)
        result = yield from _forward_progress(enrichment)
        yield complete_event(result.to_dict(), message="GitHub info loaded")

    except (GitError, EnrichmentError) as e:
        logger.error(f"Commit lookup failed: {e}")
        yield error_event(str(e))


def _forward_progress(
    events: Generator[ProgressEvent, None, CommitGitHubInfo],
) -> Generator[ProgressEvent, None, CommitGitHubInfo]:
    """Re-yield non-terminal events; the caller emits its own terminal event."""
    while True:
        try:
            event = next(events)
        except StopIteration as stop:
            return stop.value
        if not event.is_terminal:
            yield event
