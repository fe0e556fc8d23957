"""High-level orchestration for commit enrichment."""

from collections.abc import Generator
from typing import Any

from rich.markup import escape

from common.constants import GITHUB_HOST
from common.logger import get_logger
from common.progress import ProgressCallback, ProgressEvent, complete_event
from history.models import Commit

from .clients.base import APIClient, EnrichmentError, NoMatchError
from .clients.github import GitHubClient, GitHubConfig
from .models import CommitGitHubInfo, Issue, PullRequest, RateLimitStatus, RepoRef
from .references import parse_issue_references
from .remote_url import parse_remote_url

logger = get_logger(__name__)


def _error_data(e: EnrichmentError) -> dict[str, Any] | None:
    status_code = getattr(e, "status_code", None)
    return {"statusCode": status_code} if status_code is not None else None


class EnrichmentOrchestrator:
    """Attach pull request and issue data to commits.

    A lookup runs four steps strictly in order: pull requests containing the
    commit, issue references parsed from its message, the details of each
    referenced issue, and a final summary. Each step reports progress events.
    Failures of individual remote lookups are contained: a failed PR search
    counts as no PRs, a failed issue is left out, and the lookup still
    completes.
    """

    def __init__(self, client: APIClient | None = None, config: GitHubConfig | None = None):
        """Initialize orchestrator.

        Args:
            client: API client to use (if None, a GitHubClient is built from config)
            config: Settings for the default client; ignored when client is given
        """
        self.config = config or getattr(client, "config", None) or GitHubConfig()
        self.client = client or GitHubClient(self.config)

    def set_token(self, token: str | None) -> None:
        """Replace the API token used by the client (None clears it)."""
        self.client.set_token(token)

    def parse_remote_url(self, url: str | None) -> RepoRef | None:
        """Resolve a remote URL on the configured host to owner/repo."""
        return parse_remote_url(url, host=self.config.host or GITHUB_HOST)

    def resolve_repo(self, url: str | None) -> RepoRef:
        """Resolve a remote URL, failing when it does not point at the configured host.

        Raises:
            NoMatchError: If the URL is missing or not a recognised remote form
        """
        repo_ref = self.parse_remote_url(url)
        if repo_ref is None:
            raise NoMatchError("Repository is not hosted on GitHub")
        return repo_ref

    def get_rate_limit_status(self) -> RateLimitStatus | None:
        """Remaining API quota, or None if unavailable."""
        return self.client.get_rate_limit_status()

    def iter_enrichment(
        self, owner: str, repo: str, commit: Commit
    ) -> Generator[ProgressEvent, None, CommitGitHubInfo]:
        """Run a lookup as a stream of progress events.

        The generator yields every event in order and returns the result as
        its return value. Closing it early stops the lookup before the next
        remote call.

        Args:
            owner: Repository owner
            repo: Repository name
            commit: Commit to look up (hash, subject and body are used)

        Returns:
            Pull requests in API order and linked issues in ascending number order
        """
        short_hash = commit.hash[:7]
        logger.info(f"Fetching GitHub info for commit {short_hash}")
        yield ProgressEvent("init", "start", f"Starting GitHub lookup for {short_hash}...")

        # Step 1: pull requests
        yield ProgressEvent("prs", "start", "Searching for pull requests...")
        logger.debug(f"Looking up PRs for {owner}/{repo}@{short_hash}")
        pull_requests: list[PullRequest] = []
        try:
            pull_requests = self.client.get_pull_requests_for_commit(owner, repo, commit.hash)
        except EnrichmentError as e:
            logger.error(f"Failed to fetch PRs: {e}")
            yield ProgressEvent("prs", "error", f"Failed to fetch PRs: {e}", _error_data(e))
        else:
            if pull_requests:
                logger.info(
                    f"[green]✓[/green] Found {len(pull_requests)} PR(s) for commit {short_hash}"
                )
                yield ProgressEvent(
                    "prs",
                    "success",
                    f"Found {len(pull_requests)} pull request(s)",
                    {"count": len(pull_requests)},
                )
            else:
                logger.info(f"No PRs found for commit {short_hash}")
                yield ProgressEvent("prs", "info", "No pull requests found")

        # Step 2: issue references
        yield ProgressEvent("parse", "start", "Parsing commit message for issue references...")
        issue_numbers = parse_issue_references(commit.subject, commit.body)
        if issue_numbers:
            refs = ", ".join(f"#{n}" for n in issue_numbers)
            logger.info(f"Found {len(issue_numbers)} issue reference(s): {refs}")
            yield ProgressEvent(
                "parse",
                "success",
                f"Found {len(issue_numbers)} issue reference(s): {refs}",
                {"issues": issue_numbers},
            )
        else:
            logger.debug("No issue references found in commit message")
            yield ProgressEvent("parse", "info", "No issue references in commit message")

        # Step 3: issue details, one at a time
        linked_issues: list[Issue] = []
        if issue_numbers:
            total = len(issue_numbers)
            yield ProgressEvent("issues", "start", f"Fetching details for {total} issue(s)...")

            for i, number in enumerate(issue_numbers, start=1):
                yield ProgressEvent(
                    "issues",
                    "info",
                    f"Fetching issue #{number} ({i}/{total})...",
                    {"current": i, "total": total},
                )
                try:
                    issue = self.client.get_issue(owner, repo, number)
                except EnrichmentError as e:
                    logger.warning(f"Could not fetch issue #{number}: {e}")
                    yield ProgressEvent(
                        "issues", "error", f"Could not fetch issue #{number}: {e}", _error_data(e)
                    )
                    continue

                if issue is not None:
                    linked_issues.append(issue)
                    logger.info(
                        f"[green]✓[/green] Fetched issue #{number}: {escape(issue.title[:40])}"
                    )

            yield ProgressEvent(
                "issues",
                "success",
                f"Loaded {len(linked_issues)} issue(s)",
                {"count": len(linked_issues)},
            )

        # Step 4: summary
        logger.info(
            f"[green]✓[/green] GitHub lookup complete: "
            f"{len(pull_requests)} PR(s), {len(linked_issues)} issue(s)"
        )
        yield complete_event(
            {"pullRequests": len(pull_requests), "linkedIssues": len(linked_issues)},
            message="GitHub info loaded",
        )

        return CommitGitHubInfo(
            pull_requests=tuple(pull_requests), linked_issues=tuple(linked_issues)
        )

    def enrich(
        self,
        owner: str,
        repo: str,
        commit: Commit,
        on_progress: ProgressCallback | None = None,
    ) -> CommitGitHubInfo:
        """Look up pull requests and linked issues for a commit.

        Args:
            owner: Repository owner
            repo: Repository name
            commit: Commit to look up
            on_progress: Optional listener receiving every ProgressEvent

        Returns:
            CommitGitHubInfo with PRs and successfully fetched issues

        Example:
            >>> orchestrator = EnrichmentOrchestrator()
            >>> info = orchestrator.enrich("acme", "widgets", commit, on_progress=print)
            >>> print(f"{len(info.pull_requests)} PRs, {len(info.linked_issues)} issues")
        """
        events = self.iter_enrichment(owner, repo, commit)
        while True:
            try:
                event = next(events)
            except StopIteration as stop:
                return stop.value
            if on_progress is not None:
                on_progress(event)

    def close(self) -> None:
        """Clean up resources."""
        close = getattr(self.client, "close", None)
        if callable(close):
            close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
