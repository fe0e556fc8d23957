"""Abstract base class and error types for hosting-platform API clients."""

from abc import ABC, abstractmethod

from ..models import Issue, PullRequest, RateLimitStatus


class APIClient(ABC):
    """Base class for code-review platform clients.

    The enrichment orchestrator only talks to this interface, so tests and
    other platforms can substitute their own implementation.
    """

    @abstractmethod
    def get_pull_requests_for_commit(
        self, owner: str, repo: str, commit_sha: str
    ) -> list[PullRequest]:
        """List pull requests that contain a commit.

        Args:
            owner: Repository owner
            repo: Repository name
            commit_sha: Full commit hash

        Returns:
            Pull requests in API order; empty when none exist

        Raises:
            APIError: If the API request fails
            RateLimitError: If the quota is exhausted
        """
        pass

    @abstractmethod
    def get_issue(self, owner: str, repo: str, number: int) -> Issue | None:
        """Fetch a single issue.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Issue number

        Returns:
            The issue, or None if it does not exist or is a pull request

        Raises:
            APIError: If the API request fails
            RateLimitError: If the quota is exhausted
        """
        pass

    @abstractmethod
    def get_rate_limit_status(self) -> RateLimitStatus | None:
        """Get the remaining API quota, or None if it cannot be determined."""
        pass

    @abstractmethod
    def set_token(self, token: str | None) -> None:
        """Replace (or clear, with None) the credential used for requests."""
        pass


class EnrichmentError(Exception):
    """Base exception for enrichment errors."""

    pass


class APIError(EnrichmentError):
    """API request failed with an unexpected status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(APIError):
    """The token was rejected; the caller should ask for a new one."""

    def __init__(self, message: str = "GitHub authentication failed. Please check your token."):
        super().__init__(message, status_code=401)


class RateLimitError(APIError):
    """Rate limit exceeded."""

    def __init__(self, reset_at: str, message: str | None = None):
        super().__init__(message or f"GitHub rate limit exceeded. Resets at {reset_at}.", 403)
        self.reset_at = reset_at


class AccessForbiddenError(APIError):
    """The token lacks access to the resource."""

    def __init__(self, message: str = "GitHub access forbidden."):
        super().__init__(message, status_code=403)


class NetworkError(APIError):
    """The API host could not be reached."""

    def __init__(self, message: str = "Network error: Unable to reach GitHub API"):
        super().__init__(message)


class NoMatchError(EnrichmentError):
    """The repository has no remote on the hosting platform."""

    pass
