"""GitHub REST API client for commit cross-reference enrichment."""

import time
from dataclasses import dataclass, replace
from typing import Any

import requests

from common.constants import (
    GITHUB_ACCEPT,
    GITHUB_API_URL,
    GITHUB_API_VERSION,
    GITHUB_HOST,
    USER_AGENT,
)
from common.env import env
from common.logger import get_logger

from ..models import Issue, PullRequest, RateLimitStatus
from ..normalizers.base import epoch_to_iso
from ..normalizers.github_normalizer import (
    IssueNormalizer,
    PullRequestNormalizer,
    RateLimitNormalizer,
)
from .base import (
    AccessForbiddenError,
    APIClient,
    APIError,
    AuthenticationError,
    EnrichmentError,
    NetworkError,
    RateLimitError,
)
from .rate_limiter import RateLimiter
from .ttl_cache import TTLCache

logger = get_logger(__name__)


@dataclass(frozen=True)
class GitHubConfig:
    """Explicit settings for a GitHubClient.

    Built once at the application edge (see ``from_env``) and passed in; the
    client never reads the environment itself.

    Client-side pacing is opt-in: ``requests_per_minute`` of 0 never delays a
    request, and the server's quota headers are only logged.
    """

    token: str | None = None
    api_url: str = GITHUB_API_URL
    host: str = GITHUB_HOST
    api_version: str = GITHUB_API_VERSION
    timeout: float = 10.0
    requests_per_minute: int = 0
    pr_cache_size: int = 1000
    pr_cache_ttl: float = 300.0
    issue_cache_size: int = 1000
    issue_cache_ttl: float = 300.0

    @classmethod
    def from_env(cls, **overrides: Any) -> "GitHubConfig":
        """Build a config from environment variables (see ``common.env``)."""
        config = cls(
            token=env.github_token(),
            api_url=env.github_api_url(),
            host=env.github_host(),
            timeout=env.github_timeout(),
            requests_per_minute=env.github_requests_per_minute(),
            pr_cache_size=env.pr_cache_size(),
            pr_cache_ttl=env.pr_cache_ttl(),
            issue_cache_size=env.issue_cache_size(),
            issue_cache_ttl=env.issue_cache_ttl(),
        )
        return replace(config, **overrides) if overrides else config


class GitHubClient(APIClient):
    """Client for the GitHub REST API.

    Every response is checked for quota, authentication and not-found
    conditions before it is decoded:

    - 401 raises AuthenticationError
    - 403 with ``X-RateLimit-Remaining: 0`` raises RateLimitError
    - any other 403 raises AccessForbiddenError
    - 404 returns None
    - other non-2xx statuses raise APIError with the status code
    - connection failures and timeouts raise NetworkError

    Pull request lists and issues are cached in two TTL caches owned by the
    client; pass your own to control capacity, expiry or the clock.

    API Documentation: https://docs.github.com/en/rest
    """

    def __init__(
        self,
        config: GitHubConfig | None = None,
        pr_cache: TTLCache[tuple[PullRequest, ...]] | None = None,
        issue_cache: TTLCache[Issue] | None = None,
        rate_limiter: RateLimiter | None = None,
        session: requests.Session | None = None,
    ):
        """Initialize GitHub client.

        Args:
            config: Connection settings (defaults: anonymous, public API)
            pr_cache: Cache for pull request lists keyed ``owner/repo/sha``
            issue_cache: Cache for issues keyed ``owner/repo/issue/number``
            rate_limiter: Client-side pacing (default from config)
            session: HTTP session to reuse
        """
        self.config = config or GitHubConfig()
        self._token = self.config.token
        self.pr_cache = (
            pr_cache
            if pr_cache is not None
            else TTLCache(max_size=self.config.pr_cache_size, ttl=self.config.pr_cache_ttl)
        )
        self.issue_cache = (
            issue_cache
            if issue_cache is not None
            else TTLCache(max_size=self.config.issue_cache_size, ttl=self.config.issue_cache_ttl)
        )
        self.rate_limiter = rate_limiter or RateLimiter(
            requests_per_period=self.config.requests_per_minute,
            period_seconds=60,
        )
        self.session = session or requests.Session()
        self.last_rate_limit: RateLimitStatus | None = None

        self.pr_normalizer = PullRequestNormalizer()
        self.issue_normalizer = IssueNormalizer()
        self.rate_limit_normalizer = RateLimitNormalizer()

    def set_token(self, token: str | None) -> None:
        """Use ``token`` for subsequent requests; None or '' goes anonymous."""
        self._token = token or None

    @property
    def has_token(self) -> bool:
        return self._token is not None

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": GITHUB_ACCEPT,
            "X-GitHub-Api-Version": self.config.api_version,
            "User-Agent": USER_AGENT,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.config.api_url.rstrip('/')}/{path.lstrip('/')}"

    def _record_rate_limit(self, response: requests.Response) -> str | None:
        """Log the quota headers and remember them; returns the raw remaining value."""
        remaining = response.headers.get("X-RateLimit-Remaining")
        limit = response.headers.get("X-RateLimit-Limit")
        if remaining is None or limit is None:
            return remaining

        try:
            remaining_n, limit_n = int(remaining), int(limit)
        except ValueError:
            return remaining

        pct = round(remaining_n / limit_n * 100) if limit_n else 0
        logger.debug(f"Rate limit: {remaining_n}/{limit_n} ({pct}%) remaining")

        reset_at = epoch_to_iso(response.headers.get("X-RateLimit-Reset"))
        if reset_at:
            self.last_rate_limit = RateLimitStatus(
                remaining=remaining_n, limit=limit_n, reset_at=reset_at
            )
        return remaining

    def fetch(self, path: str) -> Any | None:
        """GET an API path and decode the JSON body.

        Args:
            path: Path relative to the API root (e.g. 'rate_limit') or a full URL

        Returns:
            Decoded JSON, or None when the resource does not exist (404)

        Raises:
            AuthenticationError: On 401
            RateLimitError: On 403 with no remaining quota
            AccessForbiddenError: On any other 403
            APIError: On other non-2xx statuses or an undecodable body
            NetworkError: If the API host cannot be reached
        """
        url = self._url(path)
        short = url.replace(self.config.api_url.rstrip("/") + "/", "")
        logger.debug(f"Fetching: {short}")

        self.rate_limiter.wait_if_needed()
        started = time.monotonic()
        try:
            response = self.session.get(url, headers=self._headers(), timeout=self.config.timeout)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            logger.error("Network error - cannot reach GitHub API")
            raise NetworkError() from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request to {short} failed: {e}")
            raise NetworkError(f"Network error: {e}") from e
        elapsed_ms = round((time.monotonic() - started) * 1000)

        remaining = self._record_rate_limit(response)
        status = response.status_code

        if status == 401:
            logger.error("Authentication failed - invalid token")
            raise AuthenticationError()

        if status == 403:
            if remaining is not None and remaining.strip() == "0":
                reset_at = epoch_to_iso(response.headers.get("X-RateLimit-Reset")) or "soon"
                logger.error(f"Rate limit exceeded! Resets at {reset_at}")
                if not self.has_token:
                    logger.warning("Anonymous requests share a small quota; set GITHUB_TOKEN")
                raise RateLimitError(reset_at)
            logger.error("Access forbidden")
            raise AccessForbiddenError()

        if status == 404:
            logger.debug(f"Not found: {short} ({elapsed_ms}ms)")
            return None

        if not 200 <= status < 300:
            logger.error(f"API error {status}: {short}")
            raise APIError(f"GitHub API error: {status}", status_code=status)

        logger.debug(f"Fetched: {short} ({elapsed_ms}ms)")
        try:
            return response.json()
        except ValueError as e:
            raise APIError(f"GitHub API returned invalid JSON for {short}", status) from e

    def get_pull_requests_for_commit(
        self, owner: str, repo: str, commit_sha: str
    ) -> list[PullRequest]:
        """List pull requests containing a commit (cache-checked first).

        Returns:
            Pull requests in the order the API returned them; empty if the
            commit or repository is unknown
        """
        cache_key = f"{owner}/{repo}/{commit_sha}"
        cached = self.pr_cache.get(cache_key)
        if cached is not None:
            logger.debug(f"PR cache hit: {cache_key}")
            return list(cached)

        data = self.fetch(f"repos/{owner}/{repo}/commits/{commit_sha}/pulls")
        if data is None:
            return []
        if not isinstance(data, list):
            raise APIError(f"Unexpected pull request payload for {commit_sha[:7]}")

        pull_requests: list[PullRequest] = []
        for item in data:
            try:
                pull_requests.append(self.pr_normalizer.normalize(item))
            except (ValueError, AttributeError) as e:
                logger.warning(f"Ignoring malformed pull request entry: {e}")

        self.pr_cache.set(cache_key, tuple(pull_requests))
        return pull_requests

    def get_issue(self, owner: str, repo: str, number: int) -> Issue | None:
        """Fetch one issue (cache-checked first).

        Returns:
            The issue, or None if it does not exist or is actually a pull request
        """
        cache_key = f"{owner}/{repo}/issue/{number}"
        cached = self.issue_cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Issue cache hit: {cache_key}")
            return cached

        data = self.fetch(f"repos/{owner}/{repo}/issues/{number}")
        if data is None:
            return None
        if not isinstance(data, dict):
            raise APIError(f"Unexpected issue payload for #{number}")
        if self.issue_normalizer.is_pull_request(data):
            logger.debug(f"#{number} is a pull request, not an issue")
            return None

        try:
            issue = self.issue_normalizer.normalize(data)
        except ValueError as e:
            raise APIError(f"Malformed issue #{number}: {e}") from e

        self.issue_cache.set(cache_key, issue)
        return issue

    def get_rate_limit_status(self) -> RateLimitStatus | None:
        """Query the core API quota.

        Returns:
            Quota status, or None if it could not be retrieved for any reason
        """
        try:
            data = self.fetch("rate_limit")
            if not isinstance(data, dict):
                return None
            return self.rate_limit_normalizer.normalize(data)
        except (EnrichmentError, ValueError) as e:
            logger.warning(f"Could not read rate limit status: {e}")
            return None

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
