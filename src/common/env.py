"""Environment configuration interface for gitvis.

This module provides a clean interface for accessing environment variables,
centralizing all environment variable access in one place. Core components
never read it directly; the CLI entry points build explicit config values
(see ``enrich.clients.github.GitHubConfig.from_env``).
"""

import os

from dotenv import load_dotenv

from common.constants import GITHUB_API_URL, GITHUB_HOST

# Load environment variables from .env file if it exists
load_dotenv()


class Environment:
    """Interface for accessing environment configuration."""

    @staticmethod
    def github_token() -> str | None:
        """Get the GitHub API token.

        Returns:
            Token string, or None when unset or blank
        """
        token = os.getenv("GITHUB_TOKEN", "").strip()
        return token or None

    @staticmethod
    def github_api_url() -> str:
        """Get the GitHub REST API base URL.

        Returns:
            Base URL without trailing slash, defaults to https://api.github.com
        """
        return os.getenv("GITHUB_API_URL", GITHUB_API_URL).rstrip("/")

    @staticmethod
    def github_host() -> str:
        """Get the host name that remote URLs must point at.

        Returns:
            Host name, defaults to 'github.com'
        """
        return os.getenv("GITHUB_HOST", GITHUB_HOST)

    @staticmethod
    def github_timeout() -> float:
        """Get the per-request HTTP timeout in seconds.

        Returns:
            Timeout, defaults to 10
        """
        return float(os.getenv("GITHUB_TIMEOUT", "10"))

    @staticmethod
    def github_requests_per_minute() -> int:
        """Get the client-side request pacing limit.

        Returns:
            Requests per minute, defaults to 0 (no pacing)
        """
        return int(os.getenv("GITHUB_REQUESTS_PER_MINUTE", "0"))

    @staticmethod
    def pr_cache_size() -> int:
        """Get the capacity of the pull request cache.

        Returns:
            Maximum entries, defaults to 1000
        """
        return int(os.getenv("PR_CACHE_SIZE", "1000"))

    @staticmethod
    def pr_cache_ttl() -> float:
        """Get the pull request cache time-to-live in seconds.

        Returns:
            TTL, defaults to 300 (5 minutes)
        """
        return float(os.getenv("PR_CACHE_TTL", "300"))

    @staticmethod
    def issue_cache_size() -> int:
        """Get the capacity of the issue cache.

        Returns:
            Maximum entries, defaults to 1000
        """
        return int(os.getenv("ISSUE_CACHE_SIZE", "1000"))

    @staticmethod
    def issue_cache_ttl() -> float:
        """Get the issue cache time-to-live in seconds.

        Returns:
            TTL, defaults to 300 (5 minutes)
        """
        return float(os.getenv("ISSUE_CACHE_TTL", "300"))

    @staticmethod
    def log_level() -> str:
        """Get the default logging level.

        Returns:
            Upper-cased level name, defaults to 'INFO'
        """
        return os.getenv("LOG_LEVEL", "INFO").upper()


# Singleton instance for convenient access
env = Environment()
