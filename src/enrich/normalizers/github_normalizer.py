"""Normalizers for GitHub REST API responses."""

from typing import Any

from ..models import Issue, PullRequest, RateLimitStatus
from .base import Normalizer, epoch_to_iso


class PullRequestNormalizer(Normalizer[PullRequest]):
    """Normalize items of ``GET /repos/{owner}/{repo}/commits/{sha}/pulls``."""

    def normalize(self, api_response: dict[str, Any]) -> PullRequest:
        """Convert a pull request object.

        A non-null ``merged_at`` makes the state ``merged`` regardless of the
        ``state`` field, which GitHub reports as ``closed`` for merged PRs.
        """
        merged_at = api_response.get("merged_at") or None
        state = "merged" if merged_at else self._state(api_response.get("state"))

        return PullRequest(
            number=self._require_int(api_response, "number"),
            title=api_response.get("title") or "",
            state=state,
            url=api_response.get("html_url") or "",
            author=self._safe_get(api_response, "user", "login", default="unknown"),
            created_at=api_response.get("created_at") or "",
            merged_at=merged_at,
        )

    def _state(self, raw: Any) -> str:
        return "closed" if raw == "closed" else "open"


class IssueNormalizer(Normalizer[Issue]):
    """Normalize ``GET /repos/{owner}/{repo}/issues/{number}`` responses."""

    def is_pull_request(self, api_response: dict[str, Any]) -> bool:
        """The issues endpoint also serves pull requests; they carry this key."""
        return bool(api_response.get("pull_request"))

    def normalize(self, api_response: dict[str, Any]) -> Issue:
        labels = api_response.get("labels") or []
        return Issue(
            number=self._require_int(api_response, "number"),
            title=api_response.get("title") or "",
            state="closed" if api_response.get("state") == "closed" else "open",
            url=api_response.get("html_url") or "",
            labels=tuple(self._label_name(label) for label in labels if self._label_name(label)),
        )

    def _label_name(self, label: Any) -> str:
        # Labels are objects, but the API accepts and may echo plain strings
        if isinstance(label, str):
            return label
        return self._safe_get(label, "name", default="")


class RateLimitNormalizer(Normalizer[RateLimitStatus]):
    """Normalize ``GET /rate_limit`` responses (the core ``rate`` block)."""

    def normalize(self, api_response: dict[str, Any]) -> RateLimitStatus:
        rate = api_response.get("rate")
        if not isinstance(rate, dict):
            raise ValueError("Rate limit response has no 'rate' object")
        reset_at = epoch_to_iso(rate.get("reset"))
        if reset_at is None:
            raise ValueError(f"Invalid rate limit reset value: {rate.get('reset')!r}")
        return RateLimitStatus(
            remaining=self._require_int(rate, "remaining"),
            limit=self._require_int(rate, "limit"),
            reset_at=reset_at,
        )
