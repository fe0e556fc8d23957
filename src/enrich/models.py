"""Data models for GitHub cross-reference enrichment."""

from dataclasses import dataclass
from typing import Any, Literal

PullRequestState = Literal["open", "closed", "merged"]
IssueState = Literal["open", "closed"]


@dataclass(frozen=True)
class RepoRef:
    """A repository on the hosting platform."""

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def to_dict(self) -> dict[str, Any]:
        return {"owner": self.owner, "repo": self.repo, "isGitHub": True}


@dataclass(frozen=True)
class PullRequest:
    """A pull request that contains a commit."""

    number: int
    title: str
    state: PullRequestState
    url: str
    author: str
    created_at: str
    merged_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "number": self.number,
            "title": self.title,
            "state": self.state,
            "url": self.url,
            "author": self.author,
            "createdAt": self.created_at,
        }
        if self.merged_at:
            data["mergedAt"] = self.merged_at
        return data


@dataclass(frozen=True)
class Issue:
    """An issue referenced from a commit message."""

    number: int
    title: str
    state: IssueState
    url: str
    labels: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "title": self.title,
            "state": self.state,
            "url": self.url,
            "labels": list(self.labels),
        }


@dataclass(frozen=True)
class CommitGitHubInfo:
    """Everything the enrichment pipeline found for one commit."""

    pull_requests: tuple[PullRequest, ...] = ()
    linked_issues: tuple[Issue, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "pullRequests": [pr.to_dict() for pr in self.pull_requests],
            "linkedIssues": [issue.to_dict() for issue in self.linked_issues],
        }


@dataclass(frozen=True)
class RateLimitStatus:
    """Core API quota as reported by ``GET /rate_limit``."""

    remaining: int
    limit: int
    reset_at: str

    def to_dict(self) -> dict[str, Any]:
        return {"remaining": self.remaining, "limit": self.limit, "resetAt": self.reset_at}
