"""Data models for repository history."""

from dataclasses import dataclass, field
from typing import Any, Literal

from common.constants import DEFAULT_PAGE_SIZE

RefKind = Literal["branch", "tag", "remote"]
RecommendedMode = Literal["full", "paginated", "simplified"]


@dataclass(frozen=True)
class Author:
    """Commit author identity."""

    name: str
    email: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "email": self.email}


@dataclass(frozen=True)
class RefInfo:
    """A named ref decorating a commit."""

    name: str
    kind: RefKind
    is_head: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.kind, "isHead": self.is_head}


@dataclass(frozen=True)
class Commit:
    """A single commit as read from git log.

    ``parents`` keeps git's order: the first entry is the primary ancestor.
    """

    hash: str
    short_hash: str
    subject: str
    body: str
    author: Author
    date: str  # author date, ISO-8601 with offset
    parents: tuple[str, ...] = ()
    refs: tuple[RefInfo, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.hash,
            "shortHash": self.short_hash,
            "message": self.subject,
            "body": self.body,
            "author": self.author.to_dict(),
            "date": self.date,
            "parents": list(self.parents),
            "refs": [ref.to_dict() for ref in self.refs],
        }


@dataclass(frozen=True)
class Branch:
    """A local or remote-tracking branch."""

    name: str
    commit: str
    is_remote: bool
    is_current: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "commit": self.commit,
            "isRemote": self.is_remote,
            "isHead": self.is_current,
        }


@dataclass(frozen=True)
class Tag:
    """A tag (annotated and lightweight tags are not distinguished)."""

    name: str
    commit: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "commit": self.commit}


@dataclass(frozen=True)
class Remote:
    """A configured remote and its fetch URL."""

    name: str
    url: str


@dataclass(frozen=True)
class Repository:
    """Full load of a repository: every commit, branch and tag."""

    path: str
    name: str
    current_branch: str
    commits: tuple[Commit, ...]
    branches: tuple[Branch, ...]
    tags: tuple[Tag, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "currentBranch": self.current_branch,
            "commits": [c.to_dict() for c in self.commits],
            "branches": [b.to_dict() for b in self.branches],
            "tags": [t.to_dict() for t in self.tags],
        }


@dataclass(frozen=True)
class PaginationOptions:
    """Options for a single page of history."""

    max_count: int = DEFAULT_PAGE_SIZE
    skip: int = 0
    first_parent: bool = False
    since: str | None = None
    until: str | None = None


@dataclass(frozen=True)
class PaginatedResult:
    """One page of history.

    ``has_more`` is exact: it is derived from an over-fetched sentinel record,
    never from ``total``.
    """

    commits: tuple[Commit, ...]
    total: int
    has_more: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "commits": [c.to_dict() for c in self.commits],
            "total": self.total,
            "hasMore": self.has_more,
        }


@dataclass(frozen=True)
class CommitChunk:
    """One batch produced while streaming history."""

    commits: tuple[Commit, ...]
    progress: int
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "commits": [c.to_dict() for c in self.commits],
            "progress": self.progress,
            "total": self.total,
        }


@dataclass(frozen=True)
class RepoStats:
    """Cheap size summary used to pick a loading strategy."""

    total_commits: int
    is_large_repo: bool
    recommended_mode: RecommendedMode

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalCommits": self.total_commits,
            "isLargeRepo": self.is_large_repo,
            "recommendedMode": self.recommended_mode,
        }


@dataclass(frozen=True)
class RepositoryMetadata:
    """Everything about a repository except its commits."""

    path: str
    name: str
    current_branch: str
    branches: tuple[Branch, ...]
    tags: tuple[Tag, ...]
    stats: RepoStats = field(default_factory=lambda: RepoStats(0, False, "full"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "currentBranch": self.current_branch,
            "branches": [b.to_dict() for b in self.branches],
            "tags": [t.to_dict() for t in self.tags],
            "stats": self.stats.to_dict(),
        }
