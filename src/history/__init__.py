"""Extract repository history from git as structured, pageable data."""

from .git_utils import GitError, InvalidRepositoryError
from .models import (
    Author,
    Branch,
    Commit,
    CommitChunk,
    PaginatedResult,
    PaginationOptions,
    RefInfo,
    Repository,
    RepositoryMetadata,
    RepoStats,
    Tag,
)
from .service import (
    get_commit_details,
    get_commits_paginated,
    get_repo_stats,
    get_repository,
    get_repository_metadata,
    iter_stream_events,
    stream_commits,
    validate_repository,
)

__all__ = [
    "Author",
    "Branch",
    "Commit",
    "CommitChunk",
    "GitError",
    "InvalidRepositoryError",
    "PaginatedResult",
    "PaginationOptions",
    "RefInfo",
    "RepoStats",
    "Repository",
    "RepositoryMetadata",
    "Tag",
    "get_commit_details",
    "get_commits_paginated",
    "get_repo_stats",
    "get_repository",
    "get_repository_metadata",
    "iter_stream_events",
    "stream_commits",
    "validate_repository",
]
