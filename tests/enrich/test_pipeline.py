"""
Integration tests for the commit lookup pipeline.

A real temporary repository provides the commit and remote; the GitHub side
is a mock APIClient so no network access happens.
"""

from unittest.mock import Mock

import pytest

from enrich.clients.base import APIClient, APIError
from enrich.models import Issue, PullRequest
from enrich.orchestrator import EnrichmentOrchestrator
from enrich.pipeline import iter_commit_lookup

PR = PullRequest(
    number=42,
    title="Fix crash",
    state="merged",
    url="https://github.com/acme/widgets/pull/42",
    author="octocat",
    created_at="2024-02-01T09:00:00Z",
    merged_at="2024-02-02T09:00:00Z",
)
ISSUE = Issue(12, "Crash on start", "closed", "https://github.com/acme/widgets/issues/12", ("bug",))

EMPTY_RESULT = {"pullRequests": [], "linkedIssues": []}


@pytest.fixture
def lookup_repo(tmp_path, new_repo, commit):
    """Repository with a single commit that references issue #12."""
    repo_path = new_repo(tmp_path / "lookup")
    sha = commit(repo_path, "Fix crash on start\n\nFixes #12", "2024-02-01T08:00:00+00:00")
    return repo_path, sha


@pytest.fixture
def client():
    client = Mock(spec=APIClient)
    client.get_pull_requests_for_commit.return_value = [PR]
    client.get_issue.return_value = ISSUE
    return client


@pytest.fixture
def orchestrator(client):
    return EnrichmentOrchestrator(client=client)


def steps(events):
    return [(event.step, event.status) for event in events]


class TestCommitLookup:
    """Tests for iter_commit_lookup."""

    def test_github_remote(self, lookup_repo, git, orchestrator, client):
        repo_path, sha = lookup_repo
        git(repo_path, "remote", "add", "origin", "git@github.com:acme/widgets.git")

        events = list(iter_commit_lookup(repo_path, sha, orchestrator))

        assert steps(events)[:6] == [
            ("validate", "start"),
            ("validate", "success"),
            ("commit", "start"),
            ("commit", "success"),
            ("remote", "start"),
            ("remote", "success"),
        ]
        assert events[5].message == "Found GitHub repo: acme/widgets"
        assert events[-1].step == "complete"
        assert events[-1].data == {
            "pullRequests": [PR.to_dict()],
            "linkedIssues": [ISSUE.to_dict()],
        }
        assert sum(1 for e in events if e.is_terminal) == 1
        client.get_pull_requests_for_commit.assert_called_once_with("acme", "widgets", sha)
        client.get_issue.assert_called_once_with("acme", "widgets", 12)

    def test_prefers_origin_remote(self, lookup_repo, git, orchestrator, client):
        repo_path, sha = lookup_repo
        git(repo_path, "remote", "add", "fork", "https://gitlab.com/someone/widgets.git")
        git(repo_path, "remote", "add", "origin", "https://github.com/acme/widgets.git")

        events = list(iter_commit_lookup(repo_path, sha[:8], orchestrator))

        assert events[-1].step == "complete"
        client.get_pull_requests_for_commit.assert_called_once_with("acme", "widgets", sha)

    def test_enrichment_failures_still_complete(self, lookup_repo, git, orchestrator, client):
        repo_path, sha = lookup_repo
        git(repo_path, "remote", "add", "origin", "git@github.com:acme/widgets.git")
        client.get_pull_requests_for_commit.side_effect = APIError("GitHub API error: 500", 500)
        client.get_issue.side_effect = APIError("GitHub API error: 500", 500)

        events = list(iter_commit_lookup(repo_path, sha, orchestrator))

        assert ("prs", "error") in steps(events)
        assert ("issues", "error") in steps(events)
        assert events[-1].step == "complete"
        assert events[-1].data == EMPTY_RESULT

    def test_no_remote(self, lookup_repo, orchestrator, client):
        repo_path, sha = lookup_repo

        events = list(iter_commit_lookup(repo_path, sha, orchestrator))

        assert steps(events)[-2:] == [("remote", "error"), ("complete", "success")]
        assert events[-2].message == "No remote URL found"
        assert events[-1].data == EMPTY_RESULT
        client.get_pull_requests_for_commit.assert_not_called()

    def test_non_github_remote(self, lookup_repo, git, orchestrator, client):
        repo_path, sha = lookup_repo
        git(repo_path, "remote", "add", "origin", "https://gitlab.com/acme/widgets.git")

        events = list(iter_commit_lookup(repo_path, sha, orchestrator))

        assert steps(events)[-2:] == [("remote", "error"), ("complete", "success")]
        assert events[-2].message == "Repository is not hosted on GitHub"
        assert events[-1].data == EMPTY_RESULT
        client.get_pull_requests_for_commit.assert_not_called()

    def test_invalid_repository(self, tmp_path, orchestrator):
        events = list(iter_commit_lookup(tmp_path, "HEAD", orchestrator))

        assert steps(events) == [("validate", "start"), ("error", "error")]
        assert events[-1].message == "Not a valid git repository"

    def test_unknown_commit(self, lookup_repo, orchestrator):
        repo_path, _ = lookup_repo

        events = list(iter_commit_lookup(repo_path, "deadbeefdeadbeef", orchestrator))

        assert steps(events)[-1] == ("error", "error")
        assert events[-1].message == "Commit not found"

    def test_closing_stops_before_remote_calls(self, lookup_repo, git, orchestrator, client):
        repo_path, sha = lookup_repo
        git(repo_path, "remote", "add", "origin", "git@github.com:acme/widgets.git")

        stream = iter_commit_lookup(repo_path, sha, orchestrator)
        for event in stream:
            if event.step == "remote" and event.status == "success":
                break
        stream.close()

        client.get_pull_requests_for_commit.assert_not_called()
