"""Tests for the enrichment orchestrator."""

import logging
from unittest.mock import Mock

import pytest

from enrich.clients.base import APIClient, APIError, AuthenticationError, NetworkError, NoMatchError
from enrich.clients.github import GitHubConfig
from enrich.models import CommitGitHubInfo, Issue, PullRequest, RepoRef
from enrich.orchestrator import EnrichmentOrchestrator
from history.models import Author, Commit

PR = PullRequest(
    number=42,
    title="Add streaming endpoint",
    state="merged",
    url="https://github.com/acme/widgets/pull/42",
    author="octocat",
    created_at="2024-01-01T09:00:00Z",
    merged_at="2024-01-02T17:30:00Z",
)
ISSUE_1 = Issue(1, "Login broken", "closed", "https://github.com/acme/widgets/issues/1", ("bug",))
ISSUE_3 = Issue(3, "Empty input", "open", "https://github.com/acme/widgets/issues/3")


def make_commit(subject="Handle empty input (fixes #3)", body="Refs #1"):
    return Commit(
        hash="f" * 40,
        short_hash="fffffff",
        subject=subject,
        body=body,
        author=Author("Test User", "test@example.com"),
        date="2024-01-04T10:00:00+00:00",
    )


def steps(events):
    return [(event.step, event.status) for event in events]


def run(orchestrator, commit):
    """Drain iter_enrichment, returning (events, result)."""
    events = []
    generator = orchestrator.iter_enrichment("acme", "widgets", commit)
    while True:
        try:
            events.append(next(generator))
        except StopIteration as stop:
            return events, stop.value


class TestEnrichmentOrchestrator:
    """Test suite for EnrichmentOrchestrator."""

    @pytest.fixture
    def client(self):
        client = Mock(spec=APIClient)
        client.get_pull_requests_for_commit.return_value = [PR]
        client.get_issue.side_effect = lambda owner, repo, number: {1: ISSUE_1, 3: ISSUE_3}.get(number)
        return client

    @pytest.fixture
    def orchestrator(self, client):
        return EnrichmentOrchestrator(client=client)

    def test_full_event_sequence(self, orchestrator):
        events, result = run(orchestrator, make_commit())

        assert steps(events) == [
            ("init", "start"),
            ("prs", "start"),
            ("prs", "success"),
            ("parse", "start"),
            ("parse", "success"),
            ("issues", "start"),
            ("issues", "info"),
            ("issues", "info"),
            ("issues", "success"),
            ("complete", "success"),
        ]
        assert events[2].data == {"count": 1}
        assert events[4].data == {"issues": [1, 3]}
        assert [e.data for e in events[6:8]] == [{"current": 1, "total": 2}, {"current": 2, "total": 2}]
        assert events[-1].data == {"pullRequests": 1, "linkedIssues": 2}
        assert result == CommitGitHubInfo(pull_requests=(PR,), linked_issues=(ISSUE_1, ISSUE_3))

    def test_issues_fetched_in_ascending_order(self, orchestrator, client):
        run(orchestrator, make_commit("Fixes #3 and #1", ""))

        numbers = [c.args[2] for c in client.get_issue.call_args_list]
        assert numbers == [1, 3]

    def test_pull_requests_looked_up_by_full_hash(self, orchestrator, client):
        run(orchestrator, make_commit())
        client.get_pull_requests_for_commit.assert_called_once_with("acme", "widgets", "f" * 40)

    def test_no_pull_requests(self, orchestrator, client):
        client.get_pull_requests_for_commit.return_value = []

        events, result = run(orchestrator, make_commit())

        assert ("prs", "info") in steps(events)
        assert result.pull_requests == ()
        assert len(result.linked_issues) == 2

    def test_pull_request_failure_is_not_fatal(self, orchestrator, client):
        client.get_pull_requests_for_commit.side_effect = APIError("GitHub API error: 500", 500)

        events, result = run(orchestrator, make_commit())

        prs_error = next(e for e in events if e.step == "prs" and e.status == "error")
        assert prs_error.message == "Failed to fetch PRs: GitHub API error: 500"
        assert prs_error.data == {"statusCode": 500}
        assert client.get_issue.call_count == 2
        assert result.pull_requests == ()
        assert len(result.linked_issues) == 2
        assert events[-1].step == "complete"

    def test_authentication_failure_reports_status(self, orchestrator, client):
        client.get_pull_requests_for_commit.side_effect = AuthenticationError()

        events, _ = run(orchestrator, make_commit())

        prs_error = next(e for e in events if e.step == "prs" and e.status == "error")
        assert prs_error.data == {"statusCode": 401}

    def test_issue_failure_is_skipped(self, orchestrator, client, caplog):
        def get_issue(owner, repo, number):
            if number == 1:
                raise NetworkError()
            return ISSUE_3

        client.get_issue.side_effect = get_issue

        with caplog.at_level(logging.WARNING):
            events, result = run(orchestrator, make_commit())

        assert result.linked_issues == (ISSUE_3,)
        assert ("issues", "error") in steps(events)
        assert events[-2].data == {"count": 1}
        assert "Could not fetch issue #1" in caplog.text

    def test_missing_issue_left_out(self, orchestrator, client):
        client.get_issue.side_effect = lambda owner, repo, number: None

        events, result = run(orchestrator, make_commit())

        assert result.linked_issues == ()
        assert events[-1].data == {"pullRequests": 1, "linkedIssues": 0}

    def test_no_references(self, orchestrator, client):
        events, result = run(orchestrator, make_commit("Refactor parser", ""))

        assert steps(events) == [
            ("init", "start"),
            ("prs", "start"),
            ("prs", "success"),
            ("parse", "start"),
            ("parse", "info"),
            ("complete", "success"),
        ]
        client.get_issue.assert_not_called()
        assert result.linked_issues == ()

    def test_closing_early_stops_remote_calls(self, orchestrator, client):
        generator = orchestrator.iter_enrichment("acme", "widgets", make_commit())

        assert next(generator).step == "init"
        generator.close()

        client.get_pull_requests_for_commit.assert_not_called()
        client.get_issue.assert_not_called()

    def test_enrich_with_listener(self, orchestrator):
        received = []

        result = orchestrator.enrich("acme", "widgets", make_commit(), on_progress=received.append)
        expected_events, expected_result = run(orchestrator, make_commit())

        assert steps(received) == steps(expected_events)
        assert result == expected_result

    def test_enrich_without_listener(self, orchestrator):
        result = orchestrator.enrich("acme", "widgets", make_commit())
        assert result.to_dict()["pullRequests"][0]["number"] == 42

    def test_set_token_passthrough(self, orchestrator, client):
        orchestrator.set_token("ghp_abc")
        client.set_token.assert_called_once_with("ghp_abc")

    def test_rate_limit_passthrough(self, orchestrator, client):
        client.get_rate_limit_status.return_value = None
        assert orchestrator.get_rate_limit_status() is None
        client.get_rate_limit_status.assert_called_once()

    def test_resolve_repo(self, orchestrator):
        assert orchestrator.resolve_repo("git@github.com:acme/widgets.git") == RepoRef("acme", "widgets")

    @pytest.mark.parametrize("url", [None, "https://gitlab.com/acme/widgets.git"])
    def test_resolve_repo_rejects_other_hosts(self, orchestrator, url):
        with pytest.raises(NoMatchError, match="not hosted on GitHub"):
            orchestrator.resolve_repo(url)

    def test_parse_remote_url_uses_configured_host(self, client):
        orchestrator = EnrichmentOrchestrator(client=client, config=GitHubConfig(host="ghe.example.com"))

        assert orchestrator.parse_remote_url("git@ghe.example.com:acme/widgets.git") == RepoRef(
            "acme", "widgets"
        )
        assert orchestrator.parse_remote_url("git@github.com:acme/widgets.git") is None

    def test_default_client(self):
        with EnrichmentOrchestrator(config=GitHubConfig(token="ghp_abc")) as orchestrator:
            assert orchestrator.client.has_token
