"""Shared fixtures: small git repositories with deterministic history, and logging state."""

import logging
import os
import subprocess

import pytest


def run_git(repo_path, *args, date=None):
    """Run git in ``repo_path``, pinning author and committer dates when given."""
    env = dict(os.environ)
    env["GIT_MERGE_AUTOEDIT"] = "no"
    if date:
        env["GIT_AUTHOR_DATE"] = date
        env["GIT_COMMITTER_DATE"] = date
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        env=env,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def git_commit(repo_path, message, date, filename="file.txt"):
    """Append to a file and commit it; returns the new commit hash."""
    path = repo_path / filename
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"{message}\n")
    run_git(repo_path, "add", filename)
    run_git(repo_path, "commit", "-m", message, date=date)
    return run_git(repo_path, "rev-parse", "HEAD")


def init_repo(repo_path):
    """Create an empty repository on branch ``main`` with a test identity."""
    repo_path.mkdir()
    run_git(repo_path, "init")
    run_git(repo_path, "symbolic-ref", "HEAD", "refs/heads/main")
    run_git(repo_path, "config", "user.name", "Test User")
    run_git(repo_path, "config", "user.email", "test@example.com")
    run_git(repo_path, "config", "commit.gpgsign", "false")
    run_git(repo_path, "config", "tag.gpgsign", "false")
    return repo_path


@pytest.fixture
def empty_repo(tmp_path):
    """A repository with no commits."""
    return init_repo(tmp_path / "empty")


@pytest.fixture
def history_repo(tmp_path):
    """
    Create a repository with five commits, one merge, two tags and two branches.

    History (newest first, one commit per day in January 2024):

        c5  Merge feature          (main, tag v1.0)   parents c4, c3
        c4  Main work + body
        c3  Feature work           (merged, branch deleted)
        c2  Add feature            (branch topic)
        c1  Initial commit         (annotated tag v0.1)

    Returns a dict with the repo path and the hashes by name.
    """
    repo_path = init_repo(tmp_path / "repo")

    c1 = git_commit(repo_path, "Initial commit", "2024-01-01T10:00:00+00:00")
    run_git(repo_path, "tag", "-a", "v0.1", "-m", "First release", date="2024-01-01T10:00:00+00:00")
    c2 = git_commit(repo_path, "Add feature", "2024-01-02T10:00:00+00:00")

    run_git(repo_path, "checkout", "-b", "feature")
    c3 = git_commit(repo_path, "Feature work", "2024-01-03T10:00:00+00:00", filename="feature.txt")

    run_git(repo_path, "checkout", "main")
    c4 = git_commit(
        repo_path,
        "Main work\n\nBody line one\nBody line two",
        "2024-01-04T10:00:00+00:00",
    )
    run_git(
        repo_path,
        "merge",
        "--no-ff",
        "-m",
        "Merge feature",
        "feature",
        date="2024-01-05T10:00:00+00:00",
    )
    c5 = run_git(repo_path, "rev-parse", "HEAD")

    run_git(repo_path, "branch", "-D", "feature")
    run_git(repo_path, "branch", "topic", c2)
    run_git(repo_path, "tag", "v1.0")

    return {"path": repo_path, "c1": c1, "c2": c2, "c3": c3, "c4": c4, "c5": c5}


@pytest.fixture
def git():
    """The ``run_git`` helper, for tests that add remotes or refs of their own."""
    return run_git


@pytest.fixture
def commit():
    """The ``git_commit`` helper, for tests that need a specific message."""
    return git_commit


@pytest.fixture
def new_repo():
    """The ``init_repo`` helper, for tests that build their own history."""
    return init_repo


@pytest.fixture
def restore_logging():
    """Undo setup_logging: root handlers and every named logger's handlers and level."""
    root = logging.getLogger()
    loggers = [root] + [
        lg for lg in logging.Logger.manager.loggerDict.values() if isinstance(lg, logging.Logger)
    ]
    saved = {lg: (list(lg.handlers), lg.level) for lg in loggers}
    yield
    for lg, (handlers, level) in saved.items():
        for handler in lg.handlers:
            if handler not in handlers:
                handler.close()
        lg.handlers[:] = handlers
        lg.setLevel(level)
