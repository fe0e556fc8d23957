"""Thin wrappers around the git commands the history engine consumes."""

import subprocess
from collections.abc import Sequence
from pathlib import Path

from common.logger import get_logger

from .log_parser import LOG_FORMAT, parse_log_output
from .models import Branch, Commit, Remote, Tag

logger = get_logger(__name__)


class GitError(RuntimeError):
    """Raised when a git command fails."""


class InvalidRepositoryError(GitError):
    """Raised when a path is not a git working copy."""


def _run_git(repo_path: Path | str, args: Sequence[str]) -> str:
    """Run a git sub-command inside ``repo_path`` and return its stdout.

    Args:
        repo_path: Directory to run git in
        args: Arguments after ``git``

    Returns:
        Raw stdout (not stripped; log output is whitespace sensitive)

    Raises:
        GitError: If git exits non-zero or cannot be started there
    """
    logger.debug(f"git {' '.join(args)}")
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=str(repo_path),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise GitError(e.stderr.strip() or f"git {args[0]} failed") from e
    except OSError as e:
        raise GitError(f"Cannot run git in {repo_path}: {e}") from e
    return result.stdout


def is_repository(repo_path: Path | str) -> bool:
    """Check whether ``repo_path`` is inside a git working tree."""
    if not Path(repo_path).is_dir():
        return False
    try:
        return _run_git(repo_path, ["rev-parse", "--is-inside-work-tree"]).strip() == "true"
    except GitError:
        return False


def ensure_repository(repo_path: Path | str) -> None:
    """Raise InvalidRepositoryError unless ``repo_path`` is a git working tree."""
    if not is_repository(repo_path):
        raise InvalidRepositoryError(f"Not a valid git repository: {repo_path}")


def git_log(repo_path: Path | str, args: Sequence[str] = ()) -> list[Commit]:
    """Run ``git log`` with the canonical record format.

    Args:
        repo_path: Path to git repository
        args: Extra log arguments (revision selection, limits, filters)

    Returns:
        Parsed commits in git's output order
    """
    output = _run_git(repo_path, ["log", LOG_FORMAT, *args])
    return parse_log_output(output)


def count_commits(
    repo_path: Path | str, since: str | None = None, until: str | None = None
) -> int:
    """Count commits reachable from any ref.

    Uses: git rev-list --all --count [--since] [--until]

    Returns:
        Commit count, or 0 if the count cannot be obtained (e.g. no commits yet)
    """
    args = ["rev-list", "--all", "--count"]
    if since:
        args.append(f"--since={since}")
    if until:
        args.append(f"--until={until}")
    try:
        return int(_run_git(repo_path, args).strip() or 0)
    except (GitError, ValueError) as e:
        logger.debug(f"Commit count unavailable for {repo_path}: {e}")
        return 0


def list_branches(repo_path: Path | str) -> list[Branch]:
    """List local and remote-tracking branches.

    Remote branches are named ``remotes/<remote>/<branch>``. Symbolic refs such
    as ``origin/HEAD`` are skipped.
    """
    output = _run_git(
        repo_path,
        [
            "for-each-ref",
            "--format=%(refname)%1f%(objectname)%1f%(HEAD)%1f%(symref)",
            "refs/heads",
            "refs/remotes",
        ],
    )
    branches: list[Branch] = []
    for line in output.splitlines():
        parts = line.split("\x1f")
        if len(parts) != 4:
            continue
        refname, sha, head_marker, symref = parts
        if symref:
            continue
        if refname.startswith("refs/heads/"):
            name, is_remote = refname[len("refs/heads/") :], False
        else:
            name, is_remote = "remotes/" + refname[len("refs/remotes/") :], True
        branches.append(
            Branch(name=name, commit=sha, is_remote=is_remote, is_current=head_marker == "*")
        )
    return branches


def list_tags(repo_path: Path | str) -> list[Tag]:
    """List tags via ``git show-ref``, resolving annotated tags to their commit.

    Returns:
        Tags in ref order, or an empty list when the repository has none
    """
    try:
        output = _run_git(repo_path, ["show-ref", "--tags", "--dereference"])
    except GitError:
        # show-ref exits 1 when there are no tags
        return []

    commits: dict[str, str] = {}
    for line in output.splitlines():
        sha, _, ref = line.partition(" ")
        if not ref.startswith("refs/tags/"):
            continue
        name = ref[len("refs/tags/") :]
        if name.endswith("^{}"):
            # Peeled entry of an annotated tag: the commit it points at
            commits[name[:-3]] = sha
        else:
            commits.setdefault(name, sha)
    return [Tag(name=name, commit=sha) for name, sha in commits.items()]


def get_current_branch(repo_path: Path | str) -> str:
    """Get the checked-out branch name ('HEAD' when detached or unborn)."""
    try:
        return _run_git(repo_path, ["rev-parse", "--abbrev-ref", "HEAD"]).strip() or "HEAD"
    except GitError:
        return "HEAD"


def list_remotes(repo_path: Path | str) -> list[Remote]:
    """List configured remotes with their fetch URLs."""
    try:
        output = _run_git(repo_path, ["remote", "-v"])
    except GitError:
        return []

    remotes: list[Remote] = []
    for line in output.splitlines():
        # Format: <name>\t<url> (fetch|push)
        name, _, rest = line.partition("\t")
        url, _, kind = rest.rpartition(" ")
        if kind == "(fetch)" and url:
            remotes.append(Remote(name=name, url=url))
    return remotes


def pick_remote_url(remotes: Sequence[Remote]) -> str | None:
    """Prefer the 'origin' remote, falling back to the first one configured."""
    for remote in remotes:
        if remote.name == "origin":
            return remote.url
    return remotes[0].url if remotes else None
