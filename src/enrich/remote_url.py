"""Resolve git remote URLs to GitHub owner/repo pairs."""

import re

from common.constants import GITHUB_HOST

from .models import RepoRef


def _patterns(host: str) -> list[re.Pattern[str]]:
    # The repo group is non-greedy so dotted names (user.github.io) survive and
    # only a real trailing ".git" is dropped.
    h = re.escape(host)
    return [
        re.compile(rf"^https?://(?:www\.)?{h}/(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"),
        re.compile(rf"^git@{h}:(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?$"),
        re.compile(rf"^git://{h}/(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?$"),
    ]


def parse_remote_url(url: str | None, host: str = GITHUB_HOST) -> RepoRef | None:
    """Parse a remote URL into owner and repository name.

    Accepts, in this order, HTTPS (``https://github.com/o/r.git``), SSH
    (``git@github.com:o/r.git``) and git protocol (``git://github.com/o/r``).

    Args:
        url: Remote URL as configured in the repository
        host: Host the URL must point at

    Returns:
        RepoRef, or None for other hosts and unrecognised forms

    Example:
        >>> parse_remote_url("git@github.com:acme/my.repo.git")
        RepoRef(owner='acme', repo='my.repo')
    """
    if not url:
        return None

    candidate = url.strip()
    for pattern in _patterns(host):
        match = pattern.match(candidate)
        if match:
            return RepoRef(owner=match.group("owner"), repo=match.group("repo"))
    return None
