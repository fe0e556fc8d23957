"""Classify ref decorations (git log %D) into branches, tags and remotes."""

from collections.abc import Sequence

from common.constants import REMOTE_PREFIXES

from .models import RefInfo

HEAD_POINTER = "HEAD -> "
TAG_PREFIX = "tag: "


def parse_refs(
    decoration: str | None, remote_prefixes: Sequence[str] = REMOTE_PREFIXES
) -> list[RefInfo]:
    """Parse a decoration string such as ``HEAD -> main, tag: v1.0, origin/main``.

    Args:
        decoration: Raw comma-separated decoration emitted alongside a commit
        remote_prefixes: Prefixes that mark remote-tracking refs

    Returns:
        Refs in the order they appear. A detached ``HEAD`` token is dropped;
        unrecognised tokens are treated as local branches.
    """
    if not decoration or not decoration.strip():
        return []

    refs: list[RefInfo] = []
    for token in (part.strip() for part in decoration.split(",")):
        if not token or token == "HEAD":
            continue
        if token.startswith(HEAD_POINTER):
            refs.append(RefInfo(token[len(HEAD_POINTER) :], "branch", is_head=True))
        elif token.startswith(TAG_PREFIX):
            refs.append(RefInfo(token[len(TAG_PREFIX) :], "tag"))
        elif token.startswith(tuple(remote_prefixes)):
            refs.append(RefInfo(token, "remote"))
        else:
            refs.append(RefInfo(token, "branch"))

    return refs
