"""Turn raw ``git log`` output into Commit models.

Each record is emitted as nine fields joined by the ASCII unit separator and
terminated by the record separator, so subjects and multi-line bodies never
collide with the framing.
"""

from collections.abc import Sequence

from common.logger import get_logger

from .models import Author, Commit
from .refs import parse_refs

logger = get_logger(__name__)

FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"

# hash, short hash, subject, body, author name, author email,
# strict ISO author date, parent hashes, ref decoration
LOG_FIELDS = ("%H", "%h", "%s", "%b", "%an", "%ae", "%aI", "%P", "%D")
LOG_FORMAT = "--format=" + "%x1f".join(LOG_FIELDS) + "%x1e"


def parse_commit(fields: Sequence[str]) -> Commit:
    """Build a Commit from the nine fields of one log record.

    Args:
        fields: Values in ``LOG_FIELDS`` order

    Returns:
        Commit with parents split on whitespace and refs classified

    Raises:
        ValueError: If the record does not have exactly nine fields
    """
    if len(fields) != len(LOG_FIELDS):
        raise ValueError(f"Expected {len(LOG_FIELDS)} log fields, got {len(fields)}")

    full_hash, short_hash, subject, body, name, email, date, parents, decoration = fields
    return Commit(
        hash=full_hash.strip(),
        short_hash=short_hash.strip(),
        subject=subject,
        body=body.strip(),
        author=Author(name=name, email=email),
        date=date.strip(),
        parents=tuple(p for p in parents.split() if p),
        refs=tuple(parse_refs(decoration)),
    )


def parse_log_output(output: str) -> list[Commit]:
    """Parse the complete stdout of a ``git log`` run that used ``LOG_FORMAT``.

    Args:
        output: Raw stdout

    Returns:
        Commits in the order git printed them
    """
    commits: list[Commit] = []
    for record in output.split(RECORD_SEP):
        # git terminates each formatted record with a newline
        record = record.lstrip("\n")
        if not record.strip():
            continue
        try:
            commits.append(parse_commit(record.split(FIELD_SEP)))
        except ValueError as e:
            logger.warning(f"Skipping malformed log record: {e}")
    return commits
