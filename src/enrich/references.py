"""Find issue references in commit messages."""

import re

# fixes #12, Closed #3, resolve#7
CLOSING_KEYWORD_PATTERN = re.compile(
    r"(?:fix(?:es|ed)?|close[sd]?|resolve[sd]?)\s*#(\d+)", re.IGNORECASE
)

# "#12" standing alone, followed by whitespace, end of text, comma or period
BARE_REFERENCE_PATTERN = re.compile(r"(?:^|\s)#(\d+)(?=\s|$|[,.])", re.MULTILINE)


def parse_issue_references(subject: str, body: str = "") -> list[int]:
    """Collect every issue number mentioned in a commit message.

    Closing keywords and bare references are merged; which form an issue was
    mentioned in is not kept.

    Args:
        subject: First line of the commit message
        body: Remaining message text

    Returns:
        Unique issue numbers in ascending order

    Example:
        >>> parse_issue_references("Fixes #12 and see #7, also #12")
        [7, 12]
    """
    text = f"{subject}\n{body or ''}"
    numbers: set[int] = set()
    for pattern in (CLOSING_KEYWORD_PATTERN, BARE_REFERENCE_PATTERN):
        numbers.update(int(match.group(1)) for match in pattern.finditer(text))
    return sorted(numbers)
