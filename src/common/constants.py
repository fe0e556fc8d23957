"""Shared constants for gitvis.

For environment-based configuration (GitHub token, cache sizes, etc.), use the env module:
    from common.env import env
    token = env.github_token()
"""

# GitHub REST API
GITHUB_API_URL = "https://api.github.com"
GITHUB_HOST = "github.com"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_ACCEPT = "application/vnd.github+json"
USER_AGENT = "gitvis/0.1 (git history explorer)"

# Pagination and streaming defaults
DEFAULT_PAGE_SIZE = 500
DEFAULT_CHUNK_SIZE = 500

# Repositories above these commit counts should not be loaded in full
LARGE_REPO_THRESHOLD = 10_000
HUGE_REPO_THRESHOLD = 100_000

# Decoration tokens starting with one of these are remote-tracking refs
REMOTE_PREFIXES: tuple[str, ...] = ("origin/",)
