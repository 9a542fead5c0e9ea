"""
Shared Constants

Centralized constants used across the package to ensure consistency.
"""

from typing import FrozenSet

# GitHub REST API
DEFAULT_BASE_URL: str = "https://api.github.com"
GITHUB_API_VERSION: str = "2022-11-28"
GITHUB_ACCEPT: str = "application/vnd.github+json"
USER_AGENT: str = "runner-control"

# Per-call deadline in seconds
DEFAULT_REQUEST_TIMEOUT: float = 30.0

# App JWT lifetime (GitHub accepts at most 10 minutes)
APP_JWT_LIFETIME_SECONDS: int = 600
APP_JWT_ALGORITHM: str = "RS256"

# Re-mint installation tokens this many seconds before they expire
DEFAULT_REFRESH_MARGIN_SECONDS: int = 60

# Runner defaults
DEFAULT_RUNNER_GROUP_ID: int = 1
DEFAULT_WORK_FOLDER: str = "_work"
RUNNER_STATUS_OFFLINE: str = "offline"
LABEL_TYPE_READ_ONLY: str = "read-only"
LABEL_TYPE_CUSTOM: str = "custom"

# Runner group visibility
VISIBILITY_ALL: str = "all"
VISIBILITY_SELECTED: str = "selected"
VISIBILITY_PRIVATE: str = "private"
RUNNER_GROUP_VISIBILITIES: FrozenSet[str] = frozenset(
    {VISIBILITY_ALL, VISIBILITY_SELECTED, VISIBILITY_PRIVATE}
)

# Network configuration compute services
COMPUTE_SERVICES: FrozenSet[str] = frozenset({"none", "actions"})
DEFAULT_COMPUTE_SERVICE: str = "actions"

# Metric service labels
SERVICE_GITHUB_API: str = "GitHub API"
SERVICE_GITHUB_APP_AUTH: str = "GitHub App auth"
