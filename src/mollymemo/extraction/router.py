"""Source kind detection and repository URL parsing."""

import re
from urllib.parse import urlparse

from mollymemo.models.item import SourceKind

# Hostname patterns ordered by priority
TIKTOK_HOST = re.compile(r"(?:^|\.)tiktok\.com$")
X_HOST = re.compile(r"(?:^|\.)(?:x|twitter)\.com$")
GITHUB_HOST = re.compile(r"^(?:www\.)?github\.com$")

_KIND_PATTERNS = (
    (TIKTOK_HOST, SourceKind.SHORT_VIDEO),
    (X_HOST, SourceKind.SOCIAL_POST),
    (GITHUB_HOST, SourceKind.CODE_REPO),
)


def _hostname(url: str) -> str:
    try:
        return (urlparse(url.strip()).hostname or "").lower()
    except ValueError:
        return ""


def detect_source_kind(url: str) -> SourceKind:
    """Detect source kind from the URL hostname. Unknown or unparseable URLs default to ARTICLE."""
    hostname = _hostname(url)
    for pattern, kind in _KIND_PATTERNS:
        if pattern.search(hostname):
            return kind
    return SourceKind.ARTICLE


def parse_repo_url(url: str) -> tuple[str, str] | None:
    """Extract (owner, repo) from a GitHub URL.

    Only the first two path segments count, so trailing slashes and
    sub-paths like ``/tree/main/src`` are ignored. A ``.git`` suffix is dropped.
    """
    if not GITHUB_HOST.search(_hostname(url)):
        return None
    segments = [s for s in urlparse(url.strip()).path.split("/") if s]
    if len(segments) < 2:
        return None
    owner, repo = segments[0], segments[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not repo:
        return None
    return owner, repo
