"""Explicit repository reference scanning in free text."""

import re

# github.com/<owner>/<repo>, scheme optional; the repo segment stops at
# whitespace, quotes, brackets, and further path separators
GITHUB_REF_PATTERN = re.compile(
    r"(?:https?://)?(?:www\.)?github\.com/([A-Za-z0-9_.-]+)/([^\s\"'<>()\[\]/?#]+)",
    re.IGNORECASE,
)
_TRAILING_PUNCTUATION = ".,;:!?)]}'\""


def _clean_segment(segment: str) -> str:
    segment = segment.rstrip(_TRAILING_PUNCTUATION)
    if segment.endswith(".git"):
        segment = segment[: -len(".git")]
    return segment


def find_repo_urls(text: str | None) -> list[str]:
    """Return canonical ``https://github.com/owner/repo`` URLs referenced in text.

    Trailing punctuation is stripped and duplicates (case-insensitive) are
    removed, preserving first-seen order.
    """
    if not text:
        return []
    seen: set[str] = set()
    urls: list[str] = []
    for owner, repo in GITHUB_REF_PATTERN.findall(text):
        repo = _clean_segment(repo)
        owner = owner.rstrip(_TRAILING_PUNCTUATION)
        if not owner or not repo:
            continue
        url = f"https://github.com/{owner}/{repo}"
        key = url.lower()
        if key not in seen:
            seen.add(key)
            urls.append(url)
    return urls


def merge_repo_urls(*groups: list[str]) -> list[str]:
    """Concatenate URL lists, dropping case-insensitive duplicates."""
    seen: set[str] = set()
    merged: list[str] = []
    for group in groups:
        for url in group:
            key = url.rstrip("/").lower()
            if key not in seen:
                seen.add(key)
                merged.append(url)
    return merged
