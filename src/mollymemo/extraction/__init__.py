"""Content extraction: source detection and per-source extractors.

Public API:
    detect_source_kind(url) -> SourceKind
        Total hostname-based classification; unknown URLs are articles.
    extract_content(url, source_kind) -> ExtractedPayload | None
        Lives in ``mollymemo.extraction.dispatch``.
"""

from mollymemo.extraction.router import detect_source_kind, parse_repo_url

__all__ = [
    "detect_source_kind",
    "parse_repo_url",
]
