"""LLM processing: classification and repository discovery via Gemini.

Public API:
    classify_content(url, source_kind, ...) -> ClassificationResponse | None
    extract_repos_from_text(text, known_urls, url) -> RepoExtraction
"""

from mollymemo.llm.classifier import classify_content
from mollymemo.llm.client import get_gemini_client, reset_client
from mollymemo.llm.repos import extract_repos_from_text
from mollymemo.llm.schemas import ClassificationResponse

__all__ = [
    "classify_content",
    "ClassificationResponse",
    "extract_repos_from_text",
    "get_gemini_client",
    "reset_client",
]
