"""Extractor dispatch: one extraction strategy per source kind."""

import logging

from mollymemo.cost import CostLedger
from mollymemo.extraction.article import extract_article
from mollymemo.extraction.github import extract_github
from mollymemo.extraction.tiktok import extract_tiktok
from mollymemo.extraction.x import extract_x
from mollymemo.models.content import (
    ArticleResult,
    ExtractedPayload,
    ShortVideoResult,
    SocialPostResult,
)
from mollymemo.models.item import RepoMetadata, SourceKind

logger = logging.getLogger(__name__)


def _from_short_video(result: ShortVideoResult) -> ExtractedPayload:
    return ExtractedPayload(
        source_kind=SourceKind.SHORT_VIDEO,
        text=result.transcript,
        repo_urls=result.repo_urls,
        repo_extraction_ran=result.repo_extraction_ran,
        repo_extraction_cost=(
            result.repo_extraction_cost if result.repo_extraction_ran else None
        ),
    )


def _post_text(result: SocialPostResult) -> str:
    parts = [result.text]
    if result.video_transcript:
        parts.append(f"Video transcript:\n{result.video_transcript}")
    if result.article_url:
        parts.append(f"Linked article: {result.article_url}")
    elif result.resolved_urls:
        parts.append("Links:\n" + "\n".join(result.resolved_urls))
    return "\n\n".join(p for p in parts if p)


def _from_social_post(result: SocialPostResult) -> ExtractedPayload:
    return ExtractedPayload(
        source_kind=SourceKind.SOCIAL_POST,
        text=_post_text(result),
        author=result.author_name,
        repo_urls=result.repo_urls,
        repo_extraction_ran=result.repo_extraction_ran,
        grok_cost=result.grok_cost if result.used_grok else None,
        repo_extraction_cost=(
            result.repo_extraction_cost if result.repo_extraction_ran else None
        ),
    )


def _from_code_repo(metadata: RepoMetadata) -> ExtractedPayload:
    return ExtractedPayload(
        source_kind=SourceKind.CODE_REPO,
        text=metadata.description,
        repo_metadata=metadata,
        repo_urls=[f"https://github.com/{metadata.owner}/{metadata.repo}"],
    )


def _from_article(result: ArticleResult) -> ExtractedPayload:
    return ExtractedPayload(
        source_kind=SourceKind.ARTICLE,
        text=result.text,
        author=result.byline,
        published_at=result.published_time,
        repo_urls=result.repo_urls,
    )


async def extract_content(
    url: str, source_kind: SourceKind, ledger: CostLedger | None = None
) -> ExtractedPayload | None:
    """Run the extractor for ``source_kind`` and normalize its result.

    Returns None when the extractor produced nothing usable. Spend on
    attempts the result does not reflect is charged to ``ledger``.
    """
    logger.info("Extracting %s as %s", url, source_kind.value)

    if source_kind == SourceKind.SHORT_VIDEO:
        video = await extract_tiktok(url)
        return _from_short_video(video) if video else None
    if source_kind == SourceKind.SOCIAL_POST:
        post = await extract_x(url, ledger=ledger)
        return _from_social_post(post) if post else None
    if source_kind == SourceKind.CODE_REPO:
        metadata = await extract_github(url)
        return _from_code_repo(metadata) if metadata else None

    article = await extract_article(url)
    return _from_article(article) if article else None
