"""Tests for per-source extractor dispatch and payload normalization."""

from unittest.mock import AsyncMock, patch

import pytest

from mollymemo.cost import CostLedger
from mollymemo.extraction.dispatch import extract_content
from mollymemo.models.content import ArticleResult, ShortVideoResult, SocialPostResult
from mollymemo.models.item import RepoMetadata, SourceKind

_EXTRACTORS = ("extract_tiktok", "extract_x", "extract_github", "extract_article")


@pytest.fixture
def extractors():
    """Patch every extractor; each test sets the one it expects to be called."""
    mocks = {}
    patchers = [
        patch(f"mollymemo.extraction.dispatch.{name}", new_callable=AsyncMock)
        for name in _EXTRACTORS
    ]
    for name, patcher in zip(_EXTRACTORS, patchers):
        mocks[name] = patcher.start()
    yield mocks
    for patcher in patchers:
        patcher.stop()


def _only_called(extractors: dict, expected: str) -> None:
    for name, mock in extractors.items():
        if name == expected:
            mock.assert_called_once()
        else:
            mock.assert_not_called()


async def test_short_video_payload(extractors):
    extractors["extract_tiktok"].return_value = ShortVideoResult(
        transcript="t", repo_urls=["https://github.com/a/b"], transcription_method="reference"
    )

    payload = await extract_content("https://www.tiktok.com/@a/video/1", SourceKind.SHORT_VIDEO)

    _only_called(extractors, "extract_tiktok")
    assert payload.text == "t"
    assert payload.repo_urls == ["https://github.com/a/b"]
    assert payload.repo_extraction_cost is None
    assert payload.grok_cost is None


async def test_short_video_sub_pipeline_cost_carried(extractors):
    extractors["extract_tiktok"].return_value = ShortVideoResult(
        transcript="t",
        transcription_method="upload",
        repo_extraction_ran=True,
        repo_extraction_cost=0.0,
    )

    payload = await extract_content("https://www.tiktok.com/@a/video/1", SourceKind.SHORT_VIDEO)

    assert payload.repo_extraction_ran is True
    assert payload.repo_extraction_cost == 0.0


async def test_social_post_payload_includes_transcript_and_links(extractors):
    extractors["extract_x"].return_value = SocialPostResult(
        text="post body",
        video_transcript="spoken words",
        author_name="Dev",
        resolved_urls=["https://example.com/a"],
        used_grok=True,
        grok_cost=0.04,
    )

    payload = await extract_content("https://x.com/a/status/1", SourceKind.SOCIAL_POST)

    _only_called(extractors, "extract_x")
    assert "post body" in payload.text
    assert "spoken words" in payload.text
    assert "https://example.com/a" in payload.text
    assert payload.author == "Dev"
    assert payload.grok_cost == 0.04


async def test_social_post_fallback_has_no_grok_cost(extractors):
    extractors["extract_x"].return_value = SocialPostResult(text="hi", used_grok=False)

    payload = await extract_content("https://x.com/a/status/1", SourceKind.SOCIAL_POST)

    assert payload.grok_cost is None


async def test_social_post_receives_run_ledger(extractors):
    extractors["extract_x"].return_value = SocialPostResult(text="hi")
    ledger = CostLedger()

    await extract_content("https://x.com/a/status/1", SourceKind.SOCIAL_POST, ledger=ledger)

    assert extractors["extract_x"].call_args.kwargs["ledger"] is ledger


async def test_code_repo_payload(extractors):
    extractors["extract_github"].return_value = RepoMetadata(
        owner="acme", repo="tool", name="tool", description="desc"
    )

    payload = await extract_content("https://github.com/acme/tool", SourceKind.CODE_REPO)

    _only_called(extractors, "extract_github")
    assert payload.repo_metadata.name == "tool"
    assert payload.repo_urls == ["https://github.com/acme/tool"]
    assert payload.text == "desc"


async def test_article_payload(extractors):
    extractors["extract_article"].return_value = ArticleResult(
        url="https://example.com/a",
        text="body",
        byline="Jane",
        published_time="2026-01-01",
    )

    payload = await extract_content("https://example.com/a", SourceKind.ARTICLE)

    _only_called(extractors, "extract_article")
    assert payload.author == "Jane"
    assert payload.published_at == "2026-01-01"


@pytest.mark.parametrize(
    ("kind", "name"),
    [
        (SourceKind.SHORT_VIDEO, "extract_tiktok"),
        (SourceKind.SOCIAL_POST, "extract_x"),
        (SourceKind.CODE_REPO, "extract_github"),
        (SourceKind.ARTICLE, "extract_article"),
    ],
)
async def test_null_extractor_result_is_none(extractors, kind, name):
    extractors[name].return_value = None

    assert await extract_content("https://example.com/x", kind) is None
    _only_called(extractors, name)
