"""Tests for social-post extraction: grounded path and oEmbed fallback."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from mollymemo.cost import CostCategory, CostLedger
from mollymemo.extraction.grok import GrokPost
from mollymemo.extraction.x import (
    extract_x,
    html_to_text,
    is_article_url,
    is_link_only,
    normalize_post_url,
)
from mollymemo.models.content import RepoExtraction, RepoInfo

POST_URL = "https://twitter.com/dev/status/42"


def _oembed(paragraph: str) -> httpx.Response:
    html = (
        f'<blockquote class="twitter-tweet"><p lang="en">{paragraph}</p>'
        "&mdash; Dev (@dev)</blockquote>"
    )
    return httpx.Response(
        200,
        json={"html": html, "author_name": "Dev", "author_url": "https://twitter.com/dev"},
    )


def _redirect(location: str) -> httpx.Response:
    return httpx.Response(301, headers={"location": location})


# --- pure helpers ---


def test_normalize_post_url_rewrites_twitter():
    assert normalize_post_url(POST_URL) == "https://x.com/dev/status/42"
    assert normalize_post_url("https://x.com/a/status/1") == "https://x.com/a/status/1"


def test_html_to_text_converts_breaks_and_entities():
    html = "<blockquote><p>line one<br>line &amp; two<br/><a href='#'>#tag</a></p></blockquote>"
    assert html_to_text(html) == "line one\nline & two\n#tag"


def test_html_to_text_without_paragraph():
    assert html_to_text("<blockquote>no paragraph</blockquote>") == ""


@pytest.mark.parametrize(
    "text",
    ["https://t.co/xyz", "Only link: https://t.co/xyz", "look at this https://t.co/abc123"],
)
def test_link_only_posts(text: str):
    assert is_link_only(text) is True


@pytest.mark.parametrize(
    "text",
    [
        "https://t.co/a https://t.co/b",
        "A much longer post that explains a technique https://t.co/xyz",
        "no links at all",
    ],
)
def test_not_link_only(text: str):
    assert is_link_only(text) is False


def test_article_url_shapes():
    assert is_article_url("https://x.com/i/article/1234")
    assert is_article_url("https://x.com/dev/article/1234")
    assert not is_article_url("https://x.com/dev/status/1234")


# --- oEmbed fallback ---


async def test_grok_empty_falls_back_to_oembed_link_only(configure):
    """Grounded path returns nothing -> oEmbed; a bare link post is link-only."""
    configure(xai_api_key="xai-key")
    with (
        patch(
            "mollymemo.extraction.x.fetch_post_with_grok",
            new_callable=AsyncMock,
            return_value=None,
        ) as m_grok,
        patch(
            "mollymemo.extraction.x.send_request",
            new_callable=AsyncMock,
            side_effect=[
                _oembed('Only link: <a href="https://t.co/xyz">https://t.co/xyz</a>'),
                _redirect("https://example.com/blog/post"),
            ],
        ) as m_send,
        patch(
            "mollymemo.extraction.x.extract_repos_from_text", new_callable=AsyncMock
        ) as m_repos,
    ):
        result = await extract_x(POST_URL)

    m_grok.assert_called_once_with("https://x.com/dev/status/42")
    assert result.is_link_only is True
    assert result.used_grok is False
    assert result.grok_cost == 0.0
    assert result.text == "Only link: https://t.co/xyz"
    assert result.author_name == "Dev"
    assert result.resolved_urls == ["https://example.com/blog/post"]
    m_repos.assert_not_called()
    oembed_call = m_send.call_args_list[0]
    assert oembed_call.kwargs["params"] == {
        "url": "https://x.com/dev/status/42",
        "omit_script": "true",
    }
    resolve_call = m_send.call_args_list[1]
    assert resolve_call.kwargs["follow_redirects"] is False


async def test_unconfigured_grok_skips_grounded_path():
    with (
        patch("mollymemo.extraction.x.fetch_post_with_grok", new_callable=AsyncMock) as m_grok,
        patch(
            "mollymemo.extraction.x.send_request",
            new_callable=AsyncMock,
            side_effect=[_oembed("https://t.co/xyz"), _redirect("https://x.com/i/article/99")],
        ),
    ):
        result = await extract_x(POST_URL)

    m_grok.assert_not_called()
    assert result.article_url == "https://x.com/i/article/99"


async def test_nested_short_link_discarded():
    with patch(
        "mollymemo.extraction.x.send_request",
        new_callable=AsyncMock,
        side_effect=[_oembed("https://t.co/one"), _redirect("https://t.co/two")],
    ):
        result = await extract_x(POST_URL)

    assert result.resolved_urls == []


async def test_resolved_repo_link_is_used_without_sub_pipeline():
    paragraph = "New release of my CLI, check it out and tell me what you think https://t.co/r1"
    with (
        patch(
            "mollymemo.extraction.x.send_request",
            new_callable=AsyncMock,
            side_effect=[_oembed(paragraph), _redirect("https://github.com/acme/tool")],
        ),
        patch(
            "mollymemo.extraction.x.extract_repos_from_text", new_callable=AsyncMock
        ) as m_repos,
    ):
        result = await extract_x(POST_URL)

    assert result.repo_urls == ["https://github.com/acme/tool"]
    assert result.is_link_only is False
    m_repos.assert_not_called()


async def test_sub_pipeline_runs_for_plain_post():
    extraction = RepoExtraction(
        repos=[RepoInfo(url="https://github.com/a/sharp", name="sharp", full_name="a/sharp")],
        cost_usd=0.002,
    )
    with (
        patch(
            "mollymemo.extraction.x.send_request",
            new_callable=AsyncMock,
            side_effect=[_oembed("I resize every image with sharp, it is incredibly fast")],
        ),
        patch(
            "mollymemo.extraction.x.extract_repos_from_text",
            new_callable=AsyncMock,
            return_value=extraction,
        ) as m_repos,
    ):
        result = await extract_x(POST_URL)

    m_repos.assert_called_once()
    assert result.repo_urls == ["https://github.com/a/sharp"]
    assert result.repo_extraction_ran is True
    assert result.repo_extraction_cost == 0.002


async def test_oembed_failure_returns_none():
    with patch(
        "mollymemo.extraction.x.send_request",
        new_callable=AsyncMock,
        return_value=httpx.Response(404),
    ):
        assert await extract_x(POST_URL) is None



async def test_oembed_non_json_body_returns_none():
    with patch(
        "mollymemo.extraction.x.send_request",
        new_callable=AsyncMock,
        return_value=httpx.Response(200, text="<html>Something went wrong</html>"),
    ):
        assert await extract_x(POST_URL) is None


# --- grounded path ---


async def test_grok_result_used_when_available(configure):
    configure(xai_api_key="xai-key")
    post = GrokPost(
        text="Built with github.com/acme/tool",
        author_name="Dev",
        summary="A post about a tool",
        citations=[
            "https://github.com/acme/tool/",
            "https://github.com/b/lib",
            "https://x.com/dev",
        ],
        cost_usd=0.05,
    )
    with (
        patch(
            "mollymemo.extraction.x.fetch_post_with_grok",
            new_callable=AsyncMock,
            return_value=post,
        ),
        patch("mollymemo.extraction.x.send_request", new_callable=AsyncMock) as m_send,
    ):
        result = await extract_x(POST_URL)

    m_send.assert_not_called()
    assert result.used_grok is True
    assert result.grok_cost == 0.05
    assert result.resolved_urls == ["https://github.com/acme/tool/", "https://github.com/b/lib"]
    assert result.repo_urls == ["https://github.com/acme/tool", "https://github.com/b/lib"]
    assert result.summary == "A post about a tool"


async def test_grok_answer_without_content_charges_ledger(configure):
    """A billed answer with nothing usable falls back to oEmbed but keeps its cost."""
    configure(xai_api_key="xai-key")
    ledger = CostLedger()
    with (
        patch(
            "mollymemo.extraction.x.fetch_post_with_grok",
            new_callable=AsyncMock,
            return_value=GrokPost(cost_usd=0.03),
        ),
        patch(
            "mollymemo.extraction.x.send_request",
            new_callable=AsyncMock,
            side_effect=[_oembed("https://t.co/xyz"), _redirect("https://example.com/post")],
        ),
    ):
        result = await extract_x(POST_URL, ledger=ledger)

    assert result.used_grok is False
    assert result.grok_cost == 0.0
    assert ledger.get(CostCategory.GROK) == 0.03
