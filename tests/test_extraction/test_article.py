"""Tests for article extraction (mocked fetch and trafilatura)."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from mollymemo.extraction.article import extract_article, find_published_time


def _doc(**overrides) -> SimpleNamespace:
    fields = {
        "text": "This is the full article body. Code lives at github.com/acme/tool.",
        "title": "Test Article",
        "author": "Jane Doe",
        "date": "2026-01-15",
        "sitename": "Example",
        "hostname": "example.com",
        "description": "A test article description.",
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


@pytest.mark.parametrize(
    ("html", "expected"),
    [
        (
            '<meta property="article:published_time" content="2026-02-01T10:00:00Z">'
            '<meta name="pubdate" content="2020-01-01">',
            "2026-02-01T10:00:00Z",
        ),
        ('<meta name="pubdate" content="2026-03-01">', "2026-03-01"),
        ('<meta name="publishdate" content="2026-04-01">', "2026-04-01"),
        ('<p><time datetime="2026-05-01">May 1</time></p>', "2026-05-01"),
        ("<p>No dates here</p>", None),
    ],
)
def test_find_published_time_order(html: str, expected: str | None):
    assert find_published_time(f"<html><head></head><body>{html}</body></html>") == expected


async def test_extract_article_success():
    """Successful extraction maps trafilatura fields and scans repo links."""
    html = '<html><head><meta name="pubdate" content="2026-03-01"></head><body>x</body></html>'
    with (
        patch(
            "mollymemo.extraction.article.send_request",
            new_callable=AsyncMock,
            return_value=httpx.Response(200, text=html),
        ) as mock_send,
        patch("mollymemo.extraction.article.bare_extraction", return_value=_doc()),
    ):
        result = await extract_article("https://example.com/article")

    assert result.title == "Test Article"
    assert result.byline == "Jane Doe"
    assert result.site_name == "Example"
    assert result.excerpt == "A test article description."
    assert result.published_time == "2026-03-01"
    assert result.repo_urls == ["https://github.com/acme/tool"]
    assert "User-Agent" in mock_send.call_args.kwargs["headers"]


async def test_extract_article_falls_back_to_trafilatura_date():
    with (
        patch(
            "mollymemo.extraction.article.send_request",
            new_callable=AsyncMock,
            return_value=httpx.Response(200, text="<html><body>x</body></html>"),
        ),
        patch("mollymemo.extraction.article.bare_extraction", return_value=_doc()),
    ):
        result = await extract_article("https://example.com/article")

    assert result.published_time == "2026-01-15"


async def test_extract_article_404_returns_none():
    with (
        patch(
            "mollymemo.extraction.article.send_request",
            new_callable=AsyncMock,
            return_value=httpx.Response(404),
        ),
        patch("mollymemo.extraction.article.bare_extraction") as mock_extract,
    ):
        assert await extract_article("https://example.com/gone") is None

    mock_extract.assert_not_called()


async def test_extract_article_network_failure_returns_none():
    with patch(
        "mollymemo.extraction.article.send_request",
        new_callable=AsyncMock,
        side_effect=httpx.ConnectError("down"),
    ):
        assert await extract_article("https://example.com/down") is None


@pytest.mark.parametrize("doc", [None, _doc(text=""), _doc(text="   ")])
async def test_extract_article_empty_text_returns_none(doc):
    with (
        patch(
            "mollymemo.extraction.article.send_request",
            new_callable=AsyncMock,
            return_value=httpx.Response(200, text="<html></html>"),
        ),
        patch("mollymemo.extraction.article.bare_extraction", return_value=doc),
    ):
        assert await extract_article("https://example.com/empty") is None
