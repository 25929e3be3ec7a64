"""Generic article extraction: browser-like fetch, date lookup, trafilatura."""

import asyncio
import logging

import httpx
from bs4 import BeautifulSoup
from trafilatura import bare_extraction

from mollymemo.config import get_settings
from mollymemo.extraction.repo_links import find_repo_urls
from mollymemo.http import BROWSER_HEADERS, send_request
from mollymemo.models.content import ArticleResult

logger = logging.getLogger(__name__)

# (selector, attribute) pairs tried in order; first non-empty value wins
PUBLISHED_TIME_SELECTORS = (
    ('meta[property="article:published_time"]', "content"),
    ('meta[name="pubdate"]', "content"),
    ('meta[name="publishdate"]', "content"),
    ("time[datetime]", "datetime"),
)


def find_published_time(html: str) -> str | None:
    """Search page markup for a publication timestamp."""
    soup = BeautifulSoup(html, "html.parser")
    for selector, attribute in PUBLISHED_TIME_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        value = (element.get(attribute) or "").strip()
        if value:
            return value
    return None


async def fetch_html(url: str) -> str | None:
    """Download a page with browser-like headers. None on any failure or non-2xx."""
    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(get_settings().http_timeout_seconds),
            follow_redirects=True,
        ) as client:
            response = await send_request(client, "GET", url, headers=BROWSER_HEADERS)
    except Exception as exc:
        logger.error("Article fetch failed for %s: %s", url, exc)
        return None

    if not response.is_success:
        logger.error("Article fetch error: %d for %s", response.status_code, url)
        return None
    return response.text


async def extract_article(url: str) -> ArticleResult | None:
    """Extract readable content from a generic web page.

    The publication timestamp is read before the main-content pass, which
    runs in a worker thread. Returns None when the fetch fails or the page
    yields no body text.
    """
    html = await fetch_html(url)
    if not html:
        return None

    published_time = find_published_time(html)

    doc = await asyncio.to_thread(bare_extraction, html, url=url)
    text = (doc.text or "").strip() if doc is not None else ""
    if not text:
        logger.warning("No readable content extracted from %s", url)
        return None

    return ArticleResult(
        url=url,
        title=doc.title or None,
        text=text,
        excerpt=doc.description or None,
        byline=doc.author or None,
        site_name=doc.sitename or doc.hostname or None,
        published_time=published_time or doc.date or None,
        repo_urls=find_repo_urls(text),
    )
