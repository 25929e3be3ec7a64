"""Social-post extraction for X/Twitter.

Grounded Grok retrieval is tried first when configured. Otherwise, or when
Grok returns nothing, the public oEmbed endpoint supplies the post text and
shortened links are resolved by a single redirect hop.
"""

import logging
import re

import httpx
from bs4 import BeautifulSoup

from mollymemo.config import get_settings
from mollymemo.cost import CostCategory, CostLedger
from mollymemo.extraction.grok import GrokPost, fetch_post_with_grok
from mollymemo.extraction.repo_links import find_repo_urls, merge_repo_urls
from mollymemo.http import USER_AGENT, json_object, send_request
from mollymemo.llm.repos import extract_repos_from_text
from mollymemo.models.content import RepoExtraction, SocialPostResult

logger = logging.getLogger(__name__)

OEMBED_API = "https://publish.twitter.com/oembed"

SHORT_LINK_PATTERN = re.compile(r"https?://t\.co/[A-Za-z0-9]+")
ARTICLE_PATTERN = re.compile(
    r"^https?://(?:www\.)?(?:x|twitter)\.com/(?:i|[A-Za-z0-9_]+)/article/\d+", re.IGNORECASE
)
_TWITTER_HOST = re.compile(r"^(https?://)(?:www\.|mobile\.)?twitter\.com/", re.IGNORECASE)
_CODE_HOST = re.compile(r"^https?://(?:www\.)?github\.com/", re.IGNORECASE)

# A link-only post may carry a short lead-in like "Only link:"
LINK_ONLY_MAX_WORDS = 3


def normalize_post_url(url: str) -> str:
    """Rewrite twitter.com hosts to x.com."""
    return _TWITTER_HOST.sub(r"\1x.com/", url.strip())


def html_to_text(html: str) -> str:
    """Plain text of the first ``<p>`` in an oEmbed blockquote.

    ``<br>`` becomes a newline, other tags are dropped and entities decoded.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    paragraph = soup.find("p")
    if paragraph is None:
        return ""
    for br in paragraph.find_all("br"):
        br.replace_with("\n")
    return paragraph.get_text().strip()


def find_short_links(text: str) -> list[str]:
    return list(dict.fromkeys(SHORT_LINK_PATTERN.findall(text or "")))


def is_link_only(text: str) -> bool:
    """True when the post is one shortened link plus at most a few words."""
    links = SHORT_LINK_PATTERN.findall(text or "")
    if len(links) != 1:
        return False
    remainder = SHORT_LINK_PATTERN.sub(" ", text)
    return len(remainder.split()) <= LINK_ONLY_MAX_WORDS


def is_article_url(url: str) -> bool:
    return bool(ARTICLE_PATTERN.match(url))


async def resolve_short_link(client: httpx.AsyncClient, link: str) -> str | None:
    """Resolve a shortened link by exactly one redirect hop.

    Returns the ``Location`` target, or None when there is no redirect, the
    request fails, or the target is itself a shortened link.
    """
    try:
        response = await send_request(
            client, "GET", link, headers={"User-Agent": USER_AGENT}, follow_redirects=False
        )
    except Exception as exc:
        logger.warning("Could not resolve %s: %s", link, exc)
        return None

    location = response.headers.get("location")
    if not response.is_redirect or not location:
        return None
    if SHORT_LINK_PATTERN.match(location):
        logger.info("Discarding nested short link %s -> %s", link, location)
        return None
    return location


async def fetch_oembed(post_url: str) -> dict | None:
    """Fetch the oEmbed payload for a post. None on any failure."""
    params = {"url": post_url, "omit_script": "true"}
    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(get_settings().http_timeout_seconds)
        ) as client:
            response = await send_request(client, "GET", OEMBED_API, params=params)
    except Exception as exc:
        logger.error("oEmbed request failed for %s: %s", post_url, exc)
        return None

    if not response.is_success:
        logger.error("X oEmbed error: %d for %s", response.status_code, post_url)
        return None

    data = json_object(response)
    if data is None:
        logger.error("X oEmbed returned a non-JSON body for %s", post_url)
    return data


def _from_grok(post: GrokPost) -> SocialPostResult:
    code_links = [c for c in post.citations if _CODE_HOST.match(c)]
    repo_urls = merge_repo_urls(
        find_repo_urls(" ".join(code_links)),
        find_repo_urls(post.text),
        find_repo_urls(post.video_transcript),
    )
    article_url = next((c for c in post.citations if is_article_url(c)), None)
    return SocialPostResult(
        text=post.text,
        video_transcript=post.video_transcript,
        author_name=post.author_name,
        resolved_urls=code_links,
        repo_urls=repo_urls,
        article_url=article_url,
        summary=post.summary,
        citations=post.citations,
        used_grok=True,
        grok_cost=post.cost_usd,
    )


async def _from_oembed(post_url: str) -> SocialPostResult | None:
    data = await fetch_oembed(post_url)
    if data is None:
        return None

    html = data.get("html")
    text = html_to_text(html) if isinstance(html, str) else ""
    if not text:
        logger.warning("oEmbed returned no post text for %s", post_url)
        return None

    link_only = is_link_only(text)
    resolved: list[str] = []
    short_links = find_short_links(text)
    if short_links:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(get_settings().http_timeout_seconds)
        ) as client:
            for link in short_links:
                target = await resolve_short_link(client, link)
                if target:
                    resolved.append(target)

    article_url = next((u for u in resolved if is_article_url(u)), None)
    repo_urls = merge_repo_urls(find_repo_urls(" ".join(resolved)), find_repo_urls(text))

    result = SocialPostResult(
        text=text,
        author_name=data.get("author_name"),
        author_url=data.get("author_url"),
        resolved_urls=resolved,
        repo_urls=repo_urls,
        is_link_only=link_only,
        article_url=article_url,
    )
    if repo_urls or link_only:
        return result

    try:
        extraction = await extract_repos_from_text(text, url=post_url)
    except Exception:
        logger.warning("Repo extraction failed for %s, keeping post text", post_url, exc_info=True)
        extraction = RepoExtraction()

    return result.model_copy(
        update={
            "repo_urls": merge_repo_urls(extraction.urls),
            "repo_extraction_cost": extraction.cost_usd,
            "repo_extraction_ran": True,
        }
    )


async def extract_x(url: str, ledger: CostLedger | None = None) -> SocialPostResult | None:
    """Extract post text, attribution, and links from an X/Twitter post.

    Returns None only when both the grounded path and the oEmbed fallback
    produce nothing. A billed Grok answer without usable content is charged
    to ``ledger`` directly, since the result that comes back is the oEmbed one.
    """
    post_url = normalize_post_url(url)

    if get_settings().xai_api_key:
        post = await fetch_post_with_grok(post_url)
        if post is not None and post.has_content:
            return _from_grok(post)
        if post is not None and ledger is not None:
            ledger.add(CostCategory.GROK, post.cost_usd)
        logger.info("Grok returned nothing for %s, falling back to oEmbed", post_url)

    return await _from_oembed(post_url)
