"""GitHub REST API: repository metadata lookup and repository search."""

import logging

import httpx

from mollymemo.config import get_settings
from mollymemo.extraction.router import parse_repo_url
from mollymemo.http import USER_AGENT, json_object, send_request
from mollymemo.models.content import RepoInfo
from mollymemo.models.item import RepoMetadata

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"


def _headers() -> dict[str, str]:
    """Build GitHub API headers, adding the bearer token when configured."""
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
        "User-Agent": USER_AGENT,
    }
    token = get_settings().github_token
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


async def extract_github(url: str) -> RepoMetadata | None:
    """Fetch repository metadata for a GitHub URL.

    Returns None for URLs without owner/repo, non-success responses, and
    network failures. Never raises.
    """
    parsed = parse_repo_url(url)
    if parsed is None:
        logger.warning("Not a repository URL: %s", url)
        return None
    owner, repo = parsed

    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(get_settings().http_timeout_seconds)
        ) as client:
            response = await send_request(
                client, "GET", f"{GITHUB_API}/repos/{owner}/{repo}", headers=_headers()
            )
    except Exception as exc:
        logger.warning("GitHub lookup failed for %s/%s: %s", owner, repo, exc)
        return None

    if not response.is_success:
        logger.warning("GitHub API returned %d for %s/%s", response.status_code, owner, repo)
        return None

    data = json_object(response)
    if data is None:
        logger.warning("GitHub API returned a non-JSON body for %s/%s", owner, repo)
        return None

    return RepoMetadata(
        owner=owner,
        repo=repo,
        name=data.get("name") or repo,
        description=data.get("description"),
        stars=data.get("stargazers_count") or 0,
        language=data.get("language"),
        topics=data.get("topics") or [],
    )


async def search_repository(
    query: str, client: httpx.AsyncClient | None = None
) -> RepoInfo | None:
    """Return the best-matching repository for a free-text query, or None.

    ``client`` lets callers share one connection pool across several searches.
    """
    try:
        if client is None:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(get_settings().http_timeout_seconds)
            ) as own_client:
                return await _search(own_client, query)
        return await _search(client, query)
    except Exception as exc:
        logger.warning("GitHub search failed for %r: %s", query, exc)
        return None


async def _search(client: httpx.AsyncClient, query: str) -> RepoInfo | None:
    response = await send_request(
        client,
        "GET",
        f"{GITHUB_API}/search/repositories",
        params={"q": query, "per_page": 1},
        headers=_headers(),
    )
    if not response.is_success:
        logger.warning("GitHub search returned %d for %r", response.status_code, query)
        return None

    items = (json_object(response) or {}).get("items") or []
    if not items or not isinstance(items[0], dict):
        return None
    repo = items[0]
    return RepoInfo(
        url=repo["html_url"],
        name=repo["name"],
        full_name=repo["full_name"],
        description=repo.get("description"),
        stars=repo.get("stargazers_count") or 0,
        topics=repo.get("topics") or [],
    )
