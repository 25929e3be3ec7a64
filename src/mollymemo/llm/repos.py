"""Repository candidate extraction with independent AI verification.

Propose -> resolve -> verify:

1. Gemini proposes tool/project names from the text that plausibly map to
   open-source repositories.
2. Each candidate (at most MAX_CANDIDATES) is searched on GitHub, with up to
   RESOLVE_CONCURRENCY searches in flight.
3. Each match is checked by a separate yes/no Gemini call that sees the
   text and the repository's description. Only an explicit "yes" is accepted.

Used only when the text carries no explicit repository links.
"""

import asyncio
import logging
from collections.abc import Iterable

import httpx
from google import genai

from mollymemo.config import get_settings
from mollymemo.cost import ZERO_USAGE, CostCategory, TokenUsage, log_usage, merge_usage
from mollymemo.errors import ParseFailure
from mollymemo.extraction.github import search_repository
from mollymemo.llm.calls import GEMINI_CALL_ERRORS, generate_text
from mollymemo.llm.client import get_gemini_client
from mollymemo.llm.decoding import decode_json
from mollymemo.llm.prompts import GEMINI_MODEL, build_propose_prompt, build_verify_prompt
from mollymemo.llm.schemas import CANDIDATE_NAMES_ADAPTER
from mollymemo.models.content import RepoExtraction, RepoInfo

logger = logging.getLogger(__name__)

MAX_CANDIDATES = 5
RESOLVE_CONCURRENCY = 5


def _url_key(url: str) -> str:
    return url.rstrip("/").lower()


async def propose_candidates(client: genai.Client, text: str) -> tuple[list[str], TokenUsage]:
    """Ask Gemini for candidate project names. Unparseable output yields no names."""
    response_text, usage = await generate_text(
        client, build_propose_prompt(text), temperature=0, max_output_tokens=200, json_output=True
    )
    try:
        names = decode_json(response_text, CANDIDATE_NAMES_ADAPTER)
    except ParseFailure as exc:
        logger.warning("Candidate proposal unusable: %s", exc)
        return [], usage

    cleaned = [n.strip() for n in names if n and n.strip()]
    return list(dict.fromkeys(cleaned)), usage


async def resolve_candidates(
    names: list[str], known_urls: Iterable[str] = ()
) -> list[tuple[str, RepoInfo]]:
    """Search GitHub for each name, skipping repos already known to the item.

    Returns (candidate name, matched repo) pairs in candidate order. A repo
    matched by two different names is kept once.
    """
    semaphore = asyncio.Semaphore(RESOLVE_CONCURRENCY)

    async with httpx.AsyncClient(
        timeout=httpx.Timeout(get_settings().http_timeout_seconds)
    ) as client:

        async def _resolve(name: str) -> tuple[str, RepoInfo | None]:
            async with semaphore:
                return name, await search_repository(name, client=client)

        results = await asyncio.gather(*[_resolve(n) for n in names])

    seen = {_url_key(u) for u in known_urls}
    matches: list[tuple[str, RepoInfo]] = []
    for name, repo in results:
        if repo is None:
            continue
        key = _url_key(repo.url)
        if key in seen:
            logger.info("Skipping %s for %r, already known", repo.full_name, name)
            continue
        seen.add(key)
        matches.append((name, repo))
    return matches


async def verify_match(
    client: genai.Client, text: str, candidate: str, repo: RepoInfo
) -> tuple[bool, TokenUsage]:
    """Ask whether ``repo`` is the project discussed as ``candidate``. Only "yes" passes."""
    answer, usage = await generate_text(
        client,
        build_verify_prompt(text, candidate, repo),
        temperature=0,
        max_output_tokens=10,
    )
    normalized = answer.strip().strip(".!\"'`").strip().lower()
    return normalized == "yes", usage


async def extract_repos_from_text(
    text: str, known_urls: Iterable[str] = (), url: str = ""
) -> RepoExtraction:
    """Run propose -> resolve -> verify over ``text``.

    Returns the accepted repositories and the summed cost of every Gemini call
    made. An unconfigured Gemini key or a failed proposal call yields an empty
    result; a failed verification call rejects only that candidate.
    """
    if not get_settings().gemini_api_key:
        logger.error("GEMINI_API_KEY not configured for repo extraction")
        return RepoExtraction()

    known = list(known_urls)
    client = get_gemini_client()
    total = ZERO_USAGE

    try:
        names, usage = await propose_candidates(client, text)
    except GEMINI_CALL_ERRORS:
        logger.error("Candidate proposal failed for %s", url, exc_info=True)
        return RepoExtraction()
    total = merge_usage(total, usage)

    names = names[:MAX_CANDIDATES]
    logger.info("Repo extraction candidates", extra={"url": url, "candidates": names})
    if not names:
        log_usage(url, total, CostCategory.REPO_EXTRACTION, GEMINI_MODEL)
        return RepoExtraction(cost_usd=total.cost_usd)

    matches = await resolve_candidates(names, known)

    accepted: list[RepoInfo] = []
    for name, repo in matches:
        try:
            is_match, usage = await verify_match(client, text, name, repo)
        except GEMINI_CALL_ERRORS:
            logger.warning(
                "Verification call failed for %s, rejecting", repo.full_name, exc_info=True
            )
            continue
        total = merge_usage(total, usage)
        logger.info("Repo validation for %s -> %s: %s", name, repo.full_name, is_match)
        if is_match:
            accepted.append(repo)

    log_usage(url, total, CostCategory.REPO_EXTRACTION, GEMINI_MODEL)
    return RepoExtraction(repos=accepted, cost_usd=total.cost_usd)
