"""Grounded post retrieval through xAI Grok with live search.

One chat completion both reads the post (text, author, linked video) and
returns citation URLs gathered from live X and web search.
"""

import logging

import httpx
from pydantic import BaseModel, TypeAdapter

from mollymemo.config import get_settings
from mollymemo.cost import CostCategory, extract_grok_usage, log_usage
from mollymemo.errors import ParseFailure
from mollymemo.http import json_object, send_request
from mollymemo.llm.decoding import decode_json

logger = logging.getLogger(__name__)

XAI_CHAT_API = "https://api.x.ai/v1/chat/completions"
GROK_MODEL = "grok-4-fast"
GROK_TIMEOUT_SECONDS = 60.0

_SYSTEM_PROMPT = (
    "You read posts on X for a personal knowledge tool. Use live search to open the post "
    "and anything it links to. Never invent content you could not access."
)

_USER_PROMPT = """\
Read this X post: {url}

Return ONLY a JSON object with:
- text: the full text of the post (and thread, if the author continued it)
- video_transcript: a transcript of any attached video, or null
- author_name: the display name of the author, or null
- summary: one sentence on what the post is about

Include every GitHub repository or tool homepage the post references in your citations."""


class GrokPost(BaseModel):
    """Post content retrieved through grounded search."""

    text: str = ""
    video_transcript: str | None = None
    author_name: str | None = None
    summary: str | None = None
    citations: list[str] = []
    cost_usd: float = 0.0

    @property
    def has_content(self) -> bool:
        return bool(self.text or self.video_transcript)


class _GrokAnswer(BaseModel):
    text: str = ""
    video_transcript: str | None = None
    author_name: str | None = None
    summary: str | None = None


_ANSWER_ADAPTER = TypeAdapter(_GrokAnswer)


async def fetch_post_with_grok(post_url: str) -> GrokPost | None:
    """Retrieve a post via Grok live search.

    Returns None when unconfigured or when no billed answer came back. A
    billed answer with no usable post text or transcript comes back as a
    post without content that still carries the call's cost.
    """
    api_key = get_settings().xai_api_key
    if not api_key:
        return None

    body = {
        "model": GROK_MODEL,
        "temperature": 0,
        "messages": [
            {"role": "system", "content": _SYSTEM_PROMPT},
            {"role": "user", "content": _USER_PROMPT.format(url=post_url)},
        ],
        "search_parameters": {
            "mode": "on",
            "return_citations": True,
            "sources": [{"type": "x"}, {"type": "web"}],
        },
    }

    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(GROK_TIMEOUT_SECONDS)) as client:
            response = await send_request(
                client,
                "POST",
                XAI_CHAT_API,
                headers={"Authorization": f"Bearer {api_key}"},
                json=body,
            )
    except Exception as exc:
        logger.warning("Grok request failed for %s: %s", post_url, exc)
        return None

    if not response.is_success:
        logger.warning("Grok returned %d for %s", response.status_code, post_url)
        return None

    payload = json_object(response)
    if payload is None:
        logger.warning("Grok returned a non-JSON body for %s", post_url)
        return None

    usage = extract_grok_usage(payload)
    log_usage(post_url, usage, CostCategory.GROK, GROK_MODEL)

    try:
        content = payload["choices"][0]["message"]["content"] or ""
        answer = decode_json(content, _ANSWER_ADAPTER)
    except (KeyError, IndexError, TypeError, ParseFailure) as exc:
        logger.warning("Unusable Grok response for %s: %s", post_url, exc)
        return GrokPost(cost_usd=usage.cost_usd)

    citations = payload.get("citations")
    if not isinstance(citations, list):
        citations = []
    return GrokPost(
        text=answer.text,
        video_transcript=answer.video_transcript,
        author_name=answer.author_name,
        summary=answer.summary,
        citations=[c for c in citations if isinstance(c, str)],
        cost_usd=usage.cost_usd,
    )
