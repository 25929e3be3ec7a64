"""Single Gemini text-generation call with tenacity retry logic."""

import logging

import httpx
from google import genai
from google.genai import types
from google.genai.errors import APIError, ClientError, ServerError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from mollymemo.cost import TokenUsage, extract_usage
from mollymemo.llm.prompts import GEMINI_MODEL

logger = logging.getLogger(__name__)

# Everything a Gemini call can fail with once retries are spent
GEMINI_CALL_ERRORS = (APIError, httpx.TransportError, TimeoutError)


def _is_retryable(error: BaseException) -> bool:
    """Determine if a Gemini API error is transient and worth retrying.

    Returns True for server errors (5xx), rate limits (429), and transport
    failures including timeouts. Returns False for permanent client errors
    (400, 401, 403).
    """
    if isinstance(error, (ServerError, httpx.TransportError)):
        return True
    if isinstance(error, ClientError) and error.code == 429:
        return True
    return False


@retry(
    retry=retry_if_exception(_is_retryable),
    wait=wait_exponential_jitter(initial=1, max=8, jitter=1),
    stop=stop_after_attempt(3),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def generate_text(
    client: genai.Client,
    prompt: str,
    *,
    temperature: float = 0.2,
    max_output_tokens: int = 500,
    json_output: bool = False,
) -> tuple[str, TokenUsage]:
    """Call Gemini with a plain prompt and return (text, usage).

    Raises:
        ClientError: On permanent API errors (400, 401, 403).
        ServerError: After exhausting retries on server errors.
        httpx.TransportError: After exhausting retries on network failures.
    """
    response = await client.aio.models.generate_content(
        model=GEMINI_MODEL,
        contents=prompt,
        config=types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            response_mime_type="application/json" if json_output else None,
            thinking_config=types.ThinkingConfig(thinking_budget=0),
        ),
    )
    return (response.text or "").strip(), extract_usage(response)
