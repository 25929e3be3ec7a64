"""Content classifier: extracted content -> structured taxonomy via Gemini."""

import logging

from mollymemo.config import get_settings
from mollymemo.cost import CostCategory, CostLedger, log_usage
from mollymemo.errors import ParseFailure
from mollymemo.llm.calls import GEMINI_CALL_ERRORS, generate_text
from mollymemo.llm.client import get_gemini_client
from mollymemo.llm.decoding import decode_json
from mollymemo.llm.prompts import (
    GEMINI_MODEL,
    build_classification_context,
    build_classification_prompt,
)
from mollymemo.llm.schemas import CLASSIFICATION_ADAPTER, ClassificationResponse
from mollymemo.models.item import RepoMetadata, SourceKind

logger = logging.getLogger(__name__)


async def classify_content(
    url: str,
    source_kind: SourceKind,
    text: str | None = None,
    repo_metadata: RepoMetadata | None = None,
    author: str | None = None,
    ledger: CostLedger | None = None,
) -> ClassificationResponse | None:
    """Classify extracted content into title, summary, domain, type, and tags.

    Returns None when Gemini is unconfigured, the call fails, or the response
    does not parse into a complete ClassificationResponse. The orchestrator
    treats None as a pipeline failure, never as a degraded success.

    The call's cost is recorded on ``ledger`` whenever the call was made,
    including when its output is unusable.
    """
    if not get_settings().gemini_api_key:
        logger.error("GEMINI_API_KEY not configured, cannot classify %s", url)
        return None

    context = build_classification_context(source_kind, text, repo_metadata, author)
    prompt = build_classification_prompt(context)

    try:
        response_text, usage = await generate_text(
            get_gemini_client(), prompt, temperature=0.2, max_output_tokens=500, json_output=True
        )
    except GEMINI_CALL_ERRORS:
        logger.error("Gemini call failed classifying %s", url, exc_info=True)
        return None

    log_usage(url, usage, CostCategory.CLASSIFICATION, GEMINI_MODEL)
    if ledger is not None:
        ledger.add(CostCategory.CLASSIFICATION, usage.cost_usd)

    try:
        return decode_json(response_text, CLASSIFICATION_ADAPTER)
    except ParseFailure as exc:
        logger.warning("Unusable classification for %s: %s", url, exc)
        return None
