"""Token usage extraction, cost calculation, and per-item cost accounting.

Centralizes upstream pricing constants (single source of truth) and provides
utilities for extracting token usage from Gemini and xAI responses, calculating
costs, and logging structured usage data. Spend for one pipeline run is
accumulated in an explicit ``CostLedger`` owned by that run, never in module
globals, so concurrent runs cannot bleed into each other.
"""

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

# Gemini 2.5 Flash pricing -- single source of truth
INPUT_PRICE_PER_TOKEN = 0.30 / 1_000_000  # $0.30 per 1M input tokens
OUTPUT_PRICE_PER_TOKEN = 2.50 / 1_000_000  # $2.50 per 1M output tokens

# Grok grounded search pricing
GROK_INPUT_PRICE_PER_TOKEN = 0.20 / 1_000_000
GROK_OUTPUT_PRICE_PER_TOKEN = 0.50 / 1_000_000
GROK_PRICE_PER_SOURCE = 0.025  # $25 per 1K live-search sources


class CostCategory(str, Enum):
    """Paid upstream call categories tracked independently on an item."""

    CLASSIFICATION = "classification"
    GROK = "grok"
    REPO_EXTRACTION = "repo_extraction"


@dataclass
class TokenUsage:
    """Token counts and calculated cost for a single AI call."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    cost_usd: float


ZERO_USAGE = TokenUsage(prompt_tokens=0, completion_tokens=0, total_tokens=0, cost_usd=0.0)


def extract_usage(response: object) -> TokenUsage:
    """Extract token usage from a Gemini GenerateContentResponse.

    Safely handles None values in usage_metadata by defaulting to 0.
    """
    metadata = getattr(response, "usage_metadata", None)
    prompt_tokens = getattr(metadata, "prompt_token_count", 0) or 0
    completion_tokens = getattr(metadata, "candidates_token_count", 0) or 0
    total_tokens = prompt_tokens + completion_tokens
    cost_usd = (prompt_tokens * INPUT_PRICE_PER_TOKEN) + (
        completion_tokens * OUTPUT_PRICE_PER_TOKEN
    )

    return TokenUsage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=total_tokens,
        cost_usd=cost_usd,
    )


def extract_grok_usage(payload: dict) -> TokenUsage:
    """Compute usage and cost from an xAI chat completion JSON body.

    Live search is billed per source consulted on top of token pricing.
    """
    usage = payload.get("usage")
    if not isinstance(usage, dict):
        usage = {}
    prompt_tokens = usage.get("prompt_tokens") or 0
    completion_tokens = usage.get("completion_tokens") or 0
    sources = usage.get("num_sources_used") or 0
    cost_usd = (
        prompt_tokens * GROK_INPUT_PRICE_PER_TOKEN
        + completion_tokens * GROK_OUTPUT_PRICE_PER_TOKEN
        + sources * GROK_PRICE_PER_SOURCE
    )
    return TokenUsage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=prompt_tokens + completion_tokens,
        cost_usd=cost_usd,
    )


def merge_usage(a: TokenUsage, b: TokenUsage) -> TokenUsage:
    """Combine two TokenUsage records (e.g., candidate proposal + verification)."""
    return TokenUsage(
        prompt_tokens=a.prompt_tokens + b.prompt_tokens,
        completion_tokens=a.completion_tokens + b.completion_tokens,
        total_tokens=a.total_tokens + b.total_tokens,
        cost_usd=a.cost_usd + b.cost_usd,
    )


class CostLedger:
    """Per-run cost accumulator, one nullable bucket per category.

    A bucket stays None until a call in that category is recorded, which
    lets the store distinguish "not called" from "called for free".
    """

    def __init__(self) -> None:
        self._buckets: dict[CostCategory, float | None] = {c: None for c in CostCategory}

    def add(self, category: CostCategory, amount: float) -> None:
        current = self._buckets[category] or 0.0
        self._buckets[category] = current + amount

    def get(self, category: CostCategory) -> float | None:
        return self._buckets[category]

    @property
    def total(self) -> float:
        return sum(v for v in self._buckets.values() if v is not None)


def log_usage(url: str, usage: TokenUsage, category: CostCategory, model: str) -> None:
    """Log structured token usage data for one AI call.

    Emits a single INFO log with all usage fields as structured extra data,
    suitable for JSON log aggregation and cost monitoring.
    """
    logger.info(
        "AI call complete",
        extra={
            "url": url,
            "model": model,
            "category": category.value,
            "prompt_tokens": usage.prompt_tokens,
            "completion_tokens": usage.completion_tokens,
            "total_tokens": usage.total_tokens,
            "cost_usd": round(usage.cost_usd, 6),
        },
    )
