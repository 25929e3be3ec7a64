"""Validated shapes for AI responses.

Contains only fields the model generates. Item identity, status, and costs
come from the orchestrator.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from mollymemo.models.item import ContentTag, Domain


# Notion rejects multi_select option names containing commas
_TAG_SEPARATORS = re.compile(r"[\s,]+")


def _normalize_tag(tag: str) -> str:
    return "-".join(p for p in _TAG_SEPARATORS.split(tag.strip().lower()) if p)


class ClassificationResponse(BaseModel):
    """Structured classification of one item."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1, description="Concise title, max ~60 chars")
    summary: str = Field(min_length=1, description="One-sentence summary")
    domain: Domain
    content_type: ContentTag
    tags: list[str] = Field(max_length=10, description="3-5 lowercase hyphenated tags")
    tools: list[str] = Field(default_factory=list, description="Named tools or products")
    techniques: list[str] = Field(default_factory=list, description="Named methods or patterns")

    @field_validator("title", "summary")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, tags: list[str]) -> list[str]:
        normalized = [_normalize_tag(t) for t in tags]
        return list(dict.fromkeys(t for t in normalized if t))


CLASSIFICATION_ADAPTER = TypeAdapter(ClassificationResponse)
CANDIDATE_NAMES_ADAPTER = TypeAdapter(list[str])
