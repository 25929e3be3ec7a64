"""Item model: the unit of work and the unit of display."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class SourceKind(str, Enum):
    """Closed set of source kinds an extraction strategy is chosen by."""

    SHORT_VIDEO = "short-video"
    SOCIAL_POST = "social-post"
    CODE_REPO = "code-repo"
    ARTICLE = "article"


class ItemStatus(str, Enum):
    """Processing lifecycle: pending -> processing -> processed | failed."""

    PENDING = "pending"
    PROCESSING = "processing"
    PROCESSED = "processed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemStatus.PROCESSED, ItemStatus.FAILED)


class Domain(str, Enum):
    """Closed domain vocabulary for classification."""

    VIBE_CODING = "vibe-coding"
    AI_FILMMAKING = "ai-filmmaking"
    OTHER = "other"


class ContentTag(str, Enum):
    """Closed content-type vocabulary for classification."""

    REPO = "repo"
    TECHNIQUE = "technique"
    TOOL = "tool"
    RESOURCE = "resource"
    PERSON = "person"


class RepoMetadata(BaseModel):
    """Repository metadata block from the code-hosting API."""

    owner: str
    repo: str
    name: str
    description: str | None = None
    stars: int = 0
    language: str | None = None
    topics: list[str] = []


class ExtractedEntities(BaseModel):
    """Entities discovered in an item's content.

    ``repos`` holds canonical repository URLs (explicit or validated);
    ``tools`` and ``techniques`` come from classification.
    """

    repos: list[str] = []
    tools: list[str] = []
    techniques: list[str] = []


class NewItem(BaseModel):
    """Fields written when an item is first captured (status pending)."""

    user_id: str
    source_url: str
    source_kind: SourceKind = SourceKind.ARTICLE
    captured_at: datetime
    notify_to: str | None = None


class ItemUpdate(BaseModel):
    """Partial item update. Only explicitly set fields are written."""

    status: ItemStatus | None = None
    processed_at: datetime | None = None
    processing_started_at: datetime | None = None
    error_message: str | None = None
    title: str | None = None
    summary: str | None = None
    domain: Domain | None = None
    content_type: ContentTag | None = None
    tags: list[str] | None = None
    author: str | None = None
    published_at: str | None = None
    raw_text: str | None = None
    repo_metadata: RepoMetadata | None = None
    extracted_entities: ExtractedEntities | None = None
    classification_cost: float | None = None
    grok_cost: float | None = None
    repo_extraction_cost: float | None = None

    def set_fields(self) -> dict:
        """Return only the fields the caller explicitly set (None included)."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class Item(BaseModel):
    """A captured item as held by the item store."""

    id: str
    user_id: str
    source_url: str
    source_kind: SourceKind = SourceKind.ARTICLE
    status: ItemStatus = ItemStatus.PENDING
    captured_at: datetime
    processed_at: datetime | None = None
    processing_started_at: datetime | None = None
    notify_to: str | None = None

    title: str | None = None
    summary: str | None = None
    domain: Domain | None = None
    content_type: ContentTag | None = None
    tags: list[str] = Field(default_factory=list)
    author: str | None = None
    published_at: str | None = None
    raw_text: str | None = None
    repo_metadata: RepoMetadata | None = None
    extracted_entities: ExtractedEntities | None = None

    error_message: str | None = None

    classification_cost: float | None = None
    grok_cost: float | None = None
    repo_extraction_cost: float | None = None

    @property
    def total_cost(self) -> float:
        """Sum of all recorded per-category costs."""
        costs = (self.classification_cost, self.grok_cost, self.repo_extraction_cost)
        return sum(c for c in costs if c is not None)
