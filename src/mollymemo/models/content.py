"""Extractor result models, one per source kind, plus repository candidates."""

from pydantic import BaseModel

from mollymemo.models.item import RepoMetadata, SourceKind


class RepoInfo(BaseModel):
    """A repository record matched for a candidate name."""

    url: str  # Canonical html_url, e.g. https://github.com/acme/tool
    name: str
    full_name: str
    description: str | None = None
    stars: int = 0
    topics: list[str] = []


class RepoExtraction(BaseModel):
    """Outcome of the propose -> resolve -> verify sub-pipeline."""

    repos: list[RepoInfo] = []
    cost_usd: float = 0.0

    @property
    def urls(self) -> list[str]:
        return [r.url for r in self.repos]


class ShortVideoResult(BaseModel):
    """Transcript and repository references from a short-form video."""

    transcript: str
    repo_urls: list[str] = []
    repo_extraction_cost: float = 0.0
    transcription_method: str  # "reference" or "upload"
    repo_extraction_ran: bool = False


class SocialPostResult(BaseModel):
    """Post text, attribution, and resolved links from a social post."""

    text: str
    video_transcript: str | None = None
    author_name: str | None = None
    author_url: str | None = None
    resolved_urls: list[str] = []
    repo_urls: list[str] = []
    is_link_only: bool = False
    article_url: str | None = None  # Long-form article permalink on the same platform
    summary: str | None = None
    citations: list[str] = []
    used_grok: bool = False
    grok_cost: float = 0.0
    repo_extraction_cost: float = 0.0
    repo_extraction_ran: bool = False


class ArticleResult(BaseModel):
    """Readable article content and metadata."""

    url: str
    title: str | None = None
    text: str
    excerpt: str | None = None
    byline: str | None = None
    site_name: str | None = None
    published_time: str | None = None  # Formats vary, kept as string
    repo_urls: list[str] = []


class ExtractedPayload(BaseModel):
    """Source-independent view of an extractor result, fed to the classifier."""

    source_kind: SourceKind
    text: str | None = None
    author: str | None = None
    published_at: str | None = None
    repo_metadata: RepoMetadata | None = None
    repo_urls: list[str] = []
    repo_extraction_ran: bool = False
    grok_cost: float | None = None
    repo_extraction_cost: float | None = None
