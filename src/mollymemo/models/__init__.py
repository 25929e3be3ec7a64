"""Data models and enums for the MollyMemo pipeline."""

from mollymemo.models.content import (
    ArticleResult,
    ExtractedPayload,
    RepoExtraction,
    RepoInfo,
    ShortVideoResult,
    SocialPostResult,
)
from mollymemo.models.item import (
    ContentTag,
    Domain,
    ExtractedEntities,
    Item,
    ItemStatus,
    ItemUpdate,
    NewItem,
    RepoMetadata,
    SourceKind,
)

__all__ = [
    "ArticleResult",
    "ExtractedPayload",
    "ContentTag",
    "Domain",
    "ExtractedEntities",
    "Item",
    "ItemStatus",
    "ItemUpdate",
    "NewItem",
    "RepoExtraction",
    "RepoInfo",
    "RepoMetadata",
    "ShortVideoResult",
    "SocialPostResult",
    "SourceKind",
]
