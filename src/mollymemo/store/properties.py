"""Pure mapping between item models and Notion page properties.

Long text is split across rich_text objects to respect Notion's
2000-character limit. Structured blocks (repository metadata, extracted
entities) are stored as JSON text.
"""

from datetime import datetime

from pydantic import ValidationError

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

# Notion caps rich_text arrays at 100 elements
_MAX_RICH_TEXT_CHUNKS = 100

TITLE = "Title"
SOURCE = "Source"
USER = "User"
SOURCE_KIND = "Source Kind"
STATUS = "Status"
CAPTURED = "Captured"
PROCESSED = "Processed"
PROCESSING_STARTED = "Processing Started"
NOTIFY_TO = "Notify To"
SUMMARY = "Summary"
DOMAIN = "Domain"
CONTENT_TYPE = "Content Type"
TAGS = "Tags"
AUTHOR = "Author"
PUBLISHED = "Published"
TRANSCRIPT = "Transcript"
REPO_METADATA = "Repo Metadata"
ENTITIES = "Entities"
ERROR = "Error"
CLASSIFICATION_COST = "Classification Cost"
GROK_COST = "Grok Cost"
REPO_EXTRACTION_COST = "Repo Extraction Cost"


def _split_rich_text(text: str | None, limit: int = 2000) -> list[dict]:
    """Split text into rich_text objects respecting Notion's 2000-char limit.

    Empty or None text yields an empty list, which clears the property.
    """
    if not text:
        return []
    chunks = []
    for i in range(0, len(text), limit):
        chunks.append({"type": "text", "text": {"content": text[i : i + limit]}})
    return chunks[:_MAX_RICH_TEXT_CHUNKS]


def _select(value: str | None) -> dict:
    return {"select": {"name": value} if value else None}


def _date(value: datetime | None) -> dict:
    return {"date": {"start": value.isoformat()} if value else None}


def _enum_value(value) -> str | None:
    return value.value if value is not None else None


# ItemUpdate field -> (property name, Notion value builder)
_UPDATE_MAPPING = {
    "status": (STATUS, lambda v: _select(_enum_value(v))),
    "processed_at": (PROCESSED, _date),
    "processing_started_at": (PROCESSING_STARTED, _date),
    "error_message": (ERROR, lambda v: {"rich_text": _split_rich_text(v)}),
    "title": (TITLE, lambda v: {"title": _split_rich_text(v)}),
    "summary": (SUMMARY, lambda v: {"rich_text": _split_rich_text(v)}),
    "domain": (DOMAIN, lambda v: _select(_enum_value(v))),
    "content_type": (CONTENT_TYPE, lambda v: _select(_enum_value(v))),
    "tags": (TAGS, lambda v: {"multi_select": [{"name": t} for t in v or []]}),
    "author": (AUTHOR, lambda v: {"rich_text": _split_rich_text(v)}),
    "published_at": (PUBLISHED, lambda v: {"rich_text": _split_rich_text(v)}),
    "raw_text": (TRANSCRIPT, lambda v: {"rich_text": _split_rich_text(v)}),
    "repo_metadata": (
        REPO_METADATA,
        lambda v: {"rich_text": _split_rich_text(v.model_dump_json() if v else None)},
    ),
    "extracted_entities": (
        ENTITIES,
        lambda v: {"rich_text": _split_rich_text(v.model_dump_json() if v else None)},
    ),
    "classification_cost": (CLASSIFICATION_COST, lambda v: {"number": v}),
    "grok_cost": (GROK_COST, lambda v: {"number": v}),
    "repo_extraction_cost": (REPO_EXTRACTION_COST, lambda v: {"number": v}),
}


def build_insert_properties(item: NewItem) -> dict:
    """Properties for a freshly captured, pending item.

    The title starts as the source URL so the row is recognizable before
    classification replaces it.
    """
    return {
        TITLE: {"title": _split_rich_text(item.source_url)},
        SOURCE: {"url": item.source_url},
        USER: {"rich_text": _split_rich_text(item.user_id)},
        SOURCE_KIND: _select(item.source_kind.value),
        STATUS: _select(ItemStatus.PENDING.value),
        CAPTURED: _date(item.captured_at),
        NOTIFY_TO: {"rich_text": _split_rich_text(item.notify_to)},
    }


def build_update_properties(update: ItemUpdate) -> dict:
    """Properties for the fields explicitly set on ``update``.

    Every written property replaces its previous value; list-valued
    properties are never appended to.
    """
    properties = {}
    for field, value in update.set_fields().items():
        name, builder = _UPDATE_MAPPING[field]
        properties[name] = builder(value)
    return properties


def _plain_text(prop: dict | None) -> str | None:
    if not prop:
        return None
    parts = prop.get("title") or prop.get("rich_text") or []
    text = "".join(p.get("plain_text") or p.get("text", {}).get("content", "") for p in parts)
    return text or None


def _select_name(prop: dict | None) -> str | None:
    selected = (prop or {}).get("select")
    return selected.get("name") if selected else None


def _parse_date(prop: dict | None) -> datetime | None:
    value = (prop or {}).get("date")
    if not value or not value.get("start"):
        return None
    return datetime.fromisoformat(value["start"].replace("Z", "+00:00"))


def _parse_json_block(prop: dict | None, model):
    raw = _plain_text(prop)
    if not raw:
        return None
    try:
        return model.model_validate_json(raw)
    except ValidationError:
        return None


def _created_time(page: dict) -> datetime:
    return datetime.fromisoformat(page["created_time"].replace("Z", "+00:00"))


def parse_item(page: dict) -> Item:
    """Build an Item from a Notion page object."""
    props = page.get("properties", {})
    kind = _select_name(props.get(SOURCE_KIND))
    status = _select_name(props.get(STATUS))
    domain = _select_name(props.get(DOMAIN))
    content_type = _select_name(props.get(CONTENT_TYPE))

    return Item(
        id=page["id"],
        user_id=_plain_text(props.get(USER)) or "",
        source_url=(props.get(SOURCE) or {}).get("url") or "",
        source_kind=SourceKind(kind) if kind else SourceKind.ARTICLE,
        status=ItemStatus(status) if status else ItemStatus.PENDING,
        captured_at=_parse_date(props.get(CAPTURED)) or _created_time(page),
        processed_at=_parse_date(props.get(PROCESSED)),
        processing_started_at=_parse_date(props.get(PROCESSING_STARTED)),
        notify_to=_plain_text(props.get(NOTIFY_TO)),
        title=_plain_text(props.get(TITLE)),
        summary=_plain_text(props.get(SUMMARY)),
        domain=Domain(domain) if domain else None,
        content_type=ContentTag(content_type) if content_type else None,
        tags=[t["name"] for t in (props.get(TAGS) or {}).get("multi_select", [])],
        author=_plain_text(props.get(AUTHOR)),
        published_at=_plain_text(props.get(PUBLISHED)),
        raw_text=_plain_text(props.get(TRANSCRIPT)),
        repo_metadata=_parse_json_block(props.get(REPO_METADATA), RepoMetadata),
        extracted_entities=_parse_json_block(props.get(ENTITIES), ExtractedEntities),
        error_message=_plain_text(props.get(ERROR)),
        classification_cost=(props.get(CLASSIFICATION_COST) or {}).get("number"),
        grok_cost=(props.get(GROK_COST) or {}).get("number"),
        repo_extraction_cost=(props.get(REPO_EXTRACTION_COST) or {}).get("number"),
    )
