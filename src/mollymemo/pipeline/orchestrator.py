"""Capture and processing state machine.

pending -> processing -> processed | failed

``process_item`` is the only place where a missing stage result or an
escaped exception becomes a persisted failed item. Every run ends with a
terminal write attempt, followed by a best-effort notification.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel

from mollymemo.config import Settings, get_settings
from mollymemo.cost import CostCategory, CostLedger
from mollymemo.errors import ProcessingFailure
from mollymemo.extraction.dispatch import extract_content
from mollymemo.extraction.router import detect_source_kind
from mollymemo.llm.classifier import classify_content
from mollymemo.models.item import (
    ExtractedEntities,
    Item,
    ItemStatus,
    ItemUpdate,
    NewItem,
    SourceKind,
)
from mollymemo.slack.notifier import notify_failed, notify_processed
from mollymemo.store.service import ItemStore
from mollymemo.store.urls import normalize_url

logger = logging.getLogger(__name__)


@dataclass
class PipelineContext:
    """Collaborators and limits shared by every pipeline run."""

    store: ItemStore
    pipeline_timeout_seconds: float = 240.0
    dedup_window: timedelta = field(default_factory=lambda: timedelta(hours=24))
    stale_after: timedelta = field(default_factory=lambda: timedelta(minutes=15))

    @classmethod
    def from_settings(cls, store: ItemStore, settings: Settings | None = None) -> "PipelineContext":
        settings = settings or get_settings()
        return cls(
            store=store,
            pipeline_timeout_seconds=settings.pipeline_timeout_seconds,
            dedup_window=timedelta(hours=settings.dedup_window_hours),
            stale_after=timedelta(minutes=settings.stale_after_minutes),
        )


class CaptureResult(BaseModel):
    """Outcome of a capture request."""

    id: str
    duplicate: bool = False
    source_kind: SourceKind


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def capture_item(
    store: ItemStore,
    user_id: str,
    url: str,
    notify_to: str | None = None,
    dedup_window: timedelta | None = None,
) -> CaptureResult:
    """Record a captured URL as a pending item, or resolve it to a recent duplicate.

    A URL the same user captured within ``dedup_window`` (normalized form)
    returns the existing item's id and writes nothing.
    """
    normalized = normalize_url(url)
    window = dedup_window or timedelta(hours=get_settings().dedup_window_hours)

    existing = await store.find_recent_by_url(user_id, normalized, window)
    if existing is not None:
        logger.info(
            "Duplicate capture resolved to existing item",
            extra={"item_id": existing.id, "url": normalized},
        )
        return CaptureResult(id=existing.id, duplicate=True, source_kind=existing.source_kind)

    source_kind = detect_source_kind(normalized)
    item_id = await store.insert(
        NewItem(
            user_id=user_id,
            source_url=normalized,
            source_kind=source_kind,
            captured_at=_now(),
            notify_to=notify_to,
        )
    )
    return CaptureResult(id=item_id, source_kind=source_kind)


def _cost_fields(ledger: CostLedger) -> dict:
    return {
        "classification_cost": ledger.get(CostCategory.CLASSIFICATION),
        "grok_cost": ledger.get(CostCategory.GROK),
        "repo_extraction_cost": ledger.get(CostCategory.REPO_EXTRACTION),
    }


async def _run_stages(item: Item, ledger: CostLedger) -> ItemUpdate:
    """Extract then classify. Raises ProcessingFailure when a stage yields nothing."""
    payload = await extract_content(item.source_url, item.source_kind, ledger=ledger)
    if payload is None:
        raise ProcessingFailure(
            f"Extraction failed: no content could be retrieved from this {item.source_kind.value}"
        )

    if payload.grok_cost is not None:
        ledger.add(CostCategory.GROK, payload.grok_cost)
    if payload.repo_extraction_cost is not None:
        ledger.add(CostCategory.REPO_EXTRACTION, payload.repo_extraction_cost)

    classification = await classify_content(
        item.source_url,
        item.source_kind,
        text=payload.text,
        repo_metadata=payload.repo_metadata,
        author=payload.author,
        ledger=ledger,
    )
    if classification is None:
        raise ProcessingFailure("Classification failed: no usable result from the AI model")

    return ItemUpdate(
        status=ItemStatus.PROCESSED,
        processed_at=_now(),
        error_message=None,
        title=classification.title,
        summary=classification.summary,
        domain=classification.domain,
        content_type=classification.content_type,
        tags=classification.tags,
        author=payload.author,
        published_at=payload.published_at,
        raw_text=payload.text,
        repo_metadata=payload.repo_metadata,
        extracted_entities=ExtractedEntities(
            repos=payload.repo_urls,
            tools=classification.tools,
            techniques=classification.techniques,
        ),
        **_cost_fields(ledger),
    )


def _failure_message(exc: Exception, timeout_seconds: float) -> str:
    if isinstance(exc, TimeoutError):
        return f"Processing timed out after {timeout_seconds:.0f}s"
    if isinstance(exc, ProcessingFailure):
        return str(exc)
    return f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__


async def _notify(item: Item) -> None:
    try:
        if item.status == ItemStatus.PROCESSED:
            await notify_processed(item)
        else:
            await notify_failed(item)
    except Exception:
        logger.warning("Notification failed for item %s", item.id, exc_info=True)


async def process_item(
    item_id: str, ctx: PipelineContext, *, reprocess: bool = False
) -> ItemStatus | None:
    """Drive one item to a terminal state.

    Terminal items are left alone unless ``reprocess`` is set, in which case
    the full pipeline runs again and overwrites the stored fields in place.
    A processed write the store rejects is replaced by a minimal failed
    write. Returns the terminal status written, or None when nothing ran
    (unknown item, or a terminal item without ``reprocess``) or no terminal
    write succeeded.
    """
    item = await ctx.store.get(item_id)
    if item is None:
        logger.warning("Item %s not found, nothing to process", item_id)
        return None
    if item.status.is_terminal and not reprocess:
        logger.info("Item %s already %s, skipping", item_id, item.status.value)
        return None

    ledger = CostLedger()
    try:
        async with asyncio.timeout(ctx.pipeline_timeout_seconds):
            await ctx.store.update(
                item_id,
                ItemUpdate(
                    status=ItemStatus.PROCESSING,
                    processing_started_at=_now(),
                    processed_at=None,
                    error_message=None,
                ),
            )
            logger.info(
                "Item processing",
                extra={"item_id": item_id, "status": "processing", "url": item.source_url},
            )
            update = await _run_stages(item, ledger)
    except Exception as exc:
        message = _failure_message(exc, ctx.pipeline_timeout_seconds)
        logger.error(
            "Processing failed for %s: %s",
            item.source_url,
            message,
            exc_info=not isinstance(exc, (ProcessingFailure, TimeoutError)),
        )
        update = ItemUpdate(status=ItemStatus.FAILED, error_message=message, **_cost_fields(ledger))

    try:
        await ctx.store.update(item_id, update)
    except Exception as exc:
        logger.error(
            "Terminal write failed for item %s (intended %s)",
            item_id,
            update.status.value,
            exc_info=True,
        )
        if update.status == ItemStatus.FAILED:
            return None
        update = ItemUpdate(
            status=ItemStatus.FAILED,
            error_message=f"Could not save processing result: {exc}",
            **_cost_fields(ledger),
        )
        try:
            await ctx.store.update(item_id, update)
        except Exception:
            logger.error("Failure write also failed for item %s", item_id, exc_info=True)
            return None

    logger.info(
        "Item %s",
        update.status.value,
        extra={
            "item_id": item_id,
            "status": update.status.value,
            "url": item.source_url,
            "cost_usd": round(ledger.total, 6),
        },
    )

    await _notify(item.model_copy(update=update.set_fields()))
    return update.status
