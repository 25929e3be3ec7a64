"""Stale-item recovery: at-least-once completion for interrupted runs."""

import logging
from datetime import datetime, timezone

from mollymemo.models.item import ItemStatus
from mollymemo.pipeline.orchestrator import PipelineContext, process_item

logger = logging.getLogger(__name__)


async def recover_stale_items(ctx: PipelineContext) -> dict:
    """Re-run every item stuck in pending or processing past the stale threshold.

    Items are handled one at a time. Returns counts of items found and of
    the terminal states they reached.
    """
    older_than = datetime.now(timezone.utc) - ctx.stale_after
    stale = await ctx.store.find_stale(older_than)
    logger.info("Found %d stale item(s) captured before %s", len(stale), older_than.isoformat())

    counts = {"found": len(stale), "processed": 0, "failed": 0, "skipped": 0}
    for item in stale:
        logger.info(
            "Recovering stale item",
            extra={"item_id": item.id, "status": item.status.value, "url": item.source_url},
        )
        try:
            status = await process_item(item.id, ctx)
        except Exception:
            logger.error("Recovery run crashed for item %s", item.id, exc_info=True)
            status = None

        if status == ItemStatus.PROCESSED:
            counts["processed"] += 1
        elif status == ItemStatus.FAILED:
            counts["failed"] += 1
        else:
            counts["skipped"] += 1
    return counts
