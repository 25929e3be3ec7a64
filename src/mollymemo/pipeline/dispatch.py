"""Background dispatch of item processing.

Capture only acknowledges acceptance. Processing runs after the response
through FastAPI BackgroundTasks; anything that never reaches a terminal
state is picked up by the stale-item recovery sweep.
"""

import logging

from fastapi import BackgroundTasks

from mollymemo.pipeline.orchestrator import PipelineContext, process_item

logger = logging.getLogger(__name__)


async def run_processing_task(
    item_id: str, ctx: PipelineContext, *, reprocess: bool = False
) -> None:
    """Background entry point. Task-level crashes are logged, never raised."""
    try:
        await process_item(item_id, ctx, reprocess=reprocess)
    except Exception:
        logger.error(
            "Processing task crashed for item %s",
            item_id,
            exc_info=True,
            extra={"item_id": item_id, "event": "task_crash"},
        )


def dispatch_processing(
    background_tasks: BackgroundTasks,
    item_id: str,
    ctx: PipelineContext,
    *,
    reprocess: bool = False,
) -> bool:
    """Submit processing for ``item_id``. Returns False when scheduling failed.

    A dispatch failure leaves the item in its current state for recovery.
    """
    try:
        background_tasks.add_task(run_processing_task, item_id, ctx, reprocess=reprocess)
    except Exception:
        logger.error(
            "Dispatch failed for item %s, left for recovery",
            item_id,
            exc_info=True,
            extra={"item_id": item_id, "event": "dispatch_failure"},
        )
        return False

    logger.info("Dispatched item %s", item_id, extra={"item_id": item_id, "reprocess": reprocess})
    return True
