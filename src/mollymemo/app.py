"""FastAPI application: capture intake, reprocessing, and stale-item recovery."""

import logging
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from mollymemo.config import get_settings
from mollymemo.errors import UpstreamRejection
from mollymemo.logging_config import configure_logging
from mollymemo.pipeline import (
    PipelineContext,
    capture_item,
    dispatch_processing,
    recover_stale_items,
)
from mollymemo.store import ItemStore, NotionItemStore, is_valid_capture_url

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging and load config on startup."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    yield


app = FastAPI(
    title="MollyMemo",
    lifespan=lifespan,
)


class CaptureRequest(BaseModel):
    url: str
    user_id: str = "default"
    notify_to: str | None = None


def get_store() -> ItemStore:
    return NotionItemStore()


def get_pipeline_context(store: ItemStore = Depends(get_store)) -> PipelineContext:
    return PipelineContext.from_settings(store)


async def verify_api_key(request: Request) -> None:
    """Require ``Authorization: Bearer <api_secret_key>``."""
    settings = get_settings()
    header = request.headers.get("Authorization", "")
    token = header[len("Bearer ") :] if header.startswith("Bearer ") else ""
    if not settings.api_secret_key or token != settings.api_secret_key:
        raise HTTPException(status_code=401, detail="Unauthorized")


async def verify_scheduler(request: Request) -> None:
    """Verify the scheduler secret header for protected endpoints.

    Raises HTTPException 403 if the header is missing, empty, or mismatched.
    """
    settings = get_settings()
    secret = request.headers.get("X-Scheduler-Secret", "")
    if not settings.scheduler_secret or secret != settings.scheduler_secret:
        raise HTTPException(status_code=403, detail="Invalid scheduler secret")


@app.get("/health")
async def health():
    """Health check endpoint for Cloud Run and local development."""
    return {
        "status": "ok",
        "service": "mollymemo",
        "version": "0.1.0",
    }


@app.post("/capture", dependencies=[Depends(verify_api_key)])
async def capture_endpoint(
    body: CaptureRequest,
    background_tasks: BackgroundTasks,
    ctx: PipelineContext = Depends(get_pipeline_context),
):
    """Accept a URL for processing. Acknowledges acceptance, never success."""
    if not is_valid_capture_url(body.url):
        raise HTTPException(status_code=400, detail="Invalid URL")

    try:
        result = await capture_item(
            ctx.store, body.user_id, body.url, body.notify_to, dedup_window=ctx.dedup_window
        )
    except UpstreamRejection as exc:
        logger.error("Capture failed for %s: %s", body.url, exc)
        raise HTTPException(status_code=502, detail="Failed to capture") from exc

    if result.duplicate:
        return JSONResponse(
            {"id": result.id, "status": "duplicate", "source_kind": result.source_kind.value},
            status_code=200,
        )

    dispatch_processing(background_tasks, result.id, ctx)
    return JSONResponse(
        {"id": result.id, "status": "accepted", "source_kind": result.source_kind.value},
        status_code=202,
    )


@app.post("/items/{item_id}/reprocess", dependencies=[Depends(verify_api_key)])
async def reprocess_endpoint(
    item_id: str,
    background_tasks: BackgroundTasks,
    ctx: PipelineContext = Depends(get_pipeline_context),
):
    """Re-run the full pipeline for an existing item, overwriting its fields."""
    item = await ctx.store.get(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")

    dispatch_processing(background_tasks, item_id, ctx, reprocess=True)
    return JSONResponse({"id": item_id, "status": "accepted"}, status_code=202)


@app.post("/recover", dependencies=[Depends(verify_scheduler)])
async def recover_endpoint(ctx: PipelineContext = Depends(get_pipeline_context)):
    """Re-run items stuck in pending or processing past the stale threshold."""
    return await recover_stale_items(ctx)
