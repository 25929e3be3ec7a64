"""Processing pipeline: capture, state machine, dispatch, and recovery."""

from mollymemo.pipeline.dispatch import dispatch_processing, run_processing_task
from mollymemo.pipeline.orchestrator import (
    CaptureResult,
    PipelineContext,
    capture_item,
    process_item,
)
from mollymemo.pipeline.recovery import recover_stale_items

__all__ = [
    "CaptureResult",
    "PipelineContext",
    "capture_item",
    "dispatch_processing",
    "process_item",
    "recover_stale_items",
    "run_processing_task",
]
