"""Tests for background dispatch of item processing."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi import BackgroundTasks

from mollymemo.pipeline.dispatch import dispatch_processing, run_processing_task
from mollymemo.pipeline.orchestrator import PipelineContext


def test_dispatch_schedules_background_task(memory_store):
    ctx = PipelineContext(store=memory_store)
    background_tasks = BackgroundTasks()

    assert dispatch_processing(background_tasks, "item-1", ctx, reprocess=True) is True

    task = background_tasks.tasks[0]
    assert task.func is run_processing_task
    assert task.args == ("item-1", ctx)
    assert task.kwargs == {"reprocess": True}


def test_dispatch_failure_returns_false(memory_store, caplog):
    background_tasks = MagicMock()
    background_tasks.add_task.side_effect = RuntimeError("scheduler gone")

    with caplog.at_level(logging.ERROR):
        ok = dispatch_processing(background_tasks, "item-1", PipelineContext(store=memory_store))

    assert ok is False
    assert "left for recovery" in caplog.text


async def test_task_crash_is_logged_not_raised(memory_store, caplog):
    ctx = PipelineContext(store=memory_store)

    with (
        patch(
            "mollymemo.pipeline.dispatch.process_item",
            AsyncMock(side_effect=RuntimeError("boom")),
        ),
        caplog.at_level(logging.ERROR),
    ):
        await run_processing_task("item-1", ctx)

    assert "Processing task crashed for item item-1" in caplog.text


async def test_task_passes_reprocess_flag(memory_store):
    ctx = PipelineContext(store=memory_store)

    with patch("mollymemo.pipeline.dispatch.process_item", new_callable=AsyncMock) as process:
        await run_processing_task("item-1", ctx, reprocess=True)

    process.assert_awaited_once_with("item-1", ctx, reprocess=True)
