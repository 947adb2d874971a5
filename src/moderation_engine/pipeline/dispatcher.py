"""Fire-and-forget execution of submission pipelines on the event loop."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

import structlog

from moderation_engine.observability.logger import get_logger

logger = get_logger("dispatcher")


class BackgroundDispatcher:
    """Runs pipeline coroutines as tasks with bounded concurrency.

    The submission id is the only link between a task and its state. Tasks are
    held here until they finish so they are not garbage collected mid-flight,
    and ``drain`` lets shutdown wait for in-flight work.
    """

    def __init__(self, max_concurrency: int = 8) -> None:
        self._max_concurrency = max_concurrency
        self._semaphore: asyncio.Semaphore | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, submission_id: str, job: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.create_task(self._run(submission_id, job), name=f"pipeline-{submission_id}")
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def drain(self, timeout: float | None = None) -> None:
        if not self._tasks:
            return
        logger.info("draining", pending=len(self._tasks))
        await asyncio.wait(set(self._tasks), timeout=timeout)

    async def _run(self, submission_id: str, job: Coroutine[Any, Any, None]) -> None:
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self._max_concurrency)
        structlog.contextvars.bind_contextvars(submission_id=submission_id)
        async with self._semaphore:
            await job

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "pipeline_crashed",
                task=task.get_name(),
                error=str(error),
                error_type=type(error).__name__,
            )
