"""Background job submission."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Protocol

MIN_TIMER_DELAY_S = 0.001


class TaskRunner(Protocol):
    """Runs a blocking job off the UI thread."""

    def submit(self, name: str, job: Callable[[], None]) -> None: ...


class WorkerTaskRunner:
    """Runs jobs as Textual workers on a thread.

    ``on_done`` is scheduled on the UI loop after each job so results
    posted by the job are picked up without waiting for the next tick.
    """

    def __init__(self, host: Any, on_done: Callable[[], None] | None = None) -> None:
        self._host = host
        self._on_done = on_done

    def submit(self, name: str, job: Callable[[], None]) -> None:
        host = self._host
        on_done = self._on_done

        async def work_async() -> None:
            await asyncio.to_thread(job)
            if on_done is not None:
                host.set_timer(MIN_TIMER_DELAY_S, on_done)

        host.run_worker(work_async(), name=name, exclusive=False)
