"""
Task Scheduler - Bounded-concurrency page worker pool.

One browser, one isolated context per page task. Retries are disabled: a
task that raises is marked errored and the batch moves on.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime
import asyncio
import logging

from playwright.async_api import Error as PlaywrightError

from ..execution.browser import apply_stealth
from ..models import FeedItem, PageTarget, PlaceholderRecord, TaskState

logger = logging.getLogger(__name__)

TaskFn = Callable[[Any, PageTarget], Awaitable[List[FeedItem]]]


@dataclass
class SchedulerConfig:
    """Scheduler configuration."""
    max_concurrency: int = 3
    worker_creation_delay: float = 2.0  # seconds between worker launches
    retry_limit: int = 0


@dataclass
class PageTask:
    """One page crawl."""
    target: PageTarget
    state: TaskState = TaskState.QUEUED
    result: List[FeedItem] = field(default_factory=list)
    error: Optional[BaseException] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None


class WorkerPool:
    """Run page tasks across isolated browser contexts."""

    def __init__(
        self,
        browser,
        config: Optional[SchedulerConfig] = None,
        context_options: Optional[Dict[str, Any]] = None,
        stealth: bool = False,
    ):
        self.browser = browser
        self.config = config or SchedulerConfig()
        self.context_options = context_options or {}
        self.stealth = stealth
        self.results: List[FeedItem] = []
        self.open_contexts = 0
        self.peak_contexts = 0

        if self.config.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if self.config.retry_limit:
            logger.warning("Retries are not supported, ignoring retry_limit")

    async def run(self, targets: List[PageTarget], task_fn: TaskFn) -> List[PageTask]:
        """Execute all targets; returns once every task is terminal."""
        queue: asyncio.Queue = asyncio.Queue()
        tasks = [PageTask(target=target) for target in targets]
        for task in tasks:
            queue.put_nowait(task)

        workers: List[asyncio.Task] = []
        try:
            for worker_id in range(min(self.config.max_concurrency, len(tasks))):
                if worker_id > 0:
                    await asyncio.sleep(self.config.worker_creation_delay)
                    if queue.empty():
                        break
                workers.append(asyncio.create_task(self._worker(worker_id, queue, task_fn)))

            await queue.join()
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        succeeded = sum(1 for t in tasks if t.state is TaskState.SUCCEEDED)
        logger.info(f"Worker pool idle: {succeeded}/{len(tasks)} tasks succeeded, {len(self.results)} records")
        return tasks

    async def _worker(self, worker_id: int, queue: asyncio.Queue, task_fn: TaskFn) -> None:
        """Worker coroutine that processes tasks."""
        while True:
            task = await queue.get()
            try:
                logger.debug(f"worker {worker_id} picked {task.target.url}")
                await self._execute(task, task_fn)
            finally:
                queue.task_done()

    async def _execute(self, task: PageTask, task_fn: TaskFn) -> None:
        task.state = TaskState.RUNNING
        task.started_at = datetime.now()
        context = None
        try:
            context = await self.browser.new_context(**self.context_options)
            self._track_context(1)
            if self.stealth:
                await apply_stealth(context)
            page = await context.new_page()

            task.result = list(await task_fn(page, task.target))
            task.state = TaskState.SUCCEEDED
            # merged only after the task finished, one extend per task
            self.results.extend(task.result)
        except Exception as e:
            task.state = TaskState.ERRORED
            task.error = e
            logger.error(f"Failed to crawl {task.target.url}: {e}")
            task.result = [PlaceholderRecord()]
            self.results.extend(task.result)
        finally:
            task.finished_at = datetime.now()
            if context is not None:
                try:
                    await context.close()
                except PlaywrightError as e:
                    logger.warning(f"Error closing context for {task.target.url}: {e}")
                self._track_context(-1)

    def _track_context(self, delta: int) -> None:
        self.open_contexts += delta
        self.peak_contexts = max(self.peak_contexts, self.open_contexts)
