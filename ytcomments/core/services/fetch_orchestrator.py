"""Core service that fans out one fetch task per video and joins on all of them.

Each task runs the same pipeline on every attempt:
rate-limiter permit -> parse locator -> list comment pages -> append to sink.
The retry service re-runs the whole attempt on failure, so every attempt
(and every extra page within it) takes its own permit. A task that fails or
is cancelled never affects its siblings.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from ytcomments.domain.events.fetch_events import PermitDeferred, TaskFinished
from ytcomments.domain.exceptions import CancellationError, InputError, MaxRetryError
from ytcomments.domain.interfaces.comment_source import CommentSource
from ytcomments.domain.interfaces.user_interface import UserInterface
from ytcomments.domain.models.common import (
    ApiKey, CommentRecord, FetchTask, PageToken, TaskOutcome, TaskState, VideoLocator,
)
from ytcomments.infrastructure.filesystem.comment_sink import CommentSink
from ytcomments.infrastructure.resilience.api_retry import ApiRetryService, dispatch_event
from ytcomments.infrastructure.resilience.rate_limiter import RateLimiter
from ytcomments.infrastructure.youtube.locator import extract_video_id

logger = logging.getLogger(__name__)

SourceFactory = Callable[[ApiKey], CommentSource]


class FetchOrchestrator:
    """Runs concurrent, rate-limited, retried comment fetches."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        retry_service: ApiRetryService,
        sink: CommentSink,
        source_factory: SourceFactory,
        ui: UserInterface,
    ):
        """Initializes the FetchOrchestrator with its dependencies.

        Args:
            rate_limiter: Shared limiter; every outbound call takes one permit.
            retry_service: Backoff policy applied to each task independently.
            sink: Per-video output files.
            source_factory: Builds a CommentSource from the developer key.
            ui: Reporting sink for per-task diagnostics.
        """
        self.rate_limiter = rate_limiter
        self.retry_service = retry_service
        self.sink = sink
        self.source_factory = source_factory
        self.ui = ui

    async def run(
        self,
        locators: Sequence[str],
        max_results: int,
        api_key: ApiKey,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[TaskOutcome]:
        """Fetches comments for every locator and waits until all tasks finish.

        Per-task failures are reported through the UI and the returned
        outcomes; they are never raised.

        Raises:
            InputError: If max_results is negative (before any task starts).
        """
        if max_results < 0:
            raise InputError("Invalid input. Please enter a positive integer.")
        if not locators:
            logger.info("No locators given; nothing to fetch.")
            return []

        tasks = [FetchTask(locator=VideoLocator(loc), max_results=max_results) for loc in locators]
        logger.info(f"Starting {len(tasks)} fetch task(s), max_results={max_results}")
        outcomes = await asyncio.gather(*(self._run_task(task, api_key, cancel_event) for task in tasks))

        failed = sum(1 for o in outcomes if not o.succeeded)
        logger.info(f"Fetch run finished: {len(outcomes) - failed} succeeded, {failed} failed/cancelled")
        return list(outcomes)

    async def _run_task(
        self,
        task: FetchTask,
        api_key: ApiKey,
        cancel_event: Optional[asyncio.Event],
    ) -> TaskOutcome:
        async def attempt() -> None:
            await self._attempt(task, api_key, cancel_event)

        try:
            await self.retry_service.execute_with_retry(
                attempt, description=task.locator, cancel_event=cancel_event
            )
            task.state = TaskState.SUCCEEDED
            logger.info(f"Wrote {task.records_written} comment(s) for {task.locator}")
        except CancellationError as e:
            task.state = TaskState.CANCELLED
            task.error = e
            self.ui.display_warning(f"Cancelled fetching comments for {task.locator}: {e}")
        except MaxRetryError as e:
            task.state = TaskState.EXHAUSTED
            task.error = e.original_exception
            self.ui.display_error(f"Failed to retrieve comments for {task.locator}: {e.original_exception}")
        except Exception as e:
            # Non-retryable errors are re-raised by the retry service unwrapped
            task.state = TaskState.EXHAUSTED
            task.error = e
            logger.error(f"Task for {task.locator} failed: {e}", exc_info=True)
            self.ui.display_error(f"Failed to retrieve comments for {task.locator}: {e}")

        dispatch_event(TaskFinished(
            target=task.locator, state=task.state.value, attempts=task.attempts,
            records_written=task.records_written,
            error_message=str(task.error) if task.error else None,
        ))
        return TaskOutcome(
            locator=task.locator,
            state=task.state,
            attempts=task.attempts,
            records_written=task.records_written,
            video_id=task.video_id,
            output_path=str(self.sink.path_for(task.video_id)) if task.video_id else None,
            error_message=str(task.error) if task.error else None,
        )

    async def _acquire_permit(self, task: FetchTask, cancel_event: Optional[asyncio.Event]) -> None:
        wait_duration = await self.rate_limiter.get_wait_time()
        if wait_duration > 0:
            dispatch_event(PermitDeferred(target=task.locator, wait_time_seconds=wait_duration))
        await self.rate_limiter.acquire(cancel_event)

    async def _attempt(
        self,
        task: FetchTask,
        api_key: ApiKey,
        cancel_event: Optional[asyncio.Event],
    ) -> None:
        """One attempt: permit, parse, fetch all pages, then write them."""
        task.state = TaskState.PENDING
        await self._acquire_permit(task, cancel_event)
        task.state = TaskState.PERMIT_ACQUIRED
        task.attempts += 1

        video_id = extract_video_id(task.locator)
        task.video_id = video_id

        task.state = TaskState.IN_FLIGHT
        logger.debug(f"Attempt {task.attempts} for {task.locator} (video {video_id}) in flight")
        records: List[CommentRecord] = []
        if task.max_results > 0:
            source = self.source_factory(api_key)
            page_token: Optional[PageToken] = None
            while len(records) < task.max_results:
                if page_token is not None:
                    await self._acquire_permit(task, cancel_event)
                remaining = task.max_results - len(records)
                page = await source.list_comments(video_id, remaining, page_token)
                records.extend(page.records[:remaining])
                if not page.next_page_token or not page.records:
                    break
                page_token = page.next_page_token

        async with self.sink.open(video_id) as handle:
            await handle.append_many(records)
        task.records_written = handle.records_written
