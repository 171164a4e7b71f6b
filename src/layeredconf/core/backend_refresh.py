"""
Backend refresh loop.

Periodically invokes an external fetch function and folds its result into
the BACKEND level. The first fetch runs inside ``start()`` and its failure
is raised to the caller; failures of scheduled fetches are logged and the
loop keeps its schedule.

``stop()`` cancels only a pending sleep. A fetch already in flight is left
to finish, but its result is discarded once the loop has been stopped or
restarted.
"""

import asyncio
import inspect
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from layeredconf.utils.decorators import measure_latency
from layeredconf.utils.exceptions import BackendUpdateFailed
from layeredconf.utils.logging import ConfigEventLogger, get_logger

logger = get_logger(__name__)

FetchFunction = Callable[[dict[Any, Any]], Any]


class RefreshState(Enum):
    """Refresh loop states."""
    STOPPED = "stopped"
    RUNNING = "running"


class BackendRefreshLoop:
    """Runs the backend fetch function on a fixed interval."""

    def __init__(
        self,
        fetch_fn: FetchFunction,
        snapshot_fn: Callable[[], dict[Any, Any]],
        apply_fn: Callable[[dict[Any, Any]], None],
        interval_seconds: float,
    ):
        self.fetch_fn = fetch_fn
        self.snapshot_fn = snapshot_fn
        self.apply_fn = apply_fn
        self.interval_seconds = interval_seconds

        self.state = RefreshState.STOPPED
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._sleeping: int | None = None
        self._start_task: asyncio.Task | None = None
        self._start_pending = False
        self._events = ConfigEventLogger()

        # Statistics
        self.fetch_count = 0
        self.failure_count = 0
        self.last_error: BaseException | None = None

    @property
    def is_running(self) -> bool:
        return self.state == RefreshState.RUNNING

    async def start(self) -> bool:
        """Fetch once, apply the result and schedule the following fetches.

        Returns True once the loop is running. Raises BackendUpdateFailed if
        the first fetch fails; the loop is then left stopped.
        """
        if self.is_running:
            return True

        self.state = RefreshState.RUNNING
        self._generation += 1
        generation = self._generation
        logger.info("Starting backend refresh loop", interval_seconds=self.interval_seconds)

        try:
            await self._refresh(generation)
        except BaseException:
            # no loop task was created; leave the loop restartable
            if generation == self._generation:
                self.state = RefreshState.STOPPED
            raise

        if generation != self._generation:
            # stopped (or restarted) while the first fetch was in flight
            return self.is_running

        self._task = asyncio.create_task(self._refresh_loop(generation))
        return True

    def start_in_background(self) -> asyncio.Task | None:
        """Start the loop as a task on the running event loop.

        Returns None when no event loop is running. The task is kept on the
        loop until it finishes; ``stop()`` cancels it while it is still queued.
        """
        if self._start_task is not None:
            return self._start_task

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; backend refresh loop not started")
            return None

        self._start_pending = True
        self._start_task = loop.create_task(self._queued_start())
        self._start_task.add_done_callback(self._log_background_start)
        return self._start_task

    async def _queued_start(self) -> bool:
        self._start_pending = False
        return await self.start()

    def stop(self) -> None:
        """Stop scheduling fetches. Safe to call when already stopped."""
        if self._start_pending and self._start_task is not None:
            # background start queued but not begun
            self._start_pending = False
            self._start_task.cancel()
            self._start_task = None
            logger.info("Queued backend refresh start cancelled")

        if not self.is_running:
            return

        self.state = RefreshState.STOPPED

        if self._task is not None and self._sleeping == self._generation:
            self._task.cancel()
        self._task = None
        self._generation += 1

        logger.info("Backend refresh loop stopped")

    async def _refresh_loop(self, generation: int) -> None:
        """Scheduled fetches; runs until stopped or restarted."""
        while self.is_running and generation == self._generation:
            try:
                self._sleeping = generation
                await asyncio.sleep(self.interval_seconds)
                self._sleeping = None

                if generation != self._generation:
                    break

                await self._refresh(generation)

            except asyncio.CancelledError:
                break
            except BackendUpdateFailed as e:
                logger.error(f"Scheduled backend refresh failed: {e.cause!r}")
            except Exception as e:
                logger.error(f"Error in backend refresh loop: {e}")
            finally:
                if self._sleeping == generation:
                    self._sleeping = None

    async def _refresh(self, generation: int) -> bool:
        """Run one fetch and apply its result if the loop is still current."""
        self.fetch_count += 1

        try:
            result = await self._fetch(self.snapshot_fn())
            if result is not None and not isinstance(result, Mapping):
                raise TypeError(
                    f"Backend update function returned {type(result).__name__}, expected a mapping"
                )
        except Exception as e:
            self.failure_count += 1
            self.last_error = e
            self._events.log_backend_refresh(False, error=str(e))
            raise BackendUpdateFailed(cause=e) from e

        if generation != self._generation:
            logger.debug("Discarding backend result fetched before stop")
            return False

        if result:
            self.apply_fn(dict(result))
        self._events.log_backend_refresh(True, key_count=len(result or {}))
        return True

    @measure_latency("backend_fetch")
    async def _fetch(self, snapshot: dict[Any, Any]) -> Any:
        result = self.fetch_fn(snapshot)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _log_background_start(self, task: asyncio.Task) -> None:
        if self._start_task is task:
            self._start_task = None
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Backend refresh loop failed to start: {error}")

    def get_stats(self) -> dict[str, Any]:
        """Get refresh loop statistics."""
        return {
            "state": self.state.value,
            "interval_seconds": self.interval_seconds,
            "fetch_count": self.fetch_count,
            "failure_count": self.failure_count,
            "last_error": repr(self.last_error) if self.last_error else None,
        }
