"""Fixed-interval scheduling of polling passes."""

import asyncio
from collections.abc import Callable

from .logging_config import create_execution_logger
from .models import PassResult
from .poller import FeedPoller


class Scheduler:
    """Runs a pass on startup and then every ``interval_seconds`` until stopped.

    Passes never overlap: the wait for the next pass only starts once the
    current one has finished. A pass that takes longer than the interval
    delays the following one instead of running concurrently with it.
    """

    def __init__(
        self,
        poller: FeedPoller,
        interval_seconds: float,
        on_pass: Callable[[PassResult], None] | None = None,
    ):
        self.poller = poller
        self.interval_seconds = interval_seconds
        self.on_pass = on_pass
        self.logger = create_execution_logger("scheduler")
        self._stopped = asyncio.Event()
        self.passes_run = 0

    def stop(self) -> None:
        self._stopped.set()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    async def run(self, max_passes: int | None = None) -> None:
        """Poll until :meth:`stop` is called or ``max_passes`` have run."""
        self.logger.info(
            f"RSS check is scheduled every {self.interval_seconds / 60:g} minutes."
        )
        while not self.stopped:
            await self.run_pass()
            if max_passes is not None and self.passes_run >= max_passes:
                break

            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass

        self.logger.info("Scheduler stopped", passes_run=self.passes_run)

    async def run_pass(self) -> PassResult | None:
        self.passes_run += 1
        try:
            result = await self.poller.poll_once()
        except Exception as e:
            self.logger.error(f"Polling pass failed: {e}")
            return None

        if self.on_pass is not None:
            self.on_pass(result)
        return result
