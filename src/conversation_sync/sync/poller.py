"""Fixed-interval refresh source standing in for a push channel."""

import asyncio

from loguru import logger

from conversation_sync.sync.coordinator import SyncCoordinator

POLL_REASON = "poll"


class IntervalPoller:
    """Raises the coordinator's refresh signal every 'interval_seconds'."""

    def __init__(self, coordinator: SyncCoordinator, interval_seconds: float = 5.0):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.coordinator = coordinator
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Polling every {self.interval_seconds}s")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def tick(self) -> None:
        await self.coordinator.request_refresh(POLL_REASON)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self.tick()
