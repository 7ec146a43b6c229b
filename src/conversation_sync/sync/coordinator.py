"""
Refresh signalling between the send flow and the views.

'SyncCoordinator' carries a single "something changed, refresh" signal. The
orchestrator raises it after a send, the chat list raises it after creating a
chat, and refresh sources such as 'IntervalPoller' raise it on their own
schedule. Listeners re-pull the full authoritative state, so the order in
which a poll tick and an explicit signal arrive does not matter beyond which
one finishes last.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from loguru import logger

RefreshListener = Callable[[str], Awaitable[None]]


class RefreshSource(Protocol):
    """Anything that raises refresh signals on its own, e.g. a poller or a push channel."""

    def start(self) -> None: ...

    async def stop(self) -> None: ...


class SyncCoordinator:
    def __init__(self) -> None:
        self._listeners: list[RefreshListener] = []
        self._sources: list[RefreshSource] = []

    def subscribe(self, listener: RefreshListener) -> Callable[[], None]:
        """Register 'listener' and return a callable that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def request_refresh(self, reason: str) -> None:
        logger.debug(f"Refresh requested ({reason}) for {len(self._listeners)} listener(s)")
        for listener in list(self._listeners):
            try:
                await listener(reason)
            except Exception as e:
                logger.error(f"Refresh listener failed ({reason}): {e!r}")

    def attach(self, source: RefreshSource) -> None:
        self._sources.append(source)

    def start(self) -> None:
        for source in self._sources:
            source.start()

    async def stop(self) -> None:
        for source in self._sources:
            await source.stop()
        self._sources.clear()
        self._listeners.clear()
