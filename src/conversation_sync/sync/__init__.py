from conversation_sync.sync.coordinator import RefreshListener, RefreshSource, SyncCoordinator
from conversation_sync.sync.poller import IntervalPoller

__all__ = ["IntervalPoller", "RefreshListener", "RefreshSource", "SyncCoordinator"]
