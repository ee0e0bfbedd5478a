"""Store/remote document synchronization."""

from work_tracker.sync.engine import SyncEngine, SyncStatus

__all__ = ["SyncEngine", "SyncStatus"]
