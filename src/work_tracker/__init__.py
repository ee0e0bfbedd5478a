"""Work tracker core: entity store, financial aggregation and per-user sync."""

from work_tracker.calculators import GrandTotals, company_earnings, effective_pay_rate, grand_totals
from work_tracker.errors import (
    NotFoundError,
    RemoteUnavailableError,
    StoreLockedError,
    ValidationError,
    WorkTrackerError,
)
from work_tracker.models import (
    Company,
    Expense,
    InsuranceItem,
    PayrollItem,
    Snapshot,
    WorkRecord,
)
from work_tracker.providers import Identity
from work_tracker.services import InvalidTransitionError, SessionController, SessionState
from work_tracker.store import EntityStore
from work_tracker.sync import SyncEngine, SyncStatus
from work_tracker.tracker import WorkTracker

__version__ = "0.1.0"

__all__ = [
    "WorkTracker",
    "EntityStore",
    "SyncEngine",
    "SyncStatus",
    "SessionController",
    "SessionState",
    "Identity",
    "Company",
    "WorkRecord",
    "Expense",
    "InsuranceItem",
    "PayrollItem",
    "Snapshot",
    "GrandTotals",
    "effective_pay_rate",
    "company_earnings",
    "grand_totals",
    "WorkTrackerError",
    "ValidationError",
    "NotFoundError",
    "RemoteUnavailableError",
    "StoreLockedError",
    "InvalidTransitionError",
]
