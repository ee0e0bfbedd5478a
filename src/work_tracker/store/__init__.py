"""Entity store and its change events."""

from work_tracker.store.emitter import EventEmitter, EventHandler
from work_tracker.store.entity_store import EntityStore
from work_tracker.store.events import (
    CompanyAdded,
    CompanyRemoved,
    CompanyUpdated,
    EventCategory,
    EventMetadata,
    ExpenseAdded,
    ExpenseRemoved,
    InsuranceItemAdded,
    InsuranceItemRemoved,
    PayrollItemAdded,
    PayrollItemRemoved,
    SnapshotReplaced,
    StoreEvent,
    WorkRecordAdded,
    WorkRecordRemoved,
)

__all__ = [
    "EntityStore",
    "EventEmitter",
    "EventHandler",
    "EventCategory",
    "EventMetadata",
    "StoreEvent",
    "CompanyAdded",
    "CompanyUpdated",
    "CompanyRemoved",
    "WorkRecordAdded",
    "WorkRecordRemoved",
    "ExpenseAdded",
    "ExpenseRemoved",
    "InsuranceItemAdded",
    "InsuranceItemRemoved",
    "PayrollItemAdded",
    "PayrollItemRemoved",
    "SnapshotReplaced",
]
