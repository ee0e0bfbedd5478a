"""Domain entities and their persisted document schemas."""

from work_tracker.models.entities import (
    Company,
    EntityId,
    Expense,
    InsuranceItem,
    PayrollItem,
    Snapshot,
    WorkRecord,
    effective_pay_rate,
    new_id,
)
from work_tracker.models.schemas import (
    SnapshotDocument,
    snapshot_from_document,
    snapshot_from_json,
    snapshot_to_document,
    snapshot_to_json,
)

__all__ = [
    "Company",
    "EntityId",
    "Expense",
    "InsuranceItem",
    "PayrollItem",
    "Snapshot",
    "WorkRecord",
    "effective_pay_rate",
    "new_id",
    "SnapshotDocument",
    "snapshot_from_document",
    "snapshot_from_json",
    "snapshot_to_document",
    "snapshot_to_json",
]
