"""Change events emitted by the entity store.

All events are:
- Immutable (frozen dataclasses)
- Typed with explicit payloads
- Serializable for logging and debugging

Every successful store mutation emits exactly one event. The sync engine
listens to them to schedule writes of the full snapshot.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from work_tracker.models.entities import (
    Company,
    EntityId,
    Expense,
    InsuranceItem,
    PayrollItem,
    WorkRecord,
)


class EventCategory(str, Enum):
    """Event categories for routing and filtering."""

    COMPANY = "company"
    WORK = "work"
    EXPENSE = "expense"
    INSURANCE = "insurance"
    PAYROLL = "payroll"
    SNAPSHOT = "snapshot"


@dataclass(frozen=True)
class EventMetadata:
    """Metadata attached to every store event."""

    event_id: UUID
    timestamp: datetime
    sequence: int  # Per-store, strictly increasing

    @classmethod
    def create(cls, sequence: int) -> EventMetadata:
        """Create metadata with auto-generated fields."""
        return cls(
            event_id=uuid4(),
            timestamp=datetime.now(timezone.utc),
            sequence=sequence,
        )


@dataclass(frozen=True)
class StoreEvent:
    """Base class for all store events."""

    metadata: EventMetadata

    @property
    def event_type(self) -> str:
        """Event type name for routing."""
        return self.__class__.__name__

    @property
    def category(self) -> EventCategory:
        """Event category for filtering."""
        raise NotImplementedError("Subclasses must define category")

    def to_dict(self) -> dict[str, Any]:
        """Serialize event to dictionary."""
        data = asdict(self)
        data["event_type"] = self.event_type
        return _serialize_dict(data)

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        return json.dumps(self.to_dict(), default=str)


def _serialize_dict(obj: Any) -> Any:
    """Recursively serialize objects for JSON compatibility."""
    if isinstance(obj, dict):
        return {k: _serialize_dict(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_serialize_dict(v) for v in obj]
    elif isinstance(obj, UUID):
        return str(obj)
    elif isinstance(obj, datetime):
        return obj.isoformat()
    elif isinstance(obj, Decimal):
        return str(obj)
    elif isinstance(obj, Enum):
        return obj.value
    return obj


# =============================================================================
# Company Events
# =============================================================================


@dataclass(frozen=True)
class CompanyAdded(StoreEvent):
    company: Company

    @property
    def category(self) -> EventCategory:
        return EventCategory.COMPANY


@dataclass(frozen=True)
class CompanyUpdated(StoreEvent):
    previous: Company
    company: Company

    @property
    def category(self) -> EventCategory:
        return EventCategory.COMPANY


@dataclass(frozen=True)
class CompanyRemoved(StoreEvent):
    """A company was removed together with all of its work records."""

    company: Company
    removed_work_record_ids: tuple[EntityId, ...]

    @property
    def category(self) -> EventCategory:
        return EventCategory.COMPANY


# =============================================================================
# Work Record Events
# =============================================================================


@dataclass(frozen=True)
class WorkRecordAdded(StoreEvent):
    work_record: WorkRecord

    @property
    def category(self) -> EventCategory:
        return EventCategory.WORK


@dataclass(frozen=True)
class WorkRecordRemoved(StoreEvent):
    work_record: WorkRecord

    @property
    def category(self) -> EventCategory:
        return EventCategory.WORK


# =============================================================================
# Expense / Insurance / Payroll Events
# =============================================================================


@dataclass(frozen=True)
class ExpenseAdded(StoreEvent):
    expense: Expense

    @property
    def category(self) -> EventCategory:
        return EventCategory.EXPENSE


@dataclass(frozen=True)
class ExpenseRemoved(StoreEvent):
    expense: Expense

    @property
    def category(self) -> EventCategory:
        return EventCategory.EXPENSE


@dataclass(frozen=True)
class InsuranceItemAdded(StoreEvent):
    item: InsuranceItem

    @property
    def category(self) -> EventCategory:
        return EventCategory.INSURANCE


@dataclass(frozen=True)
class InsuranceItemRemoved(StoreEvent):
    item: InsuranceItem

    @property
    def category(self) -> EventCategory:
        return EventCategory.INSURANCE


@dataclass(frozen=True)
class PayrollItemAdded(StoreEvent):
    item: PayrollItem

    @property
    def category(self) -> EventCategory:
        return EventCategory.PAYROLL


@dataclass(frozen=True)
class PayrollItemRemoved(StoreEvent):
    item: PayrollItem

    @property
    def category(self) -> EventCategory:
        return EventCategory.PAYROLL


# =============================================================================
# Snapshot Events
# =============================================================================


@dataclass(frozen=True)
class SnapshotReplaced(StoreEvent):
    """Every collection was replaced wholesale (hydration, clear or import)."""

    reason: str  # 'hydrate', 'clear', 'import'
    company_count: int
    work_record_count: int

    @property
    def category(self) -> EventCategory:
        return EventCategory.SNAPSHOT
