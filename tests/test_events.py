"""Tests for store events and the event emitter.

Tests verify:
1. Events are structured and serializable
2. The emitter routes to the right handlers
3. Handler errors are isolated
"""

import json
from decimal import Decimal

from work_tracker.models.entities import Company, Expense
from work_tracker.store.emitter import EventEmitter
from work_tracker.store.events import (
    CompanyAdded,
    EventCategory,
    EventMetadata,
    ExpenseAdded,
    SnapshotReplaced,
)

ACME = Company(id="acme", name="Acme", base_rate=Decimal("50"), deduction_percent=Decimal("10"))


def company_added(sequence=1):
    return CompanyAdded(metadata=EventMetadata.create(sequence), company=ACME)


def expense_added(sequence=1):
    return ExpenseAdded(
        metadata=EventMetadata.create(sequence),
        expense=Expense(id="e1", amount=Decimal("12.50")),
    )


class TestEventTypes:
    """Event structure and serialization."""

    def test_event_type_and_category(self):
        event = company_added()
        assert event.event_type == "CompanyAdded"
        assert event.category == EventCategory.COMPANY
        assert expense_added().category == EventCategory.EXPENSE

    def test_to_dict_serializes_values(self):
        data = company_added(sequence=7).to_dict()

        assert data["event_type"] == "CompanyAdded"
        assert data["metadata"]["sequence"] == 7
        assert isinstance(data["metadata"]["event_id"], str)
        assert data["company"]["base_rate"] == "50"

    def test_to_json(self):
        event = SnapshotReplaced(
            metadata=EventMetadata.create(3),
            reason="hydrate",
            company_count=2,
            work_record_count=5,
        )
        data = json.loads(event.to_json())
        assert data["reason"] == "hydrate"
        assert data["work_record_count"] == 5


class TestEventEmitter:
    """Handler routing."""

    def test_on_filters_by_type(self):
        emitter = EventEmitter()
        received = []
        emitter.on(CompanyAdded, received.append)

        emitter.emit(company_added())
        emitter.emit(expense_added())

        assert [e.event_type for e in received] == ["CompanyAdded"]

    def test_on_accepts_list(self):
        emitter = EventEmitter()
        received = []
        emitter.on([CompanyAdded, ExpenseAdded], received.append)

        emitter.emit(company_added())
        emitter.emit(expense_added())

        assert len(received) == 2

    def test_on_category(self):
        emitter = EventEmitter()
        received = []
        emitter.on_category(EventCategory.EXPENSE, received.append)

        emitter.emit(company_added())
        emitter.emit(expense_added())

        assert [e.event_type for e in received] == ["ExpenseAdded"]

    def test_off(self):
        emitter = EventEmitter()
        received = []
        handler = received.append
        emitter.on_all(handler)
        assert emitter.handler_count == 1

        emitter.off(handler)
        emitter.emit(company_added())

        assert received == []
        assert emitter.handler_count == 0

    def test_handler_errors_isolated(self):
        emitter = EventEmitter()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        emitter.on_all(broken)
        emitter.on_all(received.append)

        errors = emitter.emit(company_added())

        assert len(received) == 1
        assert len(errors) == 1
        assert isinstance(errors[0], RuntimeError)

    def test_handler_may_unregister_itself(self):
        emitter = EventEmitter()
        calls = []

        def once(event):
            calls.append(event)
            emitter.off(once)

        emitter.on_all(once)
        emitter.emit(company_added(1))
        emitter.emit(company_added(2))

        assert len(calls) == 1
