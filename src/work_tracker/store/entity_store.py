"""In-memory entity store for the five user collections.

The store is the only component allowed to mutate the collections. Each
collection is held as a tuple and replaced on every change, so a reader
holding a reference never observes a half-applied mutation (a company
removal and its work-record cascade land together).

Every successful mutation emits exactly one event on the store's emitter.
"""

from __future__ import annotations

import dataclasses
import logging
from decimal import Decimal
from typing import Any, Callable, TypeVar

from work_tracker.errors import NotFoundError, StoreLockedError, ValidationError
from work_tracker.models.entities import (
    Company,
    EntityId,
    Expense,
    InsuranceItem,
    PayrollItem,
    Snapshot,
    WorkRecord,
    new_id,
)
from work_tracker.money import (
    HUNDRED,
    MAX_AMOUNT,
    MAX_PLACES,
    ZERO,
    decimal_places,
    parse_decimal,
    within_range,
)
from work_tracker.store.emitter import EventEmitter
from work_tracker.store.events import (
    CompanyAdded,
    CompanyRemoved,
    CompanyUpdated,
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

logger = logging.getLogger(__name__)

E = TypeVar("E")


# =============================================================================
# Input validation
# =============================================================================


def _require_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("name", "is required")
    return value.strip()


def _bounded(field: str, amount: Decimal) -> Decimal:
    if not within_range(amount):
        raise ValidationError(field, f"cannot exceed {MAX_AMOUNT:,}")
    if decimal_places(amount) > MAX_PLACES:
        raise ValidationError(field, f"at most {MAX_PLACES} decimal places")
    return amount


def _require_positive(field: str, value: Any) -> Decimal:
    amount = parse_decimal(value)
    if amount is None:
        raise ValidationError(field, f"{value!r} is not a number")
    if amount <= 0:
        raise ValidationError(field, "must be greater than zero")
    return _bounded(field, amount)


def _require_non_negative(field: str, value: Any) -> Decimal:
    amount = parse_decimal(value)
    if amount is None:
        raise ValidationError(field, f"{value!r} is not a number")
    if amount < 0:
        raise ValidationError(field, "cannot be negative")
    return _bounded(field, amount)


def _optional_non_negative(field: str, value: Any) -> Decimal | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _require_non_negative(field, value)


def _deduction_percent(value: Any) -> Decimal:
    """Absent or non-numeric means no deduction."""
    percent = parse_decimal(value)
    if percent is None:
        return ZERO
    if percent < 0 or percent > HUNDRED:
        raise ValidationError("deduction_percent", "must be between 0 and 100")
    return _bounded("deduction_percent", percent)


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


# =============================================================================
# Entity store
# =============================================================================


class EntityStore:
    """Source of truth for companies, work records, expenses, insurance and payroll.

    Usage:
        store = EntityStore(emitter)
        store.unlock()

        acme = store.add_company("Acme", "50", "10")   # pay_rate 45.00
        store.add_work_record(acme.id, hours="10")     # rate snapshot 45.00
        store.remove_company(acme.id)                  # cascades its records

    Mutations raise StoreLockedError while the store is locked; the session
    controller keeps it locked until a session is authenticated. replace_all
    ignores the lock.
    """

    def __init__(
        self,
        emitter: EventEmitter | None = None,
        id_factory: Callable[[], EntityId] = new_id,
    ) -> None:
        self.emitter = emitter or EventEmitter()
        self._id_factory = id_factory
        self._locked = False
        self._sequence = 0

        self._companies: tuple[Company, ...] = ()
        self._work_records: tuple[WorkRecord, ...] = ()
        self._expenses: tuple[Expense, ...] = ()
        self._insurance: tuple[InsuranceItem, ...] = ()
        self._payroll: tuple[PayrollItem, ...] = ()

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def companies(self) -> tuple[Company, ...]:
        return self._companies

    @property
    def work_records(self) -> tuple[WorkRecord, ...]:
        return self._work_records

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return self._expenses

    @property
    def insurance(self) -> tuple[InsuranceItem, ...]:
        return self._insurance

    @property
    def payroll(self) -> tuple[PayrollItem, ...]:
        return self._payroll

    def find_company(self, company_id: EntityId) -> Company | None:
        for company in self._companies:
            if company.id == company_id:
                return company
        return None

    def get_company(self, company_id: EntityId) -> Company:
        company = self.find_company(company_id)
        if company is None:
            raise NotFoundError("Company", company_id)
        return company

    def snapshot(self) -> Snapshot:
        """Capture the current collections."""
        return Snapshot(
            companies=self._companies,
            work_records=self._work_records,
            expenses=self._expenses,
            insurance=self._insurance,
            payroll=self._payroll,
        )

    # -------------------------------------------------------------------------
    # Locking
    # -------------------------------------------------------------------------

    @property
    def locked(self) -> bool:
        return self._locked

    def lock(self) -> None:
        self._locked = True

    def unlock(self) -> None:
        self._locked = False

    def _check_unlocked(self) -> None:
        if self._locked:
            raise StoreLockedError()

    # -------------------------------------------------------------------------
    # Companies
    # -------------------------------------------------------------------------

    def add_company(
        self,
        name: Any,
        base_rate: Any,
        deduction_percent: Any = None,
    ) -> Company:
        """Create a company and append it.

        Raises:
            ValidationError: blank name, non-positive base rate, or a
                deduction percentage outside 0-100.
        """
        self._check_unlocked()
        company = Company(
            id=self._id_factory(),
            name=_require_name(name),
            base_rate=_require_positive("base_rate", base_rate),
            deduction_percent=_deduction_percent(deduction_percent),
        )
        self._companies = self._companies + (company,)
        self._emit(CompanyAdded, company=company)
        return company

    def update_company(
        self,
        company_id: EntityId,
        name: Any,
        base_rate: Any,
        deduction_percent: Any = None,
    ) -> Company:
        """Replace a company's mutable fields, keeping its id and position.

        Work records keep the rate they were recorded at.
        """
        self._check_unlocked()
        previous = self.get_company(company_id)
        company = dataclasses.replace(
            previous,
            name=_require_name(name),
            base_rate=_require_positive("base_rate", base_rate),
            deduction_percent=_deduction_percent(deduction_percent),
        )
        self._companies = tuple(
            company if c.id == company_id else c for c in self._companies
        )
        self._emit(CompanyUpdated, previous=previous, company=company)
        return company

    def remove_company(self, company_id: EntityId) -> Company:
        """Remove a company and every work record that references it."""
        self._check_unlocked()
        company = self.get_company(company_id)
        removed = tuple(r.id for r in self._work_records if r.company_id == company_id)

        self._companies = tuple(c for c in self._companies if c.id != company_id)
        self._work_records = tuple(
            r for r in self._work_records if r.company_id != company_id
        )
        self._emit(CompanyRemoved, company=company, removed_work_record_ids=removed)
        return company

    # -------------------------------------------------------------------------
    # Work records
    # -------------------------------------------------------------------------

    def add_work_record(
        self,
        company_id: EntityId,
        hours: Any,
        rate: Any = None,
        date: Any = None,
        description: Any = None,
    ) -> WorkRecord:
        """Record hours for a company.

        The rate defaults to the company's current pay rate and is stored on
        the record, so later rate edits do not change past earnings.
        """
        self._check_unlocked()
        company = self.get_company(company_id)
        record = WorkRecord(
            id=self._id_factory(),
            company_id=company.id,
            hours=_require_non_negative("hours", hours),
            rate=company.pay_rate if rate is None else _require_non_negative("rate", rate),
            date=_optional_text(date),
            description=_optional_text(description),
        )
        self._work_records = self._work_records + (record,)
        self._emit(WorkRecordAdded, work_record=record)
        return record

    def remove_work_record(self, record_id: EntityId) -> WorkRecord:
        self._check_unlocked()
        record, self._work_records = self._without(self._work_records, record_id, "WorkRecord")
        self._emit(WorkRecordRemoved, work_record=record)
        return record

    # -------------------------------------------------------------------------
    # Expenses, insurance, payroll
    # -------------------------------------------------------------------------

    def add_expense(self, amount: Any, description: Any = None, date: Any = None) -> Expense:
        self._check_unlocked()
        expense = Expense(
            id=self._id_factory(),
            amount=_require_non_negative("amount", amount),
            description=_optional_text(description),
            date=_optional_text(date),
        )
        self._expenses = self._expenses + (expense,)
        self._emit(ExpenseAdded, expense=expense)
        return expense

    def remove_expense(self, expense_id: EntityId) -> Expense:
        self._check_unlocked()
        expense, self._expenses = self._without(self._expenses, expense_id, "Expense")
        self._emit(ExpenseRemoved, expense=expense)
        return expense

    def add_insurance_item(
        self, amount: Any, description: Any = None, date: Any = None
    ) -> InsuranceItem:
        self._check_unlocked()
        item = InsuranceItem(
            id=self._id_factory(),
            amount=_require_non_negative("amount", amount),
            description=_optional_text(description),
            date=_optional_text(date),
        )
        self._insurance = self._insurance + (item,)
        self._emit(InsuranceItemAdded, item=item)
        return item

    def remove_insurance_item(self, item_id: EntityId) -> InsuranceItem:
        self._check_unlocked()
        item, self._insurance = self._without(self._insurance, item_id, "InsuranceItem")
        self._emit(InsuranceItemRemoved, item=item)
        return item

    def add_payroll_item(
        self, gross_pay: Any = None, description: Any = None, date: Any = None
    ) -> PayrollItem:
        self._check_unlocked()
        item = PayrollItem(
            id=self._id_factory(),
            gross_pay=_optional_non_negative("gross_pay", gross_pay),
            description=_optional_text(description),
            date=_optional_text(date),
        )
        self._payroll = self._payroll + (item,)
        self._emit(PayrollItemAdded, item=item)
        return item

    def remove_payroll_item(self, item_id: EntityId) -> PayrollItem:
        self._check_unlocked()
        item, self._payroll = self._without(self._payroll, item_id, "PayrollItem")
        self._emit(PayrollItemRemoved, item=item)
        return item

    # -------------------------------------------------------------------------
    # Wholesale replacement
    # -------------------------------------------------------------------------

    def replace_all(self, snapshot: Snapshot | None, reason: str = "hydrate") -> None:
        """Replace every collection at once.

        None is treated as an empty snapshot. Work records pointing at a
        company that is not in the snapshot are dropped.
        """
        snapshot = snapshot or Snapshot.empty()
        company_ids = {c.id for c in snapshot.companies}
        work_records = tuple(r for r in snapshot.work_records if r.company_id in company_ids)
        if len(work_records) != len(snapshot.work_records):
            logger.warning(
                "Dropped %d work record(s) without a matching company",
                len(snapshot.work_records) - len(work_records),
            )

        self._companies = tuple(snapshot.companies)
        self._work_records = work_records
        self._expenses = tuple(snapshot.expenses)
        self._insurance = tuple(snapshot.insurance)
        self._payroll = tuple(snapshot.payroll)
        self._emit(
            SnapshotReplaced,
            reason=reason,
            company_count=len(self._companies),
            work_record_count=len(self._work_records),
        )

    def clear(self) -> None:
        self.replace_all(Snapshot.empty(), reason="clear")

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _without(
        items: tuple[E, ...], item_id: EntityId, entity: str
    ) -> tuple[E, tuple[E, ...]]:
        for index, item in enumerate(items):
            if item.id == item_id:  # type: ignore[attr-defined]
                return item, items[:index] + items[index + 1 :]
        raise NotFoundError(entity, item_id)

    def _emit(self, event_type: type[StoreEvent], **payload: Any) -> None:
        self._sequence += 1
        event = event_type(metadata=EventMetadata.create(self._sequence), **payload)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Store event %s", event.to_json())
        self.emitter.emit(event)
