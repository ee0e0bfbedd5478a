"""Domain entities held by the entity store.

Entities are immutable; edits replace the whole object while keeping its id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Union
from uuid import uuid4

from work_tracker.money import HUNDRED, ZERO, round_to_cents

# Documents written by older clients carry integer (timestamp) ids.
EntityId = Union[str, int]


def new_id() -> str:
    """Generate a collision-resistant entity id."""
    return uuid4().hex


def effective_pay_rate(base_rate: Decimal, deduction_percent: Decimal) -> Decimal:
    """Base rate net of the deduction percentage, rounded to cents."""
    return round_to_cents(base_rate - base_rate * deduction_percent / HUNDRED)


@dataclass(frozen=True)
class Company:
    """An employer with an hourly rate and a percentage withheld from it."""

    id: EntityId
    name: str
    base_rate: Decimal
    deduction_percent: Decimal = ZERO

    @property
    def pay_rate(self) -> Decimal:
        """Effective hourly rate; always derived, never stored."""
        return effective_pay_rate(self.base_rate, self.deduction_percent)


@dataclass(frozen=True)
class WorkRecord:
    """Hours worked for a company at the rate in force when recorded."""

    id: EntityId
    company_id: EntityId
    hours: Decimal
    rate: Decimal
    date: str | None = None
    description: str | None = None

    @property
    def earnings(self) -> Decimal:
        return self.hours * self.rate


@dataclass(frozen=True)
class Expense:
    """Money received or spent that reduces the net total."""

    id: EntityId
    amount: Decimal
    description: str | None = None
    date: str | None = None


@dataclass(frozen=True)
class InsuranceItem:
    """An insurance payment."""

    id: EntityId
    amount: Decimal
    description: str | None = None
    date: str | None = None


@dataclass(frozen=True)
class PayrollItem:
    """A payroll disbursement. Items without gross pay count as zero."""

    id: EntityId
    gross_pay: Decimal | None = None
    description: str | None = None
    date: str | None = None


@dataclass(frozen=True)
class Snapshot:
    """The complete set of five collections for one user."""

    companies: tuple[Company, ...] = field(default_factory=tuple)
    work_records: tuple[WorkRecord, ...] = field(default_factory=tuple)
    expenses: tuple[Expense, ...] = field(default_factory=tuple)
    insurance: tuple[InsuranceItem, ...] = field(default_factory=tuple)
    payroll: tuple[PayrollItem, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> Snapshot:
        return cls()

    @property
    def is_empty(self) -> bool:
        return not (
            self.companies
            or self.work_records
            or self.expenses
            or self.insurance
            or self.payroll
        )
