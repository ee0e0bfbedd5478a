"""Pydantic schemas for the persisted user document.

The document layout matches what the web client has always written:

    {
        "companies":   [{"id", "name", "baseRate", "deductionPercent", "payRate"}],
        "workRecords": [{"id", "companyId", "hours", "rate", "date", "description"}],
        "expenses":    [{"id", "amount", "description", "date"}],
        "insurance":   [{"id", "amount", "description", "date"}],
        "payroll":     [{"id", "grossPay", "description", "date"}]
    }

Numbers are plain JSON numbers. Absent arrays read as empty, unknown fields
are ignored and malformed or out-of-range numbers read as zero (None for
grossPay).
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

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
from work_tracker.money import ZERO, parse_decimal, within_range


def _number(value: Any) -> Decimal | None:
    number = parse_decimal(value)
    if number is None or not within_range(number):
        return None
    return number


def _as_number(value: Decimal | None) -> float | None:
    if value is None:
        return None
    return float(value)


class DocumentModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: EntityId = Field(default_factory=new_id)

    @field_validator("date", "description", mode="before", check_fields=False)
    @classmethod
    def _opaque_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


class CompanyDocument(DocumentModel):
    name: str = ""
    base_rate: Decimal = ZERO
    deduction_percent: Decimal = ZERO

    @field_validator("base_rate", "deduction_percent", mode="before")
    @classmethod
    def _number_in(cls, value: Any) -> Decimal:
        return _number(value) or ZERO

    @field_serializer("base_rate", "deduction_percent")
    def _number_out(self, value: Decimal) -> float | None:
        return _as_number(value)

    @classmethod
    def from_entity(cls, company: Company) -> CompanyDocument:
        return cls(
            id=company.id,
            name=company.name,
            base_rate=company.base_rate,
            deduction_percent=company.deduction_percent,
        )

    def to_entity(self) -> Company:
        return Company(
            id=self.id,
            name=self.name,
            base_rate=self.base_rate,
            deduction_percent=self.deduction_percent,
        )

    def to_document(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True, mode="json", exclude_none=True)
        # Derived on write for readers that display it directly
        data["payRate"] = float(self.to_entity().pay_rate)
        return data


class WorkRecordDocument(DocumentModel):
    company_id: EntityId | None = None
    hours: Decimal = ZERO
    rate: Decimal = ZERO
    date: str | None = None
    description: str | None = None

    @field_validator("hours", "rate", mode="before")
    @classmethod
    def _number_in(cls, value: Any) -> Decimal:
        return _number(value) or ZERO

    @field_serializer("hours", "rate")
    def _number_out(self, value: Decimal) -> float | None:
        return _as_number(value)

    @classmethod
    def from_entity(cls, record: WorkRecord) -> WorkRecordDocument:
        return cls(
            id=record.id,
            company_id=record.company_id,
            hours=record.hours,
            rate=record.rate,
            date=record.date,
            description=record.description,
        )

    def to_entity(self) -> WorkRecord:
        return WorkRecord(
            id=self.id,
            company_id=self.company_id,
            hours=self.hours,
            rate=self.rate,
            date=self.date,
            description=self.description,
        )


class AmountDocument(DocumentModel):
    """Shared shape of expenses and insurance items."""

    amount: Decimal = ZERO
    description: str | None = None
    date: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def _number_in(cls, value: Any) -> Decimal:
        return _number(value) or ZERO

    @field_serializer("amount")
    def _number_out(self, value: Decimal) -> float | None:
        return _as_number(value)

    @classmethod
    def from_entity(cls, item: Expense | InsuranceItem) -> AmountDocument:
        return cls(
            id=item.id,
            amount=item.amount,
            description=item.description,
            date=item.date,
        )


class ExpenseDocument(AmountDocument):
    def to_entity(self) -> Expense:
        return Expense(
            id=self.id,
            amount=self.amount,
            description=self.description,
            date=self.date,
        )


class InsuranceDocument(AmountDocument):
    def to_entity(self) -> InsuranceItem:
        return InsuranceItem(
            id=self.id,
            amount=self.amount,
            description=self.description,
            date=self.date,
        )


class PayrollDocument(DocumentModel):
    gross_pay: Decimal | None = None
    description: str | None = None
    date: str | None = None

    @field_validator("gross_pay", mode="before")
    @classmethod
    def _number_in(cls, value: Any) -> Decimal | None:
        return _number(value)

    @field_serializer("gross_pay")
    def _number_out(self, value: Decimal | None) -> float | None:
        return _as_number(value)

    @classmethod
    def from_entity(cls, item: PayrollItem) -> PayrollDocument:
        return cls(
            id=item.id,
            gross_pay=item.gross_pay,
            description=item.description,
            date=item.date,
        )

    def to_entity(self) -> PayrollItem:
        return PayrollItem(
            id=self.id,
            gross_pay=self.gross_pay,
            description=self.description,
            date=self.date,
        )


class SnapshotDocument(BaseModel):
    """The whole user document."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    companies: list[CompanyDocument] = Field(default_factory=list)
    work_records: list[WorkRecordDocument] = Field(default_factory=list)
    expenses: list[ExpenseDocument] = Field(default_factory=list)
    insurance: list[InsuranceDocument] = Field(default_factory=list)
    payroll: list[PayrollDocument] = Field(default_factory=list)

    @field_validator("companies", "work_records", "expenses", "insurance", "payroll", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> SnapshotDocument:
        return cls(
            companies=[CompanyDocument.from_entity(c) for c in snapshot.companies],
            work_records=[WorkRecordDocument.from_entity(r) for r in snapshot.work_records],
            expenses=[ExpenseDocument.from_entity(e) for e in snapshot.expenses],
            insurance=[InsuranceDocument.from_entity(i) for i in snapshot.insurance],
            payroll=[PayrollDocument.from_entity(p) for p in snapshot.payroll],
        )

    def to_snapshot(self) -> Snapshot:
        """Convert to entities, dropping work records whose company is gone."""
        company_ids = {c.id for c in self.companies}
        return Snapshot(
            companies=tuple(c.to_entity() for c in self.companies),
            work_records=tuple(
                r.to_entity() for r in self.work_records if r.company_id in company_ids
            ),
            expenses=tuple(e.to_entity() for e in self.expenses),
            insurance=tuple(i.to_entity() for i in self.insurance),
            payroll=tuple(p.to_entity() for p in self.payroll),
        )

    def to_document(self) -> dict[str, Any]:
        """Plain dict ready for a document store."""
        return {
            "companies": [c.to_document() for c in self.companies],
            "workRecords": [
                r.model_dump(by_alias=True, mode="json", exclude_none=True)
                for r in self.work_records
            ],
            "expenses": [
                e.model_dump(by_alias=True, mode="json", exclude_none=True)
                for e in self.expenses
            ],
            "insurance": [
                i.model_dump(by_alias=True, mode="json", exclude_none=True)
                for i in self.insurance
            ],
            "payroll": [
                p.model_dump(by_alias=True, mode="json", exclude_none=True)
                for p in self.payroll
            ],
        }


def snapshot_to_document(snapshot: Snapshot) -> dict[str, Any]:
    """Serialize a snapshot to the persisted document layout."""
    return SnapshotDocument.from_snapshot(snapshot).to_document()


def snapshot_from_document(document: dict[str, Any] | None) -> Snapshot:
    """Parse a persisted document. None or {} yields an empty snapshot."""
    return SnapshotDocument.model_validate(document or {}).to_snapshot()


def snapshot_to_json(snapshot: Snapshot) -> str:
    """Deterministic JSON encoding of a snapshot."""
    return json.dumps(snapshot_to_document(snapshot), sort_keys=True, separators=(",", ":"))


def snapshot_from_json(text: str) -> Snapshot:
    return snapshot_from_document(json.loads(text))
