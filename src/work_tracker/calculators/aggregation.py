"""Financial aggregation over the five collections.

Sign conventions:
- Work income: positive
- Expenses, insurance, payroll: subtracted from the net total

Rounding:
- Products and sums are computed at full precision
- Every reported figure is rounded to cents (ROUND_HALF_UP)
- The net total is derived from the rounded figures, so the summary always adds up
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from work_tracker.models.entities import (
    Company,
    EntityId,
    Expense,
    InsuranceItem,
    PayrollItem,
    Snapshot,
    WorkRecord,
)
from work_tracker.models.entities import effective_pay_rate as _effective_pay_rate
from work_tracker.money import ZERO, format_amount, round_to_cents


@dataclass(frozen=True)
class CompanyEarnings:
    """Earnings breakdown for one company."""

    company_id: EntityId
    name: str
    pay_rate: Decimal
    hours: Decimal
    earnings: Decimal


@dataclass(frozen=True)
class GrandTotals:
    """All five summary figures, returned together."""

    work_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    total_insurance: Decimal = ZERO
    total_payroll: Decimal = ZERO
    net_total: Decimal = ZERO

    def display(self) -> dict[str, str]:
        """Formatted figures for the summary view."""
        return {
            "work_income": format_amount(self.work_income, signed=True),
            "total_expenses": format_amount(-self.total_expenses),
            "total_insurance": format_amount(-self.total_insurance),
            "total_payroll": format_amount(-self.total_payroll),
            "net_total": format_amount(self.net_total, signed=True),
        }


def effective_pay_rate(company: Company) -> Decimal:
    """Company base rate net of its deduction percentage, in cents."""
    return _effective_pay_rate(company.base_rate, company.deduction_percent)


def company_earnings(company: Company, work_records: Iterable[WorkRecord]) -> Decimal:
    """Sum of hours x rate over the company's work records.

    Uses the rate stored on each record, not the company's current rate.
    """
    total = sum(
        (r.earnings for r in work_records if r.company_id == company.id),
        ZERO,
    )
    return round_to_cents(total)


def company_breakdown(
    companies: Iterable[Company],
    work_records: Iterable[WorkRecord],
) -> list[CompanyEarnings]:
    """Per-company hours and earnings, in company order."""
    records = list(work_records)
    breakdown: list[CompanyEarnings] = []
    for company in companies:
        own = [r for r in records if r.company_id == company.id]
        breakdown.append(
            CompanyEarnings(
                company_id=company.id,
                name=company.name,
                pay_rate=company.pay_rate,
                hours=sum((r.hours for r in own), ZERO),
                earnings=company_earnings(company, own),
            )
        )
    return breakdown


def grand_totals(
    companies: Iterable[Company],
    work_records: Iterable[WorkRecord],
    expenses: Iterable[Expense],
    insurance: Iterable[InsuranceItem],
    payroll: Iterable[PayrollItem],
) -> GrandTotals:
    """Roll the five collections into one signed total."""
    records = list(work_records)
    work_income = sum((company_earnings(c, records) for c in companies), ZERO)
    total_expenses = round_to_cents(sum((e.amount for e in expenses), ZERO))
    total_insurance = round_to_cents(sum((i.amount for i in insurance), ZERO))
    total_payroll = round_to_cents(
        sum((p.gross_pay for p in payroll if p.gross_pay is not None), ZERO)
    )

    return GrandTotals(
        work_income=work_income,
        total_expenses=total_expenses,
        total_insurance=total_insurance,
        total_payroll=total_payroll,
        net_total=work_income - total_expenses - total_insurance - total_payroll,
    )


def snapshot_totals(snapshot: Snapshot) -> GrandTotals:
    """grand_totals over a captured snapshot."""
    return grand_totals(
        snapshot.companies,
        snapshot.work_records,
        snapshot.expenses,
        snapshot.insurance,
        snapshot.payroll,
    )
