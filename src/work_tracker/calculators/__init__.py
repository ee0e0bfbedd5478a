"""Financial aggregation engine."""

from work_tracker.calculators.aggregation import (
    CompanyEarnings,
    GrandTotals,
    company_breakdown,
    company_earnings,
    effective_pay_rate,
    grand_totals,
    snapshot_totals,
)

__all__ = [
    "CompanyEarnings",
    "GrandTotals",
    "company_breakdown",
    "company_earnings",
    "effective_pay_rate",
    "grand_totals",
    "snapshot_totals",
]
