"""Payroll calculators."""

from dutch_payroll.calculators.cumulative import (
    CumulativeTotals,
    accumulate,
    cumulative_from_history,
    cumulative_series,
    recompute_from,
    reconcile,
)
from dutch_payroll.calculators.engine import CalculationOutcome, PayrollEngine
from dutch_payroll.calculators.line_builder import LineItemBuilder
from dutch_payroll.calculators.rate_table import RateTable, RateTableRegistry
from dutch_payroll.calculators.types import (
    CompanyInput,
    EmployeeInput,
    PayrollResult,
    Period,
    ProRataMethod,
    TaxProrationPolicy,
    TaxTable,
)

__all__ = [
    "CalculationOutcome",
    "CompanyInput",
    "CumulativeTotals",
    "EmployeeInput",
    "LineItemBuilder",
    "PayrollEngine",
    "PayrollResult",
    "Period",
    "ProRataMethod",
    "RateTable",
    "RateTableRegistry",
    "TaxProrationPolicy",
    "TaxTable",
    "accumulate",
    "cumulative_from_history",
    "cumulative_series",
    "recompute_from",
    "reconcile",
]
