"""Versioned statutory rate tables, one per tax year.

Rate tables are stored as JSON documents with structure:
{
    "year": 2025,
    "version": "2025-07",
    "contributions": {
        "aow": {"rate": "0.1790", "max_annual_income": "38441"},
        "ww": {...}, "wia": {...}, "zvw": {...}
    },
    "income_tax_brackets": {
        "wit": [{"upto": "38441", "rate": "0.0817"}, ..., {"upto": null, "rate": "0.4950"}],
        "groen": [...]
    },
    "income_tax_brackets_pension_age": {"wit": [...], "groen": [...]},
    "employer_contributions": {
        "awf": {"rates": {"low": "0.0274", "medium": "0.0524", "high": "0.0774"},
                "max_annual_income": "69398"},
        "aof": {...},
        "zvw": {"rate": "0.0651", "max_annual_income": "69398"}
    },
    "holiday_allowance_rate": "0.08",
    "minimum_wage": {"hourly": "14.40", "full_time_hours_per_week": "40",
                     "youth_percentages": {"20": "85", ...}},
    "eligibility": {"state_pension_age": 67, "young_disabled_credit": "909",
                    "dga_usual_salary": "56000", "credit_with_multiple_jobs": false}
}

The pension-age bracket set and the employer section are optional.

Amounts are strings so they parse into exact Decimals.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from dutch_payroll.calculators.types import SectorRiskLevel, TaxTable
from dutch_payroll.config import get_settings
from dutch_payroll.exceptions import ConfigurationError, RateTableNotFoundError

logger = logging.getLogger(__name__)

CONTRIBUTION_NAMES = ("aow", "ww", "wia", "zvw")


def _decimal(value: Any, name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ConfigurationError(f"{name} is not a valid decimal: {value!r}") from exc


def _check_rate(rate: Decimal, name: str) -> None:
    if not Decimal("0") <= rate <= Decimal("1"):
        raise ConfigurationError(f"{name} must be between 0 and 1, got {rate}")


def _brackets_payload(
    bracket_sets: Mapping[TaxTable, tuple[IncomeTaxBracket, ...]]
) -> dict[str, list[dict[str, str | None]]]:
    return {
        table.value: [
            {
                "upto": str(b.upto_annual_income) if b.upto_annual_income is not None else None,
                "rate": str(b.rate),
            }
            for b in bracket_sets[table]
        ]
        for table in TaxTable
    }


@dataclass(frozen=True)
class ContributionRate:
    """Flat contribution rate applied up to an annual income ceiling."""

    rate: Decimal
    max_annual_income: Decimal


@dataclass(frozen=True)
class TieredContributionRate:
    """Employer premium whose rate depends on the sector risk level."""

    rates: Mapping[SectorRiskLevel, Decimal]
    max_annual_income: Decimal

    def for_level(self, level: SectorRiskLevel | str) -> ContributionRate:
        return ContributionRate(self.rates[SectorRiskLevel(level)], self.max_annual_income)


@dataclass(frozen=True)
class EmployerRates:
    """Employer-side premiums, reported as cost and never deducted from net."""

    awf: TieredContributionRate
    aof: TieredContributionRate
    zvw: ContributionRate


@dataclass(frozen=True)
class IncomeTaxBracket:
    """Progressive tax bracket; ``upto_annual_income`` None = no upper limit."""

    upto_annual_income: Decimal | None
    rate: Decimal


@dataclass(frozen=True)
class MinimumWage:
    """Statutory minimum wage, informational floor for warnings."""

    hourly: Decimal
    full_time_hours_per_week: Decimal = Decimal("40")
    youth_percentages: Mapping[int, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class TaxEligibility:
    """Policy parameters used when selecting an employee's tax variant."""

    state_pension_age: int = 67
    young_disabled_credit: Decimal = Decimal("0")
    dga_usual_salary: Decimal = Decimal("0")
    credit_with_multiple_jobs: bool = False


@dataclass(frozen=True)
class RateTable:
    """Immutable statutory rates for a single tax year."""

    year: int
    version: str
    aow: ContributionRate
    ww: ContributionRate
    wia: ContributionRate
    zvw: ContributionRate
    income_tax_brackets: Mapping[TaxTable, tuple[IncomeTaxBracket, ...]]
    holiday_allowance_rate: Decimal = Decimal("0.08")
    minimum_wage: MinimumWage = field(default_factory=lambda: MinimumWage(Decimal("0")))
    eligibility: TaxEligibility = field(default_factory=TaxEligibility)
    income_tax_brackets_pension_age: Mapping[TaxTable, tuple[IncomeTaxBracket, ...]] | None = None
    employer: EmployerRates | None = None

    def __post_init__(self) -> None:
        """Validate table invariants."""
        for name in CONTRIBUTION_NAMES:
            entry: ContributionRate = getattr(self, name)
            _check_rate(entry.rate, f"{name} rate")
            if entry.max_annual_income <= 0:
                raise ConfigurationError(f"{name} max_annual_income must be positive")

        for table in TaxTable:
            if table not in self.income_tax_brackets:
                raise ConfigurationError(
                    f"Rate table {self.year} has no '{table.value}' bracket set"
                )
            self._validate_brackets(table, self.income_tax_brackets[table])
            if self.income_tax_brackets_pension_age is not None:
                if table not in self.income_tax_brackets_pension_age:
                    raise ConfigurationError(
                        f"Rate table {self.year} has no pension-age '{table.value}' bracket set"
                    )
                self._validate_brackets(table, self.income_tax_brackets_pension_age[table])

        _check_rate(self.holiday_allowance_rate, "holiday_allowance_rate")
        if self.employer is not None:
            self._validate_employer(self.employer)

        # Freeze the bracket mapping
        object.__setattr__(
            self, "income_tax_brackets", MappingProxyType(dict(self.income_tax_brackets))
        )
        if self.income_tax_brackets_pension_age is not None:
            object.__setattr__(
                self,
                "income_tax_brackets_pension_age",
                MappingProxyType(dict(self.income_tax_brackets_pension_age)),
            )

    def _validate_brackets(
        self, table: TaxTable, brackets: tuple[IncomeTaxBracket, ...]
    ) -> None:
        if not brackets:
            raise ConfigurationError(f"'{table.value}' bracket set is empty")

        previous = Decimal("0")
        for index, bracket in enumerate(brackets):
            _check_rate(bracket.rate, f"'{table.value}' bracket {index + 1} rate")
            is_last = index == len(brackets) - 1
            if bracket.upto_annual_income is None:
                if not is_last:
                    raise ConfigurationError(
                        f"Only the final '{table.value}' bracket may be open-ended"
                    )
                continue
            if is_last:
                raise ConfigurationError(
                    f"The final '{table.value}' bracket must be open-ended"
                )
            if bracket.upto_annual_income <= previous:
                raise ConfigurationError(
                    f"'{table.value}' bracket boundaries must be strictly increasing"
                )
            previous = bracket.upto_annual_income

    def _validate_employer(self, employer: EmployerRates) -> None:
        for name in ("awf", "aof"):
            tiered: TieredContributionRate = getattr(employer, name)
            for level in SectorRiskLevel:
                if level not in tiered.rates:
                    raise ConfigurationError(
                        f"Employer {name} has no rate for risk level '{level.value}'"
                    )
                _check_rate(tiered.rates[level], f"employer {name} {level.value} rate")
            if tiered.max_annual_income <= 0:
                raise ConfigurationError(f"employer {name} max_annual_income must be positive")

        _check_rate(employer.zvw.rate, "employer zvw rate")
        if employer.zvw.max_annual_income <= 0:
            raise ConfigurationError("employer zvw max_annual_income must be positive")

    def contribution_rates(self) -> dict[str, ContributionRate]:
        return {name: getattr(self, name) for name in CONTRIBUTION_NAMES}

    def brackets_for(
        self, table: TaxTable, pension_age: bool = False
    ) -> tuple[IncomeTaxBracket, ...]:
        """Bracket set for a tax table; the pension-age set when asked and published."""
        if pension_age and self.income_tax_brackets_pension_age is not None:
            return self.income_tax_brackets_pension_age[table]
        return self.income_tax_brackets[table]

    @property
    def has_pension_age_brackets(self) -> bool:
        return self.income_tax_brackets_pension_age is not None

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-compatible representation of this table."""
        payload: dict[str, Any] = {
            "year": self.year,
            "version": self.version,
            "contributions": {
                name: {
                    "rate": str(entry.rate),
                    "max_annual_income": str(entry.max_annual_income),
                }
                for name, entry in self.contribution_rates().items()
            },
            "income_tax_brackets": _brackets_payload(self.income_tax_brackets),
            "holiday_allowance_rate": str(self.holiday_allowance_rate),
            "minimum_wage": {
                "hourly": str(self.minimum_wage.hourly),
                "full_time_hours_per_week": str(self.minimum_wage.full_time_hours_per_week),
                "youth_percentages": {
                    str(age): str(pct)
                    for age, pct in sorted(self.minimum_wage.youth_percentages.items())
                },
            },
            "eligibility": {
                "state_pension_age": self.eligibility.state_pension_age,
                "young_disabled_credit": str(self.eligibility.young_disabled_credit),
                "dga_usual_salary": str(self.eligibility.dga_usual_salary),
                "credit_with_multiple_jobs": self.eligibility.credit_with_multiple_jobs,
            },
        }
        if self.income_tax_brackets_pension_age is not None:
            payload["income_tax_brackets_pension_age"] = _brackets_payload(
                self.income_tax_brackets_pension_age
            )
        if self.employer is not None:
            payload["employer_contributions"] = {
                **{
                    name: {
                        "rates": {
                            SectorRiskLevel(level).value: str(rate)
                            for level, rate in getattr(self.employer, name).rates.items()
                        },
                        "max_annual_income": str(
                            getattr(self.employer, name).max_annual_income
                        ),
                    }
                    for name in ("awf", "aof")
                },
                "zvw": {
                    "rate": str(self.employer.zvw.rate),
                    "max_annual_income": str(self.employer.zvw.max_annual_income),
                },
            }
        return payload

    @property
    def fingerprint(self) -> str:
        """Deterministic fingerprint of the table contents."""
        json_str = json.dumps(self.to_payload(), sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]


def _brackets_from_payload(
    payload: Mapping[str, Any],
) -> dict[TaxTable, tuple[IncomeTaxBracket, ...]]:
    brackets: dict[TaxTable, tuple[IncomeTaxBracket, ...]] = {}
    for table_name, rows in payload.items():
        try:
            table = TaxTable(table_name)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown tax table '{table_name}'") from exc
        brackets[table] = tuple(
            IncomeTaxBracket(
                upto_annual_income=(
                    _decimal(row["upto"], "upto") if row.get("upto") is not None else None
                ),
                rate=_decimal(row["rate"], "rate"),
            )
            for row in rows
        )
    return brackets


def _employer_from_payload(payload: Mapping[str, Any]) -> EmployerRates:
    tiered: dict[str, TieredContributionRate] = {}
    for name in ("awf", "aof"):
        entry = payload[name]
        rates: dict[SectorRiskLevel, Decimal] = {}
        for level, rate in entry["rates"].items():
            try:
                risk_level = SectorRiskLevel(level)
            except ValueError as exc:
                raise ConfigurationError(f"Unknown risk level '{level}' for {name}") from exc
            rates[risk_level] = _decimal(rate, f"{name}.rates.{level}")
        tiered[name] = TieredContributionRate(
            rates=MappingProxyType(rates),
            max_annual_income=_decimal(entry["max_annual_income"], f"{name}.max_annual_income"),
        )

    zvw = payload["zvw"]
    return EmployerRates(
        zvw=ContributionRate(
            rate=_decimal(zvw["rate"], "employer zvw.rate"),
            max_annual_income=_decimal(zvw["max_annual_income"], "employer zvw.max_annual_income"),
        ),
        **tiered,
    )


def rate_table_from_payload(payload: Mapping[str, Any]) -> RateTable:
    """Build a RateTable from its JSON payload."""
    try:
        contributions = payload["contributions"]
        brackets = _brackets_from_payload(payload["income_tax_brackets"])
        pension_age = payload.get("income_tax_brackets_pension_age")
        employer = payload.get("employer_contributions")

        wage = payload.get("minimum_wage", {})
        minimum_wage = MinimumWage(
            hourly=_decimal(wage.get("hourly", 0), "minimum_wage.hourly"),
            full_time_hours_per_week=_decimal(
                wage.get("full_time_hours_per_week", 40), "full_time_hours_per_week"
            ),
            youth_percentages=MappingProxyType(
                {
                    int(age): _decimal(pct, f"youth_percentages[{age}]")
                    for age, pct in wage.get("youth_percentages", {}).items()
                }
            ),
        )

        rules = payload.get("eligibility", {})
        eligibility = TaxEligibility(
            state_pension_age=int(rules.get("state_pension_age", 67)),
            young_disabled_credit=_decimal(
                rules.get("young_disabled_credit", 0), "young_disabled_credit"
            ),
            dga_usual_salary=_decimal(rules.get("dga_usual_salary", 0), "dga_usual_salary"),
            credit_with_multiple_jobs=bool(rules.get("credit_with_multiple_jobs", False)),
        )

        return RateTable(
            year=int(payload["year"]),
            version=str(payload.get("version", payload["year"])),
            income_tax_brackets=brackets,
            holiday_allowance_rate=_decimal(
                payload.get("holiday_allowance_rate", "0.08"), "holiday_allowance_rate"
            ),
            minimum_wage=minimum_wage,
            eligibility=eligibility,
            income_tax_brackets_pension_age=(
                _brackets_from_payload(pension_age) if pension_age is not None else None
            ),
            employer=_employer_from_payload(employer) if employer is not None else None,
            **{
                name: ContributionRate(
                    rate=_decimal(contributions[name]["rate"], f"{name}.rate"),
                    max_annual_income=_decimal(
                        contributions[name]["max_annual_income"], f"{name}.max_annual_income"
                    ),
                )
                for name in CONTRIBUTION_NAMES
            },
        )
    except KeyError as exc:
        raise ConfigurationError(f"Rate table is missing required key {exc}") from exc


def load_rate_table_file(path: Path) -> RateTable:
    """Load and validate a single rate table file."""
    with path.open("r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Rate table {path.name} is not valid JSON") from exc

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Rate table {path.name} must define an object")

    table = rate_table_from_payload(payload)
    if path.stem.isdigit() and int(path.stem) != table.year:
        raise ConfigurationError(
            f"Rate table year mismatch: file {path.name} declares {table.year}"
        )
    return table


class RateTableRegistry:
    """Read-only lookup of rate tables by tax year.

    Built once and shared; concurrent reads need no locking because neither
    the registry nor its tables are ever mutated.
    """

    def __init__(self, tables: Iterable[RateTable]):
        by_year: dict[int, RateTable] = {}
        for table in tables:
            if table.year in by_year:
                raise ConfigurationError(f"Duplicate rate table for {table.year}")
            by_year[table.year] = table
        self._tables = MappingProxyType(by_year)

    @classmethod
    def from_directory(cls, directory: Path) -> RateTableRegistry:
        """Load every ``<year>.json`` file in a directory."""
        if not directory.is_dir():
            raise ConfigurationError(f"Rate table directory not found: {directory}")

        tables = [load_rate_table_file(path) for path in sorted(directory.glob("*.json"))]
        for table in tables:
            logger.info("Loaded rate table %s (version %s)", table.year, table.version)
        return cls(tables)

    def get(self, year: int) -> RateTable:
        """Get the rate table for a tax year."""
        try:
            return self._tables[year]
        except KeyError:
            raise RateTableNotFoundError(year) from None

    def __contains__(self, year: object) -> bool:
        return year in self._tables

    @property
    def years(self) -> list[int]:
        return sorted(self._tables)


@lru_cache(maxsize=1)
def get_default_registry() -> RateTableRegistry:
    """Get the cached registry of packaged (or configured) rate tables."""
    return RateTableRegistry.from_directory(get_settings().rate_table_dir)
