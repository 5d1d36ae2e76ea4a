"""
vcf_valuation/engine.py - Economic Loss Projection Engine

Projects a household's lost income year by year over the work-life horizon
and discounts each year to present value.

Per-Year Transition (t = 1..n):
1. Growth rate for attained age (start_age + t), or the fixed rate
2. salary_t = salary_{t-1} × (1 + g_t);  medical_t = medical_{t-1} × (1 + m)
3. Retirement add-on: R_t = salary_t × r
4. Consumption (wrongful death): C = base × (1 - tax) × c_t
   (anchored to after-tax income at the date of loss, never grown)
5. Unemployment / tax / consumption / medical in the configured order
6. PV_t = subtotal_t / (1 + i)^t

Aggregation:
- Gross PV = Σ PV_t
- Net PV = max(0, Gross PV - Offsets PV)

The tax rate, discount rate and horizon are resolved once per projection.

Author: Claim Valuation Project
License: MIT
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple, Union
import logging

from .brackets import lookup_consumption_rate, lookup_tax_rate
from .claim_config import (
    AgeSpecificGrowth,
    FirmWorklife,
    Manual,
    ProjectionConfig,
    UnemploymentTiming,
)
from .financials import FinancialEngine, discount_rate_for_age
from .worklife import AgeGrowthTable, count_dependents_under, lookup_worklife

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YearRow:
    """Complete breakdown of one projection year."""
    year: int
    age: float
    growth_rate: float
    projected_income: float
    retirement: float
    income_plus_retirement: float
    unemployment_adjusted_income: float
    tax_rate: float
    post_tax_income: float
    consumption_rate: float
    consumption_amount: float
    income_less_consumption: float
    medical_contribution: float
    subtotal: float
    present_value: float


@dataclass(frozen=True)
class ProjectionResult:
    """Final output of one projection."""
    gross_pv: float
    offsets_pv: float
    net_pv: float
    tax_rate: float
    discount_rate: float
    horizon: int
    expected_exit_age: float
    rows: Tuple[YearRow, ...]


# =============================================================================
# UNEMPLOYMENT ORDERING STRATEGIES
# =============================================================================

@dataclass(frozen=True)
class AdjustedIncome:
    """Intermediate amounts produced by an unemployment ordering."""
    unemployment_adjusted: float
    post_tax: float
    after_consumption: float
    subtotal: float


def apply_before_medical(income_plus_retirement: float, tax_rate: float,
                         consumption_amount: float, medical: float,
                         unemployment_factor: float) -> AdjustedIncome:
    """
    Unemployment on income + retirement, then tax, then consumption, then
    add medical. Medical is not reduced by unemployment.
    """
    unemployment_adjusted = income_plus_retirement * (1 - unemployment_factor)
    post_tax = unemployment_adjusted * (1 - tax_rate)
    after_consumption = post_tax - consumption_amount
    subtotal = after_consumption + medical
    return AdjustedIncome(unemployment_adjusted, post_tax, after_consumption, subtotal)


def apply_after_medical(income_plus_retirement: float, tax_rate: float,
                        consumption_amount: float, medical: float,
                        unemployment_factor: float) -> AdjustedIncome:
    """
    Legacy ordering: tax, consumption, add medical, then unemployment on the
    whole subtotal (medical included).
    """
    post_tax = income_plus_retirement * (1 - tax_rate)
    after_consumption = post_tax - consumption_amount
    subtotal = (after_consumption + medical) * (1 - unemployment_factor)
    return AdjustedIncome(subtotal, post_tax, after_consumption, subtotal)


TIMING_STRATEGIES: Dict[UnemploymentTiming, Callable[..., AdjustedIncome]] = {
    UnemploymentTiming.BEFORE_MEDICAL: apply_before_medical,
    UnemploymentTiming.AFTER_MEDICAL: apply_after_medical,
}


def resolve_rate(source: Any, auto_rate: Callable[[], float]) -> float:
    """Resolve an Auto | Manual source to a single rate."""
    if isinstance(source, Manual):
        return source.value
    return auto_rate()


# =============================================================================
# YEAR PROJECTOR
# =============================================================================

class YearProjector:
    """
    Stateful per-year transition.

    Owns the running salary and medical benefit for a single pass; create a
    new projector for every projection.
    """

    def __init__(self, config: ProjectionConfig, tax_rate: float,
                 financial: FinancialEngine):
        self.config = config
        self.tax_rate = tax_rate
        self.financial = financial

        growth = config.growth_source
        if isinstance(growth, AgeSpecificGrowth):
            table = AgeGrowthTable(fallback_rate=growth.fallback_rate)
            self._growth_rate = table.get_rate
        else:
            self._growth_rate = lambda age: growth.rate

        self._adjust = TIMING_STRATEGIES[config.unemployment_timing]
        self._medical_growth = config.resolved_medical_growth
        self._after_tax_at_loss = config.base_income * (1 - tax_rate)

        self.salary = config.base_income
        self.medical = config.medical_base

    def consumption_rate_for(self, year: int) -> float:
        """Consumption share in ``year`` (0.0 outside wrongful death)."""
        config = self.config
        if not config.is_wrongful_death:
            return 0.0
        if isinstance(config.consumption_source, Manual):
            return config.consumption_source.value

        children = count_dependents_under(config.dependents, year - 1)
        return lookup_consumption_rate(
            config.base_income, config.marital_status, children
        )

    def project(self, year: int) -> YearRow:
        """Advance the running state by one year and return its row."""
        config = self.config
        age = config.start_age + year
        growth_rate = self._growth_rate(age)

        self.salary = self.salary * (1 + growth_rate)
        self.medical = self.medical * (1 + self._medical_growth)

        retirement = self.salary * config.retirement_rate
        income_plus_retirement = self.salary + retirement

        consumption_rate = self.consumption_rate_for(year)
        consumption_amount = (self._after_tax_at_loss * consumption_rate
                              if config.is_wrongful_death else 0.0)

        adjusted = self._adjust(
            income_plus_retirement, self.tax_rate, consumption_amount,
            self.medical, config.unemployment_factor
        )
        present_value = self.financial.present_value(adjusted.subtotal, year)

        logger.debug(f"Year {year} (age {age}): subtotal=${adjusted.subtotal:,.2f}, "
                     f"PV=${present_value:,.2f}")

        return YearRow(
            year=year,
            age=age,
            growth_rate=growth_rate,
            projected_income=self.salary,
            retirement=retirement,
            income_plus_retirement=income_plus_retirement,
            unemployment_adjusted_income=adjusted.unemployment_adjusted,
            tax_rate=self.tax_rate,
            post_tax_income=adjusted.post_tax,
            consumption_rate=consumption_rate,
            consumption_amount=consumption_amount,
            income_less_consumption=adjusted.after_consumption,
            medical_contribution=self.medical,
            subtotal=adjusted.subtotal,
            present_value=present_value,
        )


# =============================================================================
# PROJECTION ENGINE (AGGREGATOR)
# =============================================================================

class ProjectionEngine:
    """Drives the year loop and nets offsets against the gross present value."""

    def __init__(self, config: ProjectionConfig):
        self.config = config

        self.tax_rate = resolve_rate(
            config.tax_source, lambda: lookup_tax_rate(config.base_income)
        )
        self.discount_rate = resolve_rate(
            config.discount_source, lambda: discount_rate_for_age(config.start_age)
        )
        self.financial = FinancialEngine(discount_rate=self.discount_rate)

        if isinstance(config.horizon_source, FirmWorklife):
            worklife = lookup_worklife(config.start_age)
            self.horizon = worklife.years
            self.expected_exit_age = worklife.exit_age
        else:
            self.horizon = config.horizon_source.years
            self.expected_exit_age = config.start_age + self.horizon

        logger.info(f"ProjectionEngine initialized: mode={config.mode.value}, "
                    f"age={config.start_age}, horizon={self.horizon}, "
                    f"tax={self.tax_rate:.2%}, discount={self.discount_rate:.2%}")

    def run(self) -> ProjectionResult:
        """Run the full projection."""
        projector = YearProjector(self.config, self.tax_rate, self.financial)

        rows: List[YearRow] = []
        gross_pv = 0.0
        for year in range(1, self.horizon + 1):
            row = projector.project(year)
            rows.append(row)
            gross_pv += row.present_value

        offsets_pv = self.financial.offsets_present_value(self.config.offsets)
        net_pv = max(0.0, gross_pv - offsets_pv)

        logger.info(f"Projection complete: gross=${gross_pv:,.0f}, "
                    f"offsets=${offsets_pv:,.0f}, net=${net_pv:,.0f}")

        return ProjectionResult(
            gross_pv=gross_pv,
            offsets_pv=offsets_pv,
            net_pv=net_pv,
            tax_rate=self.tax_rate,
            discount_rate=self.discount_rate,
            horizon=self.horizon,
            expected_exit_age=self.expected_exit_age,
            rows=tuple(rows),
        )


def create_engine(config: Union[ProjectionConfig, Dict[str, Any]]) -> ProjectionEngine:
    """Create an engine from a config model or a plain dictionary."""
    if not isinstance(config, ProjectionConfig):
        config = ProjectionConfig.create_from_dict(config)
    return ProjectionEngine(config)


def run_projection(config: Union[ProjectionConfig, Dict[str, Any]]) -> ProjectionResult:
    """Convenience wrapper: create an engine and run it."""
    return create_engine(config).run()
