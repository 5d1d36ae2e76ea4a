"""
vcf_valuation/reporting.py - Tabular Views and Comparison Runs

Produces presentation-ready pandas tables from a projection:
1. Year-by-year breakdown (one row per YearRow)
2. The five reference tables, read from the engine's constants
3. Automatic comparison runs (unemployment ordering, discount ±1%)

No formatting or file output happens here; callers render the DataFrames.

Author: Claim Valuation Project
License: MIT
"""

import pandas as pd
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, List, Tuple
import logging

from .brackets import CONSUMPTION_TABLE, NY_EFFECTIVE_TAX_TABLE, ConsumptionColumn
from .claim_config import Manual, ProjectionConfig, UnemploymentTiming
from .engine import ProjectionEngine, ProjectionResult, create_engine
from .financials import DISCOUNT_BANDS, FinancialEngine
from .worklife import AGE_GROWTH_RATES, DEFAULT_GROWTH_RATE, GROWTH_FALLBACK_AGE, WORKLIFE_TABLE

logger = logging.getLogger(__name__)


# Display labels in projection order
YEAR_ROW_COLUMNS: Dict[str, str] = {
    'year': 'Year',
    'age': 'Age',
    'growth_rate': 'Income Growth %',
    'projected_income': 'Projected Income',
    'retirement': '+ Retirement',
    'income_plus_retirement': 'Income + Retirement',
    'unemployment_adjusted_income': 'Unemployment Adj. Income',
    'tax_rate': 'Tax Rate',
    'post_tax_income': 'Post-tax Income',
    'consumption_rate': 'Consumption %',
    'consumption_amount': 'Consumption $',
    'income_less_consumption': 'Income - Consumption',
    'medical_contribution': 'Health Contribution',
    'subtotal': 'Subtotal (post-tax adj.)',
    'present_value': 'Discounted PV',
}

CONSUMPTION_COLUMN_LABELS: Dict[ConsumptionColumn, str] = {
    ConsumptionColumn.SINGLE_NO_CHILDREN: 'Single, 0 Children',
    ConsumptionColumn.SINGLE_WITH_CHILDREN: 'Single, 1+ Children',
    ConsumptionColumn.MARRIED_NO_CHILDREN: 'Married, 0 Children',
    ConsumptionColumn.MARRIED_ONE_CHILD: 'Married, 1 Child',
    ConsumptionColumn.MARRIED_TWO_PLUS_CHILDREN: 'Married, 2+ Children',
}


def rows_to_dataframe(result: ProjectionResult) -> pd.DataFrame:
    """Year-by-year breakdown with a discount factor column."""
    df = pd.DataFrame(
        [{label: getattr(row, attr) for attr, label in YEAR_ROW_COLUMNS.items()}
         for row in result.rows],
        columns=list(YEAR_ROW_COLUMNS.values()),
    )
    factors = FinancialEngine(result.discount_rate).get_discount_factor_vector(result.horizon)
    df.insert(len(df.columns) - 1, 'Discount Factor', factors[:len(df)])
    df.attrs['gross_pv'] = result.gross_pv
    df.attrs['discount_rate'] = result.discount_rate
    return df


def summary(result: ProjectionResult) -> Dict[str, float]:
    """Headline numbers of a projection."""
    return {
        'effective_tax_rate': result.tax_rate,
        'discount_rate': result.discount_rate,
        'horizon': result.horizon,
        'expected_exit_age': result.expected_exit_age,
        'gross_pv': result.gross_pv,
        'offsets_pv': result.offsets_pv,
        'net_pv': result.net_pv,
    }


def reference_tables() -> Dict[str, pd.DataFrame]:
    """
    The five reference tables, verbatim, for transparency displays.

    Returns:
        Dict with keys 'tax', 'worklife', 'growth', 'consumption', 'discount'
    """
    tax = pd.DataFrame(
        [(row.threshold, row.value) for row in NY_EFFECTIVE_TAX_TABLE],
        columns=['Income Threshold', 'Effective Rate'],
    )

    worklife = pd.DataFrame(
        [(row.age, row.remaining_years, row.nominal_exit_age) for row in WORKLIFE_TABLE],
        columns=['Age', 'Remaining Years', 'Exit Age'],
    )

    growth = pd.DataFrame(
        sorted(AGE_GROWTH_RATES.items()), columns=['Age', 'Growth Rate'],
    )
    growth.attrs['fallback'] = f"{GROWTH_FALLBACK_AGE}+ = {DEFAULT_GROWTH_RATE}"

    consumption = pd.DataFrame(
        [{'Income Threshold': row.threshold,
          **{CONSUMPTION_COLUMN_LABELS[col]: rate for col, rate in row.value.items()}}
         for row in CONSUMPTION_TABLE]
    )

    lower = 0
    bands = []
    for band in DISCOUNT_BANDS:
        label = f"{lower}-{band.max_age}" if band.max_age is not None else f"{lower}+"
        bands.append((label, band.rate))
        if band.max_age is not None:
            lower = band.max_age + 1
    discount = pd.DataFrame(bands, columns=['Age Band', 'Discount Rate'])

    return {
        'tax': tax,
        'worklife': worklife,
        'growth': growth,
        'consumption': consumption,
        'discount': discount,
    }


# =============================================================================
# SENSITIVITY / COMPARISON RUNS
# =============================================================================

@dataclass
class ScenarioResult:
    """Result from a comparison run."""
    scenario: str
    unemployment_timing: UnemploymentTiming
    discount_rate: float
    gross_pv: float
    net_pv: float
    description: str = ""


class SensitivityAnalyzer:
    """
    Runs a base configuration through a fixed set of scenarios.

    Performs 4 projections:
    1. Baseline
    2. Other unemployment ordering (before-medical <-> after-medical)
    3. Discount rate -1%
    4. Discount rate +1%
    """

    SCENARIOS: List[Tuple[str, bool, float]] = [
        ("baseline", False, 0.0),
        ("alternate_timing", True, 0.0),
        ("disc_minus_1", False, -0.01),
        ("disc_plus_1", False, 0.01),
    ]

    def __init__(self, base_config: ProjectionConfig,
                 engine_factory: Callable[[ProjectionConfig], ProjectionEngine] = create_engine):
        self.base_config = base_config
        self.engine_factory = engine_factory

    def run_all_scenarios(self) -> Dict[str, ScenarioResult]:
        """
        Run every scenario.

        Returns:
            Dict mapping scenario name to ScenarioResult
        """
        base_discount = self.engine_factory(self.base_config).discount_rate
        results = {}

        for scenario_name, flip_timing, disc_adj in self.SCENARIOS:
            logger.info(f"Running comparison scenario: {scenario_name}")

            changes: Dict[str, Any] = {}
            if flip_timing:
                changes['unemployment_timing'] = _other_timing(self.base_config.unemployment_timing)
            if disc_adj:
                changes['discount_source'] = Manual(value=base_discount + disc_adj)

            config = self.base_config.with_overrides(**changes) if changes else self.base_config
            result = self.engine_factory(config).run()

            results[scenario_name] = ScenarioResult(
                scenario=scenario_name,
                unemployment_timing=config.unemployment_timing,
                discount_rate=result.discount_rate,
                gross_pv=result.gross_pv,
                net_pv=result.net_pv,
                description=self._get_description(scenario_name),
            )

        return results

    def _get_description(self, scenario: str) -> str:
        descriptions = {
            'baseline': 'Current assumptions',
            'alternate_timing': 'Unemployment factor applied in the other order',
            'disc_minus_1': 'Discount rate decreased 1%',
            'disc_plus_1': 'Discount rate increased 1%',
        }
        return descriptions.get(scenario, scenario)

    @staticmethod
    def to_dataframe(results: Dict[str, ScenarioResult]) -> pd.DataFrame:
        """Comparison table, one row per scenario."""
        df = pd.DataFrame(
            [{f.name: getattr(r, f.name) for f in fields(ScenarioResult)}
             for r in results.values()],
            columns=[f.name for f in fields(ScenarioResult)],
        )
        if df.empty:
            return df
        df['unemployment_timing'] = df['unemployment_timing'].map(lambda t: t.value)
        baseline = results['baseline'].net_pv if 'baseline' in results else None
        if baseline:
            df['change_vs_baseline'] = df['net_pv'] / baseline - 1.0
        return df


def _other_timing(timing: UnemploymentTiming) -> UnemploymentTiming:
    if timing == UnemploymentTiming.BEFORE_MEDICAL:
        return UnemploymentTiming.AFTER_MEDICAL
    return UnemploymentTiming.BEFORE_MEDICAL
