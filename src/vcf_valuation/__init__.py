"""
VCF Claim Valuation Engine

Present-value estimator for the economic-loss component of wrongful-death
and injury claims. Projects income, retirement, medical benefits,
consumption and tax year by year over the work-life horizon, discounts each
year and nets collateral offsets.

Version: 1.0.0

Reference Tables:
- Table 1: Effective tax rate by income (bracket, no interpolation)
- Table 2: Firm work-life expectancy by age
- Table 3: Age-specific nominal earnings growth
- Table 4: Personal consumption by income and household type
- Table 5: After-tax discount rate by age band

Author: Claim Valuation Project
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Claim Valuation Project"

from .engine import (
    ProjectionEngine,
    YearProjector,
    YearRow,
    ProjectionResult,
    apply_before_medical,
    apply_after_medical,
    create_engine,
    run_projection,
)

from .claim_config import (
    ProjectionConfig,
    OffsetSchedule,
    ClaimMode,
    MaritalStatus,
    UnemploymentTiming,
    MedicalGrowthMode,
    Auto,
    Manual,
    FirmWorklife,
    ManualHorizon,
    AgeSpecificGrowth,
    FixedGrowth,
)

from .brackets import (
    BracketRow,
    ConsumptionColumn,
    NY_EFFECTIVE_TAX_TABLE,
    CONSUMPTION_TABLE,
    bracket_lookup,
    lookup_tax_rate,
    lookup_consumption_rate,
    select_consumption_column,
)

from .worklife import (
    AGE_GROWTH_RATES,
    WORKLIFE_TABLE,
    AgeGrowthTable,
    WorklifeRow,
    WorklifeResult,
    lookup_worklife,
    count_dependents_under,
)

from .financials import (
    DISCOUNT_BANDS,
    DiscountBand,
    FinancialEngine,
    discount_rate_for_age,
)

from .reporting import (
    rows_to_dataframe,
    reference_tables,
    summary,
    SensitivityAnalyzer,
    ScenarioResult,
)

__all__ = [
    # Main engine
    "ProjectionEngine",
    "YearProjector",
    "create_engine",
    "run_projection",
    "apply_before_medical",
    "apply_after_medical",

    # Results
    "YearRow",
    "ProjectionResult",

    # Configuration
    "ProjectionConfig",
    "OffsetSchedule",
    "ClaimMode",
    "MaritalStatus",
    "UnemploymentTiming",
    "MedicalGrowthMode",
    "Auto",
    "Manual",
    "FirmWorklife",
    "ManualHorizon",
    "AgeSpecificGrowth",
    "FixedGrowth",

    # Bracket tables
    "BracketRow",
    "ConsumptionColumn",
    "NY_EFFECTIVE_TAX_TABLE",
    "CONSUMPTION_TABLE",
    "bracket_lookup",
    "lookup_tax_rate",
    "lookup_consumption_rate",
    "select_consumption_column",

    # Age tables
    "AGE_GROWTH_RATES",
    "WORKLIFE_TABLE",
    "AgeGrowthTable",
    "WorklifeRow",
    "WorklifeResult",
    "lookup_worklife",
    "count_dependents_under",

    # Discounting
    "DISCOUNT_BANDS",
    "DiscountBand",
    "FinancialEngine",
    "discount_rate_for_age",

    # Reporting
    "rows_to_dataframe",
    "reference_tables",
    "summary",
    "SensitivityAnalyzer",
    "ScenarioResult",
]
