"""
vcf_valuation/brackets.py - Threshold (Bracket) Table Lookups

Implements the step-function lookups used for the effective tax rate and the
decedent's personal consumption rate.

Lookup Rule:
- Select the row with the highest threshold <= value
- Values below the first threshold use the first row
- An empty table yields the neutral default (0.0 for rates)
- NO interpolation between adjacent rows

Consumption rates are keyed by pre-loss income only; the column is chosen by
marital status and the number of children under 23.

Author: Claim Valuation Project
License: MIT
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Generic, Mapping, Optional, Sequence, Tuple, TypeVar, Union
import logging

from .claim_config import MaritalStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class BracketRow(Generic[T]):
    """One threshold row: ``value`` applies from ``threshold`` up to the next row."""
    threshold: float
    value: T


def bracket_lookup(table: Sequence[BracketRow], value: float,
                   default: Any = 0.0) -> Any:
    """
    Return the value of the highest threshold not exceeding ``value``.

    Rows are assumed to be in ascending threshold order; ordering is not
    validated. A query below the first threshold returns the first row.

    Args:
        table: Ascending sequence of BracketRow
        value: Query value (e.g. annual income)
        default: Returned when the table is empty

    Returns:
        The selected row's value
    """
    if not table:
        return default

    selected = table[0].value
    for row in table:
        if value >= row.threshold:
            selected = row.value
        else:
            break
    return selected


# =============================================================================
# TABLE 1: NY EFFECTIVE TAX RATES (bracket, no interpolation)
# Keyed by annual base income at the date of loss
# =============================================================================

NY_EFFECTIVE_TAX_TABLE: Tuple[BracketRow, ...] = (
    BracketRow(10000, 0.1482),
    BracketRow(20000, 0.1481),
    BracketRow(25000, 0.1479),
    BracketRow(30000, 0.1386),
    BracketRow(35000, 0.1293),
    BracketRow(40000, 0.1345),
    BracketRow(45000, 0.1396),
    BracketRow(50000, 0.1474),
    BracketRow(60000, 0.1551),
    BracketRow(70000, 0.1629),
    BracketRow(80000, 0.1706),
    BracketRow(90000, 0.1864),
    BracketRow(100000, 0.2021),
    BracketRow(125000, 0.2180),
    BracketRow(150000, 0.2338),
    BracketRow(175000, 0.2497),
    BracketRow(200000, 0.2655),
    BracketRow(225000, 0.3017),
    BracketRow(350000, 0.3378),
)


def lookup_tax_rate(income: float,
                    table: Sequence[BracketRow] = NY_EFFECTIVE_TAX_TABLE) -> float:
    """Effective tax rate for an annual income."""
    return bracket_lookup(table, income, default=0.0)


# =============================================================================
# TABLE 4: PERSONAL CONSUMPTION (share of after-tax income)
# Keyed by pre-loss income; one column per household type
# =============================================================================

class ConsumptionColumn(Enum):
    """Household columns of the consumption table."""
    SINGLE_NO_CHILDREN = "single_0"
    SINGLE_WITH_CHILDREN = "single_1plus"
    MARRIED_NO_CHILDREN = "married_0"
    MARRIED_ONE_CHILD = "married_1"
    MARRIED_TWO_PLUS_CHILDREN = "married_2plus"


def _consumption_row(income: float, single_0: float, single_1plus: float,
                     married_0: float, married_1: float,
                     married_2plus: float) -> BracketRow:
    return BracketRow(income, MappingProxyType({
        ConsumptionColumn.SINGLE_NO_CHILDREN: single_0,
        ConsumptionColumn.SINGLE_WITH_CHILDREN: single_1plus,
        ConsumptionColumn.MARRIED_NO_CHILDREN: married_0,
        ConsumptionColumn.MARRIED_ONE_CHILD: married_1,
        ConsumptionColumn.MARRIED_TWO_PLUS_CHILDREN: married_2plus,
    }))


CONSUMPTION_TABLE: Tuple[BracketRow, ...] = (
    #                income   Single0 Single1+ Married0 Married1 Married2+
    _consumption_row(10000,  0.779,  0.185,   0.370,   0.194,   0.131),
    _consumption_row(20000,  0.763,  0.182,   0.344,   0.184,   0.126),
    _consumption_row(25000,  0.755,  0.180,   0.330,   0.180,   0.123),
    _consumption_row(30000,  0.747,  0.178,   0.317,   0.175,   0.121),
    _consumption_row(35000,  0.753,  0.185,   0.290,   0.169,   0.120),
    _consumption_row(40000,  0.751,  0.185,   0.258,   0.157,   0.113),
    _consumption_row(45000,  0.748,  0.185,   0.226,   0.145,   0.107),
    _consumption_row(50000,  0.732,  0.184,   0.219,   0.142,   0.105),
    _consumption_row(60000,  0.715,  0.182,   0.211,   0.138,   0.103),
    _consumption_row(70000,  0.682,  0.175,   0.189,   0.126,   0.094),
    _consumption_row(80000,  0.641,  0.165,   0.172,   0.116,   0.087),
    _consumption_row(90000,  0.620,  0.160,   0.164,   0.110,   0.083),
    _consumption_row(100000, 0.599,  0.155,   0.155,   0.105,   0.080),
    _consumption_row(125000, 0.548,  0.143,   0.143,   0.097,   0.073),
    _consumption_row(150000, 0.519,  0.137,   0.132,   0.090,   0.069),
    _consumption_row(175000, 0.490,  0.131,   0.120,   0.084,   0.084),
    _consumption_row(200000, 0.337,  0.096,   0.100,   0.070,   0.054),
    _consumption_row(225000, 0.184,  0.060,   0.081,   0.056,   0.043),
)


def select_consumption_column(marital: Union[MaritalStatus, str],
                              children_under_23: int) -> ConsumptionColumn:
    """Pick the consumption column for a household."""
    if MaritalStatus(marital) == MaritalStatus.SINGLE:
        if children_under_23 >= 1:
            return ConsumptionColumn.SINGLE_WITH_CHILDREN
        return ConsumptionColumn.SINGLE_NO_CHILDREN

    if children_under_23 >= 2:
        return ConsumptionColumn.MARRIED_TWO_PLUS_CHILDREN
    if children_under_23 == 1:
        return ConsumptionColumn.MARRIED_ONE_CHILD
    return ConsumptionColumn.MARRIED_NO_CHILDREN


def lookup_consumption_rate(pre_loss_income: float,
                            marital: Union[MaritalStatus, str],
                            children_under_23: int,
                            table: Sequence[BracketRow] = CONSUMPTION_TABLE) -> float:
    """
    Consumption share for a household at the given pre-loss income.

    Args:
        pre_loss_income: Base income at the date of loss (never grown income)
        marital: Marital status of the decedent
        children_under_23: Dependents still under 23 (already capped at 2)
        table: Consumption bracket table

    Returns:
        Consumption rate, or 0.0 for an empty table
    """
    column = select_consumption_column(marital, children_under_23)
    row: Optional[Mapping[ConsumptionColumn, float]] = bracket_lookup(
        table, pre_loss_income, default=None
    )
    if row is None:
        return 0.0
    return row[column]
