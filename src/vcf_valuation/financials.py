"""
vcf_valuation/financials.py - Discounting Engine

Implements the time-value-of-money calculations for the loss projection.

Mathematical Framework:
- Discount factors: v^t = (1+i)^{-t}, end-of-year, t = 1..n
- Offsets PV: Σ_{t=1}^{N} A / (1+i)^t + LumpSum
- Lump-sum offsets are already in present-value terms (not discounted)

Table 5 (after-tax discount rate by age at loss):
- age <= 35:  2.6%
- 36 to 54:   2.4%
- 55+:        2.1%

Author: Claim Valuation Project
License: MIT
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import logging

from .claim_config import OffsetSchedule

logger = logging.getLogger(__name__)


# =============================================================================
# TABLE 5: AFTER-TAX DISCOUNT RATE BANDS
# =============================================================================

@dataclass(frozen=True)
class DiscountBand:
    """Discount rate applying up to and including ``max_age`` (None = no limit)."""
    max_age: Optional[float]
    rate: float


DISCOUNT_BANDS: Tuple[DiscountBand, ...] = (
    DiscountBand(35, 0.026),
    DiscountBand(54, 0.024),
    DiscountBand(None, 0.021),
)


def discount_rate_for_age(age: float,
                          bands: Sequence[DiscountBand] = DISCOUNT_BANDS) -> float:
    """After-tax discount rate for the age at the start of the loss."""
    for band in bands:
        if band.max_age is None or age <= band.max_age:
            return band.rate
    return bands[-1].rate


@dataclass
class FinancialEngine:
    """
    Discounting for one projection.

    The rate is resolved once per projection and used for every year and
    for the offsets.

    Attributes:
        discount_rate: Annual after-tax discount rate
    """

    discount_rate: float = 0.021

    def __post_init__(self):
        if not 0 < self.discount_rate < 0.20:
            logger.warning(f"Unusual discount rate: {self.discount_rate:.2%}")

    def present_value(self, amount: float, years: int) -> float:
        """
        Discount an end-of-year amount.

        Formula: PV = amount / (1+i)^t
        """
        return amount / (1.0 + self.discount_rate) ** years

    def get_discount_factor_vector(self, max_years: int) -> np.ndarray:
        """
        Discount factors for years 1..max_years.

        Returns:
            NumPy array [v^1, v^2, ..., v^n]
        """
        years = np.arange(1, max_years + 1)
        return 1.0 / np.power(1.0 + self.discount_rate, years)

    def offsets_present_value(self, offsets: OffsetSchedule) -> float:
        """
        Present value of collateral offsets.

        The periodic stream counts only when both the annual amount and the
        number of years are positive; the lump sum is always added as is.
        """
        periodic_pv = 0.0
        if offsets.annual_amount > 0 and offsets.years > 0:
            years = np.arange(1, offsets.years + 1)
            periodic_pv = float(np.sum(
                offsets.annual_amount / np.power(1.0 + self.discount_rate, years)
            ))
        return periodic_pv + offsets.lump_sum
