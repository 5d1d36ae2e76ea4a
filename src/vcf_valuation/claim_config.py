"""
vcf_valuation/claim_config.py - Claim Projection Configuration

DESIGN PRINCIPLE: Reference tables are never mutated.
Every customisation is expressed here as an override value, and every
auto/manual toggle is a tagged union resolved once per projection.

Tagged unions (discriminated on ``kind``):
- RateSource:    Auto | Manual(value)          (tax, consumption, discount)
- HorizonSource: FirmWorklife | ManualHorizon   (projection length)
- GrowthSource:  AgeSpecificGrowth | FixedGrowth (earnings growth)

Defaults mirror the firm's standard wrongful-death worksheet.

Author: Claim Valuation Project
License: MIT
"""

from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================

class ClaimMode(Enum):
    """Claim types supported by the projection."""
    INJURY = "injury"
    WRONGFUL_DEATH = "wrongful_death"


class MaritalStatus(Enum):
    """Marital status used for consumption column selection."""
    SINGLE = "single"
    MARRIED = "married"


class UnemploymentTiming(Enum):
    """Where the unemployment factor is applied in the yearly cash flow."""
    BEFORE_MEDICAL = "before_medical"
    AFTER_MEDICAL = "after_medical"  # legacy ordering


class MedicalGrowthMode(Enum):
    """Medical benefit growth assumption."""
    CPI = "cpi"
    CPI_MEDICAL = "cpi_medical"
    CUSTOM = "custom"


MEDICAL_GROWTH_PRESETS: Dict[MedicalGrowthMode, float] = {
    MedicalGrowthMode.CPI: 0.023,
    MedicalGrowthMode.CPI_MEDICAL: 0.0304,
}


# =============================================================================
# TAGGED UNIONS
# =============================================================================

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Auto(_Frozen):
    """Resolve the rate from the reference table."""
    kind: Literal["auto"] = "auto"


class Manual(_Frozen):
    """Use a caller-supplied rate for every year."""
    kind: Literal["manual"] = "manual"
    value: float


class FirmWorklife(_Frozen):
    """Take the horizon from the firm work-life table."""
    kind: Literal["firm_table"] = "firm_table"


class ManualHorizon(_Frozen):
    """Explicit number of projection years."""
    kind: Literal["manual"] = "manual"
    years: int = 12


class AgeSpecificGrowth(_Frozen):
    """Age-indexed earnings growth with a fallback for ages 52+."""
    kind: Literal["age_specific"] = "age_specific"
    fallback_rate: float = 0.03


class FixedGrowth(_Frozen):
    """Single earnings growth rate for every year."""
    kind: Literal["fixed"] = "fixed"
    rate: float = 0.03


RateSource = Annotated[Union[Auto, Manual], Field(discriminator="kind")]
HorizonSource = Annotated[Union[FirmWorklife, ManualHorizon], Field(discriminator="kind")]
GrowthSource = Annotated[Union[AgeSpecificGrowth, FixedGrowth], Field(discriminator="kind")]


# =============================================================================
# PROJECTION CONFIGURATION
# =============================================================================

class OffsetSchedule(_Frozen):
    """Collateral offsets: a level annual amount for N years plus a PV lump sum."""
    annual_amount: float = 0.0
    years: int = 0
    lump_sum: float = Field(0.0, description="Already expressed in present value")


class ProjectionConfig(_Frozen):
    """Complete input for one loss projection."""
    mode: ClaimMode = ClaimMode.WRONGFUL_DEATH
    start_age: Union[int, float] = 55
    horizon_source: HorizonSource = Field(default_factory=FirmWorklife)
    base_income: float = 100000.0

    tax_source: RateSource = Field(default_factory=Auto)

    # Household (wrongful death only)
    marital_status: MaritalStatus = MaritalStatus.MARRIED
    dependents: Tuple[Optional[int], ...] = Field(
        default=(None, None), max_length=2,
        description="Current ages of up to two dependents (None = no dependent)"
    )
    consumption_source: RateSource = Field(default_factory=Auto)

    growth_source: GrowthSource = Field(default_factory=AgeSpecificGrowth)
    retirement_rate: float = 0.04

    medical_base: float = 7280.0
    medical_growth_mode: MedicalGrowthMode = MedicalGrowthMode.CPI
    medical_growth_rate: Optional[float] = Field(
        default=None, description="Required when medical_growth_mode is custom"
    )

    unemployment_factor: float = 0.06
    unemployment_timing: UnemploymentTiming = UnemploymentTiming.BEFORE_MEDICAL

    discount_source: RateSource = Field(default_factory=Auto)
    offsets: OffsetSchedule = Field(default_factory=OffsetSchedule)

    @field_validator("dependents", mode="before")
    @classmethod
    def _none_markers(cls, value: Any) -> Any:
        """Accept the literal 'none' (any case) for an empty dependent slot."""
        if isinstance(value, (list, tuple)):
            return tuple(
                None if isinstance(v, str) and v.strip().lower() == "none" else v
                for v in value
            )
        return value

    @model_validator(mode="after")
    def _custom_growth_needs_rate(self) -> "ProjectionConfig":
        if (self.medical_growth_mode == MedicalGrowthMode.CUSTOM
                and self.medical_growth_rate is None):
            raise ValueError("medical_growth_rate is required for custom medical growth")
        return self

    @property
    def resolved_medical_growth(self) -> float:
        """Medical growth rate after applying the preset for the selected mode."""
        if self.medical_growth_mode == MedicalGrowthMode.CUSTOM:
            return self.medical_growth_rate
        return MEDICAL_GROWTH_PRESETS[self.medical_growth_mode]

    @property
    def is_wrongful_death(self) -> bool:
        return self.mode == ClaimMode.WRONGFUL_DEATH

    def with_overrides(self, **changes: Any) -> "ProjectionConfig":
        """Copy of this config with some fields replaced (re-validated)."""
        data = self.model_dump()
        data.update(changes)
        return ProjectionConfig(**data)

    @classmethod
    def create_from_dict(cls, config: Dict[str, Any]) -> "ProjectionConfig":
        """Create a config from a plain dictionary (e.g. parsed JSON)."""
        return cls(**config)
