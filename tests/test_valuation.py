"""
tests/test_valuation.py - Loss Projection Unit Tests

Validation tests for the projection engine:
1. The "Flat World" check: no growth, tax, unemployment or discounting
2. Hand-computed single years for both unemployment orderings
3. Consumption anchored to after-tax income at the date of loss
4. Dependents aging out of the consumption column
5. Offsets netting with the zero floor
6. Row count, ordering and idempotence properties
7. The standard age-55 wrongful-death scenario

Author: Claim Valuation Project
License: MIT
"""

import pytest
import numpy as np
from pydantic import ValidationError
from vcf_valuation.claim_config import (
    AgeSpecificGrowth,
    ClaimMode,
    FixedGrowth,
    Manual,
    ManualHorizon,
    MedicalGrowthMode,
    OffsetSchedule,
    ProjectionConfig,
    UnemploymentTiming,
)
from vcf_valuation.engine import (
    ProjectionEngine,
    YearProjector,
    apply_after_medical,
    apply_before_medical,
    create_engine,
    run_projection,
)
from vcf_valuation.financials import FinancialEngine


def flat_config(**overrides) -> ProjectionConfig:
    """Injury config with every rate set to zero."""
    config = dict(
        mode=ClaimMode.INJURY,
        start_age=40,
        horizon_source=ManualHorizon(years=3),
        base_income=50000.0,
        tax_source=Manual(value=0.0),
        growth_source=FixedGrowth(rate=0.0),
        retirement_rate=0.0,
        medical_base=1000.0,
        medical_growth_mode=MedicalGrowthMode.CUSTOM,
        medical_growth_rate=0.0,
        unemployment_factor=0.0,
        discount_source=Manual(value=0.0),
    )
    config.update(overrides)
    return ProjectionConfig(**config)


class TestFlatWorld:
    """
    PROOF: With every rate at zero, the gross PV is the plain sum of
    (income + medical) over the horizon.
    """

    def test_flat_world_sum(self):
        result = run_projection(flat_config())

        assert len(result.rows) == 3
        assert result.gross_pv == pytest.approx(3 * 51000.0), \
            f"Expected $153,000, got ${result.gross_pv:,.2f}"
        assert result.net_pv == result.gross_pv

    def test_flat_world_both_orderings_agree(self):
        """With no unemployment factor the two orderings coincide."""
        before = run_projection(flat_config())
        after = run_projection(
            flat_config(unemployment_timing=UnemploymentTiming.AFTER_MEDICAL)
        )
        assert before.gross_pv == pytest.approx(after.gross_pv)


class TestSingleYearByHand:
    """
    Year 1 for base $100,000, 3% growth, 4% retirement, 20% tax,
    6% unemployment, $1,000 medical (no growth), no discounting.
    """

    def config(self, timing):
        return flat_config(
            horizon_source=ManualHorizon(years=1),
            base_income=100000.0,
            tax_source=Manual(value=0.20),
            growth_source=FixedGrowth(rate=0.03),
            retirement_rate=0.04,
            unemployment_factor=0.06,
            unemployment_timing=timing,
        )

    def test_before_medical(self):
        row = run_projection(self.config(UnemploymentTiming.BEFORE_MEDICAL)).rows[0]

        assert row.projected_income == pytest.approx(103000.0)
        assert row.retirement == pytest.approx(4120.0)
        assert row.income_plus_retirement == pytest.approx(107120.0)
        assert row.unemployment_adjusted_income == pytest.approx(100692.8)
        assert row.post_tax_income == pytest.approx(80554.24)
        assert row.subtotal == pytest.approx(81554.24)
        assert row.present_value == pytest.approx(81554.24)

    def test_after_medical(self):
        """Legacy ordering: medical is also reduced by the unemployment factor."""
        row = run_projection(self.config(UnemploymentTiming.AFTER_MEDICAL)).rows[0]

        assert row.post_tax_income == pytest.approx(85696.0)
        assert row.income_less_consumption == pytest.approx(85696.0)
        assert row.subtotal == pytest.approx((85696.0 + 1000.0) * 0.94)
        assert row.unemployment_adjusted_income == row.subtotal

    def test_orderings_differ(self):
        before = run_projection(self.config(UnemploymentTiming.BEFORE_MEDICAL))
        after = run_projection(self.config(UnemploymentTiming.AFTER_MEDICAL))
        assert before.gross_pv != pytest.approx(after.gross_pv)


class TestOrderingStrategies:
    """Test: The two ordering functions in isolation."""

    def test_before_medical_strict_deductions(self):
        adjusted = apply_before_medical(104000.0, 0.2021, 0.0, 7280.0, 0.06)
        assert adjusted.unemployment_adjusted < 104000.0
        assert adjusted.post_tax < adjusted.unemployment_adjusted
        assert adjusted.subtotal == pytest.approx(adjusted.after_consumption + 7280.0)

    def test_after_medical_shrinks_medical(self):
        with_medical = apply_after_medical(104000.0, 0.2, 5000.0, 7280.0, 0.06)
        without_medical = apply_after_medical(104000.0, 0.2, 5000.0, 0.0, 0.06)
        assert with_medical.subtotal - without_medical.subtotal == pytest.approx(7280.0 * 0.94)

    def test_before_medical_keeps_full_medical(self):
        with_medical = apply_before_medical(104000.0, 0.2, 5000.0, 7280.0, 0.06)
        without_medical = apply_before_medical(104000.0, 0.2, 5000.0, 0.0, 0.06)
        assert with_medical.subtotal - without_medical.subtotal == pytest.approx(7280.0)


class TestGrowthAndDiscounting:
    """Test: Compounding from year 1 and end-of-year discounting."""

    def test_salary_and_medical_compound_from_year_one(self):
        config = flat_config(
            growth_source=FixedGrowth(rate=0.05),
            medical_growth_mode=MedicalGrowthMode.CPI,
            medical_growth_rate=None,
        )
        rows = run_projection(config).rows

        for row in rows:
            assert row.projected_income == pytest.approx(50000.0 * 1.05 ** row.year)
            assert row.medical_contribution == pytest.approx(1000.0 * 1.023 ** row.year)

    def test_cpi_medical_preset(self):
        config = flat_config(medical_growth_mode=MedicalGrowthMode.CPI_MEDICAL,
                             medical_growth_rate=None)
        assert run_projection(config).rows[0].medical_contribution == pytest.approx(1030.4)

    def test_age_specific_growth_uses_attained_age(self):
        config = flat_config(start_age=49, horizon_source=ManualHorizon(years=4),
                             growth_source=AgeSpecificGrowth(fallback_rate=0.01))
        rows = run_projection(config).rows

        assert [row.age for row in rows] == [50, 51, 52, 53]
        assert [row.growth_rate for row in rows] == [0.0336, 0.03169, 0.01, 0.01]

    def test_present_value_per_year(self):
        config = flat_config(discount_source=Manual(value=0.03),
                             horizon_source=ManualHorizon(years=5))
        result = run_projection(config)

        for row in result.rows:
            assert row.present_value == pytest.approx(row.subtotal / 1.03 ** row.year)
        assert result.gross_pv == pytest.approx(sum(r.present_value for r in result.rows))
        assert result.discount_rate == 0.03

    def test_auto_discount_resolved_once_from_start_age(self):
        """A 35-year-old keeps 2.6% even as attained ages pass 36 and 55."""
        config = flat_config(start_age=35, horizon_source=ManualHorizon(years=25),
                             discount_source={'kind': 'auto'})
        result = run_projection(config)

        assert result.discount_rate == 0.026
        last = result.rows[-1]
        assert last.present_value == pytest.approx(last.subtotal / 1.026 ** 25)


class TestConsumption:
    """
    Test: Wrongful-death consumption deduction.

    Consumption dollars are anchored to the after-tax base income at the date
    of loss and do not grow with projected income.
    """

    def wd_config(self, **overrides):
        config = dict(
            mode=ClaimMode.WRONGFUL_DEATH,
            start_age=40,
            horizon_source=ManualHorizon(years=6),
            base_income=100000.0,
            marital_status='married',
            dependents=(None, None),
        )
        config.update(overrides)
        return ProjectionConfig(**config)

    def test_consumption_anchored_to_base_after_tax_income(self):
        result = run_projection(self.wd_config())
        expected = 100000.0 * (1 - 0.2021) * 0.155

        amounts = np.array([row.consumption_amount for row in result.rows])
        np.testing.assert_allclose(amounts, expected, rtol=1e-12,
                                   err_msg="Consumption should not grow with income")
        assert result.rows[-1].projected_income > result.rows[0].projected_income

    def test_dependent_ages_out(self):
        """A 20-year-old counts for years 1-3 (offsets 0-2), then ages out."""
        result = run_projection(self.wd_config(dependents=(20, None)))
        rates = [row.consumption_rate for row in result.rows]

        assert rates == [0.105, 0.105, 0.105, 0.155, 0.155, 0.155], \
            f"Unexpected consumption rates: {rates}"

    def test_two_dependents_step_down(self):
        result = run_projection(self.wd_config(dependents=(21, 18)))
        rates = [row.consumption_rate for row in result.rows]

        assert rates == [0.080, 0.080, 0.105, 0.105, 0.105, 0.155]

    def test_manual_consumption_override(self):
        result = run_projection(self.wd_config(consumption_source=Manual(value=0.25),
                                               dependents=(5, 6)))
        assert all(row.consumption_rate == 0.25 for row in result.rows)

    def test_consumption_uses_pre_loss_income_bracket(self):
        """Projected income crosses $125k but the $100k bracket is kept."""
        result = run_projection(self.wd_config(
            horizon_source=ManualHorizon(years=10),
            growth_source=FixedGrowth(rate=0.05),
        ))
        assert result.rows[-1].projected_income > 125000
        assert all(row.consumption_rate == 0.155 for row in result.rows)

    def test_tax_rate_constant_from_base_income(self):
        result = run_projection(self.wd_config(growth_source=FixedGrowth(rate=0.10)))
        assert all(row.tax_rate == 0.2021 for row in result.rows)
        assert result.tax_rate == 0.2021

    def test_injury_mode_has_no_consumption(self):
        result = run_projection(self.wd_config(mode=ClaimMode.INJURY,
                                               consumption_source=Manual(value=0.5),
                                               dependents=(3, None)))
        for row in result.rows:
            assert row.consumption_rate == 0.0
            assert row.consumption_amount == 0.0
            assert row.income_less_consumption == row.post_tax_income


class TestOffsets:
    """Test: Offset present value and the zero floor on net PV."""

    def test_periodic_and_lump_sum(self):
        offsets = OffsetSchedule(annual_amount=10000.0, years=3, lump_sum=5000.0)
        result = run_projection(flat_config(discount_source=Manual(value=0.02),
                                            offsets=offsets))

        expected = sum(10000.0 / 1.02 ** t for t in range(1, 4)) + 5000.0
        assert result.offsets_pv == pytest.approx(expected)
        assert result.net_pv == pytest.approx(result.gross_pv - expected)

    def test_periodic_offset_runs_past_horizon(self):
        """Offset years are independent of the projection horizon."""
        offsets = OffsetSchedule(annual_amount=1000.0, years=10)
        result = run_projection(flat_config(discount_source=Manual(value=0.0),
                                            offsets=offsets))
        assert result.offsets_pv == pytest.approx(10000.0)

    def test_periodic_offset_needs_years_and_amount(self):
        financial = FinancialEngine(discount_rate=0.02)
        assert financial.offsets_present_value(
            OffsetSchedule(annual_amount=10000.0, years=0, lump_sum=250.0)) == 250.0
        assert financial.offsets_present_value(
            OffsetSchedule(annual_amount=0.0, years=5)) == 0.0

    def test_net_pv_floored_at_zero(self):
        offsets = OffsetSchedule(lump_sum=1e9)
        result = run_projection(flat_config(offsets=offsets))

        assert result.offsets_pv > result.gross_pv
        assert result.net_pv == 0.0, f"Net PV should be exactly 0, got {result.net_pv}"


class TestProjectionProperties:
    """Test: Structural properties that hold for any configuration."""

    @pytest.mark.parametrize("years", [0, 1, 7, 30])
    def test_row_count_equals_horizon(self, years):
        result = run_projection(ProjectionConfig(horizon_source=ManualHorizon(years=years)))
        assert len(result.rows) == years == result.horizon
        assert [row.year for row in result.rows] == list(range(1, years + 1))

    def test_before_medical_deduction_order(self):
        result = run_projection(ProjectionConfig(start_age=30, dependents=(2, 5)))
        for row in result.rows:
            assert row.unemployment_adjusted_income < row.income_plus_retirement
            assert row.post_tax_income < row.unemployment_adjusted_income

    def test_idempotent(self):
        config = ProjectionConfig(start_age=42, dependents=(12, 16),
                                  offsets=OffsetSchedule(annual_amount=2000, years=8))
        first = run_projection(config)
        second = run_projection(config)
        assert first == second

    def test_projector_state_is_per_run(self):
        engine = create_engine(ProjectionConfig())
        assert engine.run() == engine.run()

    def test_create_engine_from_dict(self):
        engine = create_engine({
            'mode': 'injury',
            'start_age': 45,
            'horizon_source': {'kind': 'manual', 'years': 4},
            'tax_source': {'kind': 'manual', 'value': 0.3},
        })
        assert isinstance(engine, ProjectionEngine)
        assert engine.tax_rate == 0.3
        assert engine.horizon == 4
        assert engine.expected_exit_age == 49

    def test_year_projector_advances_state(self):
        config = flat_config(growth_source=FixedGrowth(rate=0.10))
        projector = YearProjector(config, 0.0, FinancialEngine(discount_rate=0.02))
        projector.project(1)
        projector.project(2)
        assert projector.salary == pytest.approx(50000.0 * 1.1 ** 2)


class TestStandardScenario:
    """
    Age 55, wrongful death, married with one dependent aged 10, $100,000
    base income, firm work-life table, before-medical ordering, all auto.
    """

    @pytest.fixture
    def result(self):
        config = ProjectionConfig(
            mode=ClaimMode.WRONGFUL_DEATH,
            start_age=55,
            base_income=100000,
            marital_status='married',
            dependents=(10, None),
            unemployment_timing=UnemploymentTiming.BEFORE_MEDICAL,
        )
        return run_projection(config)

    def test_horizon_from_worklife_table(self, result):
        """The 55 row holds 10.53 years, which rounds to 11."""
        assert result.horizon == 11
        assert len(result.rows) == 11
        assert result.expected_exit_age == 66

    def test_attained_ages_strictly_increase(self, result):
        ages = [row.age for row in result.rows]
        assert ages == list(range(56, 67))
        assert all(b > a for a, b in zip(ages, ages[1:]))

    def test_resolved_rates(self, result):
        assert result.discount_rate == 0.021
        assert result.tax_rate == 0.2021

    def test_child_counts_all_years(self, result):
        """The 10-year-old stays under 23 for the whole horizon."""
        assert all(row.consumption_rate == 0.105 for row in result.rows)

    def test_ten_year_manual_horizon(self):
        config = ProjectionConfig(start_age=55, dependents=(10, None),
                                  horizon_source=ManualHorizon(years=10))
        result = run_projection(config)

        assert len(result.rows) == 10
        assert [row.age for row in result.rows] == list(range(56, 66))
        assert result.expected_exit_age == 65
        assert result.discount_rate == 0.021

    def test_net_pv_positive(self, result):
        assert result.gross_pv > 0
        assert result.offsets_pv == 0.0
        assert result.net_pv == result.gross_pv


class TestConfiguration:
    """Test: Configuration shape checks and defaults."""

    def test_defaults(self):
        config = ProjectionConfig()
        assert config.mode == ClaimMode.WRONGFUL_DEATH
        assert config.start_age == 55
        assert config.retirement_rate == 0.04
        assert config.medical_base == 7280.0
        assert config.resolved_medical_growth == 0.023
        assert config.unemployment_factor == 0.06
        assert config.unemployment_timing == UnemploymentTiming.BEFORE_MEDICAL

    def test_more_than_two_dependents_rejected(self):
        with pytest.raises(ValidationError):
            ProjectionConfig(dependents=(1, 2, 3))

    def test_none_marker_for_dependents(self):
        config = ProjectionConfig(dependents=['none', 12])
        assert config.dependents == (None, 12)

    def test_custom_medical_growth_requires_rate(self):
        with pytest.raises(ValidationError):
            ProjectionConfig(medical_growth_mode='custom')
        config = ProjectionConfig(medical_growth_mode='custom', medical_growth_rate=0.05)
        assert config.resolved_medical_growth == 0.05

    def test_unknown_source_kind_rejected(self):
        with pytest.raises(ValidationError):
            ProjectionConfig(tax_source={'kind': 'guess', 'value': 0.1})

    def test_config_is_frozen(self):
        config = ProjectionConfig()
        with pytest.raises(ValidationError):
            config.base_income = 1.0

    def test_with_overrides_revalidates(self):
        config = ProjectionConfig().with_overrides(unemployment_timing='after_medical')
        assert config.unemployment_timing == UnemploymentTiming.AFTER_MEDICAL


class TestLogging:
    """Test: Unusual discount rates are logged, not rejected."""

    def test_zero_discount_warns(self, caplog):
        with caplog.at_level('WARNING', logger='vcf_valuation.financials'):
            result = run_projection(flat_config())
        assert 'Unusual discount rate' in caplog.text
        assert len(result.rows) == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
