#!/usr/bin/env python3
"""
run_estimate.py - Economic Loss Estimate Runner

Runs a complete loss projection from the command line:
1. Build and validate the projection configuration
2. Run the projection engine
3. Print resolved rates, present values and the year-by-year table
4. Optionally compare unemployment orderings and discount shocks

Usage:
    python run_estimate.py --start-age 55 --income 100000 --dependent 10

    python run_estimate.py \\
        --mode injury \\
        --start-age 40 \\
        --years 20 \\
        --income 85000 \\
        --timing after_medical \\
        --compare

Author: Claim Valuation Project
Version: 1.0.0
"""

import argparse
import sys
import logging
from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import ValidationError

logger = logging.getLogger(__name__)


def parse_age(value: str):
    """Parse an age, keeping whole numbers as integers."""
    age = float(value)
    return int(age) if age.is_integer() else age


def parse_dependent(value: str) -> Optional[int]:
    """Parse a dependent age; 'none' marks an empty slot."""
    if value.strip().lower() == 'none':
        return None
    return int(value)


def build_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate command-line arguments into a configuration dictionary."""
    config: Dict[str, Any] = {
        'mode': args.mode,
        'start_age': args.start_age,
        'base_income': args.income,
        'marital_status': args.marital,
        'dependents': tuple(args.dependent or ()),
        'retirement_rate': args.retirement_rate,
        'medical_base': args.medical_base,
        'medical_growth_mode': args.medical_growth_mode,
        'medical_growth_rate': args.medical_growth_rate,
        'unemployment_factor': args.unemployment,
        'unemployment_timing': args.timing,
        'offsets': {
            'annual_amount': args.offset_annual,
            'years': args.offset_years,
            'lump_sum': args.offset_lump_sum,
        },
    }

    if args.years is not None:
        config['horizon_source'] = {'kind': 'manual', 'years': args.years}
    if args.tax_rate is not None:
        config['tax_source'] = {'kind': 'manual', 'value': args.tax_rate}
    if args.consumption_rate is not None:
        config['consumption_source'] = {'kind': 'manual', 'value': args.consumption_rate}
    if args.discount_rate is not None:
        config['discount_source'] = {'kind': 'manual', 'value': args.discount_rate}
    if args.fixed_growth is not None:
        config['growth_source'] = {'kind': 'fixed', 'rate': args.fixed_growth}
    else:
        config['growth_source'] = {'kind': 'age_specific', 'fallback_rate': args.growth_fallback}

    return config


def run_estimate(config_dict: Dict[str, Any], compare: bool = False) -> Dict[str, Any]:
    """
    Run a loss projection and print the results.

    Args:
        config_dict: Projection configuration as a plain dictionary
        compare: Also run the ordering / discount comparison scenarios

    Returns:
        Dict with the config, result, year table and optional comparison
    """
    from vcf_valuation import (
        ProjectionConfig,
        SensitivityAnalyzer,
        create_engine,
        rows_to_dataframe,
    )

    config = ProjectionConfig.create_from_dict(config_dict)

    print("=" * 70)
    print("ECONOMIC LOSS ESTIMATE")
    print("=" * 70)

    engine = create_engine(config)
    result = engine.run()

    print(f"Mode:              {config.mode.value}")
    print(f"Start age:         {config.start_age}")
    print(f"Horizon:           {result.horizon} years")
    print(f"Expected exit age: {result.expected_exit_age}")
    print(f"Effective tax:     {result.tax_rate:.2%}")
    print(f"Discount rate:     {result.discount_rate:.2%}")
    print()
    print(f"Gross PV (pre-offset): ${result.gross_pv:,.0f}")
    print(f"Offsets PV:            ${result.offsets_pv:,.0f}")
    print(f"Estimated award:       ${result.net_pv:,.0f}")
    print()

    table = rows_to_dataframe(result)
    with pd.option_context('display.max_columns', None, 'display.width', 200):
        print(table.to_string(index=False, float_format=lambda x: f"{x:,.2f}"))

    comparison = None
    if compare:
        print()
        print("Comparison scenarios:")
        analyzer = SensitivityAnalyzer(config)
        comparison = SensitivityAnalyzer.to_dataframe(analyzer.run_all_scenarios())
        print(comparison.to_string(index=False))

    return {
        'config': config,
        'result': result,
        'table': table,
        'comparison': comparison,
    }


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description='Estimate the present value of an economic-loss claim',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Wrongful death, firm work-life table, married with one child aged 10
  python run_estimate.py --start-age 55 --income 100000 --dependent 10

  # Injury claim with a manual 20-year horizon and comparison runs
  python run_estimate.py --mode injury --start-age 40 --years 20 --compare
"""
    )

    parser.add_argument('--mode', choices=['injury', 'wrongful_death'], default='wrongful_death')
    parser.add_argument('--start-age', type=parse_age, default=55, help='Age at start of loss')
    parser.add_argument('--years', type=int, help='Manual horizon (default: firm work-life table)')
    parser.add_argument('--income', type=float, default=100000.0, help='Base pre-loss income')
    parser.add_argument('--tax-rate', type=float, help='Manual effective tax rate (default: bracket lookup)')
    parser.add_argument('--marital', choices=['single', 'married'], default='married')
    parser.add_argument('--dependent', type=parse_dependent, action='append',
                        help="Dependent's current age or 'none' (repeat up to twice)")
    parser.add_argument('--consumption-rate', type=float, help='Manual consumption rate')
    parser.add_argument('--fixed-growth', type=float, help='Fixed earnings growth (default: age-specific)')
    parser.add_argument('--growth-fallback', type=float, default=0.03,
                        help='Age-specific growth fallback for ages 52+')
    parser.add_argument('--retirement-rate', type=float, default=0.04)
    parser.add_argument('--medical-base', type=float, default=7280.0)
    parser.add_argument('--medical-growth-mode', choices=['cpi', 'cpi_medical', 'custom'], default='cpi')
    parser.add_argument('--medical-growth-rate', type=float, help='Required for custom medical growth')
    parser.add_argument('--unemployment', type=float, default=0.06, help='Unemployment factor')
    parser.add_argument('--timing', choices=['before_medical', 'after_medical'], default='before_medical')
    parser.add_argument('--discount-rate', type=float, help='Manual discount rate (default: age band)')
    parser.add_argument('--offset-annual', type=float, default=0.0)
    parser.add_argument('--offset-years', type=int, default=0)
    parser.add_argument('--offset-lump-sum', type=float, default=0.0)
    parser.add_argument('--compare', action='store_true', help='Run comparison scenarios')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log every projection year')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        run_estimate(build_config(args), compare=args.compare)
    except ValidationError as exc:
        print(f"ERROR: Invalid configuration:\n{exc}")
        sys.exit(1)


if __name__ == '__main__':
    main()
