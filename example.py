#!/usr/bin/env python3
"""Example usage of the FAIR Monte Carlo risk model.

This script demonstrates:
1. Building frequency and magnitude estimates
2. Inspecting the modified-PERT distributions behind them
3. Running the Monte Carlo simulation
4. Calculating risk metrics and a percentile table
5. Building the loss exceedance curve
6. Checking that the parallel engine reproduces the serial result
"""

import logging
import numpy as np

from fair_risk import (
    RiskEstimate,
    SimulationConfig,
    FAIRSimulationEngine,
    ParallelFAIRSimulationEngine,
    create_metrics_report,
    create_percentile_table,
    exceedance_probability,
)


def main():
    """Run the example."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 70)
    print("FAIR ANNUAL LOSS EXPOSURE - EXAMPLE")
    print("=" * 70)

    print("\n1. Expert estimates...")
    frequency = RiskEstimate(minimum=2, likely=4, maximum=9)
    magnitude = RiskEstimate(minimum=1_000, likely=4_000, maximum=9_000)
    config = SimulationConfig(confidence_shape=4, run_count=10_000, random_seed=42)
    print(f"   Frequency (events/year): {frequency}")
    print(f"   Magnitude (per event):   {magnitude}")
    print(f"   Config: {config.to_metadata()}")

    print("\n2. PERT distributions...")
    for name, estimate in (("Frequency", frequency), ("Magnitude", magnitude)):
        dist = estimate.to_distribution(config.confidence_shape)
        print(f"   {name}: {dist!r}")
        print(f"      alpha={dist.alpha:.3f} beta={dist.beta:.3f} "
              f"mean={dist.mean():,.2f} std={dist.std():,.2f} "
              f"p90={dist.percentile(0.9):,.2f}")

    print("\n3. Running Monte Carlo simulation...")
    engine = FAIRSimulationEngine(config)
    result = engine.simulate(frequency, magnitude)
    print(f"   Years simulated: {result.num_runs:,}")
    print(f"   Mean frequency: {np.mean(result.frequency):.3f}")
    print(f"   Expected ALE: ${result.expected_loss:,.0f}")
    print(f"   Expected crude ALE: ${result.crude_expected_loss:,.0f}")
    print(f"   ALE Std Dev: ${result.loss_std:,.0f}")
    print(f"   VaR (97.5%): ${result.get_var(0.975):,.0f}")
    print(f"   Expected Shortfall (97.5%): ${result.get_expected_shortfall(0.975):,.0f}")

    print("\n4. Crude vs compounded ALE...")
    report = create_metrics_report({'Crude_ALE': result.crude_ale, 'ALE': result.ale})
    print(report.to_string(index=False))

    print("\n   Percentile table (ALE):")
    print(create_percentile_table(result.ale).to_string(index=False))

    print("\n5. Loss exceedance curve...")
    curve = result.exceedance_curve()
    frame = curve.to_frame()
    print(f"   Points: {len(curve):,}")
    print(frame.iloc[::len(frame) // 10].to_string(index=False))
    for threshold in (10_000, 25_000, 50_000):
        prob = exceedance_probability(result.ale, threshold)
        print(f"   P(ALE > ${threshold:,}) = {prob:.2%}")

    print("\n6. Parallel engine reproducibility...")
    parallel = ParallelFAIRSimulationEngine(config, num_workers=2)
    parallel_result = parallel.simulate(frequency, magnitude)
    identical = np.array_equal(result.ale, parallel_result.ale)
    print(f"   Identical ALE across engines: {identical}")

    print("\n" + "=" * 70)
    print("SIMULATION COMPLETE")
    print("=" * 70)


if __name__ == "__main__":
    main()
