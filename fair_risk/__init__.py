"""FAIR (Factor Analysis of Information Risk) Monte Carlo risk model.

This package turns expert three-point estimates of loss event frequency and
loss magnitude into a simulated distribution of annual loss exposure.

Main components:
- pert: Modified-PERT sampler for three-point estimates
- estimates: RiskEstimate and SimulationConfig inputs
- simulation: Frequency simulation, loss compounding and engines
- risk_metrics: Value at Risk, exceedance curves and reports
"""

from .exceptions import InvalidParameterError
from .pert import PERTDistribution, pert_parameters, sample_pert
from .estimates import RiskEstimate, SimulationConfig
from .simulation import (
    FAIRSimulationEngine,
    ParallelFAIRSimulationEngine,
    SimulationResult,
    compound_losses,
    simulate_frequency,
)
from .risk_metrics import (
    ExceedanceCurve,
    RiskMetrics,
    compute_exceedance_curve,
    compute_metrics,
    create_metrics_report,
    create_percentile_table,
    exceedance_probability,
)

__version__ = "1.0.0"

__all__ = [
    # Errors
    "InvalidParameterError",
    # Sampler
    "PERTDistribution",
    "pert_parameters",
    "sample_pert",
    # Inputs
    "RiskEstimate",
    "SimulationConfig",
    # Simulation
    "FAIRSimulationEngine",
    "ParallelFAIRSimulationEngine",
    "SimulationResult",
    "compound_losses",
    "simulate_frequency",
    # Risk metrics
    "ExceedanceCurve",
    "RiskMetrics",
    "compute_exceedance_curve",
    "compute_metrics",
    "create_metrics_report",
    "create_percentile_table",
    "exceedance_probability",
]
