"""Pytest fixtures for FAIR risk model tests."""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fair_risk import (
    RiskEstimate,
    SimulationConfig,
    FAIRSimulationEngine,
)


@pytest.fixture
def frequency_estimate():
    """Loss events per year: between 2 and 9, most likely 4."""
    return RiskEstimate(minimum=2, likely=4, maximum=9)


@pytest.fixture
def magnitude_estimate():
    """Loss per event: between 1,000 and 9,000, most likely 4,000."""
    return RiskEstimate(minimum=1_000, likely=4_000, maximum=9_000)


@pytest.fixture
def seeded_config():
    """Standard 10,000-year configuration with a fixed seed."""
    return SimulationConfig(confidence_shape=4, run_count=10_000, random_seed=42)


@pytest.fixture
def small_config():
    """Small configuration spanning several compounding blocks."""
    return SimulationConfig(confidence_shape=4, run_count=2_000, random_seed=7,
                            block_size=250)


@pytest.fixture
def simulation_result(seeded_config, frequency_estimate, magnitude_estimate):
    """Result of a full seeded simulation."""
    engine = FAIRSimulationEngine(seeded_config)
    return engine.simulate(frequency_estimate, magnitude_estimate)


@pytest.fixture
def loss_sample():
    """Continuous sample of annual losses with unique values."""
    rng = np.random.default_rng(123)
    return rng.lognormal(mean=9.5, sigma=0.8, size=5_000)
