"""Monte Carlo simulation engine for FAIR annual loss exposure."""

from typing import List, Optional, Tuple
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
import logging
import numpy as np

from .estimates import RiskEstimate, SimulationConfig
from .exceptions import InvalidParameterError
from .pert import is_integer, sample_pert, validate_pert_inputs
from .risk_metrics import (
    ExceedanceCurve,
    RiskMetrics,
    compute_exceedance_curve,
    compute_metrics,
)

LOGGER = logging.getLogger(__name__)


def _read_only(values: np.ndarray) -> np.ndarray:
    values.flags.writeable = False
    return values


@dataclass(frozen=True)
class SimulationResult:
    """Results from a FAIR Monte Carlo run.

    Attributes:
        frequency: Simulated loss event frequency per year
        crude_ale: Frequency times a single magnitude draw, per year
        ale: Sum of floor(frequency) magnitude draws, per year
        num_runs: Number of simulated years
        config: Configuration the run used
    """
    frequency: np.ndarray
    crude_ale: np.ndarray
    ale: np.ndarray
    num_runs: int
    config: SimulationConfig

    @property
    def expected_loss(self) -> float:
        """Average compounded annual loss."""
        return float(np.mean(self.ale))

    @property
    def crude_expected_loss(self) -> float:
        """Average crude annual loss."""
        return float(np.mean(self.crude_ale))

    @property
    def loss_std(self) -> float:
        """Standard deviation of compounded annual losses."""
        return float(np.std(self.ale))

    @property
    def loss_year_probability(self) -> float:
        """Fraction of simulated years with any loss."""
        return float(np.mean(self.ale > 0))

    def get_var(self, confidence: float = 0.975) -> float:
        """Value at Risk of the compounded ALE at the given confidence level."""
        return self.metrics(confidence).value_at_risk

    def get_expected_shortfall(self, confidence: float = 0.975) -> float:
        """Expected Shortfall (CVaR) of the compounded ALE."""
        return self.metrics(confidence).expected_shortfall

    def metrics(self, percentile: float = 0.975) -> RiskMetrics:
        return compute_metrics(self.ale, percentile)

    def exceedance_curve(self) -> ExceedanceCurve:
        return compute_exceedance_curve(self.ale)


def simulate_frequency(config: SimulationConfig, frequency_estimate: RiskEstimate,
                       rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Draw one loss event frequency per simulated year.

    To compound the result with compound_losses, pass the same generator to
    both calls, or use FAIRSimulationEngine. Letting each call build its own
    generator from config.random_seed reuses one seeded stream for both stages.

    Args:
        config: Run configuration (run_count and confidence_shape are used)
        frequency_estimate: Events-per-year three-point estimate
        rng: Run-scoped random generator; config.make_rng() if None

    Returns:
        Read-only array of shape (config.run_count,)
    """
    if rng is None:
        rng = config.make_rng()

    frequency = sample_pert(
        config.run_count,
        frequency_estimate.minimum,
        frequency_estimate.likely,
        frequency_estimate.maximum,
        config.confidence_shape,
        rng=rng,
    )
    return _read_only(frequency)


def _compound_block(args: Tuple) -> Tuple[np.ndarray, np.ndarray]:
    """Worker function compounding one block of years.

    Args:
        args: Tuple of (frequencies, magnitude_estimate, shape, seed_sequence)

    Returns:
        Tuple of (crude_ale, ale) for this block
    """
    frequencies, magnitude, shape, seed_sequence = args
    rng = np.random.default_rng(seed_sequence)
    num_years = len(frequencies)

    single_draws = sample_pert(num_years, magnitude.minimum, magnitude.likely,
                               magnitude.maximum, shape, rng=rng)
    crude_ale = frequencies * single_draws

    event_counts = np.floor(np.clip(frequencies, 0.0, None)).astype(np.int64)
    event_losses = sample_pert(int(event_counts.sum()), magnitude.minimum,
                               magnitude.likely, magnitude.maximum, shape, rng=rng)

    year_index = np.repeat(np.arange(num_years), event_counts)
    ale = np.bincount(year_index, weights=event_losses, minlength=num_years)

    LOGGER.debug("Compounded %d years with %d loss events", num_years, len(event_losses))
    return crude_ale, ale


def _check_num_workers(num_workers) -> None:
    if not is_integer(num_workers) or num_workers < 1:
        raise InvalidParameterError(
            f"num_workers must be an integer of at least 1, got {num_workers}"
        )


def _spawn_block_seeds(rng: np.random.Generator, num_blocks: int) -> List[np.random.SeedSequence]:
    """Partition the run generator into one independent sub-stream per block."""
    entropy = [int(word) for word in rng.integers(0, 2**32, size=4, dtype=np.uint64)]
    return np.random.SeedSequence(entropy).spawn(num_blocks)


def compound_losses(frequency_sample: np.ndarray, magnitude_estimate: RiskEstimate,
                    config: SimulationConfig,
                    rng: Optional[np.random.Generator] = None,
                    num_workers: int = 1) -> Tuple[np.ndarray, np.ndarray]:
    """Turn per-year event frequencies into annual loss exposure.

    Years are processed in blocks of config.block_size, each with its own
    sub-stream spawned from rng, so the output depends only on the generator
    state and block size, never on num_workers.

    Pass the generator that drew frequency_sample so both stages share one
    stream; FAIRSimulationEngine does this.

    Args:
        frequency_sample: Simulated events per year, one per year
        magnitude_estimate: Per-event loss three-point estimate
        config: Run configuration
        rng: Run-scoped random generator; config.make_rng() if None
        num_workers: Number of worker processes (1 = run inline)

    Returns:
        Tuple of read-only (crude_ale, ale) arrays, same length as frequency_sample
    """
    frequency = np.asarray(frequency_sample, dtype=float)
    if frequency.ndim != 1:
        raise InvalidParameterError(
            f"Frequency sample must be one-dimensional, got shape {frequency.shape}"
        )
    if not np.all(np.isfinite(frequency)):
        raise InvalidParameterError("Frequency sample contains non-finite values")
    validate_pert_inputs(magnitude_estimate.minimum, magnitude_estimate.likely,
                         magnitude_estimate.maximum, config.confidence_shape)
    _check_num_workers(num_workers)

    num_years = len(frequency)
    if num_years == 0:
        return _read_only(np.zeros(0)), _read_only(np.zeros(0))

    if rng is None:
        rng = config.make_rng()

    block_size = config.block_size
    starts = range(0, num_years, block_size)
    seeds = _spawn_block_seeds(rng, len(starts))
    blocks = [
        (frequency[start:start + block_size], magnitude_estimate,
         config.confidence_shape, seed)
        for start, seed in zip(starts, seeds)
    ]

    if num_workers == 1 or len(blocks) == 1:
        results = [_compound_block(block) for block in blocks]
    else:
        LOGGER.debug("Distributing %d blocks over %d workers", len(blocks), num_workers)
        with ProcessPoolExecutor(max_workers=int(num_workers)) as executor:
            results = list(executor.map(_compound_block, blocks))

    crude_ale = np.concatenate([r[0] for r in results])
    ale = np.concatenate([r[1] for r in results])
    return _read_only(crude_ale), _read_only(ale)


class FAIRSimulationEngine:
    """Monte Carlo engine for FAIR annual loss exposure.

    Draws a frequency per simulated year, then compounds per-event magnitude
    draws into one ALE per year.
    """

    def __init__(self, config: SimulationConfig):
        """Initialize the simulation engine.

        Args:
            config: Run configuration, including the random seed
        """
        self.config = config
        self.random_state = config.random_seed
        self._rng = config.make_rng()

    @property
    def num_workers(self) -> int:
        return 1

    def simulate(self, frequency_estimate: RiskEstimate,
                 magnitude_estimate: RiskEstimate) -> SimulationResult:
        """Run the full frequency-then-severity simulation.

        Args:
            frequency_estimate: Loss events per year
            magnitude_estimate: Loss per event

        Returns:
            SimulationResult with frequency, crude ALE and compounded ALE
        """
        validate_pert_inputs(magnitude_estimate.minimum, magnitude_estimate.likely,
                             magnitude_estimate.maximum, self.config.confidence_shape)

        LOGGER.info(
            "Simulating %d years (shape=%g, seed=%s, workers=%d)",
            self.config.run_count, self.config.confidence_shape,
            self.random_state, self.num_workers,
        )

        frequency = simulate_frequency(self.config, frequency_estimate, rng=self._rng)
        crude_ale, ale = compound_losses(
            frequency, magnitude_estimate, self.config,
            rng=self._rng, num_workers=self.num_workers,
        )

        result = SimulationResult(
            frequency=frequency,
            crude_ale=crude_ale,
            ale=ale,
            num_runs=self.config.run_count,
            config=self.config,
        )
        LOGGER.info("Simulation complete: mean ALE %.2f, mean crude ALE %.2f",
                    result.expected_loss, result.crude_expected_loss)
        return result


class ParallelFAIRSimulationEngine(FAIRSimulationEngine):
    """FAIR engine that compounds blocks of years across worker processes.

    Produces output identical to FAIRSimulationEngine for the same config.
    """

    def __init__(self, config: SimulationConfig, num_workers: Optional[int] = None):
        """Initialize parallel engine.

        Args:
            config: Run configuration
            num_workers: Number of parallel workers (None = CPU count)
        """
        super().__init__(config)
        if num_workers is not None:
            _check_num_workers(num_workers)
        self._num_workers = num_workers

    @property
    def num_workers(self) -> int:
        if self._num_workers is not None:
            return int(self._num_workers)
        from multiprocessing import cpu_count
        return cpu_count()
