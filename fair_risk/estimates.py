"""Expert estimates and run configuration for FAIR simulations."""

from dataclasses import dataclass
from typing import Dict, Optional
import numpy as np

from .exceptions import InvalidParameterError
from .pert import PERTDistribution, is_integer, pert_mean

DEFAULT_CONFIDENCE_SHAPE = 4.0


@dataclass(frozen=True)
class RiskEstimate:
    """Three-point subject-matter-expert estimate of an uncertain quantity.

    Used once for loss event frequency (events per year) and once for loss
    magnitude (currency units per event).

    Attributes:
        minimum: Lowest plausible value
        likely: Most likely value (the PERT mode)
        maximum: Highest plausible value
    """
    minimum: float
    likely: float
    maximum: float

    def __post_init__(self):
        for name in ("minimum", "likely", "maximum"):
            value = getattr(self, name)
            if not np.isfinite(value):
                raise InvalidParameterError(f"{name} must be finite, got {value}")
        if self.minimum > self.likely:
            raise InvalidParameterError(
                f"minimum must not exceed likely, got {self.minimum} > {self.likely}"
            )
        if self.likely > self.maximum:
            raise InvalidParameterError(
                f"likely must not exceed maximum, got {self.likely} > {self.maximum}"
            )

    @property
    def is_degenerate(self) -> bool:
        """True when all three points coincide."""
        return self.minimum == self.maximum

    def mean(self, shape: float = DEFAULT_CONFIDENCE_SHAPE) -> float:
        """Mean of the modified-PERT distribution built from this estimate."""
        return pert_mean(self.minimum, self.likely, self.maximum, shape)

    def to_distribution(self, shape: float = DEFAULT_CONFIDENCE_SHAPE) -> PERTDistribution:
        """Build the modified-PERT distribution for this estimate."""
        return PERTDistribution(self.minimum, self.likely, self.maximum, shape)


@dataclass(frozen=True)
class SimulationConfig:
    """Settings governing one simulation run.

    Attributes:
        confidence_shape: PERT shape parameter; larger values concentrate
            draws around the most likely value
        run_count: Number of simulated years
        random_seed: Seed for the run's random generator (None = fresh entropy)
        block_size: Number of consecutive years sharing one random sub-stream
            during loss compounding
    """
    confidence_shape: float = DEFAULT_CONFIDENCE_SHAPE
    run_count: int = 10_000
    random_seed: Optional[int] = None
    block_size: int = 1_000

    def __post_init__(self):
        if not np.isfinite(self.confidence_shape) or self.confidence_shape <= 0:
            raise InvalidParameterError(
                f"confidence_shape must be positive, got {self.confidence_shape}"
            )
        if not is_integer(self.run_count) or self.run_count <= 0:
            raise InvalidParameterError(
                f"run_count must be a positive integer, got {self.run_count}"
            )
        if not is_integer(self.block_size) or self.block_size <= 0:
            raise InvalidParameterError(
                f"block_size must be a positive integer, got {self.block_size}"
            )
        if self.random_seed is not None and (
                not is_integer(self.random_seed) or self.random_seed < 0):
            raise InvalidParameterError(
                f"random_seed must be a non-negative integer, got {self.random_seed}"
            )

    @property
    def num_blocks(self) -> int:
        """Number of compounding blocks covering run_count years."""
        return -(-self.run_count // self.block_size)

    def make_rng(self) -> np.random.Generator:
        """Create the run-scoped random generator."""
        return np.random.default_rng(self.random_seed)

    def to_metadata(self) -> Dict[str, object]:
        """Serialise into a plain dictionary."""
        return {
            "confidence_shape": float(self.confidence_shape),
            "run_count": int(self.run_count),
            "random_seed": None if self.random_seed is None else int(self.random_seed),
            "block_size": int(self.block_size),
        }

    @classmethod
    def from_metadata(cls, metadata: Dict[str, object]) -> "SimulationConfig":
        """Rebuild a config from to_metadata output; missing keys take defaults."""
        defaults = cls.__dataclass_fields__
        seed = metadata.get("random_seed", defaults["random_seed"].default)
        return cls(
            confidence_shape=float(metadata.get(
                "confidence_shape", defaults["confidence_shape"].default)),
            run_count=int(metadata.get("run_count", defaults["run_count"].default)),
            random_seed=None if seed is None else int(seed),
            block_size=int(metadata.get("block_size", defaults["block_size"].default)),
        )
