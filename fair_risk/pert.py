"""Modified-PERT distribution for expert three-point estimates.

The modified PERT is a Beta distribution rescaled onto [minimum, maximum]
with its mode at the most likely value. The shape parameter (often called
lambda or confidence) controls how strongly draws concentrate around the
mode; the classic PERT uses 4.
"""

from typing import Optional, Tuple
import numpy as np
from scipy import stats

from .exceptions import InvalidParameterError

# Relative tolerance (fraction of the range) for treating mean == likely
MEAN_TOLERANCE = 1e-12


def is_integer(value) -> bool:
    """True for Python or numpy integers, excluding bool."""
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def validate_pert_inputs(minimum: float, likely: float, maximum: float,
                         shape: float) -> None:
    """Check three-point bounds and shape, raising InvalidParameterError."""
    for name, value in (("minimum", minimum), ("likely", likely),
                        ("maximum", maximum), ("shape", shape)):
        if not np.isfinite(value):
            raise InvalidParameterError(f"{name} must be finite, got {value}")
    if minimum > likely:
        raise InvalidParameterError(
            f"minimum must not exceed likely, got {minimum} > {likely}"
        )
    if likely > maximum:
        raise InvalidParameterError(
            f"likely must not exceed maximum, got {likely} > {maximum}"
        )
    if shape <= 0:
        raise InvalidParameterError(f"shape must be positive, got {shape}")


def pert_mean(minimum: float, likely: float, maximum: float, shape: float) -> float:
    """Mean of the modified-PERT distribution."""
    return (minimum + shape * likely + maximum) / (shape + 2)


def pert_parameters(minimum: float, likely: float, maximum: float,
                    shape: float) -> Tuple[float, float]:
    """Derive the Beta shape parameters (alpha, beta) of a modified PERT.

    Args:
        minimum: Lower bound (must be strictly below maximum)
        likely: Mode
        maximum: Upper bound
        shape: Confidence/shape parameter (> 0)

    Returns:
        Tuple of (alpha, beta)
    """
    validate_pert_inputs(minimum, likely, maximum, shape)
    if minimum == maximum:
        raise InvalidParameterError(
            "Beta parameters are undefined for a zero-width range"
        )

    mean = pert_mean(minimum, likely, maximum, shape)
    width = maximum - minimum

    if abs(mean - likely) <= MEAN_TOLERANCE * width:
        alpha = shape / 2 + 1
    else:
        alpha = ((mean - minimum) * (2 * likely - minimum - maximum)) / (
            (likely - mean) * width)
    beta = alpha * (maximum - mean) / (mean - minimum)
    return float(alpha), float(beta)


class PERTDistribution:
    """Modified-PERT distribution on [minimum, maximum] peaked at likely.

    A zero-width range (minimum == likely == maximum) is a valid degenerate
    distribution that always returns the single value.
    """

    def __init__(self, minimum: float, likely: float, maximum: float,
                 shape: float = 4.0):
        """Initialize the distribution.

        Args:
            minimum: Lowest plausible value
            likely: Most likely value
            maximum: Highest plausible value
            shape: Confidence/shape parameter (> 0)
        """
        validate_pert_inputs(minimum, likely, maximum, shape)

        self._minimum = float(minimum)
        self._likely = float(likely)
        self._maximum = float(maximum)
        self._shape = float(shape)

        if self._minimum == self._maximum:
            self._alpha = None
            self._beta = None
            self._frozen = None
        else:
            self._alpha, self._beta = pert_parameters(minimum, likely, maximum, shape)
            self._frozen = stats.beta(self._alpha, self._beta, loc=self._minimum,
                                      scale=self._maximum - self._minimum)

    @property
    def alpha(self) -> Optional[float]:
        """Beta alpha parameter (None when degenerate)."""
        return self._alpha

    @property
    def beta(self) -> Optional[float]:
        """Beta beta parameter (None when degenerate)."""
        return self._beta

    @property
    def is_degenerate(self) -> bool:
        return self._frozen is None

    def sample(self, n_samples: int,
               rng: Optional[np.random.Generator] = None) -> np.ndarray:
        """Draw independent samples.

        Args:
            n_samples: Number of samples to draw (>= 0)
            rng: Random generator to draw from; a fresh unseeded one if None

        Returns:
            Array of shape (n_samples,)
        """
        if not is_integer(n_samples) or n_samples < 0:
            raise InvalidParameterError(
                f"Sample count must be a non-negative integer, got {n_samples}"
            )

        if self.is_degenerate:
            return np.full(n_samples, self._minimum)

        if rng is None:
            rng = np.random.default_rng()

        variates = rng.beta(self._alpha, self._beta, size=n_samples)
        return self._minimum + variates * (self._maximum - self._minimum)

    def mean(self) -> float:
        return pert_mean(self._minimum, self._likely, self._maximum, self._shape)

    def std(self) -> float:
        if self.is_degenerate:
            return 0.0
        return float(self._frozen.std())

    def percentile(self, percentile: float) -> float:
        """Get the value at a percentile of the distribution.

        Args:
            percentile: Percentile between 0 and 1, the same scale as
                compute_metrics

        Returns:
            Value at the given percentile
        """
        if not np.isfinite(percentile) or not 0 <= percentile <= 1:
            raise InvalidParameterError(
                f"Percentile must be between 0 and 1, got {percentile}"
            )
        if self.is_degenerate:
            return self._minimum
        return float(self._frozen.ppf(percentile))

    def __repr__(self) -> str:
        return (f"PERTDistribution(minimum={self._minimum:g}, likely={self._likely:g}, "
                f"maximum={self._maximum:g}, shape={self._shape:g})")


def sample_pert(count: int, minimum: float, likely: float, maximum: float,
                shape: float = 4.0,
                rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Draw `count` independent modified-PERT deviates.

    All parameters are validated before the generator is touched, so an
    invalid call consumes no randomness.

    Args:
        count: Number of draws (>= 0)
        minimum: Lower bound
        likely: Mode
        maximum: Upper bound
        shape: Confidence/shape parameter (> 0)
        rng: Random generator; a fresh unseeded one if None

    Returns:
        Array of shape (count,) with values in [minimum, maximum]
    """
    if not is_integer(count) or count < 0:
        raise InvalidParameterError(
            f"Sample count must be a non-negative integer, got {count}"
        )
    return PERTDistribution(minimum, likely, maximum, shape).sample(count, rng=rng)
