"""Risk metrics and loss exceedance curves over simulated annual losses.

Conventions:
    Value at Risk uses linear interpolation between order statistics
    (numpy.quantile's default "linear" method, Hyndman & Fan type 7), so the
    0th percentile is the sample minimum and the 100th the sample maximum.

    Exceedance probability of a loss is 1 - percent_rank(loss), where the
    percent rank gives tied values their average rank divided by the sample
    size (pandas rank(method="average", pct=True)).
"""

from typing import Dict, Sequence
from dataclasses import dataclass
import numpy as np
import pandas as pd

from .exceptions import InvalidParameterError

DEFAULT_PERCENTILES = (0.5, 0.75, 0.9, 0.95, 0.975, 0.99)


@dataclass(frozen=True)
class RiskMetrics:
    """Summary statistics of an annual loss sample.

    Attributes:
        minimum: Smallest simulated annual loss
        maximum: Largest simulated annual loss
        mean: Average annual loss
        std: Standard deviation of annual loss
        value_at_risk: Loss at the requested percentile (value_at_risk_p in
            FAIR reporting terms; also available under that name)
        expected_shortfall: Mean loss at or above value_at_risk
        percentile: Percentile used for value_at_risk, in [0, 1]
    """
    minimum: float
    maximum: float
    mean: float
    std: float
    value_at_risk: float
    expected_shortfall: float
    percentile: float

    @property
    def value_at_risk_p(self) -> float:
        return self.value_at_risk


@dataclass(frozen=True)
class ExceedanceCurve:
    """Empirical loss exceedance curve.

    Attributes:
        losses: Annual losses sorted ascending (stable)
        probabilities: Probability of exceeding each loss, non-increasing
    """
    losses: np.ndarray
    probabilities: np.ndarray

    def __len__(self) -> int:
        return len(self.losses)

    def to_frame(self) -> pd.DataFrame:
        """Return the curve as a two-column DataFrame."""
        return pd.DataFrame({
            'Loss': self.losses,
            'Probability_of_Exceedance': self.probabilities,
        })


def _as_sample(ale_sample) -> np.ndarray:
    sample = np.asarray(ale_sample, dtype=float)
    if sample.ndim != 1:
        raise InvalidParameterError(
            f"Loss sample must be one-dimensional, got shape {sample.shape}"
        )
    if len(sample) == 0:
        raise InvalidParameterError("Loss sample must not be empty")
    if not np.all(np.isfinite(sample)):
        raise InvalidParameterError("Loss sample contains non-finite values")
    return sample


def _check_percentile(percentile: float) -> None:
    if not np.isfinite(percentile) or not 0 <= percentile <= 1:
        raise InvalidParameterError(
            f"Percentile must be between 0 and 1, got {percentile}"
        )


def compute_metrics(ale_sample: np.ndarray, percentile: float = 0.975) -> RiskMetrics:
    """Calculate summary risk metrics for an annual loss sample.

    Args:
        ale_sample: Simulated annual losses
        percentile: Percentile for Value at Risk, between 0 and 1

    Returns:
        RiskMetrics for the sample
    """
    _check_percentile(percentile)
    sample = _as_sample(ale_sample)

    var = float(np.quantile(sample, percentile, method="linear"))
    tail_losses = sample[sample >= var]
    expected_shortfall = float(np.mean(tail_losses)) if len(tail_losses) > 0 else var

    return RiskMetrics(
        minimum=float(np.min(sample)),
        maximum=float(np.max(sample)),
        mean=float(np.mean(sample)),
        std=float(np.std(sample)),
        value_at_risk=var,
        expected_shortfall=expected_shortfall,
        percentile=float(percentile),
    )


def compute_exceedance_curve(ale_sample: np.ndarray) -> ExceedanceCurve:
    """Build the empirical loss exceedance curve of an annual loss sample.

    Args:
        ale_sample: Simulated annual losses

    Returns:
        ExceedanceCurve with ascending losses and their exceedance probabilities
    """
    sample = _as_sample(ale_sample)

    losses = sample[np.argsort(sample, kind="stable")]
    percent_rank = pd.Series(losses).rank(method="average", pct=True).to_numpy()
    probabilities = 1.0 - percent_rank

    losses.flags.writeable = False
    probabilities.flags.writeable = False
    return ExceedanceCurve(losses=losses, probabilities=probabilities)


def exceedance_probability(ale_sample: np.ndarray, threshold: float) -> float:
    """Fraction of simulated years whose loss is strictly above threshold."""
    sample = _as_sample(ale_sample)
    return float(np.mean(sample > threshold))


def create_percentile_table(ale_sample: np.ndarray,
                            percentiles: Sequence[float] = DEFAULT_PERCENTILES) -> pd.DataFrame:
    """Create a DataFrame of losses at several percentiles.

    Args:
        ale_sample: Simulated annual losses
        percentiles: Percentiles between 0 and 1

    Returns:
        DataFrame with Percentile, Loss and Probability_of_Exceedance columns
    """
    for p in percentiles:
        _check_percentile(p)
    sample = _as_sample(ale_sample)

    losses = np.quantile(sample, list(percentiles), method="linear")
    return pd.DataFrame({
        'Percentile': list(percentiles),
        'Loss': losses,
        'Probability_of_Exceedance': [1.0 - p for p in percentiles],
    })


def create_metrics_report(samples: Dict[str, np.ndarray],
                          percentile: float = 0.975) -> pd.DataFrame:
    """Create a DataFrame comparing risk metrics of named loss samples.

    Args:
        samples: Mapping of sample name (e.g. 'Crude_ALE', 'ALE') to losses
        percentile: Percentile for Value at Risk

    Returns:
        DataFrame with one row per sample, in mapping order
    """
    data = []
    for name, sample in samples.items():
        metrics = compute_metrics(sample, percentile)
        data.append({
            'Sample': name,
            'Min': metrics.minimum,
            'Mean': metrics.mean,
            'Std': metrics.std,
            'VaR': metrics.value_at_risk,
            'ES': metrics.expected_shortfall,
            'Max': metrics.maximum,
            'Percentile': metrics.percentile,
        })

    return pd.DataFrame(data)
