"""Tests for risk_metrics.py - VaR, exceedance curves and reports."""

import dataclasses

import pytest
import numpy as np
import pandas as pd

from fair_risk import (
    ExceedanceCurve,
    InvalidParameterError,
    RiskMetrics,
    compute_exceedance_curve,
    compute_metrics,
    create_metrics_report,
    create_percentile_table,
    exceedance_probability,
)


class TestComputeMetrics:
    """Tests for compute_metrics function."""

    def test_known_sample(self):
        """Test metrics on a small hand-checked sample."""
        metrics = compute_metrics(np.array([1.0, 2.0, 3.0, 4.0, 5.0]), 0.975)
        assert isinstance(metrics, RiskMetrics)
        assert metrics.minimum == 1.0
        assert metrics.maximum == 5.0
        assert metrics.mean == 3.0
        assert metrics.std == pytest.approx(np.sqrt(2.0))
        assert metrics.value_at_risk == pytest.approx(4.9)
        assert metrics.expected_shortfall == pytest.approx(5.0)
        assert metrics.percentile == 0.975

    def test_value_at_risk_p_alias(self, loss_sample):
        """Test that value_at_risk_p reports the same loss as value_at_risk."""
        metrics = compute_metrics(loss_sample, 0.9)
        assert metrics.value_at_risk_p == metrics.value_at_risk

    def test_immutable(self, loss_sample):
        """Test that metrics cannot be reassigned after construction."""
        metrics = compute_metrics(loss_sample)
        with pytest.raises(dataclasses.FrozenInstanceError):
            metrics.value_at_risk = 0.0

    def test_median(self):
        """Test linear interpolation between order statistics."""
        metrics = compute_metrics([10.0, 20.0, 30.0, 40.0], 0.5)
        assert metrics.value_at_risk == pytest.approx(25.0)

    def test_extreme_percentiles(self, loss_sample):
        """Test that 0 and 1 give the sample extremes exactly."""
        assert compute_metrics(loss_sample, 0.0).value_at_risk == np.min(loss_sample)
        assert compute_metrics(loss_sample, 1.0).value_at_risk == np.max(loss_sample)

    @pytest.mark.parametrize("percentile", [0.05, 0.5, 0.9, 0.975, 0.99])
    def test_matches_numpy_percentile(self, loss_sample, percentile):
        """Test agreement with the conventional linear percentile."""
        expected = np.percentile(loss_sample, percentile * 100)
        assert compute_metrics(loss_sample, percentile).value_at_risk == pytest.approx(expected)

    def test_var_above_mean_for_skewed_sample(self, loss_sample):
        """Test that the upper tail sits above the mean."""
        metrics = compute_metrics(loss_sample, 0.975)
        assert metrics.value_at_risk > metrics.mean
        assert metrics.expected_shortfall >= metrics.value_at_risk

    def test_all_zero_sample(self):
        """Test that an all-zero sample gives finite zero metrics."""
        metrics = compute_metrics(np.zeros(100), 0.975)
        assert metrics.value_at_risk == 0.0
        assert metrics.expected_shortfall == 0.0
        assert metrics.std == 0.0

    @pytest.mark.parametrize("percentile", [-0.1, 1.1, np.nan])
    def test_invalid_percentile(self, loss_sample, percentile):
        """Test that percentiles outside [0, 1] raise errors."""
        with pytest.raises(InvalidParameterError, match="between 0 and 1"):
            compute_metrics(loss_sample, percentile)

    def test_empty_sample(self):
        """Test that an empty sample raises an error."""
        with pytest.raises(InvalidParameterError, match="empty"):
            compute_metrics(np.array([]), 0.5)

    def test_two_dimensional_sample(self):
        """Test that matrices are rejected."""
        with pytest.raises(InvalidParameterError, match="one-dimensional"):
            compute_metrics(np.ones((2, 2)), 0.5)


class TestExceedanceCurve:
    """Tests for compute_exceedance_curve function."""

    def test_sorted_losses(self, loss_sample):
        """Test that losses are sorted ascending."""
        curve = compute_exceedance_curve(loss_sample)
        assert isinstance(curve, ExceedanceCurve)
        assert len(curve) == len(loss_sample)
        assert np.all(np.diff(curve.losses) >= 0)
        assert np.array_equal(curve.losses, np.sort(loss_sample))

    def test_probabilities_non_increasing(self, loss_sample):
        """Test that exceedance probability falls as loss rises."""
        curve = compute_exceedance_curve(loss_sample)
        assert np.all(np.diff(curve.probabilities) <= 0)

    def test_curve_endpoints(self, loss_sample):
        """Test the endpoints for a sample with unique extremes."""
        n = len(loss_sample)
        curve = compute_exceedance_curve(loss_sample)
        assert curve.probabilities[0] == pytest.approx(1 - 1 / n)
        assert curve.probabilities[-1] == pytest.approx(0.0)

    def test_ties_use_average_rank(self):
        """Test that tied losses share the average percent rank."""
        curve = compute_exceedance_curve(np.array([3.0, 1.0, 3.0, 2.0]))
        assert np.array_equal(curve.losses, [1.0, 2.0, 3.0, 3.0])
        assert np.allclose(curve.probabilities, [0.75, 0.5, 0.125, 0.125])

    def test_constant_sample(self):
        """Test a sample of identical losses."""
        curve = compute_exceedance_curve(np.full(4, 5.0))
        assert np.allclose(curve.probabilities, 0.375)

    def test_matches_pandas_percent_rank(self, loss_sample):
        """Test agreement with 1 - pandas percent rank."""
        curve = compute_exceedance_curve(loss_sample)
        expected = 1 - pd.Series(np.sort(loss_sample)).rank(pct=True).to_numpy()
        assert np.allclose(curve.probabilities, expected)

    def test_input_not_modified(self, loss_sample):
        """Test that the input sample is left untouched."""
        original = loss_sample.copy()
        compute_exceedance_curve(loss_sample)
        assert np.array_equal(loss_sample, original)

    def test_read_only(self, loss_sample):
        """Test that curve arrays cannot be modified."""
        curve = compute_exceedance_curve(loss_sample)
        with pytest.raises(ValueError):
            curve.losses[0] = 0.0
        with pytest.raises(ValueError):
            curve.probabilities[0] = 0.0
        with pytest.raises(dataclasses.FrozenInstanceError):
            curve.losses = np.zeros(3)

    def test_to_frame(self, loss_sample):
        """Test DataFrame conversion."""
        frame = compute_exceedance_curve(loss_sample).to_frame()
        assert isinstance(frame, pd.DataFrame)
        assert list(frame.columns) == ['Loss', 'Probability_of_Exceedance']
        assert len(frame) == len(loss_sample)

    def test_from_simulation(self, simulation_result):
        """Test the curve of a simulated ALE sample."""
        curve = simulation_result.exceedance_curve()
        assert curve.losses[0] == np.min(simulation_result.ale)
        assert curve.losses[-1] == np.max(simulation_result.ale)
        assert np.all(np.diff(curve.probabilities) <= 0)


class TestExceedanceProbability:
    """Tests for exceedance_probability function."""

    def test_threshold(self):
        """Test the fraction of years strictly above a threshold."""
        losses = np.array([0.0, 0.0, 10.0, 20.0])
        assert exceedance_probability(losses, 5.0) == 0.5
        assert exceedance_probability(losses, 20.0) == 0.0
        assert exceedance_probability(losses, -1.0) == 1.0

    def test_empty_sample(self):
        """Test that an empty sample raises an error."""
        with pytest.raises(InvalidParameterError):
            exceedance_probability([], 1.0)


class TestReports:
    """Tests for DataFrame report builders."""

    def test_percentile_table(self, loss_sample):
        """Test the percentile table values."""
        table = create_percentile_table(loss_sample, percentiles=[0.5, 0.9, 0.975])
        assert list(table.columns) == ['Percentile', 'Loss', 'Probability_of_Exceedance']
        assert len(table) == 3
        assert np.allclose(table['Loss'], np.quantile(loss_sample, [0.5, 0.9, 0.975]))
        assert np.allclose(table['Probability_of_Exceedance'], [0.5, 0.1, 0.025])

    def test_percentile_table_default(self, loss_sample):
        """Test default percentiles produce increasing losses."""
        table = create_percentile_table(loss_sample)
        assert np.all(np.diff(table['Loss']) >= 0)

    def test_percentile_table_validation(self, loss_sample):
        """Test that invalid percentiles raise errors."""
        with pytest.raises(InvalidParameterError):
            create_percentile_table(loss_sample, percentiles=[0.5, 2.0])

    def test_metrics_report(self, simulation_result):
        """Test comparing crude and compounded ALE."""
        report = create_metrics_report(
            {'Crude_ALE': simulation_result.crude_ale, 'ALE': simulation_result.ale},
            percentile=0.975,
        )
        assert list(report['Sample']) == ['Crude_ALE', 'ALE']
        ale_row = report[report['Sample'] == 'ALE'].iloc[0]
        assert ale_row['Mean'] == pytest.approx(simulation_result.expected_loss)
        assert ale_row['VaR'] == pytest.approx(simulation_result.get_var(0.975))
        assert ale_row['Percentile'] == 0.975
