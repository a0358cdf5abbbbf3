"""Unit tests for the SampleAggregator module."""

from decimal import Decimal
import math

import numpy as np
import pytest

from src.scaling.aggregator import (
    AggregationResult,
    EMPTY_AGGREGATION,
    SampleAggregator,
)
from src.scaling.config import RescalerConfig


class TestAggregationResult:
    """Tests for AggregationResult dataclass."""

    def test_default_values(self):
        """Test the empty result."""
        result = AggregationResult()

        assert result.total_active == 0.0
        assert result.total_waiting == 0.0
        assert result.force_spin_up is False
        assert result.num_samples == 0
        assert result.skipped == 0

    def test_merge(self):
        """Test merging two sub-batch results."""
        first = AggregationResult(1.5, 0.04, False, 2, 1)
        second = AggregationResult(0.5, 0.02, True, 1, 0)

        merged = first.merge(second)

        assert merged.total_active == 2.0
        assert merged.total_waiting == pytest.approx(0.06)
        assert merged.force_spin_up is True
        assert merged.num_samples == 3
        assert merged.skipped == 1

    def test_merge_with_empty_is_identity(self):
        """Test that the empty result is the identity of merge."""
        result = AggregationResult(3.0, 0.1, False, 5, 0)

        assert result.merge(EMPTY_AGGREGATION) == result
        assert EMPTY_AGGREGATION.merge(result) == result

    def test_str_representation(self):
        """Test string representation."""
        result = AggregationResult(1.0, 0.02, True, 1, 0)

        result_str = str(result)
        assert "force=True" in result_str
        assert "samples=1" in result_str


class TestSampleAggregator:
    """Tests for SampleAggregator class."""

    @pytest.fixture
    def aggregator(self):
        """Create aggregator with default config."""
        return SampleAggregator(RescalerConfig())

    def test_initialization_defaults(self):
        """Test default initialization."""
        aggregator = SampleAggregator()
        assert aggregator.config.min_overhead == 0.007
        assert aggregator.config.max_overhead == 0.020

    def test_empty_batch(self, aggregator):
        """Test that an empty batch yields zero totals."""
        result = aggregator.aggregate([])

        assert result.total_active == 0.0
        assert result.total_waiting == 0.0
        assert result.force_spin_up is False
        assert result.num_samples == 0

    def test_single_sample(self, aggregator):
        """Test active time is net of the minimum overhead."""
        result = aggregator.aggregate([1.0])

        assert result.total_active == pytest.approx(0.993)
        assert result.total_waiting == pytest.approx(0.020)
        assert result.num_samples == 1

    def test_short_sample_bounded_by_floor(self, aggregator):
        """Test that a call shorter than the overhead counts 1ms."""
        result = aggregator.aggregate([0.005])

        assert result.total_active == pytest.approx(0.001)
        assert result.force_spin_up is False

    def test_waiting_counts_every_sample(self, aggregator):
        """Test fixed caller overhead is added per sample regardless of duration."""
        result = aggregator.aggregate([0.01, 1.0, 30.0, 0.0])

        assert result.total_waiting == pytest.approx(4 * 0.020)

    def test_force_signal(self, aggregator):
        """Test that a near-zero sample sets the force flag."""
        result = aggregator.aggregate([0.00005])

        assert result.force_spin_up is True
        assert result.total_active == 0.0
        assert result.total_waiting == pytest.approx(0.020)

    def test_force_signal_is_sticky(self, aggregator):
        """Test one force sample among many regular ones is enough."""
        samples = [2.0] * 600 + [0.0] + [2.0] * 10

        result = aggregator.aggregate(samples)

        assert result.force_spin_up is True
        assert result.total_active == pytest.approx(610 * 1.993)
        assert result.num_samples == 611

    def test_threshold_sample_is_not_force(self, aggregator):
        """Test a sample exactly at the threshold counts as work."""
        result = aggregator.aggregate([1e-4])

        assert result.force_spin_up is False
        assert result.total_active == pytest.approx(0.001)

    def test_negative_sample_skipped(self, aggregator):
        """Test negative durations are rejected individually."""
        result = aggregator.aggregate([1.0, -0.5, 1.0])

        assert result.skipped == 1
        assert result.num_samples == 2
        assert result.total_active == pytest.approx(2 * 0.993)
        assert result.total_waiting == pytest.approx(2 * 0.020)

    def test_malformed_samples_skipped(self, aggregator):
        """Test non-numeric and non-finite samples are rejected."""
        samples = [1.0, "fast", None, math.nan, math.inf, True, 10**400, 0.5]

        result = aggregator.aggregate(samples)

        assert result.skipped == 6
        assert result.num_samples == 2
        assert result.total_active == pytest.approx(0.993 + 0.493)

    def test_integer_too_large_for_float_skipped(self, aggregator):
        """Test an integer that overflows a float is skipped, not raised."""
        result = aggregator.aggregate([1.0, 10**400])

        assert result.skipped == 1
        assert result.num_samples == 1
        assert result.total_active == pytest.approx(0.993)

    def test_decimal_samples(self, aggregator):
        """Test Decimal durations are accepted and special values skipped."""
        samples = [Decimal("1.0"), Decimal("0.5"), Decimal("NaN"), Decimal("sNaN"), Decimal("-1")]

        result = aggregator.aggregate(samples)

        assert result.num_samples == 2
        assert result.skipped == 3
        assert result.total_active == pytest.approx(0.993 + 0.493)

    def test_skipped_samples_logged(self, aggregator, caplog):
        """Test that skipped samples produce a warning."""
        with caplog.at_level("WARNING", logger="src.scaling.aggregator"):
            aggregator.aggregate([-1.0, -2.0])

        assert "Skipped 2 malformed" in caplog.text

    def test_accepts_numpy_values(self, aggregator):
        """Test numpy arrays and scalars are accepted."""
        result = aggregator.aggregate(np.array([1.0, 2.0], dtype=np.float32))

        assert result.num_samples == 2
        assert result.total_active == pytest.approx(0.993 + 1.993)

    def test_custom_overheads(self):
        """Test custom overhead configuration."""
        config = RescalerConfig(min_overhead=0.1, max_overhead=0.5)
        aggregator = SampleAggregator(config)

        result = aggregator.aggregate([1.0, 1.0])

        assert result.total_active == pytest.approx(1.8)
        assert result.total_waiting == pytest.approx(1.0)


class TestBatchedAggregation:
    """Splitting a batch never changes the totals."""

    @pytest.fixture
    def aggregator(self):
        """Create aggregator with default config."""
        return SampleAggregator()

    @pytest.mark.parametrize("batch_size", [1, 5, 7, 64, 1000])
    def test_sub_batches_match_whole(self, aggregator, random_durations, batch_size):
        """Test aggregating sub-batches equals aggregating the union."""
        whole = aggregator.aggregate(random_durations)
        batches = [
            random_durations[lo:lo + batch_size]
            for lo in range(0, len(random_durations), batch_size)
        ]

        merged = aggregator.aggregate_batches(batches)

        assert merged.total_active == pytest.approx(whole.total_active)
        assert merged.total_waiting == pytest.approx(whole.total_waiting)
        assert merged.force_spin_up == whole.force_spin_up
        assert merged.num_samples == whole.num_samples

    def test_order_does_not_matter(self, aggregator, random_durations):
        """Test aggregation is independent of sample order."""
        shuffled = list(reversed(random_durations))

        assert aggregator.aggregate(shuffled).total_active == pytest.approx(
            aggregator.aggregate(random_durations).total_active
        )

    def test_force_signal_survives_batching(self, aggregator):
        """Test a force sample in any sub-batch flags the whole cycle."""
        batches = [[1.0, 1.0], [0.5], [0.0], [2.0]]

        result = aggregator.aggregate_batches(batches)

        assert result.force_spin_up is True
        assert result.num_samples == 5

    def test_no_batches(self, aggregator):
        """Test that no sub-batches yields the empty result."""
        assert aggregator.aggregate_batches([]) == EMPTY_AGGREGATION

    def test_skipped_counts_add_up(self, aggregator):
        """Test skipped counts accumulate across sub-batches."""
        result = aggregator.aggregate_batches([[-1.0, 1.0], [None], [1.0]])

        assert result.skipped == 2
        assert result.num_samples == 2
