"""Reduction of raw call durations into per-cycle activity totals."""

from collections.abc import Iterable
from dataclasses import dataclass
import decimal
import logging
import numbers

import numpy as np

from src.scaling.config import RescalerConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationResult:
    """Totals of one batch of call duration samples.

    Attributes:
        total_active: Seconds spent doing work, net of the per-call overhead
        total_waiting: Seconds callers spent waiting on serverless invocations
        force_spin_up: Whether any sample carried the force signal
        num_samples: Number of valid samples reduced
        skipped: Number of malformed samples rejected
    """

    total_active: float = 0.0
    total_waiting: float = 0.0
    force_spin_up: bool = False
    num_samples: int = 0
    skipped: int = 0

    def merge(self, other: "AggregationResult") -> "AggregationResult":
        """Combine the totals of two disjoint sub-batches.

        Args:
            other: Result of another sub-batch

        Returns:
            Result equal to aggregating both sub-batches at once
        """
        return AggregationResult(
            total_active=self.total_active + other.total_active,
            total_waiting=self.total_waiting + other.total_waiting,
            force_spin_up=self.force_spin_up or other.force_spin_up,
            num_samples=self.num_samples + other.num_samples,
            skipped=self.skipped + other.skipped,
        )

    def __str__(self) -> str:
        return (
            f"active={self.total_active:.3f}s, waiting={self.total_waiting:.3f}s, "
            f"force={self.force_spin_up}, samples={self.num_samples}, skipped={self.skipped}"
        )


EMPTY_AGGREGATION = AggregationResult()


class SampleAggregator:
    """Aggregate raw call durations into active and waiting totals.

    Every valid sample adds the fixed caller overhead to the waiting total.
    A sample shorter than the force threshold is not work but a request to
    spin up an instance; any other sample contributes its duration, net of
    the minimum overhead and bounded below, to the active total.
    """

    def __init__(self, config: RescalerConfig | None = None):
        """Initialize aggregator.

        Args:
            config: Rescaler configuration
        """
        self.config = config or RescalerConfig()

    def aggregate(self, samples: Iterable) -> AggregationResult:
        """Aggregate one batch of samples.

        Args:
            samples: Call durations in seconds

        Returns:
            AggregationResult with the batch totals
        """
        durations, skipped = self._clean(samples)
        if skipped:
            logger.warning("Skipped %d malformed duration samples", skipped)
        if durations.size == 0:
            return AggregationResult(skipped=skipped)

        forced = durations < self.config.force_threshold
        active = np.maximum(
            durations[~forced] - self.config.min_overhead,
            self.config.min_active_duration,
        )

        result = AggregationResult(
            total_active=float(active.sum()),
            total_waiting=float(durations.size * self.config.max_overhead),
            force_spin_up=bool(forced.any()),
            num_samples=int(durations.size),
            skipped=skipped,
        )
        logger.debug("Aggregated batch: %s", result)
        return result

    def aggregate_batches(self, batches: Iterable[Iterable]) -> AggregationResult:
        """Aggregate samples delivered in several sub-batches.

        Args:
            batches: Sub-batches of call durations

        Returns:
            AggregationResult of the union of all sub-batches
        """
        result = EMPTY_AGGREGATION
        for batch in batches:
            result = result.merge(self.aggregate(batch))
        return result

    def _clean(self, samples: Iterable) -> tuple[np.ndarray, int]:
        """Drop samples that are not finite, non-negative numbers.

        Args:
            samples: Raw samples

        Returns:
            Tuple of (valid durations, number of skipped samples)
        """
        valid = []
        skipped = 0
        for sample in samples:
            if isinstance(sample, bool) or not isinstance(sample, (numbers.Real, decimal.Decimal)):
                skipped += 1
                continue
            try:
                value = float(sample)
            except (OverflowError, ValueError):
                skipped += 1
                continue
            if not np.isfinite(value) or value < 0:
                skipped += 1
                continue
            valid.append(value)
        return np.array(valid, dtype=float), skipped
