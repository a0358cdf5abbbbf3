"""Exponential smoothing of per-cycle activity and waiting rates."""

import logging
import math

from src.scaling.aggregator import AggregationResult
from src.scaling.config import RescalerConfig
from src.scaling.errors import InvalidIntervalError
from src.scaling.state import PolicyState

logger = logging.getLogger(__name__)


class ActivityEstimator:
    """Maintain moving averages of activity and caller waiting.

    The raw activity of a cycle is the active time divided by the cycle
    length, capped at ``activity_cap``. Parallel calls can push the raw value
    above full utilization; the cap keeps them from inflating the estimate.
    A force signal replaces the raw activity with ``force_activity``.
    """

    def __init__(self, config: RescalerConfig | None = None):
        """Initialize estimator.

        Args:
            config: Rescaler configuration
        """
        self.config = config or RescalerConfig()

    def raw_rates(
        self,
        aggregation: AggregationResult,
        interval_secs: float,
    ) -> tuple[float, float]:
        """Compute the unsmoothed rates of one cycle.

        Args:
            aggregation: Totals of the cycle's samples
            interval_secs: Length of the cycle in seconds

        Returns:
            Tuple of (raw activity, raw waiting)

        Raises:
            InvalidIntervalError: If the interval is not a positive number, or is
                too short for the rates to be finite
        """
        if not math.isfinite(interval_secs) or interval_secs <= 0:
            raise InvalidIntervalError(interval_secs)

        if aggregation.force_spin_up:
            raw_activity = self.config.force_activity
        else:
            raw_activity = min(aggregation.total_active / interval_secs, self.config.activity_cap)
        raw_waiting = aggregation.total_waiting / interval_secs
        if not (math.isfinite(raw_activity) and math.isfinite(raw_waiting)):
            raise InvalidIntervalError(interval_secs)
        return raw_activity, raw_waiting

    def smooth(self, previous: float, observation: float) -> float:
        """Apply one step of the moving average."""
        alpha = self.config.smoothing_factor
        return (1 - alpha) * previous + alpha * observation

    def update(
        self,
        previous: PolicyState,
        aggregation: AggregationResult,
        interval_secs: float,
    ) -> PolicyState:
        """Fold one cycle's samples into the smoothed state.

        Args:
            previous: State after the previous cycle
            aggregation: Totals of the cycle's samples
            interval_secs: Length of the cycle in seconds

        Returns:
            Updated PolicyState
        """
        raw_activity, raw_waiting = self.raw_rates(aggregation, interval_secs)
        logger.debug(
            "Raw rates over %.1fs: activity=%.4f, waiting=%.4f",
            interval_secs,
            raw_activity,
            raw_waiting,
        )
        return PolicyState(
            activity=self.smooth(previous.activity, raw_activity),
            waiting=self.smooth(previous.waiting, raw_waiting),
        )
