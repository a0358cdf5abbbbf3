"""Rescaling policy for hybrid serverless/provisioned messaging functions."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Any

from src.scaling.aggregator import AggregationResult, SampleAggregator
from src.scaling.config import RescalerConfig
from src.scaling.cost import CostBreakdown, CostComparator
from src.scaling.deployment import ResourceSizing, load_sizing
from src.scaling.errors import InvalidIntervalError
from src.scaling.estimator import ActivityEstimator
from src.scaling.state import PolicyState, ScalingState, decode_state

logger = logging.getLogger(__name__)

Timestamp = datetime | float | int


@dataclass
class RescaleDecision:
    """Result of one rescale cycle."""

    target_scale: int
    new_state: PolicyState
    cost: CostBreakdown | None = None
    aggregation: AggregationResult = field(default_factory=AggregationResult)
    interval_secs: float | None = None

    @property
    def skipped_samples(self) -> int:
        return self.aggregation.skipped

    def __str__(self) -> str:
        ratio = f"{self.cost.ratio:.3f}" if self.cost is not None else "n/a"
        return (
            f"SCALE {self.target_scale}: {self.new_state} "
            f"(ratio={ratio}, samples={self.aggregation.num_samples}, "
            f"skipped={self.aggregation.skipped})"
        )


def interval_seconds(curr_timestamp: Timestamp, prev_timestamp: Timestamp) -> float:
    """Get the elapsed seconds between two cycle timestamps.

    Args:
        curr_timestamp: Timestamp of the current cycle
        prev_timestamp: Timestamp of the previous cycle

    Returns:
        Elapsed seconds

    Raises:
        InvalidIntervalError: If the interval is not positive
    """
    if isinstance(curr_timestamp, datetime) != isinstance(prev_timestamp, datetime):
        raise TypeError("timestamps must both be datetimes or both be seconds")
    if isinstance(curr_timestamp, datetime):
        interval = (curr_timestamp - prev_timestamp).total_seconds()
    else:
        interval = float(curr_timestamp) - float(prev_timestamp)
    if not interval > 0:
        raise InvalidIntervalError(interval)
    return interval


class Rescaler(ABC):
    """Decision policy invoked by the scaling controller once per cycle."""

    @abstractmethod
    def decide(
        self,
        state: PolicyState | Mapping[str, Any] | None,
        samples: Iterable,
        curr_timestamp: Timestamp,
        prev_timestamp: Timestamp,
        sizing: ResourceSizing | Mapping[str, Any] | None,
    ) -> RescaleDecision:
        """Compute the scale target and the state to persist."""


class MessagingRescaler(Rescaler):
    """Choose between serverless and provisioned execution by cost.

    Each cycle reduces the call durations observed since the previous cycle,
    folds them into moving averages of activity and caller waiting, and
    requests one provisioned instance when serving that load in serverless
    mode costs at least as much as the instance. The rescaler keeps no state
    between calls.
    """

    def __init__(self, config: RescalerConfig | None = None):
        """Initialize rescaler.

        Args:
            config: Rescaler configuration
        """
        self.config = config or RescalerConfig()
        self.aggregator = SampleAggregator(self.config)
        self.estimator = ActivityEstimator(self.config)
        self.comparator = CostComparator(self.config)

    def decide(
        self,
        state: PolicyState | Mapping[str, Any] | None,
        samples: Iterable,
        curr_timestamp: Timestamp,
        prev_timestamp: Timestamp,
        sizing: ResourceSizing | Mapping[str, Any] | None,
    ) -> RescaleDecision:
        """Run one rescale cycle.

        Args:
            state: Previous state, None on the first cycle
            samples: Call durations (seconds) observed since the previous cycle
            curr_timestamp: Timestamp of this cycle
            prev_timestamp: Timestamp of the previous cycle
            sizing: Resource sizing or deployment record of the function

        Returns:
            RescaleDecision with the target scale and new state

        Raises:
            ConfigurationError: If the resource sizing is absent or malformed
            StateDecodeError: If the previous state is malformed
            InvalidIntervalError: If the interval is not positive
        """
        sizing = load_sizing(sizing)
        previous = decode_state(state)
        interval = interval_seconds(curr_timestamp, prev_timestamp)

        aggregation = self.aggregator.aggregate(samples)
        new_state = self.estimator.update(previous, aggregation, interval)
        cost = self.comparator.compare(new_state, sizing)

        logger.info(
            "Rescaled over %.1fs with %d samples (%d skipped): %s -> scale %d (ratio=%.3f)",
            interval,
            aggregation.num_samples,
            aggregation.skipped,
            new_state,
            cost.target_scale,
            cost.ratio,
        )
        return RescaleDecision(
            target_scale=cost.target_scale,
            new_state=new_state,
            cost=cost,
            aggregation=aggregation,
            interval_secs=interval,
        )

    def rescale(
        self,
        scaling_state: ScalingState,
        curr_timestamp: datetime,
        metrics: Iterable,
    ) -> tuple[int, dict]:
        """Run one cycle from the controller's scaling record.

        Args:
            scaling_state: Controller record of the function
            curr_timestamp: Timestamp of this cycle
            metrics: Call durations observed since the last rescale

        Returns:
            Tuple of (target scale, state record to persist)
        """
        decision = self.decide(
            scaling_state.scaling_info,
            metrics,
            curr_timestamp,
            scaling_state.last_rescale,
            scaling_state.deployment,
        )
        if decision.target_scale != scaling_state.current_scale:
            logger.info(
                "Scale changes from %d to %d",
                scaling_state.current_scale,
                decision.target_scale,
            )
        return decision.target_scale, decision.new_state.to_dict()
