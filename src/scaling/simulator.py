"""Offline replay of load traces through a rescaler."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

import numpy as np
import pandas as pd

from src.scaling.config import RescalerConfig
from src.scaling.cost import CostComparator
from src.scaling.deployment import ResourceSizing, load_sizing
from src.scaling.policy import MessagingRescaler, Rescaler
from src.scaling.state import PolicyState


def synthetic_samples(
    load: float,
    interval_secs: float = 60,
    call_duration: float = 1.0,
) -> list[float]:
    """Generate the call durations of a cycle with the given load.

    Args:
        load: Fraction of the interval spent in calls (may exceed 1)
        interval_secs: Length of the cycle in seconds
        call_duration: Duration of every call in seconds

    Returns:
        ``round(load * interval / duration)`` samples of ``call_duration``
    """
    if load < 0:
        raise ValueError("load must be non-negative")
    if call_duration <= 0:
        raise ValueError("call_duration must be positive")
    num_calls = int(round(load * interval_secs / call_duration))
    return [float(call_duration)] * num_calls


@dataclass
class SimulationMetrics:
    """Metrics from a simulation run."""

    # Cost metrics (dollars over the whole run)
    total_cost: float
    serverless_only_cost: float
    provisioned_only_cost: float

    # Scale metrics
    provisioned_fraction: float
    scale_up_events: int
    scale_down_events: int

    # Estimate metrics
    max_activity: float
    final_state: PolicyState

    # Time series
    activity_over_time: list = field(default_factory=list)
    waiting_over_time: list = field(default_factory=list)
    ratio_over_time: list = field(default_factory=list)
    scale_over_time: list = field(default_factory=list)
    cost_over_time: list = field(default_factory=list)

    @property
    def savings_vs_provisioned(self) -> float:
        return self.provisioned_only_cost - self.total_cost

    def to_frame(self) -> pd.DataFrame:
        """Convert time series to a DataFrame with one row per cycle."""
        return pd.DataFrame({
            "activity": self.activity_over_time,
            "waiting": self.waiting_over_time,
            "ratio": self.ratio_over_time,
            "scale": self.scale_over_time,
            "cost": self.cost_over_time,
        })

    def __str__(self) -> str:
        return (
            f"Simulation Results:\n"
            f"  Total Cost: ${self.total_cost:.4f}\n"
            f"  Serverless Only: ${self.serverless_only_cost:.4f}\n"
            f"  Provisioned Only: ${self.provisioned_only_cost:.4f}\n"
            f"  Provisioned Time: {self.provisioned_fraction:.1%}\n"
            f"  Scaling Events: {self.scale_up_events + self.scale_down_events} "
            f"(up: {self.scale_up_events}, down: {self.scale_down_events})"
        )


class RescaleSimulator:
    """Replay per-cycle loads through a rescaler.

    Each cycle receives the synthetic samples of its load and the resulting
    state is carried to the next cycle. Costs are charged for the mode
    chosen at the end of each cycle.
    """

    def __init__(
        self,
        sizing: ResourceSizing | dict,
        rescaler: Rescaler | None = None,
        config: RescalerConfig | None = None,
        interval_secs: float = 60,
        call_duration: float = 1.0,
    ):
        """Initialize simulator.

        Args:
            sizing: Resource sizing of the simulated function
            rescaler: Policy to replay (default MessagingRescaler)
            config: Configuration used for costs and the default policy
            interval_secs: Length of a cycle in seconds
            call_duration: Duration of every synthetic call in seconds
        """
        if interval_secs <= 0:
            raise ValueError("interval_secs must be positive")
        self.sizing = load_sizing(sizing)
        self.config = config or RescalerConfig()
        self.rescaler = rescaler or MessagingRescaler(self.config)
        self.comparator = CostComparator(self.config)
        self.interval_secs = interval_secs
        self.call_duration = call_duration

    def simulate(
        self,
        loads: pd.Series | np.ndarray | list,
        start: datetime | None = None,
        initial_state: PolicyState | None = None,
    ) -> SimulationMetrics:
        """Run simulation with given per-cycle loads.

        Args:
            loads: Load of each cycle (fraction of the interval spent in calls)
            start: Timestamp of the first cycle boundary
            initial_state: State before the first cycle

        Returns:
            SimulationMetrics with results
        """
        loads = np.asarray(loads, dtype=float)
        start = start or datetime(2023, 1, 1, 0, 0, 0)
        step = timedelta(seconds=self.interval_secs)

        state = initial_state
        activities, waitings, ratios, scales, costs = [], [], [], [], []
        serverless_costs = []
        hours = self.interval_secs / 3600
        provisioned_hourly = self.comparator.provisioned_cost(self.sizing)

        for i, load in enumerate(loads):
            samples = synthetic_samples(load, self.interval_secs, self.call_duration)
            decision = self.rescaler.decide(
                state,
                samples,
                start + (i + 1) * step,
                start + i * step,
                self.sizing,
            )
            state = decision.new_state
            breakdown = decision.cost or self.comparator.compare(state, self.sizing)

            activities.append(state.activity)
            waitings.append(state.waiting)
            ratios.append(breakdown.ratio)
            scales.append(decision.target_scale)
            serverless_costs.append(breakdown.hybrid_cost * hours)
            if decision.target_scale > 0:
                costs.append(provisioned_hourly * hours)
            else:
                costs.append(breakdown.hybrid_cost * hours)

        scales_arr = np.array(scales, dtype=int)
        changes = np.diff(np.concatenate(([0], scales_arr))) if len(scales_arr) else np.array([])

        return SimulationMetrics(
            total_cost=float(np.sum(costs)),
            serverless_only_cost=float(np.sum(serverless_costs)),
            provisioned_only_cost=float(provisioned_hourly * hours * len(loads)),
            provisioned_fraction=float(np.mean(scales_arr > 0)) if len(scales_arr) else 0.0,
            scale_up_events=int(np.sum(changes > 0)),
            scale_down_events=int(np.sum(changes < 0)),
            max_activity=float(np.max(activities)) if activities else 0.0,
            final_state=state or PolicyState.zero(),
            activity_over_time=activities,
            waiting_over_time=waitings,
            ratio_over_time=ratios,
            scale_over_time=scales_arr.tolist(),
            cost_over_time=costs,
        )

    def compare_configs(
        self,
        loads: pd.Series | np.ndarray | list,
        configs: dict[str, RescalerConfig],
    ) -> pd.DataFrame:
        """Compare rescaler configurations on the same load trace.

        Args:
            loads: Load of each cycle
            configs: Dict of name -> configuration

        Returns:
            DataFrame with comparison metrics
        """
        results = []

        for name, config in configs.items():
            simulator = RescaleSimulator(
                self.sizing,
                config=config,
                interval_secs=self.interval_secs,
                call_duration=self.call_duration,
            )
            metrics = simulator.simulate(loads)

            results.append({
                "config": name,
                "total_cost": metrics.total_cost,
                "serverless_only_cost": metrics.serverless_only_cost,
                "provisioned_only_cost": metrics.provisioned_only_cost,
                "provisioned_fraction": metrics.provisioned_fraction,
                "scale_up_events": metrics.scale_up_events,
                "scale_down_events": metrics.scale_down_events,
                "max_activity": metrics.max_activity,
            })

        return pd.DataFrame(results).set_index("config")
