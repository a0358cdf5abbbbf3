"""Break-even comparison of serverless and provisioned execution."""

from dataclasses import dataclass
import logging
import math
import sys

from src.scaling.deployment import ResourceSizing
from src.scaling.config import RescalerConfig
from src.scaling.state import PolicyState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostBreakdown:
    """Hourly costs behind a scale decision."""

    provisioned_cost: float
    serverless_cost: float
    wait_cost: float
    ratio: float
    target_scale: int

    @property
    def hybrid_cost(self) -> float:
        """Hourly cost of serving the current load in serverless mode."""
        return self.serverless_cost + self.wait_cost

    def __str__(self) -> str:
        return (
            f"scale={self.target_scale} (ratio={self.ratio:.3f}, "
            f"serverless=${self.serverless_cost:.5f}/h, wait=${self.wait_cost:.5f}/h, "
            f"provisioned=${self.provisioned_cost:.5f}/h)"
        )


class CostComparator:
    """Turn smoothed load estimates into a binary scale target.

    The serverless cost of the current load, plus what callers pay while
    waiting on serverless calls, is compared with the flat hourly price of a
    provisioned instance. Once it reaches that price, one instance is
    requested.
    """

    def __init__(self, config: RescalerConfig | None = None):
        """Initialize comparator.

        Args:
            config: Rescaler configuration
        """
        self.config = config or RescalerConfig()

    def provisioned_cost(self, sizing: ResourceSizing) -> float:
        """Hourly cost of one provisioned instance, guarded against zero."""
        cost = self.config.provisioned_base_price * sizing.provisioned_vcpu
        if not math.isfinite(cost) or cost <= 0:
            logger.warning(
                "Provisioned cost %r for %d MB is not positive, using %g",
                cost,
                sizing.mem,
                self.config.min_provisioned_cost,
            )
            return self.config.min_provisioned_cost
        return cost

    def compare(self, state: PolicyState, sizing: ResourceSizing) -> CostBreakdown:
        """Compare hourly costs for the given load estimates.

        Args:
            state: Smoothed activity and waiting estimates
            sizing: Memory allocations of the function

        Returns:
            CostBreakdown with the ratio and target scale
        """
        hourly = self.config.hourly_unit_price
        provisioned_cost = self.provisioned_cost(sizing)
        serverless_cost = hourly * sizing.function_gb * state.activity
        wait_cost = hourly * sizing.caller_gb * state.waiting

        ratio = (serverless_cost + wait_cost) / provisioned_cost
        if math.isnan(ratio):
            logger.warning("Cost ratio is undefined for state %s, not scaling", state)
            ratio = 0.0
        elif math.isinf(ratio):
            logger.warning("Cost ratio overflowed for state %s, scaling", state)
            ratio = sys.float_info.max

        return CostBreakdown(
            provisioned_cost=provisioned_cost,
            serverless_cost=serverless_cost,
            wait_cost=wait_cost,
            ratio=ratio,
            target_scale=int(ratio >= 1.0),
        )
