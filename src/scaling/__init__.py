"""Hybrid serverless/provisioned rescaling policy and simulation modules."""

from src.scaling.config import (
    RescalerConfig,
    DEFAULT_CONFIG,
    RESPONSIVE_CONFIG,
    STABLE_CONFIG,
)
from src.scaling.errors import (
    RescalerError,
    ConfigurationError,
    InvalidIntervalError,
    StateDecodeError,
)
from src.scaling.deployment import ResourceSizing, DeploymentInfo, load_sizing
from src.scaling.aggregator import AggregationResult, SampleAggregator
from src.scaling.state import PolicyState, ScalingState, decode_state
from src.scaling.estimator import ActivityEstimator
from src.scaling.cost import CostBreakdown, CostComparator
from src.scaling.policy import (
    Rescaler,
    MessagingRescaler,
    RescaleDecision,
)
from src.scaling.simulator import (
    RescaleSimulator,
    SimulationMetrics,
    synthetic_samples,
)

__all__ = [
    "RescalerConfig",
    "DEFAULT_CONFIG",
    "RESPONSIVE_CONFIG",
    "STABLE_CONFIG",
    "RescalerError",
    "ConfigurationError",
    "InvalidIntervalError",
    "StateDecodeError",
    "ResourceSizing",
    "DeploymentInfo",
    "load_sizing",
    "AggregationResult",
    "SampleAggregator",
    "PolicyState",
    "ScalingState",
    "decode_state",
    "ActivityEstimator",
    "CostBreakdown",
    "CostComparator",
    "Rescaler",
    "MessagingRescaler",
    "RescaleDecision",
    "RescaleSimulator",
    "SimulationMetrics",
    "synthetic_samples",
]
