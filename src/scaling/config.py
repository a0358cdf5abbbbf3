"""Configuration for the hybrid-execution rescaling policy."""

from dataclasses import dataclass, fields
import math


@dataclass
class RescalerConfig:
    """Tunable parameters of the messaging rescaler.

    Attributes:
        smoothing_factor: Weight of the newest observation in the moving averages
        force_threshold: Sample durations below this value force a spin up
        min_overhead: Fixed per-call overhead subtracted from active time (seconds)
        max_overhead: Fixed per-call caller-side waiting time (seconds)

        provisioned_base_price: Hourly price of one provisioned vCPU
        unit_price: Price per second per GB for serverless compute and caller waiting

        force_activity: Raw activity used for a cycle with a force signal
        activity_cap: Upper bound of the raw activity of a normal cycle
        min_active_duration: Lower bound of the active time of a single call
        min_provisioned_cost: Floor used when the provisioned cost is not positive
    """

    # Moving average
    smoothing_factor: float = 0.25

    # Sample interpretation (seconds)
    force_threshold: float = 1e-4
    min_overhead: float = 0.007
    max_overhead: float = 0.020

    # Prices (dollars)
    provisioned_base_price: float = 0.015      # per vCPU-hour (1 vCPU, 2GB)
    unit_price: float = 0.0000166667           # per GB-second (~$0.06/GB-hour)

    # Bounds
    force_activity: float = 10.0
    activity_cap: float = 1.0
    min_active_duration: float = 0.001
    min_provisioned_cost: float = 1e-9

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self):
        """Validate configuration parameters."""
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValueError(f"{f.name} must be a finite number")
        if not 0 < self.smoothing_factor <= 1:
            raise ValueError("smoothing_factor must be between 0 and 1")
        if self.force_threshold < 0:
            raise ValueError("force_threshold must be non-negative")
        if self.min_overhead < 0:
            raise ValueError("min_overhead must be non-negative")
        if self.max_overhead < 0:
            raise ValueError("max_overhead must be non-negative")
        if self.provisioned_base_price <= 0:
            raise ValueError("provisioned_base_price must be positive")
        if self.unit_price <= 0:
            raise ValueError("unit_price must be positive")
        if self.force_activity <= 0:
            raise ValueError("force_activity must be positive")
        if self.activity_cap <= 0:
            raise ValueError("activity_cap must be positive")
        if self.min_active_duration <= 0:
            raise ValueError("min_active_duration must be positive")
        if self.min_provisioned_cost <= 0:
            raise ValueError("min_provisioned_cost must be positive")

    @property
    def hourly_unit_price(self) -> float:
        """Get the per-GB price of one hour of serverless time."""
        return self.unit_price * 3600

    def to_dict(self) -> dict:
        """Convert config to dictionary.

        Returns:
            Configuration as dictionary
        """
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, config_dict: dict) -> "RescalerConfig":
        """Create config from dictionary.

        Args:
            config_dict: Configuration dictionary

        Returns:
            RescalerConfig instance
        """
        return cls(**config_dict)


DEFAULT_CONFIG = RescalerConfig()

# Reacts to load changes within roughly two cycles
RESPONSIVE_CONFIG = RescalerConfig(smoothing_factor=0.5)

# Roughly an eight-cycle memory window
STABLE_CONFIG = RescalerConfig(smoothing_factor=0.125)
