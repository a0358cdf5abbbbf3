"""Scaling state persisted between rescale cycles."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from src.scaling.errors import StateDecodeError


@dataclass(frozen=True)
class PolicyState:
    """Smoothed estimates carried from one cycle to the next.

    Attributes:
        activity: Moving average of the fraction of time spent active
        waiting: Moving average of caller waiting time per second
    """

    activity: float = 0.0
    waiting: float = 0.0

    @classmethod
    def zero(cls) -> "PolicyState":
        """State of a function that was never rescaled."""
        return cls()

    def to_dict(self) -> dict:
        """Convert state to the record stored by the caller.

        Returns:
            State as dictionary
        """
        return {"activity": self.activity, "waiting": self.waiting}

    def __str__(self) -> str:
        return f"activity={self.activity:.4f}, waiting={self.waiting:.4f}"


class StoredPolicyState(BaseModel):
    """Wire format of PolicyState."""

    activity: float = Field(..., ge=0, allow_inf_nan=False)
    waiting: float = Field(..., ge=0, allow_inf_nan=False)


def decode_state(record: PolicyState | Mapping[str, Any] | None) -> PolicyState:
    """Read the previous state of a function.

    Args:
        record: Stored state, or None on the first cycle

    Returns:
        Decoded PolicyState (zero state when nothing was stored)

    Raises:
        StateDecodeError: If the stored record is malformed
    """
    if record is None:
        return PolicyState.zero()
    if isinstance(record, PolicyState):
        return record
    if not isinstance(record, Mapping):
        raise StateDecodeError(
            f"scaling state must be a mapping, got {type(record).__name__}"
        )
    try:
        stored = StoredPolicyState.model_validate(dict(record))
    except ValidationError as e:
        raise StateDecodeError(f"malformed scaling state: {e}") from e
    return PolicyState(activity=stored.activity, waiting=stored.waiting)


@dataclass
class ScalingState:
    """Record the scaling controller keeps for one function.

    Attributes:
        deployment: Deployment registry record holding the resource sizing
        last_rescale: Timestamp of the previous rescale cycle
        scaling_info: Opaque policy state, None before the first cycle
        current_scale: Last scale target applied by the controller, compared
            with the new target to report scale changes
    """

    deployment: Mapping[str, Any] | None
    last_rescale: datetime
    scaling_info: Mapping[str, Any] | None = None
    current_scale: int = 0
