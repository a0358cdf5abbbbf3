"""Resource sizing records read from the deployment registry."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.scaling.errors import ConfigurationError

MB_PER_VCPU = 2048
MB_PER_GB = 1024


class ResourceSizing(BaseModel):
    """Memory allocations of a messaging function, in MB."""

    model_config = ConfigDict(frozen=True)

    mem: int = Field(
        ...,
        description="Memory of the provisioned instance",
        ge=0,
    )
    fn_mem: int = Field(
        ...,
        description="Memory of the serverless function",
        ge=0,
    )
    caller_mem: int = Field(
        ...,
        description="Memory of the caller while it waits on a serverless call",
        ge=0,
    )

    @property
    def provisioned_vcpu(self) -> float:
        """vCPUs of the provisioned instance (1 vCPU per 2GB)."""
        return self.mem / MB_PER_VCPU

    @property
    def function_gb(self) -> float:
        """Memory of the serverless function in GB."""
        return self.fn_mem / MB_PER_GB

    @property
    def caller_gb(self) -> float:
        """Memory of the waiting caller in GB."""
        return self.caller_mem / MB_PER_GB


class DeploymentInfo(BaseModel):
    """Deployment registry record of a function.

    Only the messaging sizing is read here; other subsystems' fields are kept
    but ignored.
    """

    model_config = ConfigDict(extra="allow")

    msg_info: ResourceSizing | None = None


def load_sizing(record: ResourceSizing | Mapping[str, Any] | None) -> ResourceSizing:
    """Read the resource sizing of a function.

    Args:
        record: A ResourceSizing, a flat sizing mapping or a full deployment
            record with a ``msg_info`` entry

    Returns:
        Validated ResourceSizing

    Raises:
        ConfigurationError: If the sizing is absent or malformed
    """
    if isinstance(record, ResourceSizing):
        return record
    if record is None:
        raise ConfigurationError("resource sizing is missing")
    if not isinstance(record, Mapping):
        raise ConfigurationError(
            f"resource sizing must be a mapping, got {type(record).__name__}"
        )

    try:
        if "msg_info" in record:
            info = DeploymentInfo.model_validate(dict(record))
            if info.msg_info is None:
                raise ConfigurationError("deployment has no messaging sizing")
            return info.msg_info
        return ResourceSizing.model_validate(dict(record))
    except ValidationError as e:
        raise ConfigurationError(f"malformed resource sizing: {e}") from e
