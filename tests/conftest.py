"""Pytest configuration and shared fixtures."""

from datetime import datetime

import numpy as np
import pytest

from src.scaling.config import RescalerConfig
from src.scaling.deployment import ResourceSizing


@pytest.fixture
def config():
    """Create default rescaler configuration."""
    return RescalerConfig()


@pytest.fixture
def sizing():
    """Sizing where one provisioned vCPU competes with 1GB functions."""
    return ResourceSizing(mem=2048, fn_mem=1024, caller_mem=1024)


@pytest.fixture
def deployment_record():
    """Create a deployment registry record with messaging sizing."""
    return {
        "msg_info": {"mem": 2048, "fn_mem": 1024, "caller_mem": 1024},
        "namespace": "messaging",
        "name": "echo",
    }


@pytest.fixture
def start_time():
    """Timestamp of the first cycle boundary."""
    return datetime(2023, 1, 1, 0, 0, 0)


@pytest.fixture
def random_durations():
    """Create a batch of realistic call durations in seconds."""
    rng = np.random.default_rng(42)
    return rng.exponential(scale=0.2, size=250).tolist()
