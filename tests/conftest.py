"""
Shared fixtures for fleetopt tests
"""

import pytest

from fleetopt.config.settings import PolicyConfig, RiskConfig, Settings
from fleetopt.schemas.models import Dimensions, Item
from fleetopt.schemas.optimization import InstanceType


def make_items(count, cpu=1000, ram=1024, prefix="pod"):
    """Identical workloads named <prefix>-0 .. <prefix>-<count-1>"""
    return [
        Item(id=f"{prefix}-{i}", dimensions=Dimensions(cpu=cpu, ram=ram))
        for i in range(count)
    ]


@pytest.fixture
def risk_config():
    return RiskConfig(baseline_risk=0.05, decay_factor=0.95, interruption_penalty=1.0)


@pytest.fixture
def default_policy():
    return PolicyConfig(
        max_churn_percent=20.0,
        max_spend_limit=10000.0,
        allowed_families=["t3", "m5", "m6g", "c5", "c6g", "r5", "r6g"],
    )


@pytest.fixture
def closed_policy():
    """Policy that allows no instance family at all"""
    return PolicyConfig(allowed_families=[])


@pytest.fixture
def small_large_policy():
    """Policy that allows the synthetic small/large catalog"""
    return PolicyConfig(allowed_families=["small", "large"])


@pytest.fixture
def settings(default_policy, risk_config):
    return Settings(policy=default_policy, risk=risk_config, default_region="us-east-1")


@pytest.fixture
def small_large_catalog():
    """small: $1/hr, 1 vCPU; large: $10/hr, 12 vCPU (the workhorse)"""
    return [
        InstanceType(name="small", cpu=1000, ram=1024, hourly_cost=1.0, region="us-east-1", zone="us-east-1a"),
        InstanceType(name="large", cpu=12000, ram=12288, hourly_cost=10.0, region="us-east-1", zone="us-east-1a"),
    ]
