"""
fleetopt - Fleet Optimization Engine

Recommends a cost-minimal compute fleet for observed workloads, gated by
safety policy and interruption risk. Proposes plans only; never mutates
infrastructure.
"""

from .schemas import (
    Dimensions,
    Item,
    Bin,
    InstanceType,
    OptimizationRequest,
    AllocationPlan,
)
from .decision_engine import (
    Packer,
    NodeTemplate,
    RiskEngine,
    PolicyValidator,
    SafetyViolation,
    Optimizer,
    InfeasiblePlanError,
    FleetOptimizerEngine,
)

__version__ = "1.0.0"

__all__ = [
    "Dimensions",
    "Item",
    "Bin",
    "InstanceType",
    "OptimizationRequest",
    "AllocationPlan",
    "Packer",
    "NodeTemplate",
    "RiskEngine",
    "PolicyValidator",
    "SafetyViolation",
    "Optimizer",
    "InfeasiblePlanError",
    "FleetOptimizerEngine",
]
