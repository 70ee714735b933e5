"""
Decision Engine Module

Resource optimization core:
1. Bin Packing - 2-D Best-Fit-Decreasing placement of workloads onto nodes
2. Risk Oracle - Decaying interruption risk per (zone, instance type)
3. Policy Validator - Churn, spend and instance-family safety limits
4. Optimizer - Homogeneous sweep plus workhorse/dust refinement
5. Fleet Optimizer Engine - Pipeline wrapper producing DecisionResponse
"""

from .base_engine import BaseDecisionEngine
from .bin_packing import NodeTemplate, Packer
from .risk_oracle import RiskEngine
from .policy_validator import PolicyValidator, SafetyViolation
from .optimizer import (
    DUST_EFFICIENCY_THRESHOLD,
    MIXED_FLEET_RISK_SCORE,
    RISK_CUTOFF,
    InfeasiblePlanError,
    Optimizer,
)
from .instance_catalog import (
    CANDIDATE_TYPES,
    InstanceSpecs,
    StaticCostEstimator,
    build_catalog,
    build_workloads,
    current_monthly_spend,
    get_specs,
)
from .fleet_optimizer import FleetOptimizerEngine

__all__ = [
    # Base
    "BaseDecisionEngine",
    # Core
    "NodeTemplate",
    "Packer",
    "RiskEngine",
    "PolicyValidator",
    "SafetyViolation",
    "Optimizer",
    "InfeasiblePlanError",
    "RISK_CUTOFF",
    "DUST_EFFICIENCY_THRESHOLD",
    "MIXED_FLEET_RISK_SCORE",
    # Catalog
    "CANDIDATE_TYPES",
    "InstanceSpecs",
    "StaticCostEstimator",
    "build_catalog",
    "build_workloads",
    "current_monthly_spend",
    "get_specs",
    # Engines
    "FleetOptimizerEngine",
]
