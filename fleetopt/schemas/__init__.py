"""
Schemas for the Fleet Optimization Engine

Packing models, optimizer request/plan types and engine responses.
"""

from .models import (
    Dimensions,
    Item,
    Bin,
    PackingResult,
)

from .optimization import (
    HOURS_PER_MONTH,
    InstanceType,
    OptimizationRequest,
    AllocationPlan,
)

from .responses import (
    DecisionResponse,
    Recommendation,
    ExecutionStep,
)

__all__ = [
    # Packing models
    "Dimensions",
    "Item",
    "Bin",
    "PackingResult",

    # Optimizer
    "HOURS_PER_MONTH",
    "InstanceType",
    "OptimizationRequest",
    "AllocationPlan",

    # Responses
    "DecisionResponse",
    "Recommendation",
    "ExecutionStep",
]
