"""
Optimization Request/Plan Schemas

InstanceType is validated with Pydantic since catalog entries arrive from
external pricing sources. Requests and plans are plain containers around
the packing models.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .models import Bin, Item

# Fixed month length used to turn hourly prices into monthly cost
HOURS_PER_MONTH = 730


class InstanceType(BaseModel):
    """A purchasable compute SKU (catalog entry)"""
    name: str = Field(..., description="Instance type name (e.g., m5.large)")
    cpu: float = Field(..., gt=0, description="Capacity in milli-cores")
    ram: float = Field(..., gt=0, description="Capacity in MiB")
    hourly_cost: float = Field(..., ge=0, description="On-demand price per hour (USD)")
    region: str = Field("", description="AWS region (e.g., us-east-1)")
    zone: str = Field("", description="Availability zone (e.g., us-east-1a)")

    model_config = ConfigDict(frozen=True)

    @property
    def monthly_cost(self) -> float:
        return self.hourly_cost * HOURS_PER_MONTH

    @property
    def cost_efficiency(self) -> float:
        """Hourly cost per unit of capacity, RAM normalized by 1000 (lower is better)"""
        return self.hourly_cost / (self.cpu + self.ram / 1000.0)


@dataclass(frozen=True)
class OptimizationRequest:
    """Read-only input bundle for one solver run"""
    workloads: Sequence[Item]
    catalog: Sequence[InstanceType]
    current_spend: float = 0.0


@dataclass
class AllocationPlan:
    """
    The solver's recommended fleet

    total_cost and savings are monthly USD. dropped_items lists workloads
    that fit no node of the chosen type(s) and need manual handling.
    """
    nodes: List[Bin]
    total_cost: float
    savings: float
    risk_score: float
    instructions: List[str] = field(default_factory=list)
    dropped_items: List[Item] = field(default_factory=list)

    @property
    def hourly_cost(self) -> float:
        return self.total_cost / HOURS_PER_MONTH

    @property
    def packed_item_count(self) -> int:
        return sum(len(node.items) for node in self.nodes)
