"""
Decision Response Schemas

Models returned by decision engines to the surrounding scan/report
pipeline. The pipeline renders them; engines never execute them.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone


class Recommendation(BaseModel):
    """
    Single node-pool recommendation

    Part of DecisionResponse; one entry per instance type in the plan.
    """
    # Pool details
    pool: str = Field(..., description="Pool label (main, dust, or homogeneous)")
    instance_type: str = Field(..., description="EC2 instance type (e.g., m5.large)")
    node_count: int = Field(..., ge=0, description="Number of nodes of this type")
    availability_zone: Optional[str] = Field(None, description="Target AZ")

    # Pricing
    hourly_price: float = Field(..., ge=0, description="Hourly price per instance (USD)")
    monthly_cost: float = Field(..., ge=0, description="Total monthly cost for this pool (USD)")

    # Packing
    workload_ids: List[str] = Field(default_factory=list, description="Workloads placed in this pool")
    average_efficiency: float = Field(0.0, description="Mean node packing efficiency (0.0 to 1.0)")


class ExecutionStep(BaseModel):
    """
    Single step in a proposed migration plan

    Steps are advisory text for downstream script/report generators.
    """
    step: int = Field(..., description="Step number (execution order)")
    action: str = Field(..., description="Action type (provision_pool, migrate_workloads, ...)")
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Action-specific parameters")
    requires_confirmation: bool = Field(True, description="Requires manual confirmation")
    description: str = Field(..., description="Human-readable description of this step")


class DecisionResponse(BaseModel):
    """
    Response from a decision engine

    An empty recommendation list with status "skipped" or "no_recommendation"
    is a normal outcome, not a failure.
    """
    engine: str = Field(..., description="Engine that produced the decision")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: str = Field(..., description="recommended, skipped, or no_recommendation")

    recommendations: List[Recommendation] = Field(default_factory=list)

    current_monthly_spend: float = Field(0.0, description="Current monthly spend (USD)")
    projected_monthly_cost: Optional[float] = Field(None, description="Monthly cost of the plan (USD)")
    estimated_savings: float = Field(0.0, description="Estimated monthly savings (USD)")

    risk_assessment: Dict[str, Any] = Field(default_factory=dict, description="Risk analysis")
    execution_plan: List[ExecutionStep] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional metadata")
