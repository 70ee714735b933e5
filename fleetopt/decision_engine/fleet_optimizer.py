"""
Fleet Optimizer Engine
======================

Pipeline-facing wrapper around the Optimizer.

Flow:
1. Discovered resources -> workloads (one Item per EC2 instance)
2. Current monthly spend from live prices or static estimates
3. Candidate types -> catalog (monthly price / 730, zone "<region>a")
4. Optimizer.solve -> AllocationPlan
5. Plan -> DecisionResponse (one Recommendation per node pool)

Optimization failure never escapes this engine: no compute workloads
yields status "skipped", an infeasible catalog yields
"no_recommendation", and so do invalid policy overrides. The surrounding
scan keeps going either way.

Example:
    engine = FleetOptimizerEngine()
    response = engine.decide(
        cluster_state={"resources": [
            {"id": "i-0abc", "type": "AWS::EC2::Instance", "instance_type": "m5.xlarge"},
        ]},
        requirements={"region": "us-east-1"},
        constraints={"allowed_families": ["m5", "c5"]},
    )
"""

from typing import Any, Dict, List, Optional
import logging

from pydantic import ValidationError

from ..config.settings import PolicyConfig, Settings, get_settings
from ..schemas.models import Bin
from ..schemas.optimization import AllocationPlan, InstanceType, OptimizationRequest
from ..schemas.responses import DecisionResponse, ExecutionStep, Recommendation
from .base_engine import BaseDecisionEngine
from .instance_catalog import (
    CANDIDATE_TYPES,
    PriceLookup,
    build_catalog,
    build_workloads,
    current_monthly_spend,
)
from .optimizer import RISK_CUTOFF, InfeasiblePlanError, Optimizer
from .policy_validator import PolicyValidator
from .risk_oracle import RiskEngine

logger = logging.getLogger(__name__)

# Policy fields a caller may override per decision through `constraints`
POLICY_OVERRIDES = ("max_churn_percent", "max_spend_limit", "allowed_families")


class FleetOptimizerEngine(BaseDecisionEngine):
    """
    Fleet Optimization Engine

    Recommends the cheapest node pool layout for the discovered compute
    footprint. The RiskEngine is injected so interruption history can be
    shared with event handlers and decay schedulers.

    Config keys:
        candidate_types: default instance types when a request names none
    """

    REQUIRED_STATE_KEYS = ["resources"]

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        risk: Optional[RiskEngine] = None,
        settings: Optional[Settings] = None,
        price_lookup: Optional[PriceLookup] = None
    ):
        super().__init__(config)
        self.settings = settings or get_settings()
        self.risk = risk or RiskEngine(self.settings.risk)
        self.price_lookup = price_lookup

    def decide(
        self,
        cluster_state: Dict[str, Any],
        requirements: Dict[str, Any],
        constraints: Optional[Dict[str, Any]] = None
    ) -> DecisionResponse:
        """
        Generate fleet recommendations

        Args:
            cluster_state:
                - resources: discovered resources ({"id", "type", "instance_type"})
            requirements:
                - region: AWS region (defaults to settings.default_region)
                - candidate_types: instance types to consider (defaults to
                  config["candidate_types"], then CANDIDATE_TYPES)
            constraints: Per-call policy overrides
                - max_churn_percent, max_spend_limit, allowed_families

        Returns:
            DecisionResponse with status recommended, skipped or no_recommendation
        """
        self.validate_input(cluster_state)

        resources = cluster_state["resources"]
        region = requirements.get("region") or self.settings.default_region
        candidate_types = requirements.get("candidate_types", self.config.get("candidate_types"))
        if candidate_types is None:
            candidate_types = CANDIDATE_TYPES

        workloads = build_workloads(resources)
        if not workloads:
            logger.info("No active compute workloads detected. Optimization skipped.")
            return self.create_response(
                status="skipped",
                recommendations=[],
                execution_plan=[],
                metadata={"reason": "No active compute workloads detected", "region": region},
            )

        current_spend = current_monthly_spend(resources, region, self.price_lookup)
        catalog = build_catalog(candidate_types, region, self.price_lookup)

        metadata = {
            "region": region,
            "catalog_size": len(catalog),
            "input_workloads": len(workloads),
        }

        try:
            policy = self._policy_for(constraints)
        except ValidationError as e:
            logger.warning(f"Rejected policy overrides {constraints}: {e.error_count()} invalid field(s)")
            return self.create_response(
                status="no_recommendation",
                recommendations=[],
                execution_plan=[],
                current_monthly_spend=current_spend,
                metadata={
                    **metadata,
                    "reason": "Invalid policy override",
                    "invalid_fields": [".".join(str(part) for part in err["loc"]) for err in e.errors()],
                },
            )

        optimizer = Optimizer(self.risk, PolicyValidator(policy))
        request = OptimizationRequest(workloads=workloads, catalog=catalog, current_spend=current_spend)

        try:
            plan = optimizer.solve(request)
        except InfeasiblePlanError as e:
            logger.warning(f"Solver failed: {e}")
            return self.create_response(
                status="no_recommendation",
                recommendations=[],
                execution_plan=[],
                current_monthly_spend=current_spend,
                metadata={**metadata, "reason": str(e)},
            )

        catalog_by_name = {entry.name: entry for entry in catalog}
        recommendations = self._build_recommendations(plan, catalog_by_name)

        metadata.update({
            "packed_workloads": plan.packed_item_count,
            "dropped_workload_ids": [item.id for item in plan.dropped_items],
            "node_count": len(plan.nodes),
            "packing_efficiency": round(self._mean_efficiency(plan.nodes), 4),
            "instructions": list(plan.instructions),
        })

        return self.create_response(
            status="recommended",
            recommendations=recommendations,
            execution_plan=self._build_execution_plan(plan, recommendations, len(workloads)),
            current_monthly_spend=current_spend,
            projected_monthly_cost=plan.total_cost,
            estimated_savings=plan.savings,
            risk_assessment={
                "plan_risk_score": plan.risk_score,
                "risk_cutoff": RISK_CUTOFF,
                "tracked_pools": self.risk.snapshot(),
            },
            metadata=metadata,
        )

    def _policy_for(self, constraints: Optional[Dict[str, Any]]) -> PolicyConfig:
        """
        Settings policy with any per-call overrides applied

        Overrides go through full PolicyConfig validation, so a malformed
        value (e.g. allowed_families given as a bare string) is rejected
        rather than loosening the limits.

        Raises:
            ValidationError: If an override has the wrong type or range
        """
        overrides = {
            key: value for key, value in (constraints or {}).items()
            if key in POLICY_OVERRIDES
        }
        if not overrides:
            return self.settings.policy
        return PolicyConfig.model_validate({**self.settings.policy.model_dump(), **overrides})

    @staticmethod
    def _mean_efficiency(nodes: List[Bin]) -> float:
        if not nodes:
            return 0.0
        return sum(node.efficiency() for node in nodes) / len(nodes)

    def _build_recommendations(
        self,
        plan: AllocationPlan,
        catalog_by_name: Dict[str, InstanceType]
    ) -> List[Recommendation]:
        """One recommendation per (pool, instance type), in node order"""
        groups: Dict[tuple, List[Bin]] = {}
        for node in plan.nodes:
            groups.setdefault((node.pool, node.node_type), []).append(node)

        recommendations = []
        for (pool, node_type), nodes in groups.items():
            entry = catalog_by_name[node_type]
            recommendations.append(Recommendation(
                pool=pool,
                instance_type=node_type,
                node_count=len(nodes),
                availability_zone=entry.zone or None,
                hourly_price=entry.hourly_cost,
                monthly_cost=round(len(nodes) * entry.monthly_cost, 2),
                workload_ids=[item.id for node in nodes for item in node.items],
                average_efficiency=round(self._mean_efficiency(nodes), 4),
            ))
        return recommendations

    def _build_execution_plan(
        self,
        plan: AllocationPlan,
        recommendations: List[Recommendation],
        current_node_count: int
    ) -> List[ExecutionStep]:
        """Build the proposed migration steps (advisory only)"""
        steps = []
        for recommendation, instruction in zip(recommendations, plan.instructions):
            steps.append(ExecutionStep(
                step=len(steps) + 1,
                action="provision_pool",
                parameters={
                    "pool": recommendation.pool,
                    "instance_type": recommendation.instance_type,
                    "node_count": recommendation.node_count,
                    "availability_zone": recommendation.availability_zone,
                },
                description=instruction,
            ))

        steps.append(ExecutionStep(
            step=len(steps) + 1,
            action="migrate_workloads",
            parameters={"workload_count": plan.packed_item_count},
            description=f"Migrate {plan.packed_item_count} workloads onto the new pools",
        ))
        steps.append(ExecutionStep(
            step=len(steps) + 1,
            action="decommission_nodes",
            parameters={"node_count": current_node_count},
            description=f"Decommission {current_node_count} existing nodes after migration",
        ))
        return steps
