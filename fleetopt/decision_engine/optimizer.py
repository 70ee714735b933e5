"""
Fleet Optimizer - Cost-Minimal Node Pool Selection
==================================================

Purpose: Recommend the cheapest fleet that hosts all observed workloads
without breaking safety policy or entering high-risk Spot pools.

Search strategy (two phases, cheapest feasible plan wins):

**Phase A: Homogeneous sweep**
- For every catalog entry allowed by policy and below the risk cutoff,
  simulate packing the whole workload set onto nodes of that type
- Monthly cost = node_count * hourly_cost * 730
- A type on which every workload is oversized is skipped; an empty
  workload set yields a 0-node, $0 plan on the first eligible type

**Phase B: Heterogeneous refinement ("workhorse + dust")**
- Workhorse = entry with the lowest hourly_cost / (cpu + ram/1000)
- Pack everything onto workhorse nodes
- If the last node is under 40% efficient, move its contents ("dust")
  to the cheapest catalog entry that can hold all of it
- Phase B ranks purely on cost efficiency; it does not consult policy
  or risk per candidate

Phase B only replaces Phase A's plan when strictly cheaper. When neither
phase produces a plan, solve raises InfeasiblePlanError.

The solver is synchronous and keeps no state between calls; the shared
RiskEngine is the only mutable collaborator.
"""

from typing import List, Optional
import logging

from ..schemas.models import Bin, Dimensions, PackingResult
from ..schemas.optimization import (
    HOURS_PER_MONTH,
    AllocationPlan,
    InstanceType,
    OptimizationRequest,
)
from .bin_packing import NodeTemplate, Packer
from .policy_validator import PolicyValidator
from .risk_oracle import RiskEngine

logger = logging.getLogger(__name__)

# Pools above this interruption risk are never used in a homogeneous plan
RISK_CUTOFF = 0.5

# A last workhorse node below this efficiency is treated as dust
DUST_EFFICIENCY_THRESHOLD = 0.4

# Reported risk of a workhorse + dust mixed fleet
MIXED_FLEET_RISK_SCORE = 0.1

# Pool labels carried on generated nodes
HOMOGENEOUS_POOL = "gen"
MAIN_POOL = "main"
DUST_POOL = "dust"


class InfeasiblePlanError(Exception):
    """No catalog entry produced a plan that satisfies all constraints"""


class Optimizer:
    """
    Fleet optimizer

    Usage:
        optimizer = Optimizer(RiskEngine(), PolicyValidator())
        plan = optimizer.solve(OptimizationRequest(workloads, catalog, current_spend))
    """

    def __init__(
        self,
        risk: RiskEngine,
        policy: PolicyValidator,
        packer: Optional[Packer] = None
    ):
        self.risk = risk
        self.policy = policy
        self.packer = packer or Packer()

    def solve(self, request: OptimizationRequest) -> AllocationPlan:
        """
        Generate the cheapest feasible allocation plan

        Args:
            request: Workloads, instance catalog and current monthly spend

        Returns:
            AllocationPlan with nodes, monthly cost, savings and instructions

        Raises:
            InfeasiblePlanError: If neither phase produced a plan
        """
        best_plan = self._solve_homogeneous(request)

        hetero_plan = self._solve_heterogeneous(request)
        if hetero_plan is not None:
            if best_plan is None or hetero_plan.total_cost < best_plan.total_cost:
                best_plan = hetero_plan

        if best_plan is None:
            logger.warning(
                f"No feasible plan for {len(request.workloads)} workloads "
                f"across {len(request.catalog)} catalog entries"
            )
            raise InfeasiblePlanError("no feasible plan found satisfying all constraints")

        if best_plan.dropped_items:
            logger.warning(
                f"{len(best_plan.dropped_items)} workloads exceed the chosen node size and need manual placement: "
                f"{', '.join(item.id for item in best_plan.dropped_items)}"
            )

        logger.info(
            f"Selected plan: {len(best_plan.nodes)} nodes, ${best_plan.total_cost:.2f}/mo "
            f"(savings ${best_plan.savings:.2f}/mo, risk {best_plan.risk_score:.2f})"
        )
        return best_plan

    # ========================================
    # PHASE A: HOMOGENEOUS SWEEP
    # ========================================

    def _solve_homogeneous(self, request: OptimizationRequest) -> Optional[AllocationPlan]:
        best_plan = None
        min_cost = float("inf")

        for instance in request.catalog:
            # Churn and cost are not known per candidate here, so only the family check bites
            violation = self.policy.validate_proposal(0, instance.name, 0)
            if violation is not None:
                logger.debug(f"Skipping {instance.name}: {violation.message}")
                continue

            risk = self.risk.get_risk(instance.zone, instance.name)
            if risk > RISK_CUTOFF:
                logger.debug(f"Skipping {instance.name} in {instance.zone}: risk {risk:.2f} > {RISK_CUTOFF}")
                continue

            result = self.packer.pack_with_report(request.workloads, self._template(instance, HOMOGENEOUS_POOL))
            if result.dropped and not result.bins:
                logger.debug(f"Skipping {instance.name}: no workload fits a single node")
                continue

            total_cost = len(result.bins) * instance.hourly_cost * HOURS_PER_MONTH
            if total_cost < min_cost:
                min_cost = total_cost
                best_plan = AllocationPlan(
                    nodes=result.bins,
                    total_cost=total_cost,
                    savings=request.current_spend - total_cost,
                    risk_score=risk,
                    instructions=[f"Migrate to {len(result.bins)} nodes of type {instance.name}"],
                    dropped_items=result.dropped,
                )

        return best_plan

    # ========================================
    # PHASE B: HETEROGENEOUS REFINEMENT
    # ========================================

    def _solve_heterogeneous(self, request: OptimizationRequest) -> Optional[AllocationPlan]:
        if not request.catalog:
            return None

        candidates = sorted(request.catalog, key=lambda it: it.cost_efficiency)
        workhorse = candidates[0]

        result = self.packer.pack_with_report(request.workloads, self._template(workhorse, MAIN_POOL))
        if not result.bins:
            return None

        last_bin = result.bins[-1]
        if last_bin.efficiency() < DUST_EFFICIENCY_THRESHOLD:
            plan = self._plan_with_dust(request, workhorse, candidates, result)
            if plan is not None:
                return plan

        total_cost = len(result.bins) * workhorse.hourly_cost * HOURS_PER_MONTH
        return AllocationPlan(
            nodes=result.bins,
            total_cost=total_cost,
            savings=request.current_spend - total_cost,
            risk_score=self.risk.get_risk(workhorse.zone, workhorse.name),
            instructions=[f"Migrate to {len(result.bins)} nodes of type {workhorse.name}"],
            dropped_items=result.dropped,
        )

    def _plan_with_dust(
        self,
        request: OptimizationRequest,
        workhorse: InstanceType,
        candidates: List[InstanceType],
        result: PackingResult
    ) -> Optional[AllocationPlan]:
        """Move the under-filled last node onto the cheapest type that holds all of it"""
        main_fleet = result.bins[:-1]
        dust_items = result.bins[-1].items

        demand = Dimensions()
        for item in dust_items:
            demand = demand + item.dimensions

        dust_type = None
        for candidate in sorted(candidates, key=lambda it: it.hourly_cost):
            if candidate.cpu >= demand.cpu and candidate.ram >= demand.ram:
                dust_type = candidate
                break

        if dust_type is None:
            return None

        dust_bin = Bin(
            id=f"node-{dust_type.name}-{DUST_POOL}",
            capacity=Dimensions(cpu=dust_type.cpu, ram=dust_type.ram),
            node_type=dust_type.name,
            pool=DUST_POOL,
        )
        for item in dust_items:
            dust_bin.add_item(item)

        total_cost = 0.0
        instructions = []
        if main_fleet:
            total_cost += len(main_fleet) * workhorse.hourly_cost * HOURS_PER_MONTH
            instructions.append(f"pool-main: {len(main_fleet)} nodes of type {workhorse.name}")
        total_cost += dust_type.hourly_cost * HOURS_PER_MONTH
        instructions.append(f"pool-dust: 1 node of type {dust_type.name}")

        logger.debug(
            f"Dust node {dust_type.name} takes {len(dust_items)} workloads "
            f"({demand.cpu:.0f} mCPU / {demand.ram:.0f} MiB)"
        )

        return AllocationPlan(
            nodes=main_fleet + [dust_bin],
            total_cost=total_cost,
            savings=request.current_spend - total_cost,
            risk_score=MIXED_FLEET_RISK_SCORE,
            instructions=instructions,
            dropped_items=result.dropped,
        )

    @staticmethod
    def _template(instance: InstanceType, pool: str) -> NodeTemplate:
        return NodeTemplate(
            capacity=Dimensions(cpu=instance.cpu, ram=instance.ram),
            node_type=instance.name,
            pool=pool,
        )
