"""
Base Decision Engine

Abstract base class for all decision engines
Defines fixed input/output contract for pluggable architecture
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
import logging

from ..schemas.responses import DecisionResponse, ExecutionStep, Recommendation

logger = logging.getLogger(__name__)


class BaseDecisionEngine(ABC):
    """
    Base class for all decision engines

    All decision engines must:
    - Accept a cluster state snapshot as input
    - Return a DecisionResponse with recommendations
    - Include an execution plan
    """

    # Keys every cluster_state must carry
    REQUIRED_STATE_KEYS: List[str] = []

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize decision engine

        Args:
            config: Engine-specific configuration
        """
        self.config = config or {}
        self.engine_name = self.__class__.__name__
        logger.info(f"Initialized decision engine: {self.engine_name}")

    @abstractmethod
    def decide(
        self,
        cluster_state: Dict[str, Any],
        requirements: Dict[str, Any],
        constraints: Optional[Dict[str, Any]] = None
    ) -> DecisionResponse:
        """
        Make optimization decision

        Args:
            cluster_state: Current infrastructure snapshot
            requirements: Decision-specific requirements
            constraints: Safety constraints (optional)

        Returns:
            DecisionResponse
        """
        pass

    def validate_input(self, cluster_state: Dict[str, Any]) -> bool:
        """
        Validate input cluster state

        Args:
            cluster_state: Cluster state to validate

        Returns:
            True if valid, raises exception otherwise
        """
        for key in self.REQUIRED_STATE_KEYS:
            if key not in cluster_state:
                raise ValueError(f"Missing required key in cluster_state: {key}")
        return True

    def create_response(
        self,
        status: str,
        recommendations: List[Recommendation],
        execution_plan: List[ExecutionStep],
        current_monthly_spend: float = 0.0,
        projected_monthly_cost: Optional[float] = None,
        estimated_savings: float = 0.0,
        risk_assessment: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> DecisionResponse:
        """Create standardized decision response"""
        return DecisionResponse(
            engine=self.engine_name,
            status=status,
            recommendations=recommendations,
            current_monthly_spend=round(current_monthly_spend, 2),
            projected_monthly_cost=None if projected_monthly_cost is None else round(projected_monthly_cost, 2),
            estimated_savings=round(estimated_savings, 2),
            risk_assessment=risk_assessment or {},
            execution_plan=execution_plan,
            metadata=metadata or {},
        )
