"""
Policy Validator - Safety Limits for Proposed Placements
=======================================================

Hard limits every automated recommendation must respect:
1. Churn: share of infrastructure changed per run <= max_churn_percent
2. Spend: total monthly cost <= max_spend_limit
3. Instance family: type name must start with an allowed family prefix

Checks run in that order and stop at the first violation, so a proposal
breaking several limits reports only the first one.

Violations are an expected, frequent outcome (most catalog entries are
rejected), so validate_proposal returns them instead of raising.
enforce_proposal raises for callers that prefer exception flow.
"""

from typing import Optional
import logging

from ..config.settings import PolicyConfig

logger = logging.getLogger(__name__)


class SafetyViolation(Exception):
    """A proposal broke a policy limit"""

    CHURN_LIMIT = "churn_limit"
    SPEND_LIMIT = "spend_limit"
    INSTANCE_FAMILY = "instance_family"

    def __init__(self, violation_type: str, message: str):
        self.violation_type = violation_type
        self.message = message
        super().__init__(message)


class PolicyValidator:
    """Checks proposals against an immutable PolicyConfig"""

    def __init__(self, policy: Optional[PolicyConfig] = None):
        self.policy = policy or PolicyConfig()

    def validate_proposal(
        self,
        churn_percent: float,
        target_instance_type: str,
        total_cost: float
    ) -> Optional[SafetyViolation]:
        """
        Validate a proposed optimization

        Args:
            churn_percent: Share of existing infrastructure the proposal changes (percent)
            target_instance_type: Instance type the proposal moves to
            total_cost: Monthly cost of the proposal (USD)

        Returns:
            None if the proposal is allowed, otherwise the first SafetyViolation
        """
        if churn_percent > self.policy.max_churn_percent:
            return SafetyViolation(
                SafetyViolation.CHURN_LIMIT,
                f"Proposed churn {churn_percent:.1f}% exceeds limit {self.policy.max_churn_percent:.1f}%"
            )

        if total_cost > self.policy.max_spend_limit:
            return SafetyViolation(
                SafetyViolation.SPEND_LIMIT,
                f"Total cost ${total_cost:.2f} exceeds limit ${self.policy.max_spend_limit:.2f}"
            )

        if not any(target_instance_type.startswith(family) for family in self.policy.allowed_families):
            return SafetyViolation(
                SafetyViolation.INSTANCE_FAMILY,
                f"Instance type {target_instance_type} is not in allowed families list"
            )

        return None

    def enforce_proposal(self, churn_percent: float, target_instance_type: str, total_cost: float) -> None:
        """Same checks as validate_proposal, raising SafetyViolation on failure"""
        violation = self.validate_proposal(churn_percent, target_instance_type, total_cost)
        if violation is not None:
            logger.warning(f"Safety trip ({violation.violation_type}): {violation.message}")
            raise violation
