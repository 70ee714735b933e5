"""
Fleet Optimizer Engine Tests
============================

End-to-end tests from discovered resources to DecisionResponse:
- recommended / skipped / no_recommendation outcomes
- Per-call policy overrides
- Shared risk oracle
- Execution plan and metadata
"""

import pytest
from pydantic import ValidationError

from fleetopt.decision_engine.fleet_optimizer import FleetOptimizerEngine
from fleetopt.decision_engine.risk_oracle import RiskEngine


def prices(region, instance_type):
    return {"m5.large": 73.0, "m5.2xlarge": 146.0}[instance_type]


@pytest.fixture
def cluster_state():
    return {
        "resources": [
            {"id": f"i-00{n}", "type": "AWS::EC2::Instance", "instance_type": "m5.large"}
            for n in range(1, 5)
        ] + [{"id": "vol-1", "type": "AWS::EC2::Volume"}]
    }


@pytest.fixture
def requirements():
    return {"region": "us-east-1", "candidate_types": ["m5.large", "m5.2xlarge"]}


@pytest.fixture
def engine(settings):
    return FleetOptimizerEngine(settings=settings, price_lookup=prices)


class TestFleetOptimizerEngine:
    """Test suite for FleetOptimizerEngine"""

    def test_consolidates_onto_larger_node(self, engine, cluster_state, requirements):
        """Four m5.large instances fit one m5.2xlarge"""
        response = engine.decide(cluster_state, requirements)

        assert response.engine == "FleetOptimizerEngine"
        assert response.status == "recommended"
        assert response.current_monthly_spend == pytest.approx(292.0)
        assert response.projected_monthly_cost == pytest.approx(146.0)
        assert response.estimated_savings == pytest.approx(146.0)

        assert len(response.recommendations) == 1
        recommendation = response.recommendations[0]
        assert recommendation.pool == "gen"
        assert recommendation.instance_type == "m5.2xlarge"
        assert recommendation.node_count == 1
        assert recommendation.availability_zone == "us-east-1a"
        assert recommendation.hourly_price == pytest.approx(0.2)
        assert recommendation.monthly_cost == pytest.approx(146.0)
        assert recommendation.workload_ids == ["i-001", "i-002", "i-003", "i-004"]
        assert recommendation.average_efficiency == pytest.approx(1.0)

    def test_execution_plan(self, engine, cluster_state, requirements):
        """Provision, migrate, then decommission"""
        response = engine.decide(cluster_state, requirements)

        assert [s.action for s in response.execution_plan] == [
            "provision_pool", "migrate_workloads", "decommission_nodes"
        ]
        assert [s.step for s in response.execution_plan] == [1, 2, 3]
        assert all(s.requires_confirmation for s in response.execution_plan)
        assert response.execution_plan[0].description == "Migrate to 1 nodes of type m5.2xlarge"
        assert response.execution_plan[0].parameters["instance_type"] == "m5.2xlarge"
        assert response.execution_plan[1].parameters == {"workload_count": 4}
        assert response.execution_plan[2].parameters == {"node_count": 4}

    def test_metadata_and_risk(self, engine, cluster_state, requirements):
        response = engine.decide(cluster_state, requirements)

        assert response.metadata["region"] == "us-east-1"
        assert response.metadata["catalog_size"] == 2
        assert response.metadata["input_workloads"] == 4
        assert response.metadata["packed_workloads"] == 4
        assert response.metadata["dropped_workload_ids"] == []
        assert response.metadata["node_count"] == 1
        assert response.risk_assessment["plan_risk_score"] == pytest.approx(0.05)
        assert response.risk_assessment["risk_cutoff"] == 0.5

    def test_no_compute_is_skipped(self, engine, requirements):
        """Nothing to pack is a normal outcome"""
        response = engine.decide({"resources": [{"id": "b", "type": "AWS::S3::Bucket"}]}, requirements)

        assert response.status == "skipped"
        assert response.recommendations == []
        assert response.metadata["reason"] == "No active compute workloads detected"

    def test_empty_catalog_is_no_recommendation(self, engine, cluster_state):
        """Solver failure is reported, not raised"""
        response = engine.decide(cluster_state, {"candidate_types": []})

        assert response.status == "no_recommendation"
        assert response.recommendations == []
        assert response.projected_monthly_cost is None
        assert response.current_monthly_spend == pytest.approx(292.0)
        assert "no feasible plan" in response.metadata["reason"]

    def test_missing_resources_raises(self, engine, requirements):
        with pytest.raises(ValueError, match="resources"):
            engine.decide({}, requirements)

    def test_default_region(self, engine, cluster_state):
        response = engine.decide(cluster_state, {"candidate_types": ["m5.large", "m5.2xlarge"]})

        assert response.metadata["region"] == "us-east-1"
        assert response.recommendations[0].availability_zone == "us-east-1a"

    def test_constraint_override_disables_phase_a(self, engine, cluster_state, requirements):
        """Disallowing m5 leaves only the workhorse plan"""
        response = engine.decide(cluster_state, requirements, constraints={"allowed_families": ["c5"]})

        assert response.status == "recommended"
        assert response.recommendations[0].pool == "main"
        assert response.recommendations[0].instance_type == "m5.2xlarge"
        # Settings policy itself is untouched
        assert "m5" in engine.settings.policy.allowed_families

    def test_unknown_constraints_ignored(self, engine, cluster_state, requirements):
        response = engine.decide(cluster_state, requirements, constraints={"max_risk_score": 0.1})
        assert response.recommendations[0].pool == "gen"

    def test_shared_risk_oracle(self, settings, cluster_state, requirements):
        """Interruptions recorded outside the engine steer Phase A away"""
        oracle = RiskEngine(settings.risk)
        oracle.record_interruption("us-east-1a", "m5.2xlarge")
        engine = FleetOptimizerEngine(settings=settings, risk=oracle, price_lookup=prices)

        response = engine.decide(cluster_state, requirements)

        # Phase A only has m5.large at 292; the workhorse plan is cheaper
        assert response.recommendations[0].pool == "main"
        assert response.projected_monthly_cost == pytest.approx(146.0)
        assert response.risk_assessment["plan_risk_score"] == pytest.approx(1.0)
        assert response.risk_assessment["tracked_pools"] == {"us-east-1a:m5.2xlarge": 1.0}

    def test_response_serializes(self, engine, cluster_state, requirements):
        payload = engine.decide(cluster_state, requirements).model_dump(mode="json")

        assert payload["status"] == "recommended"
        assert payload["recommendations"][0]["instance_type"] == "m5.2xlarge"


class TestPolicyOverrides:
    """Per-call constraints are validated like configured policy"""

    def test_validated_override_restricts_families(self, engine):
        policy = engine._policy_for({"allowed_families": ["c5"]})

        assert policy.allowed_families == ["c5"]
        assert policy.max_churn_percent == engine.settings.policy.max_churn_percent

    def test_bare_string_families_rejected(self, engine, cluster_state, requirements):
        """A string is not a family list; it must not widen the whitelist to single characters"""
        with pytest.raises(ValidationError):
            engine._policy_for({"allowed_families": "c5"})

        response = engine.decide(cluster_state, requirements, constraints={"allowed_families": "c5"})

        assert response.status == "no_recommendation"
        assert response.recommendations == []
        assert response.metadata["reason"] == "Invalid policy override"
        assert response.metadata["invalid_fields"] == ["allowed_families"]

    def test_non_numeric_limit_reported_not_raised(self, engine, cluster_state, requirements):
        response = engine.decide(cluster_state, requirements, constraints={"max_spend_limit": "lots"})

        assert response.status == "no_recommendation"
        assert response.current_monthly_spend == pytest.approx(292.0)
        assert response.metadata["invalid_fields"] == ["max_spend_limit"]

    def test_numeric_string_limit_is_coerced(self, engine, cluster_state, requirements):
        """Coercible values are normalized to the field type"""
        assert engine._policy_for({"max_spend_limit": "5000"}).max_spend_limit == 5000.0

        response = engine.decide(cluster_state, requirements, constraints={"max_spend_limit": "5000"})
        assert response.status == "recommended"

    def test_out_of_range_limit_rejected(self, engine, cluster_state, requirements):
        response = engine.decide(cluster_state, requirements, constraints={"max_churn_percent": -5})

        assert response.status == "no_recommendation"
        assert response.metadata["invalid_fields"] == ["max_churn_percent"]


class TestEngineConfig:

    def test_config_candidate_types_are_default(self, settings, cluster_state):
        """config["candidate_types"] applies when the request names none"""
        engine = FleetOptimizerEngine(config={"candidate_types": ["m5.large"]}, settings=settings, price_lookup=prices)

        response = engine.decide(cluster_state, {})

        assert response.metadata["catalog_size"] == 1
        assert response.recommendations[0].instance_type == "m5.large"

    def test_request_candidate_types_win_over_config(self, settings, cluster_state, requirements):
        engine = FleetOptimizerEngine(config={"candidate_types": ["m5.large"]}, settings=settings, price_lookup=prices)

        response = engine.decide(cluster_state, requirements)

        assert response.metadata["catalog_size"] == 2
        assert response.recommendations[0].instance_type == "m5.2xlarge"

    def test_decommission_counts_compute_only(self, engine, cluster_state, requirements):
        """The volume in cluster_state is not a node to decommission"""
        response = engine.decide(cluster_state, requirements)

        assert response.execution_plan[-1].parameters == {"node_count": 4}
