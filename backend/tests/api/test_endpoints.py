"""API tests for the simulation, decision-tree, scoring, rules and version endpoints."""

from contextlib import ExitStack

import pytest
from fastapi.testclient import TestClient

from conftest import POLICY_ID, InMemoryPolicySource
from app.core.enums import DocumentKind
from app.deps import get_policy_source
from app.main import app


@pytest.fixture
def client_for():
    """Build a TestClient whose persistence collaborator is the given source."""
    with ExitStack() as stack:

        def _build(source: InMemoryPolicySource) -> TestClient:
            app.dependency_overrides[get_policy_source] = lambda: source
            return stack.enter_context(TestClient(app))

        yield _build

    app.dependency_overrides.clear()


class TestSimulationEndpoints:
    """Test /api/v1/simulation routes."""

    def test_simulate_full(self, client_for, configured_source, applicant):
        client = client_for(configured_source)

        response = client.post(f"/api/v1/simulation/{POLICY_ID}/simulate-full", json=applicant)

        assert response.status_code == 200
        data = response.json()
        assert data["decision"] == "APPROVE"
        assert data["score"] == 70
        assert data["tier"] == "TIER_1"
        assert data["triggeredRule"] == "_score >= 70 ✓"
        assert data["reason"] == "Score 70 resulted in APPROVE"
        assert len(data["trace"]) == 6

    def test_simulate_ineligible_applicant(self, client_for, configured_source):
        client = client_for(configured_source)

        response = client.post(
            f"/api/v1/simulation/{POLICY_ID}/simulate-full", json={"age": 16, "state": "CA"}
        )

        assert response.status_code == 200
        assert response.json()["triggeredRule"] == "Eligibility Filter"
        assert response.json()["score"] == 0

    def test_simulate_malformed_configuration(self, client_for, policy_source):
        policy_source.put(POLICY_ID, DocumentKind.RULES, {"conditions": [{"field": "age"}]})
        client = client_for(policy_source)

        response = client.post(f"/api/v1/simulation/{POLICY_ID}/simulate-full", json={"age": 1})

        assert response.status_code == 422
        assert "operator" in response.json()["detail"]

    def test_validate_unknown_policy(self, client_for, policy_source):
        client = client_for(policy_source)

        response = client.post("/api/v1/simulation/POL-MISSING/validate")

        assert response.status_code == 404
        assert response.json()["detail"] == "Policy not found"

    def test_validate_reports_completed_steps(self, client_for, configured_source):
        client = client_for(configured_source)

        response = client.post(f"/api/v1/simulation/{POLICY_ID}/validate")

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"valid", "errors", "completedSteps"}
        assert data["completedSteps"]["decisionTree"] is True

    def test_history(self, client_for, configured_source):
        configured_source.saved_results.append(
            {"policy_id": POLICY_ID, "simulation_input": {"age": 30}, "result": {"decision": "APPROVE"}}
        )
        client = client_for(configured_source)

        response = client.get(f"/api/v1/simulation/{POLICY_ID}/history", params={"limit": 5})

        assert response.status_code == 200
        assert response.json()[0]["simulationInput"] == {"age": 30}

    def test_history_limit_is_bounded(self, client_for, configured_source):
        client = client_for(configured_source)

        response = client.get(f"/api/v1/simulation/{POLICY_ID}/history", params={"limit": 0})

        assert response.status_code == 422


class TestDecisionTreeEndpoints:
    """Test /api/v1/decision-tree routes."""

    def test_tree_test_returns_trace_and_path(self, client_for, configured_source):
        client = client_for(configured_source)

        response = client.post(f"/api/v1/decision-tree/{POLICY_ID}/test", json={"_score": 90})

        assert response.status_code == 200
        assert response.json() == {
            "decision": "APPROVE",
            "tier": "TIER_1",
            "trace": ["_score >= 70 ✓"],
            "path": ["_score >= 70 ✓"],
        }
        assert configured_source.tested == [POLICY_ID]

    def test_no_tree_configured(self, client_for, policy_source):
        client = client_for(policy_source)

        response = client.post(f"/api/v1/decision-tree/{POLICY_ID}/test", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "No decision tree configured"

    def test_malformed_tree(self, client_for, policy_source):
        policy_source.put(POLICY_ID, DocumentKind.DECISION_TREE, {"type": "condition"})
        client = client_for(policy_source)

        response = client.post(f"/api/v1/decision-tree/{POLICY_ID}/test", json={})

        assert response.status_code == 422


class TestScoringEndpoints:
    """Test /api/v1/scoring routes."""

    def test_validate_scoring(self, client_for, configured_source):
        client = client_for(configured_source)

        response = client.post(f"/api/v1/scoring/{POLICY_ID}/validate")

        assert response.status_code == 200
        assert response.json() == {
            "valid": True,
            "errors": [],
            "totalWeight": 100,
            "parameterCount": 3,
        }

    def test_validate_missing_scoring(self, client_for, policy_source):
        client = client_for(policy_source)

        response = client.post(f"/api/v1/scoring/{POLICY_ID}/validate")

        assert response.json()["errors"] == ["No scoring parameters defined"]

    def test_validate_malformed_scoring(self, client_for, policy_source):
        policy_source.put(POLICY_ID, DocumentKind.SCORING, {"categories": ["Credit"]})
        client = client_for(policy_source)

        response = client.post(f"/api/v1/scoring/{POLICY_ID}/validate")

        assert response.status_code == 422
        assert "must be an object" in response.json()["detail"]


class TestRulesEndpoints:
    """Test /api/v1/rules routes."""

    def test_generate_sql(self, client_for, policy_source, eligibility_rules):
        client = client_for(policy_source)

        response = client.post("/api/v1/rules/generate-sql", json={"ruleJson": eligibility_rules})

        assert response.status_code == 200
        assert response.json() == {"sql": "(age >= 18 AND state IN ('CA', 'NY'))"}

    def test_generate_sql_without_rules(self, client_for, policy_source):
        client = client_for(policy_source)

        response = client.post("/api/v1/rules/generate-sql", json={})

        assert response.json() == {"sql": ""}


class TestVersionEndpoints:
    """Test /api/v1/versions routes."""

    def test_snapshot_and_compare(self, client_for, configured_source):
        client = client_for(configured_source)

        first = client.post(f"/api/v1/versions/{POLICY_ID}/snapshot", json={"userId": "analyst-7"})
        configured_source.put(POLICY_ID, DocumentKind.CLAUSES, [])
        second = client.post(f"/api/v1/versions/{POLICY_ID}/snapshot")

        assert first.status_code == 201
        assert first.json()["versionNumber"] == 3
        assert configured_source.versions[first.json()["id"]].created_by == "analyst-7"
        assert configured_source.versions[second.json()["id"]].created_by == "system"

        response = client.get(
            f"/api/v1/versions/{POLICY_ID}/compare",
            params={"base": first.json()["id"], "compare": second.json()["id"]},
        )

        assert response.status_code == 200
        diff = response.json()["diff"]
        assert len(diff) == 1
        assert diff[0]["type"] == "modified"
        assert diff[0]["path"] == "clauses"
        assert diff[0]["newValue"] == []

    def test_snapshot_unknown_policy(self, client_for, policy_source):
        client = client_for(policy_source)

        response = client.post("/api/v1/versions/POL-MISSING/snapshot")

        assert response.status_code == 404

    def test_compare_unknown_versions(self, client_for, policy_source):
        client = client_for(policy_source)

        response = client.get(
            f"/api/v1/versions/{POLICY_ID}/compare", params={"base": "a", "compare": "b"}
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Version not found"


class TestRoot:
    """Test the service banner."""

    def test_root(self, client_for, policy_source):
        client = client_for(policy_source)

        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["message"] == "Policy Decision Engine API"
