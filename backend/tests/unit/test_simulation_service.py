"""Unit tests for the simulation orchestration service."""

import asyncio
import logging
from datetime import date

import pytest

from conftest import POLICY_ID, InMemoryPolicySource
from app.core.enums import DocumentKind
from app.models.schemas.simulation import PolicyRecord
from app.services.config_source import PolicyNotFoundError
from app.services.rule_engine.base import StructuralError
from app.services.rule_engine.engine import SimulationEngine
from app.services.simulation_service import SimulationService, wait_for_pending_writes


class TestRunSimulation:
    """Test end-to-end simulations against stored configuration."""

    @pytest.mark.asyncio
    async def test_runs_and_persists_result(self, configured_source, applicant):
        service = SimulationService(configured_source)

        result = await service.run_simulation(POLICY_ID, applicant)
        await wait_for_pending_writes()

        assert result.decision == "APPROVE"
        assert result.score == 70
        assert configured_source.saved_results == [
            {
                "policy_id": POLICY_ID,
                "simulation_input": applicant,
                "result": result.to_dict(),
            }
        ]

    @pytest.mark.asyncio
    async def test_unconfigured_policy_uses_score_bands(self, policy_source):
        service = SimulationService(policy_source)

        result = await service.run_simulation(POLICY_ID, {"age": 40})

        assert result.decision == "REJECT"
        assert result.score == 0
        assert result.triggered_rule == "Score: 0"

    @pytest.mark.asyncio
    async def test_failed_write_does_not_reach_caller(self, applicant, caplog):
        source = InMemoryPolicySource(fail_writes=True)
        service = SimulationService(source)

        with caplog.at_level(logging.ERROR, logger="app.services.simulation_service"):
            result = await service.run_simulation(POLICY_ID, applicant)
            await wait_for_pending_writes()

        assert result.decision == "REJECT"
        assert source.saved_results == []
        assert "Failed to persist simulation result" in caplog.text

    @pytest.mark.asyncio
    async def test_result_returned_before_write_settles(self, configured_source, applicant):
        gate = asyncio.Event()
        configured_source.write_gate = gate
        service = SimulationService(configured_source)

        result = await service.run_simulation(POLICY_ID, applicant)

        assert result.decision == "APPROVE"
        assert configured_source.saved_results == []

        gate.set()
        await wait_for_pending_writes()

        assert len(configured_source.saved_results) == 1
        assert configured_source.saved_results[0]["result"] == result.to_dict()

    @pytest.mark.asyncio
    async def test_malformed_configuration_raises(self, policy_source, applicant):
        policy_source.put(POLICY_ID, DocumentKind.RULES, {"conditions": [{"value": 1}]})
        service = SimulationService(policy_source)

        with pytest.raises(StructuralError):
            await service.run_simulation(POLICY_ID, applicant)

        assert policy_source.saved_results == []

    @pytest.mark.asyncio
    async def test_uses_injected_engine(self, policy_source, scoring_config, applicant):
        policy_source.put(POLICY_ID, DocumentKind.SCORING, scoring_config)
        service = SimulationService(
            policy_source, engine=SimulationEngine(approve_threshold=70)
        )

        result = await service.run_simulation(POLICY_ID, applicant)

        assert result.decision == "APPROVE"
        assert result.tier == "TIER_1"


class TestValidatePolicy:
    """Test aggregated completeness checks."""

    @pytest.mark.asyncio
    async def test_complete_policy(self, configured_source):
        service = SimulationService(configured_source)

        report = await service.validate_policy(POLICY_ID, today=date(2026, 1, 1))

        assert report.valid is True
        assert report.errors == []
        assert report.completed_steps == {
            "attributes": True,
            "eligibility": True,
            "scoring": True,
            "decisionTree": True,
            "clauses": True,
        }

    @pytest.mark.asyncio
    async def test_incomplete_policy_reports_every_problem(self, policy_source):
        policy_source.policies[POLICY_ID] = PolicyRecord(
            id=POLICY_ID,
            policy_name="Draft",
            effective_date=date(2025, 1, 1),
            expiry_date=date(2024, 12, 31),
        )
        policy_source.put(
            POLICY_ID,
            DocumentKind.SCORING,
            {
                "categories": [
                    {
                        "name": "Credit",
                        "parameters": [
                            {"field": "credit_score", "operator": ">=", "threshold": 700, "weight": 70}
                        ],
                    }
                ]
            },
        )
        service = SimulationService(policy_source)

        report = await service.validate_policy(POLICY_ID, today=date(2026, 1, 1))

        assert report.valid is False
        assert report.errors == [
            "No eligibility rules defined",
            "Scoring weight is 70%, must be 100%",
            "No decision tree configured",
            "No clauses defined",
            "Effective date is in the past",
            "Expiry date must be after effective date",
        ]
        assert report.completed_steps == {
            "attributes": True,
            "eligibility": False,
            "scoring": False,
            "decisionTree": False,
            "clauses": False,
        }

    @pytest.mark.asyncio
    async def test_missing_scoring_categories(self, configured_source):
        configured_source.put(POLICY_ID, DocumentKind.SCORING, {"categories": []})
        service = SimulationService(configured_source)

        report = await service.validate_policy(POLICY_ID, today=date(2026, 1, 1))

        assert report.errors == ["No scoring parameters defined"]

    @pytest.mark.asyncio
    async def test_non_numeric_weight_is_reported(self, configured_source):
        configured_source.put(
            POLICY_ID,
            DocumentKind.SCORING,
            {
                "categories": [
                    {
                        "name": "Base",
                        "parameters": [
                            {"field": "x", "operator": ">=", "threshold": 0, "weight": "abc"}
                        ],
                    }
                ]
            },
        )
        service = SimulationService(configured_source)

        report = await service.validate_policy(POLICY_ID, today=date(2026, 1, 1))

        assert report.valid is False
        assert report.errors == ["Weight for 'x' must be numeric, got 'abc'"]
        assert report.completed_steps["scoring"] is False

    @pytest.mark.asyncio
    async def test_non_object_scoring_category_is_reported(self, configured_source):
        configured_source.put(POLICY_ID, DocumentKind.SCORING, {"categories": ["Credit"]})
        service = SimulationService(configured_source)

        report = await service.validate_policy(POLICY_ID, today=date(2026, 1, 1))

        assert report.valid is False
        assert report.errors == ["Scoring category must be an object, got str"]
        assert report.completed_steps["scoring"] is False

    @pytest.mark.asyncio
    async def test_effective_today_is_not_in_the_past(self, configured_source):
        service = SimulationService(configured_source)

        report = await service.validate_policy(POLICY_ID, today=date(2026, 2, 1))

        assert report.valid is True

    @pytest.mark.asyncio
    async def test_unknown_policy_raises(self, policy_source):
        service = SimulationService(policy_source)

        with pytest.raises(PolicyNotFoundError):
            await service.validate_policy("POL-MISSING")


class TestDecisionTreeTesting:
    """Test evaluating stored trees with sample data."""

    @pytest.mark.asyncio
    async def test_evaluates_tree_and_marks_tested(self, configured_source):
        service = SimulationService(configured_source)

        result = await service.test_decision_tree(POLICY_ID, {"_score": 85})

        assert result.decision == "APPROVE"
        assert result.path == ["_score >= 70 ✓"]
        assert configured_source.tested == [POLICY_ID]

    @pytest.mark.asyncio
    async def test_missing_score_takes_else_branch(self, configured_source):
        service = SimulationService(configured_source)

        result = await service.test_decision_tree(POLICY_ID, {"age": 30})

        assert result.decision == "REVIEW"
        assert result.trace == ["_score >= 70 ✗"]

    @pytest.mark.asyncio
    async def test_no_tree_returns_none(self, policy_source):
        service = SimulationService(policy_source)

        assert await service.test_decision_tree(POLICY_ID, {}) is None
        assert policy_source.tested == []

    @pytest.mark.asyncio
    async def test_failed_mark_still_returns_result(self, score_tree, caplog):
        source = InMemoryPolicySource(fail_writes=True)
        source.put(POLICY_ID, DocumentKind.DECISION_TREE, score_tree)
        service = SimulationService(source)

        with caplog.at_level(logging.ERROR, logger="app.services.simulation_service"):
            result = await service.test_decision_tree(POLICY_ID, {"_score": 10})

        assert result.decision == "REVIEW"
        assert "Failed to mark decision tree tested" in caplog.text


class TestHistory:
    """Test retrieval of persisted simulation results."""

    @pytest.mark.asyncio
    async def test_newest_first_with_limit(self, configured_source):
        service = SimulationService(configured_source)
        for age in (20, 30, 40):
            await service.run_simulation(POLICY_ID, {"age": age, "state": "CA"})
        await wait_for_pending_writes()

        history = await service.get_history(POLICY_ID, limit=2)

        assert [item.simulation_input["age"] for item in history] == [40, 30]

    @pytest.mark.asyncio
    async def test_default_limit(self, configured_source):
        service = SimulationService(configured_source)
        for _ in range(25):
            await service.run_simulation(POLICY_ID, {"age": 20, "state": "NY"})
        await wait_for_pending_writes()

        history = await service.get_history(POLICY_ID)

        assert len(history) == 20
