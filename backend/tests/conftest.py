"""Test configuration and fixtures for the policy decision engine.

Provides an in-memory persistence collaborator and reusable rule, scoring and
decision-tree documents.
"""

import asyncio
from datetime import date
from typing import Any, Optional
from uuid import uuid4

import pytest

from app.core.enums import DocumentKind
from app.models.schemas.simulation import (
    PolicyRecord,
    PolicyVersionRecord,
    SimulationHistoryItem,
)

POLICY_ID = "POL-2026-1234"


class InMemoryPolicySource:
    """Dictionary-backed stand-in for the policy document repository."""

    def __init__(
        self,
        fail_writes: bool = False,
        write_gate: Optional[asyncio.Event] = None,
    ):
        self.documents: dict[tuple[str, DocumentKind], Any] = {}
        self.policies: dict[str, PolicyRecord] = {}
        self.versions: dict[str, PolicyVersionRecord] = {}
        self.saved_results: list[dict[str, Any]] = []
        self.tested: list[str] = []
        self.fail_writes = fail_writes
        # Result writes block on this event when set
        self.write_gate = write_gate

    def put(self, policy_id: str, kind: DocumentKind, document: Any) -> None:
        self.documents[(policy_id, kind)] = document

    async def get_rules(self, policy_id: str) -> Optional[dict]:
        return self.documents.get((policy_id, DocumentKind.RULES))

    async def get_scoring(self, policy_id: str) -> Optional[dict]:
        return self.documents.get((policy_id, DocumentKind.SCORING))

    async def get_decision_tree(self, policy_id: str) -> Optional[dict]:
        return self.documents.get((policy_id, DocumentKind.DECISION_TREE))

    async def get_clauses(self, policy_id: str) -> Optional[list]:
        return self.documents.get((policy_id, DocumentKind.CLAUSES))

    async def get_policy(self, policy_id: str) -> Optional[PolicyRecord]:
        return self.policies.get(policy_id)

    async def save_simulation_result(
        self, policy_id: str, simulation_input: dict[str, Any], result: dict[str, Any]
    ) -> None:
        if self.write_gate is not None:
            await self.write_gate.wait()
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        self.saved_results.append(
            {"policy_id": policy_id, "simulation_input": simulation_input, "result": result}
        )

    async def get_simulation_history(
        self, policy_id: str, limit: int
    ) -> list[SimulationHistoryItem]:
        items = [
            SimulationHistoryItem(**saved)
            for saved in reversed(self.saved_results)
            if saved["policy_id"] == policy_id
        ]
        return items[:limit]

    async def mark_tree_tested(self, policy_id: str) -> None:
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        self.tested.append(policy_id)

    async def save_version(
        self,
        policy_id: str,
        version_number: int,
        snapshot: dict[str, Any],
        status: Optional[str],
        created_by: str,
    ) -> str:
        version_id = str(uuid4())
        self.versions[version_id] = PolicyVersionRecord(
            id=version_id,
            policy_id=policy_id,
            version_number=version_number,
            json_snapshot=snapshot,
            status=status,
            created_by=created_by,
        )
        return version_id

    async def get_version(self, version_id: str) -> Optional[PolicyVersionRecord]:
        return self.versions.get(version_id)


@pytest.fixture
def eligibility_rules() -> dict[str, Any]:
    """Adults in supported states."""
    return {
        "type": "group",
        "operator": "AND",
        "conditions": [
            {"field": "age", "operator": ">=", "value": 18},
            {"field": "state", "operator": "IN", "value": ["CA", "NY"]},
        ],
    }


@pytest.fixture
def scoring_config() -> dict[str, Any]:
    """Two categories whose weights total 100."""
    return {
        "categories": [
            {
                "name": "Credit",
                "parameters": [
                    {"field": "credit_score", "operator": ">=", "threshold": 700, "weight": 40},
                    {"field": "income", "operator": ">", "threshold": 50000, "weight": 30},
                ],
            },
            {
                "name": "Stability",
                "parameters": [
                    {"field": "years_employed", "operator": ">=", "threshold": 2, "weight": 30},
                ],
            },
        ]
    }


@pytest.fixture
def score_tree() -> dict[str, Any]:
    """Decision tree keyed on the computed score."""
    return {
        "type": "condition",
        "if": {"field": "_score", "operator": ">=", "value": 70},
        "then": {"action": "APPROVE", "tier": "TIER_1"},
        "else": {"action": "REVIEW", "tier": "TIER_2"},
    }


@pytest.fixture
def applicant() -> dict[str, Any]:
    return {
        "age": 30,
        "state": "CA",
        "credit_score": 720,
        "income": 40000,
        "years_employed": 3,
    }


@pytest.fixture
def policy_source() -> InMemoryPolicySource:
    return InMemoryPolicySource()


@pytest.fixture
def configured_source(
    policy_source: InMemoryPolicySource,
    eligibility_rules: dict[str, Any],
    scoring_config: dict[str, Any],
    score_tree: dict[str, Any],
) -> InMemoryPolicySource:
    """Source holding a fully configured policy."""
    policy_source.policies[POLICY_ID] = PolicyRecord(
        id=POLICY_ID,
        policy_name="Personal Loan Standard",
        status="DRAFT",
        version=3,
        effective_date=date(2026, 2, 1),
        expiry_date=date(2027, 2, 1),
        tags=["retail", "unsecured"],
    )
    policy_source.put(POLICY_ID, DocumentKind.RULES, eligibility_rules)
    policy_source.put(POLICY_ID, DocumentKind.SCORING, scoring_config)
    policy_source.put(POLICY_ID, DocumentKind.DECISION_TREE, score_tree)
    policy_source.put(
        POLICY_ID,
        DocumentKind.CLAUSES,
        [{"triggerCondition": "income < 20000", "clauseTemplate": "Co-signer required"}],
    )
    return policy_source
