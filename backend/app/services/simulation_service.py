"""Simulation service for orchestrating a policy simulation end to end."""

import asyncio
import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, Optional

from app.config import settings
from app.models.schemas.simulation import PolicyValidationResponse, SimulationHistoryItem
from app.services.config_source import PolicyConfigSource, PolicyNotFoundError
from app.services.rule_engine.base import (
    DecisionTreeResult,
    SimulationResult,
    StructuralError,
    format_scalar,
)
from app.services.rule_engine.engine import SimulationEngine, has_decision_tree
from app.services.rule_engine.scoring import ScoringEngine

logger = logging.getLogger(__name__)

# Detached result writes; the event loop only keeps weak references to tasks
_background_writes: set[asyncio.Task] = set()


async def wait_for_pending_writes() -> None:
    """Wait until every detached result write has settled."""
    while True:
        pending = [task for task in _background_writes if not task.done()]
        if not pending:
            return
        await asyncio.gather(*pending, return_exceptions=True)


class SimulationService:
    """
    Simulation service to run the rule engine against stored configuration.

    This service:
    - Fetches the rule, scoring and decision-tree documents concurrently
    - Runs the pure SimulationEngine over them
    - Persists each result as a detached, best-effort write
    - Aggregates policy completeness checks
    - Runs stored decision trees against sample data
    """

    def __init__(
        self,
        source: PolicyConfigSource,
        engine: Optional[SimulationEngine] = None,
    ):
        """
        Initialize the simulation service.

        Args:
            source: Persistence collaborator supplying configuration documents
            engine: Simulation engine (built from settings when omitted)
        """
        self.source = source
        self.engine = engine or SimulationEngine(
            max_depth=settings.MAX_TREE_DEPTH,
            approve_threshold=settings.APPROVE_SCORE_THRESHOLD,
            review_threshold=settings.REVIEW_SCORE_THRESHOLD,
        )

    async def run_simulation(
        self,
        policy_id: str,
        applicant_data: Mapping[str, Any],
    ) -> SimulationResult:
        """
        Run a full simulation for a policy.

        The result is returned before its persistence settles; a failed write
        is logged and never reaches the caller.

        Args:
            policy_id: External policy identifier
            applicant_data: Flat applicant field values

        Returns:
            SimulationResult with the unified trace

        Raises:
            StructuralError: If a stored configuration document is malformed
        """
        rules, scoring_config, decision_tree = await asyncio.gather(
            self.source.get_rules(policy_id),
            self.source.get_scoring(policy_id),
            self.source.get_decision_tree(policy_id),
        )

        logger.info(f"Running simulation for policy {policy_id}")
        result = self.engine.simulate(rules, scoring_config, decision_tree, applicant_data)
        logger.info(
            f"Simulation for policy {policy_id} finished: "
            f"{result.decision} (score {format_scalar(result.score)})"
        )

        self._persist_in_background(policy_id, dict(applicant_data), result)
        return result

    def _persist_in_background(
        self,
        policy_id: str,
        applicant_data: dict[str, Any],
        result: SimulationResult,
    ) -> None:
        task = asyncio.create_task(
            self._save_result(policy_id, applicant_data, result.to_dict())
        )
        _background_writes.add(task)
        task.add_done_callback(_background_writes.discard)

    async def _save_result(
        self,
        policy_id: str,
        applicant_data: dict[str, Any],
        result: dict[str, Any],
    ) -> None:
        try:
            await self.source.save_simulation_result(policy_id, applicant_data, result)
        except Exception as e:
            logger.error(
                f"Failed to persist simulation result for policy {policy_id}: {str(e)}",
                exc_info=True,
            )

    async def validate_policy(
        self,
        policy_id: str,
        today: Optional[date] = None,
    ) -> PolicyValidationResponse:
        """
        Check that every configuration step of a policy is complete.

        Args:
            policy_id: External policy identifier
            today: Reference date for the effective-date check (defaults to today)

        Returns:
            PolicyValidationResponse with errors and per-step completion flags

        Raises:
            PolicyNotFoundError: If the policy does not exist
        """
        policy = await self.source.get_policy(policy_id)
        if policy is None:
            raise PolicyNotFoundError(f"Policy {policy_id} not found")

        rules, scoring_config, decision_tree, clauses = await asyncio.gather(
            self.source.get_rules(policy_id),
            self.source.get_scoring(policy_id),
            self.source.get_decision_tree(policy_id),
            self.source.get_clauses(policy_id),
        )
        today = today or date.today()
        errors: list[str] = []

        has_rules = isinstance(rules, Mapping) and bool(rules.get("conditions"))
        if not has_rules:
            errors.append("No eligibility rules defined")

        scoring_complete = False
        if not isinstance(scoring_config, Mapping) or not scoring_config.get("categories"):
            errors.append("No scoring parameters defined")
        else:
            try:
                total_weight = ScoringEngine.total_weight(scoring_config)
            except StructuralError as e:
                errors.append(str(e))
            else:
                scoring_complete = total_weight == 100
                if not scoring_complete:
                    errors.append(
                        f"Scoring weight is {format_scalar(total_weight)}%, must be 100%"
                    )

        has_tree = has_decision_tree(decision_tree)
        if not has_tree:
            errors.append("No decision tree configured")

        has_clauses = bool(clauses)
        if not has_clauses:
            errors.append("No clauses defined")

        if policy.effective_date and policy.effective_date < today:
            errors.append("Effective date is in the past")
        if (
            policy.expiry_date
            and policy.effective_date
            and policy.expiry_date <= policy.effective_date
        ):
            errors.append("Expiry date must be after effective date")

        return PolicyValidationResponse(
            valid=not errors,
            errors=errors,
            completed_steps={
                "attributes": bool(policy.policy_name),
                "eligibility": has_rules,
                "scoring": scoring_complete,
                "decisionTree": has_tree,
                "clauses": has_clauses,
            },
        )

    async def test_decision_tree(
        self,
        policy_id: str,
        sample_data: Mapping[str, Any],
    ) -> Optional[DecisionTreeResult]:
        """
        Evaluate the stored decision tree against sample data.

        Args:
            policy_id: External policy identifier
            sample_data: Applicant field values

        Returns:
            DecisionTreeResult, or None when no tree is stored
        """
        tree = await self.source.get_decision_tree(policy_id)
        if tree is None:
            return None

        result = self.engine.decision_tree.evaluate(tree, sample_data)

        try:
            await self.source.mark_tree_tested(policy_id)
        except Exception as e:
            logger.error(
                f"Failed to mark decision tree tested for policy {policy_id}: {str(e)}",
                exc_info=True,
            )
        return result

    async def get_history(
        self,
        policy_id: str,
        limit: Optional[int] = None,
    ) -> list[SimulationHistoryItem]:
        """Most recent simulation results for a policy, newest first."""
        return await self.source.get_simulation_history(
            policy_id, limit or settings.SIMULATION_HISTORY_LIMIT
        )
