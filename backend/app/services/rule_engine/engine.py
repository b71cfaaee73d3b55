"""Simulation engine sequencing eligibility, scoring and the decision tree."""

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from app.core.enums import Decision, Tier
from app.services.rule_engine.base import (
    DEFAULT_MAX_DEPTH,
    FAIL_MARK,
    SimulationResult,
    format_scalar,
)
from app.services.rule_engine.conditions import ConditionEvaluator
from app.services.rule_engine.decision_tree import DecisionTreeEngine
from app.services.rule_engine.eligibility import EligibilityEngine
from app.services.rule_engine.scoring import ScoringEngine

logger = logging.getLogger(__name__)

# Input key under which the computed score is exposed to the decision tree
SCORE_FIELD = "_score"

ELIGIBILITY_RULE_NAME = "Eligibility Filter"
ELIGIBILITY_FAILURE_REASON = "Failed eligibility criteria"


def has_decision_tree(tree: Any) -> bool:
    """A tree is configured when its root declares a type."""
    return isinstance(tree, Mapping) and bool(tree.get("type"))


class SimulationEngine:
    """
    Pure simulation pipeline.

    This class:
    - Runs the eligibility filter and short-circuits to REJECT on failure
    - Scores the applicant against the scoring configuration
    - Walks the decision tree, or applies default score bands without one
    - Assembles the unified trace and the triggered rule
    """

    def __init__(
        self,
        evaluator: Optional[ConditionEvaluator] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        approve_threshold: Union[int, float] = 75,
        review_threshold: Union[int, float] = 60,
    ):
        evaluator = evaluator or ConditionEvaluator()
        self.eligibility = EligibilityEngine(evaluator, max_depth=max_depth)
        self.scoring = ScoringEngine(evaluator)
        self.decision_tree = DecisionTreeEngine(evaluator, max_depth=max_depth)
        self.approve_threshold = approve_threshold
        self.review_threshold = review_threshold

    def simulate(
        self,
        rules: Optional[Mapping[str, Any]],
        scoring_config: Optional[Mapping[str, Any]],
        decision_tree: Optional[Mapping[str, Any]],
        applicant_data: Mapping[str, Any],
    ) -> SimulationResult:
        """
        Run a full simulation over already-fetched configuration documents.

        Args:
            rules: Eligibility rule tree, or None
            scoring_config: Scoring document, or None
            decision_tree: Decision tree document, or None
            applicant_data: Applicant field values (not modified)

        Returns:
            SimulationResult with the combined trace

        Raises:
            StructuralError: If any configuration document is malformed
        """
        eligibility = self.eligibility.evaluate(rules, applicant_data)

        if not eligibility.passed:
            logger.info("Applicant failed eligibility filter, skipping scoring")
            return SimulationResult(
                decision=Decision.REJECT.value,
                score=0,
                tier=None,
                triggered_rule=ELIGIBILITY_RULE_NAME,
                reason=ELIGIBILITY_FAILURE_REASON,
                trace=list(eligibility.trace),
            )

        scored = self.scoring.score(scoring_config, applicant_data)
        score = scored.score

        tree_trace: list[str] = []
        if has_decision_tree(decision_tree):
            tree_result = self.decision_tree.evaluate(
                decision_tree, {**applicant_data, SCORE_FIELD: score}
            )
            decision = tree_result.decision
            tier = tree_result.tier
            tree_trace = tree_result.trace
        else:
            decision, tier = self.apply_score_bands(score)

        return SimulationResult(
            decision=decision,
            score=score,
            tier=tier,
            triggered_rule=self._triggered_rule(tree_trace, score),
            reason=f"Score {format_scalar(score)} resulted in {decision}",
            trace=[*eligibility.trace, *scored.trace, *tree_trace],
        )

    def apply_score_bands(self, score: Union[int, float]) -> tuple[str, Optional[str]]:
        """Default decision bands used when no decision tree is configured."""
        if score >= self.approve_threshold:
            return Decision.APPROVE.value, Tier.TIER_1.value
        if score >= self.review_threshold:
            return Decision.REVIEW.value, Tier.TIER_2.value
        return Decision.REJECT.value, None

    @staticmethod
    def _triggered_rule(tree_trace: list[str], score: Union[int, float]) -> str:
        failed = [line for line in tree_trace if line.endswith(FAIL_MARK)]
        if failed:
            return failed[-1]
        if tree_trace:
            return tree_trace[-1]
        return f"Score: {format_scalar(score)}"
