"""Eligibility filter over a recursive group/leaf rule tree."""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from app.services.rule_engine.base import (
    DEFAULT_MAX_DEPTH,
    EligibilityResult,
    parse_condition,
)
from app.services.rule_engine.conditions import ConditionEvaluator

logger = logging.getLogger(__name__)


class EligibilityEngine:
    """
    Gating filter deciding whether an applicant proceeds to scoring.

    An absent (or empty) rule document allows every applicant.
    """

    def __init__(
        self,
        evaluator: Optional[ConditionEvaluator] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.evaluator = evaluator or ConditionEvaluator()
        self.max_depth = max_depth

    def evaluate(
        self,
        rule_root: Optional[Mapping[str, Any]],
        data: Mapping[str, Any],
    ) -> EligibilityResult:
        """
        Evaluate the rule tree against applicant data.

        Args:
            rule_root: Raw group or leaf document, or None
            data: Applicant field values

        Returns:
            EligibilityResult with pass/fail and one trace line per leaf

        Raises:
            StructuralError: If the rule tree is malformed or nested too deeply
        """
        if not rule_root:
            logger.debug("No eligibility rules configured, allowing applicant")
            return EligibilityResult(passed=True, trace=[])

        node = parse_condition(rule_root, max_depth=self.max_depth)
        outcome = self.evaluator.evaluate(node, data)
        return EligibilityResult(passed=outcome.met, trace=outcome.trace)
