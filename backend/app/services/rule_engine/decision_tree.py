"""Decision tree walker mapping applicant (and score) data to an action and tier."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from app.core.enums import Decision
from app.services.rule_engine.base import (
    DEFAULT_MAX_DEPTH,
    ConditionNode,
    DecisionTreeResult,
    StructuralError,
    parse_condition,
)
from app.services.rule_engine.conditions import ConditionEvaluator

logger = logging.getLogger(__name__)

CONDITION_NODE_TYPE = "condition"


@dataclass(frozen=True)
class TreeCondition:
    """Guarded branch: ``then`` when the guard is met, otherwise ``otherwise``."""

    guard: ConditionNode
    then: Any = None
    otherwise: Any = None


@dataclass(frozen=True)
class TreeTerminal:
    """Accepting node carrying the final action."""

    action: str
    tier: Optional[str] = None


TreeNode = Union[TreeCondition, TreeTerminal, None]


def classify_tree_node(node: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> TreeNode:
    """
    Classify one raw tree node without descending into its branches.

    Returns:
        TreeCondition for ``type == "condition"``, TreeTerminal for nodes with
        an action, and None for absent or empty branches (NO_DECISION)

    Raises:
        StructuralError: If a condition node has no ``if`` guard
    """
    if not isinstance(node, Mapping):
        return None

    if node.get("type") == CONDITION_NODE_TYPE:
        guard = node.get("if")
        if not guard:
            raise StructuralError("Decision tree condition is missing required key 'if'")
        return TreeCondition(
            guard=parse_condition(guard, max_depth=max_depth),
            then=node.get("then"),
            otherwise=node.get("else"),
        )

    action = node.get("action")
    if action:
        return TreeTerminal(action=action, tier=node.get("tier") or None)
    return None


class DecisionTreeEngine:
    """
    Walks a condition/action tree to a terminal decision.

    Guard trace lines are appended before the lines of the branch taken.
    Trees are untrusted input, so the walk carries a depth counter and fails
    with StructuralError instead of recursing without bound.
    """

    def __init__(
        self,
        evaluator: Optional[ConditionEvaluator] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.evaluator = evaluator or ConditionEvaluator()
        self.max_depth = max_depth

    def evaluate(self, root: Any, data: Mapping[str, Any]) -> DecisionTreeResult:
        """
        Evaluate the tree against the input data.

        Args:
            root: Raw decision tree document
            data: Applicant fields, plus the computed score when run from a simulation

        Returns:
            DecisionTreeResult with decision, tier and guard trace

        Raises:
            StructuralError: If the tree is malformed or deeper than max_depth
        """
        trace: list[str] = []
        terminal = self._walk(root, data, trace, depth=0)

        if terminal is None:
            return DecisionTreeResult(decision=Decision.NO_DECISION.value, tier=None, trace=trace)
        return DecisionTreeResult(decision=terminal.action, tier=terminal.tier, trace=trace)

    def _walk(
        self,
        node: Any,
        data: Mapping[str, Any],
        trace: list[str],
        depth: int,
    ) -> Optional[TreeTerminal]:
        if depth > self.max_depth:
            logger.warning(f"Decision tree exceeded maximum depth of {self.max_depth}")
            raise StructuralError(f"Decision tree exceeds maximum depth of {self.max_depth}")

        current = classify_tree_node(node, max_depth=self.max_depth)

        if isinstance(current, TreeTerminal) or current is None:
            return current

        outcome = self.evaluator.evaluate(current.guard, data)
        trace.extend(outcome.trace)

        branch = current.then if outcome.met else current.otherwise
        return self._walk(branch, data, trace, depth + 1)
