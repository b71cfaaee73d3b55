"""Leaf and group condition evaluation shared by the eligibility filter and decision trees."""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Callable, Optional, Union

from app.core.enums import ConditionOperator, GroupOperator
from app.services.rule_engine.base import (
    FAIL_MARK,
    MISSING,
    PASS_MARK,
    ConditionGroup,
    ConditionLeaf,
    ConditionNode,
    ConditionOutcome,
    LeafOutcome,
    format_value,
    lookup_field,
)

Number = Union[int, float, Decimal]


def _to_number(value: Any) -> Optional[Number]:
    """Coerce a scalar to a number, or None when it has no numeric reading."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float, Decimal)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return float(text)
        except ValueError:
            return None
    return None


def _ordered_pair(actual: Any, expected: Any) -> Optional[tuple[Any, Any]]:
    """Bring both sides of an ordering comparison to a comparable pair."""
    if isinstance(actual, str) and isinstance(expected, str):
        return actual, expected
    left = _to_number(actual)
    right = _to_number(expected)
    if left is None or right is None:
        return None
    return left, right


def _compare(actual: Any, expected: Any, op: Callable[[Any, Any], bool]) -> bool:
    pair = _ordered_pair(actual, expected)
    if pair is None:
        return False
    return op(*pair)


def loose_equals(actual: Any, expected: Any) -> bool:
    """
    Loose equality between an applicant value and a rule value.

    Numeric strings compare equal to the numbers they spell, an absent field
    only equals ``null``, and everything else uses plain equality.
    """
    if actual is MISSING or actual is None:
        return expected is None
    if expected is None:
        return False
    if isinstance(actual, str) != isinstance(expected, str):
        left = _to_number(actual)
        right = _to_number(expected)
        return left is not None and right is not None and left == right
    return actual == expected


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _contains(values: Any, actual: Any) -> bool:
    return actual is not MISSING and actual in values


_OPERATIONS: dict[ConditionOperator, Callable[[Any, Any], bool]] = {
    ConditionOperator.GT: lambda a, v: _compare(a, v, lambda x, y: x > y),
    ConditionOperator.GTE: lambda a, v: _compare(a, v, lambda x, y: x >= y),
    ConditionOperator.LT: lambda a, v: _compare(a, v, lambda x, y: x < y),
    ConditionOperator.LTE: lambda a, v: _compare(a, v, lambda x, y: x <= y),
    ConditionOperator.EQ: loose_equals,
    ConditionOperator.EQ_ALIAS: loose_equals,
    ConditionOperator.NEQ: lambda a, v: not loose_equals(a, v),
    ConditionOperator.IN: lambda a, v: _is_sequence(v) and _contains(v, a),
    ConditionOperator.NOT_IN: lambda a, v: _is_sequence(v) and not _contains(v, a),
}


class ConditionEvaluator:
    """
    Evaluates leaf comparisons and AND/OR groups against applicant data.

    Evaluation never short-circuits: every child of a group is evaluated so
    the trace records every condition checked, in document order.
    """

    def evaluate_leaf(self, leaf: ConditionLeaf, data: Mapping[str, Any]) -> LeafOutcome:
        """
        Evaluate one comparison.

        Unknown operators and ``IN``/``NOT IN`` with a non-list value resolve
        to ``met=False`` instead of raising.
        """
        actual = lookup_field(data, leaf.field)
        try:
            operation = _OPERATIONS[ConditionOperator(leaf.operator)]
        except ValueError:
            met = False
        else:
            try:
                met = bool(operation(actual, leaf.value))
            except TypeError:
                met = False

        mark = PASS_MARK if met else FAIL_MARK
        return LeafOutcome(
            met=met,
            trace_line=f"{leaf.field} {leaf.operator} {format_value(leaf.value)} {mark}",
        )

    def evaluate_group(self, group: ConditionGroup, data: Mapping[str, Any]) -> ConditionOutcome:
        """Evaluate every child in order; an empty group is always met."""
        outcome = ConditionOutcome(met=True)
        results = []
        for child in group.conditions:
            child_outcome = self.evaluate(child, data)
            outcome.trace.extend(child_outcome.trace)
            results.append(child_outcome.met)

        if results:
            if group.operator == GroupOperator.AND:
                outcome.met = all(results)
            else:
                outcome.met = any(results)
        return outcome

    def evaluate(self, node: ConditionNode, data: Mapping[str, Any]) -> ConditionOutcome:
        """Dispatch a parsed condition node."""
        if isinstance(node, ConditionGroup):
            return self.evaluate_group(node, data)
        leaf_outcome = self.evaluate_leaf(node, data)
        return ConditionOutcome(met=leaf_outcome.met, trace=[leaf_outcome.trace_line])
