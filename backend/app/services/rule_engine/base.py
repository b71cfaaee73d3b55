"""Rule engine foundation: condition node types, evaluation results, and shared helpers."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Union

from app.core.enums import GroupOperator

# Recursion limit for user-authored trees and condition groups
DEFAULT_MAX_DEPTH = 64

PASS_MARK = "✓"
FAIL_MARK = "✗"


class StructuralError(ValueError):
    """Raised when a rule, scoring or decision-tree document is malformed."""


class _Missing:
    """Marker for a field that is absent from the applicant data."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def lookup_field(data: Mapping[str, Any], name: str) -> Any:
    """Return the applicant value for ``name``, or ``MISSING`` when the key is absent."""
    if name in data:
        return data[name]
    return MISSING


@dataclass(frozen=True)
class ConditionLeaf:
    """A single ``field operator value`` comparison."""

    field: str
    operator: str
    value: Any = None


@dataclass(frozen=True)
class ConditionGroup:
    """AND/OR combination of child condition nodes, evaluated in order."""

    operator: GroupOperator
    conditions: tuple["ConditionNode", ...] = ()


ConditionNode = Union[ConditionLeaf, ConditionGroup]


def require_key(node: Mapping[str, Any], key: str, kind: str = "Condition") -> Any:
    """
    Extract a required key from a raw document node.

    Raises:
        StructuralError: If the key is absent or empty
    """
    value = node.get(key)
    if value is None or value == "":
        raise StructuralError(f"{kind} is missing required key '{key}'")
    return value


def require_field(node: Mapping[str, Any], kind: str = "Condition") -> str:
    """Extract the applicant field name a leaf reads; it must be a string."""
    name = require_key(node, "field", kind)
    if not isinstance(name, str):
        raise StructuralError(f"{kind} 'field' must be a string, got {type(name).__name__}")
    return name


def is_group_node(node: Mapping[str, Any]) -> bool:
    """A raw node is a group when tagged as one or when it carries a conditions list."""
    return node.get("type") == "group" or "conditions" in node


def parse_condition(
    node: Any,
    depth: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ConditionNode:
    """
    Convert a raw JSON condition document into typed condition nodes.

    Args:
        node: Raw group or leaf mapping
        depth: Current nesting depth
        max_depth: Maximum allowed nesting depth

    Returns:
        ConditionGroup or ConditionLeaf

    Raises:
        StructuralError: If the document is malformed or nested too deeply
    """
    if depth > max_depth:
        raise StructuralError(f"Condition nesting exceeds maximum depth of {max_depth}")
    if not isinstance(node, Mapping):
        raise StructuralError(f"Condition must be an object, got {type(node).__name__}")

    if is_group_node(node):
        raw_operator = require_key(node, "operator", "Group")
        try:
            operator = GroupOperator(raw_operator)
        except ValueError:
            raise StructuralError(f"Unsupported group operator: {raw_operator!r}") from None

        children = node.get("conditions") or []
        if not isinstance(children, (list, tuple)):
            raise StructuralError("Group 'conditions' must be a list")

        return ConditionGroup(
            operator=operator,
            conditions=tuple(
                parse_condition(child, depth + 1, max_depth) for child in children
            ),
        )

    return ConditionLeaf(
        field=require_field(node),
        operator=require_key(node, "operator"),
        value=node.get("value"),
    )


def format_value(value: Any) -> str:
    """Render a condition value the way it appears in the trace (compact JSON)."""
    if isinstance(value, Decimal):
        value = as_number(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def format_scalar(value: Any) -> str:
    """Render a bare value for trace and reason strings; sequences join with commas."""
    if value is None:
        return "null"
    if isinstance(value, (list, tuple)):
        return ",".join(format_scalar(item) for item in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Decimal, float)):
        return str(as_number(value))
    return str(value)


def as_number(value: Union[Decimal, int, float]) -> Union[int, float]:
    """Collapse a numeric value to ``int`` when integral, else ``float``."""
    if isinstance(value, float) and not value.is_integer():
        return value
    if isinstance(value, Decimal) and value != value.to_integral_value():
        return float(value)
    return int(value)


@dataclass(frozen=True)
class LeafOutcome:
    """Result of evaluating one leaf condition."""

    met: bool
    trace_line: str


@dataclass
class ConditionOutcome:
    """Combined result of a condition node with its trace lines in evaluation order."""

    met: bool
    trace: list[str] = field(default_factory=list)


@dataclass
class EligibilityResult:
    """Pass/fail result of the eligibility filter."""

    passed: bool
    trace: list[str] = field(default_factory=list)


@dataclass
class ScoreResult:
    """Weighted score with one trace line per scoring parameter."""

    score: Union[int, float] = 0
    trace: list[str] = field(default_factory=list)


@dataclass
class ScoringValidation:
    """Structural report on a scoring configuration."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    total_weight: Union[int, float] = 0
    parameter_count: int = 0

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "totalWeight": self.total_weight,
            "parameterCount": self.parameter_count,
        }


@dataclass
class DecisionTreeResult:
    """
    Outcome of walking a decision tree.

    Attributes:
        decision: Action of the terminal reached, or NO_DECISION
        tier: Tier of the terminal reached, if any
        trace: Guard trace lines in evaluation order
    """

    decision: str
    tier: Optional[str] = None
    trace: list[str] = field(default_factory=list)

    @property
    def path(self) -> list[str]:
        """Alias of ``trace`` kept for consumers of the tree test response."""
        return self.trace

    def to_dict(self, include_path: bool = False) -> dict:
        data = {"decision": self.decision, "tier": self.tier, "trace": list(self.trace)}
        if include_path:
            data["path"] = list(self.trace)
        return data


@dataclass
class SimulationResult:
    """
    Auditable result of a full simulation.

    Attributes:
        decision: Final decision
        score: Weighted score (0 when eligibility failed)
        tier: Tier assigned by the tree or score bands
        triggered_rule: Trace line (or synthesized label) that explains the decision
        reason: Human-readable summary
        trace: Eligibility, scoring and decision-tree trace lines, in that order
    """

    decision: str
    score: Union[int, float]
    triggered_rule: str
    reason: str
    tier: Optional[str] = None
    trace: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "decision": self.decision,
            "score": self.score,
            "tier": self.tier,
            "triggeredRule": self.triggered_rule,
            "reason": self.reason,
            "trace": list(self.trace),
        }


@dataclass(frozen=True)
class DiffEntry:
    """One structural change between two snapshots."""

    type: str
    path: str
    old_value: Any = MISSING
    new_value: Any = MISSING

    def to_dict(self) -> dict:
        data = {"type": self.type, "path": self.path}
        if self.old_value is not MISSING:
            data["oldValue"] = self.old_value
        if self.new_value is not MISSING:
            data["newValue"] = self.new_value
        return data
