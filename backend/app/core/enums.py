"""Core enums for type safety across the application."""

from enum import Enum


class Decision(str, Enum):
    """Final underwriting decisions produced by a simulation."""

    APPROVE = "APPROVE"
    REVIEW = "REVIEW"
    REJECT = "REJECT"
    NO_DECISION = "NO_DECISION"


class Tier(str, Enum):
    """Tiers attached to the default score bands."""

    TIER_1 = "TIER_1"
    TIER_2 = "TIER_2"


class ConditionOperator(str, Enum):
    """Comparison operators allowed in a leaf condition."""

    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    EQ = "="
    EQ_ALIAS = "=="
    NEQ = "!="
    IN = "IN"
    NOT_IN = "NOT IN"


class GroupOperator(str, Enum):
    """Combinators for a condition group."""

    AND = "AND"
    OR = "OR"


class DiffType(str, Enum):
    """Kinds of change reported by a version diff."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class DocumentKind(str, Enum):
    """Configuration documents stored per policy."""

    RULES = "rules"
    SCORING = "scoring"
    DECISION_TREE = "decision_tree"
    CLAUSES = "clauses"
