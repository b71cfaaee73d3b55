"""Rule engine for evaluating applicants against policy configuration documents."""

from .base import (
    MISSING,
    ConditionGroup,
    ConditionLeaf,
    DecisionTreeResult,
    DiffEntry,
    EligibilityResult,
    ScoreResult,
    ScoringValidation,
    SimulationResult,
    StructuralError,
)
from .conditions import ConditionEvaluator
from .decision_tree import DecisionTreeEngine
from .diff import VersionDiffEngine, VersionSnapshot
from .eligibility import EligibilityEngine
from .engine import SimulationEngine
from .scoring import ScoringEngine
from .sql_generator import generate_sql

__all__ = [
    "MISSING",
    "ConditionEvaluator",
    "ConditionGroup",
    "ConditionLeaf",
    "DecisionTreeEngine",
    "DecisionTreeResult",
    "DiffEntry",
    "EligibilityEngine",
    "EligibilityResult",
    "ScoreResult",
    "ScoringEngine",
    "ScoringValidation",
    "SimulationEngine",
    "SimulationResult",
    "StructuralError",
    "VersionDiffEngine",
    "VersionSnapshot",
    "generate_sql",
]
