"""Weighted scoring over categories of threshold parameters."""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Iterator, Optional

from app.services.rule_engine.base import (
    FAIL_MARK,
    PASS_MARK,
    ConditionLeaf,
    ScoreResult,
    ScoringValidation,
    StructuralError,
    as_number,
    format_scalar,
    require_field,
    require_key,
)
from app.services.rule_engine.conditions import ConditionEvaluator

REQUIRED_TOTAL_WEIGHT = Decimal("100")


def _require_mapping(value: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise StructuralError(f"{kind} must be an object, got {type(value).__name__}")
    return value


class ScoringEngine:
    """
    Scoring engine summing the weights of matched parameters.

    Scoring config structure:
    {
        "categories": [
            {
                "name": "Credit",
                "parameters": [
                    {"field": "credit_score", "operator": ">=", "threshold": 700, "weight": 40}
                ]
            }
        ]
    }

    Every parameter is evaluated and traced, matched or not. Weights are
    summed as decimals so fractional weights add up exactly.
    """

    def __init__(self, evaluator: Optional[ConditionEvaluator] = None):
        self.evaluator = evaluator or ConditionEvaluator()

    def score(
        self,
        scoring_config: Optional[Mapping[str, Any]],
        data: Mapping[str, Any],
    ) -> ScoreResult:
        """
        Calculate the weighted score for an applicant.

        Args:
            scoring_config: Raw scoring document, or None
            data: Applicant field values

        Returns:
            ScoreResult with the total and one trace line per parameter

        Raises:
            StructuralError: If the document is not built from objects, or a parameter
                lacks field/operator or has a non-numeric weight
        """
        total = Decimal("0")
        trace: list[str] = []

        for parameter in self._iter_parameters(scoring_config):
            leaf = ConditionLeaf(
                field=require_field(parameter, "Scoring parameter"),
                operator=require_key(parameter, "operator", "Scoring parameter"),
                value=parameter.get("threshold"),
            )
            weight = self._parse_weight(parameter)
            met = self.evaluator.evaluate_leaf(leaf, data).met

            if met:
                total += weight

            trace.append(
                f"{leaf.field} {leaf.operator} {format_scalar(leaf.value)} "
                f"(weight: {format_scalar(weight)}%) {PASS_MARK if met else FAIL_MARK}"
            )

        return ScoreResult(score=as_number(total), trace=trace)

    def validate(self, scoring_config: Optional[Mapping[str, Any]]) -> ScoringValidation:
        """
        Check a scoring configuration for completeness.

        Flags categories without parameters, a total weight other than 100,
        and configurations with no parameters at all. Bad weights are reported
        as errors.

        Raises:
            StructuralError: If the config, a category or a parameter is not an object
        """
        if not scoring_config or _require_mapping(
            scoring_config, "Scoring configuration"
        ).get("categories") is None:
            return ScoringValidation(valid=False, errors=["No scoring parameters defined"])

        errors: list[str] = []
        total = Decimal("0")
        parameter_count = 0

        for category in self._categories(scoring_config):
            parameters = self._parameters(category)
            if not parameters:
                errors.append(f'Category "{category.get("name")}" has no parameters')
            for parameter in parameters:
                parameter_count += 1
                try:
                    total += self._parse_weight(parameter)
                except StructuralError as e:
                    errors.append(str(e))

        if total != REQUIRED_TOTAL_WEIGHT:
            errors.append(f"Total weight is {format_scalar(total)}%, must be 100%")
        if parameter_count == 0:
            errors.append("At least one parameter required")

        return ScoringValidation(
            valid=not errors,
            errors=errors,
            total_weight=as_number(total),
            parameter_count=parameter_count,
        )

    @classmethod
    def total_weight(cls, scoring_config: Optional[Mapping[str, Any]]):
        """Sum of all parameter weights (absent weight counts as 0)."""
        total = sum(
            (cls._parse_weight(p) for p in cls._iter_parameters(scoring_config)),
            Decimal("0"),
        )
        return as_number(total)

    @staticmethod
    def _categories(scoring_config: Mapping[str, Any]) -> list[Mapping[str, Any]]:
        categories = scoring_config.get("categories") or []
        if not isinstance(categories, (list, tuple)):
            raise StructuralError("Scoring 'categories' must be a list")
        return [_require_mapping(category, "Scoring category") for category in categories]

    @staticmethod
    def _parameters(category: Mapping[str, Any]) -> list[Mapping[str, Any]]:
        parameters = category.get("parameters") or []
        if not isinstance(parameters, (list, tuple)):
            raise StructuralError(f'Category "{category.get("name")}" parameters must be a list')
        return [_require_mapping(parameter, "Scoring parameter") for parameter in parameters]

    @classmethod
    def _iter_parameters(
        cls, scoring_config: Optional[Mapping[str, Any]]
    ) -> Iterator[Mapping[str, Any]]:
        if not scoring_config:
            return
        _require_mapping(scoring_config, "Scoring configuration")
        for category in cls._categories(scoring_config):
            yield from cls._parameters(category)

    @staticmethod
    def _parse_weight(parameter: Mapping[str, Any]) -> Decimal:
        weight = parameter.get("weight")
        if weight is None or weight == "":
            return Decimal("0")
        if isinstance(weight, bool):
            raise StructuralError(f"Weight for '{parameter.get('field')}' must be numeric")
        try:
            parsed = Decimal(str(weight))
        except InvalidOperation:
            parsed = None
        if parsed is None or not parsed.is_finite():
            raise StructuralError(
                f"Weight for '{parameter.get('field')}' must be numeric, got {weight!r}"
            )
        return parsed
