"""Render an eligibility rule tree as a SQL WHERE-clause preview."""

from collections.abc import Mapping
from typing import Any, Optional

from app.services.rule_engine.base import DEFAULT_MAX_DEPTH, StructuralError, is_group_node


def _format_sql_value(value: Any) -> str:
    if isinstance(value, str):
        escaped = value.replace("'", "''")
        return f"'{escaped}'"
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


def generate_sql(node: Optional[Mapping[str, Any]], depth: int = 0) -> str:
    """
    Convert a rule tree to a WHERE-clause string for display.

    Groups with several children are parenthesised and joined by their
    operator; leaves without a field or operator are skipped.

    Raises:
        StructuralError: If the tree is nested deeper than the engine allows
    """
    if not node or not isinstance(node, Mapping):
        return ""
    if depth > DEFAULT_MAX_DEPTH:
        raise StructuralError(f"Condition nesting exceeds maximum depth of {DEFAULT_MAX_DEPTH}")

    if is_group_node(node):
        parts = [generate_sql(child, depth + 1) for child in node.get("conditions") or []]
        parts = [part for part in parts if part]
        if not parts:
            return ""
        if len(parts) == 1:
            return parts[0]
        joiner = f" {node.get('operator') or 'AND'} "
        return f"({joiner.join(parts)})"

    field = node.get("field")
    operator = node.get("operator")
    if not field or not operator:
        return ""

    value = node.get("value")
    if isinstance(value, (list, tuple)):
        formatted = ", ".join(_format_sql_value(v) for v in value)
        return f"{field} {operator} ({formatted})"
    return f"{field} {operator} {_format_sql_value(value)}"
