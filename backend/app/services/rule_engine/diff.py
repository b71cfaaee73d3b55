"""Version snapshots and the structural diff between two of them."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from app.core.enums import DiffType
from app.services.rule_engine.base import DiffEntry


@dataclass(frozen=True)
class VersionSnapshot:
    """Captured policy configuration at a version point."""

    policy_id: str
    version_number: int
    policy: dict = field(default_factory=dict)
    tags: tuple[str, ...] = ()
    rules: Optional[dict] = None
    scoring: Optional[dict] = None
    decision_tree: Optional[dict] = None
    clauses: Optional[list] = None

    def to_document(self) -> dict:
        return {
            "policy": self.policy,
            "tags": list(self.tags),
            "rules": self.rules,
            "scoring": self.scoring,
            "decisionTree": self.decision_tree,
            "clauses": self.clauses,
        }


def load_snapshot(snapshot: Union[str, bytes, Mapping[str, Any], None]) -> dict:
    """Accept a stored snapshot either as parsed JSON or as a JSON string."""
    if snapshot is None:
        return {}
    if isinstance(snapshot, (str, bytes)):
        return json.loads(snapshot)
    return dict(snapshot)


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


class VersionDiffEngine:
    """
    Recursive structural diff of two snapshot documents.

    Nested mappings are walked key by key (keys sorted for reproducible
    output); lists and scalars are compared as whole serialized values.
    """

    def compute_diff(
        self,
        base: Optional[Mapping[str, Any]],
        compare: Optional[Mapping[str, Any]],
        path: str = "",
    ) -> list[DiffEntry]:
        """
        Compute the ordered list of changes from ``base`` to ``compare``.

        Args:
            base: Older document
            compare: Newer document
            path: Dot-separated prefix for nested keys

        Returns:
            DiffEntry list ordered by key
        """
        base = base or {}
        compare = compare or {}
        changes: list[DiffEntry] = []

        for key in sorted(set(base) | set(compare), key=str):
            current_path = f"{path}.{key}" if path else str(key)

            if key not in base:
                changes.append(
                    DiffEntry(type=DiffType.ADDED.value, path=current_path, new_value=compare[key])
                )
                continue
            if key not in compare:
                changes.append(
                    DiffEntry(type=DiffType.REMOVED.value, path=current_path, old_value=base[key])
                )
                continue

            base_value = base[key]
            compare_value = compare[key]

            if isinstance(base_value, Mapping) and isinstance(compare_value, Mapping):
                changes.extend(self.compute_diff(base_value, compare_value, current_path))
            elif _canonical(base_value) != _canonical(compare_value):
                changes.append(
                    DiffEntry(
                        type=DiffType.MODIFIED.value,
                        path=current_path,
                        old_value=base_value,
                        new_value=compare_value,
                    )
                )

        return changes
