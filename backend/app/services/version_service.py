"""Version service for capturing and comparing policy configuration snapshots."""

import asyncio
import logging

from app.models.schemas.simulation import (
    SnapshotResponse,
    VersionComparisonResponse,
)
from app.services.config_source import (
    PolicyConfigSource,
    PolicyNotFoundError,
    VersionNotFoundError,
)
from app.services.rule_engine.diff import VersionDiffEngine, VersionSnapshot, load_snapshot

logger = logging.getLogger(__name__)


class VersionService:
    """Captures configuration snapshots and diffs two stored versions."""

    def __init__(self, source: PolicyConfigSource):
        self.source = source
        self.diff_engine = VersionDiffEngine()

    async def create_snapshot(
        self,
        policy_id: str,
        created_by: str = "system",
    ) -> SnapshotResponse:
        """
        Capture the current configuration of a policy as a version snapshot.

        Args:
            policy_id: External policy identifier
            created_by: User recorded on the version

        Returns:
            SnapshotResponse with the stored version ID and document

        Raises:
            PolicyNotFoundError: If the policy does not exist
        """
        policy = await self.source.get_policy(policy_id)
        if policy is None:
            raise PolicyNotFoundError(f"Policy {policy_id} not found")

        rules, scoring_config, decision_tree, clauses = await asyncio.gather(
            self.source.get_rules(policy_id),
            self.source.get_scoring(policy_id),
            self.source.get_decision_tree(policy_id),
            self.source.get_clauses(policy_id),
        )

        snapshot = VersionSnapshot(
            policy_id=policy_id,
            version_number=policy.version,
            policy=policy.model_dump(mode="json", exclude={"tags"}),
            tags=tuple(policy.tags),
            rules=rules,
            scoring=scoring_config,
            decision_tree=decision_tree,
            clauses=clauses,
        )
        document = snapshot.to_document()

        version_id = await self.source.save_version(
            policy_id=policy_id,
            version_number=snapshot.version_number,
            snapshot=document,
            status=policy.status,
            created_by=created_by,
        )
        logger.info(f"Created snapshot {version_id} for policy {policy_id} v{snapshot.version_number}")

        return SnapshotResponse(
            id=version_id,
            version_number=snapshot.version_number,
            snapshot=document,
        )

    async def compare_versions(
        self,
        base_id: str,
        compare_id: str,
    ) -> VersionComparisonResponse:
        """
        Diff two stored version snapshots.

        Raises:
            VersionNotFoundError: If either version does not exist
        """
        base, compare = await asyncio.gather(
            self.source.get_version(base_id),
            self.source.get_version(compare_id),
        )
        if base is None or compare is None:
            raise VersionNotFoundError("Version not found")

        diff = self.diff_engine.compute_diff(
            load_snapshot(base.json_snapshot),
            load_snapshot(compare.json_snapshot),
        )
        return VersionComparisonResponse(
            base=base,
            compare=compare,
            diff=[entry.to_dict() for entry in diff],
        )
