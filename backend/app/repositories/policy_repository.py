"""Repository for policy configuration documents, simulation results and versions."""

from datetime import datetime, timezone
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.enums import DocumentKind
from app.models.domain.policy import Policy, PolicyDocument, PolicyVersion, SimulationRecord
from app.models.schemas.simulation import (
    PolicyRecord,
    PolicyVersionRecord,
    SimulationHistoryItem,
)
from app.repositories.base import BaseRepository


class PolicyDocumentRepository:
    """
    SQLAlchemy-backed configuration source for the simulation services.

    Each call opens its own session, so the three configuration reads of a
    simulation can run concurrently and a detached result write does not
    depend on the request's session.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize the repository.

        Args:
            session_factory: Factory producing async database sessions
        """
        self.session_factory = session_factory

    async def _get_document(self, policy_id: str, kind: DocumentKind) -> Optional[Any]:
        async with self.session_factory() as db:
            repo = BaseRepository(PolicyDocument, db)
            row = await repo.find_one_by(policy_id=policy_id, kind=kind)
            return row.document if row else None

    async def get_rules(self, policy_id: str) -> Optional[dict]:
        return await self._get_document(policy_id, DocumentKind.RULES)

    async def get_scoring(self, policy_id: str) -> Optional[dict]:
        return await self._get_document(policy_id, DocumentKind.SCORING)

    async def get_decision_tree(self, policy_id: str) -> Optional[dict]:
        return await self._get_document(policy_id, DocumentKind.DECISION_TREE)

    async def get_clauses(self, policy_id: str) -> Optional[list]:
        return await self._get_document(policy_id, DocumentKind.CLAUSES)

    async def get_policy(self, policy_id: str) -> Optional[PolicyRecord]:
        """
        Retrieve the policy attributes used by validation and snapshots.

        Args:
            policy_id: External policy identifier

        Returns:
            PolicyRecord if found, None otherwise
        """
        async with self.session_factory() as db:
            policy = await BaseRepository(Policy, db).find_one_by(policy_id=policy_id)
            if policy is None:
                return None
            return PolicyRecord(
                id=policy.policy_id,
                policy_name=policy.policy_name,
                status=policy.status,
                version=policy.version,
                effective_date=policy.effective_date,
                expiry_date=policy.expiry_date,
                tags=list(policy.tags or []),
            )

    async def save_simulation_result(
        self,
        policy_id: str,
        simulation_input: dict[str, Any],
        result: dict[str, Any],
    ) -> None:
        async with self.session_factory() as db:
            await BaseRepository(SimulationRecord, db).create(
                policy_id=policy_id,
                simulation_input=simulation_input,
                result=result,
            )
            await db.commit()

    async def get_simulation_history(
        self,
        policy_id: str,
        limit: int,
    ) -> List[SimulationHistoryItem]:
        """
        Get the most recent simulation results for a policy, newest first.

        Args:
            policy_id: External policy identifier
            limit: Maximum number of results

        Returns:
            List of SimulationHistoryItem
        """
        async with self.session_factory() as db:
            rows = await BaseRepository(SimulationRecord, db).find_by(
                order_by=SimulationRecord.created_at.desc(),
                limit=limit,
                policy_id=policy_id,
            )
            return [SimulationHistoryItem.model_validate(row) for row in rows]

    async def mark_tree_tested(self, policy_id: str) -> None:
        async with self.session_factory() as db:
            repo = BaseRepository(PolicyDocument, db)
            row = await repo.find_one_by(policy_id=policy_id, kind=DocumentKind.DECISION_TREE)
            if row is None:
                return
            await repo.update(row.id, last_tested_at=datetime.now(timezone.utc))
            await db.commit()

    async def save_version(
        self,
        policy_id: str,
        version_number: int,
        snapshot: dict[str, Any],
        status: Optional[str],
        created_by: str,
    ) -> str:
        async with self.session_factory() as db:
            version = await BaseRepository(PolicyVersion, db).create(
                policy_id=policy_id,
                version_number=version_number,
                json_snapshot=snapshot,
                status=status,
                created_by=created_by,
            )
            await db.commit()
            return str(version.id)

    async def get_version(self, version_id: str) -> Optional[PolicyVersionRecord]:
        """
        Retrieve a version snapshot by ID.

        Args:
            version_id: UUID string of the version

        Returns:
            PolicyVersionRecord if found, None otherwise (including malformed IDs)
        """
        try:
            key = UUID(version_id)
        except ValueError:
            return None

        async with self.session_factory() as db:
            version = await BaseRepository(PolicyVersion, db).get_by_id(key)
            if version is None:
                return None
            return PolicyVersionRecord(
                id=str(version.id),
                policy_id=version.policy_id,
                version_number=version.version_number,
                json_snapshot=version.json_snapshot,
                status=version.status,
                created_by=version.created_by,
                created_at=version.created_at,
            )
