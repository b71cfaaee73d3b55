"""Interface of the persistence collaborator used by the orchestration services."""

from typing import Any, Optional, Protocol

from app.models.schemas.simulation import (
    PolicyRecord,
    PolicyVersionRecord,
    SimulationHistoryItem,
)


class PolicyNotFoundError(LookupError):
    """Raised when a policy record does not exist."""


class VersionNotFoundError(LookupError):
    """Raised when a version snapshot does not exist."""


class PolicyConfigSource(Protocol):
    """
    Supplies configuration documents on read and accepts results on write.

    Every document getter returns None when the document is not configured.
    """

    async def get_rules(self, policy_id: str) -> Optional[dict]: ...

    async def get_scoring(self, policy_id: str) -> Optional[dict]: ...

    async def get_decision_tree(self, policy_id: str) -> Optional[dict]: ...

    async def get_clauses(self, policy_id: str) -> Optional[list]: ...

    async def get_policy(self, policy_id: str) -> Optional[PolicyRecord]: ...

    async def save_simulation_result(
        self, policy_id: str, simulation_input: dict[str, Any], result: dict[str, Any]
    ) -> None: ...

    async def get_simulation_history(
        self, policy_id: str, limit: int
    ) -> list[SimulationHistoryItem]: ...

    async def mark_tree_tested(self, policy_id: str) -> None: ...

    async def save_version(
        self,
        policy_id: str,
        version_number: int,
        snapshot: dict[str, Any],
        status: Optional[str],
        created_by: str,
    ) -> str: ...

    async def get_version(self, version_id: str) -> Optional[PolicyVersionRecord]: ...
