"""Dependency injection for FastAPI endpoints."""

from typing import Annotated

from fastapi import Depends

from app.db.session import SessionLocal
from app.repositories.policy_repository import PolicyDocumentRepository
from app.services.config_source import PolicyConfigSource
from app.services.simulation_service import SimulationService
from app.services.version_service import VersionService


def get_policy_source() -> PolicyConfigSource:
    """Persistence collaborator backed by the configured database."""
    return PolicyDocumentRepository(SessionLocal)


def get_simulation_service(
    source: Annotated[PolicyConfigSource, Depends(get_policy_source)],
) -> SimulationService:
    return SimulationService(source)


def get_version_service(
    source: Annotated[PolicyConfigSource, Depends(get_policy_source)],
) -> VersionService:
    return VersionService(source)
