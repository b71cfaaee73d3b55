"""Service layer for business logic."""

from app.services.simulation_service import SimulationService
from app.services.version_service import VersionService

__all__ = ["SimulationService", "VersionService"]
