"""Domain models for the application."""

from app.models.domain.policy import Policy, PolicyDocument, PolicyVersion, SimulationRecord

__all__ = [
    "Policy",
    "PolicyDocument",
    "PolicyVersion",
    "SimulationRecord",
]
