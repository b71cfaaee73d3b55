"""Pydantic schemas for API validation and serialization."""

from app.models.schemas.simulation import (
    DecisionTreeTestResponse,
    PolicyRecord,
    PolicyValidationResponse,
    PolicyVersionRecord,
    ScoringValidationResponse,
    SimulationHistoryItem,
    SimulationResultResponse,
    SnapshotResponse,
    SqlPreviewRequest,
    SqlPreviewResponse,
    VersionComparisonResponse,
)

__all__ = [
    "DecisionTreeTestResponse",
    "PolicyRecord",
    "PolicyValidationResponse",
    "PolicyVersionRecord",
    "ScoringValidationResponse",
    "SimulationHistoryItem",
    "SimulationResultResponse",
    "SnapshotResponse",
    "SqlPreviewRequest",
    "SqlPreviewResponse",
    "VersionComparisonResponse",
]
