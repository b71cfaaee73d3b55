"""Pydantic schemas for simulation, validation, decision-tree and version endpoints."""

from datetime import date, datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==================== Collaborator Records ====================


class PolicyRecord(BaseModel):
    """Policy attributes read by validation and snapshots."""

    id: str
    policy_name: Optional[str] = None
    status: Optional[str] = None
    version: int = 1
    effective_date: Optional[date] = None
    expiry_date: Optional[date] = None
    tags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class PolicyVersionRecord(BaseModel):
    """Stored version snapshot."""

    id: str
    policy_id: str
    version_number: int
    json_snapshot: Union[dict[str, Any], str]
    status: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SimulationHistoryItem(CamelModel):
    """Persisted simulation run."""

    policy_id: str
    simulation_input: dict[str, Any] = Field(default_factory=dict)
    result: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# ==================== Responses ====================


class SimulationResultResponse(CamelModel):
    """Result of a full simulation."""

    decision: str
    score: Union[int, float]
    tier: Optional[str] = None
    triggered_rule: str
    reason: str
    trace: list[str] = Field(default_factory=list)


class DecisionTreeTestResponse(BaseModel):
    """Result of testing a decision tree with sample data."""

    decision: str
    tier: Optional[str] = None
    trace: list[str] = Field(default_factory=list)
    path: list[str] = Field(default_factory=list)


class ScoringValidationResponse(CamelModel):
    """Scoring configuration validation report."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    total_weight: Union[int, float] = 0
    parameter_count: int = 0


class PolicyValidationResponse(CamelModel):
    """Policy completeness report with per-step completion flags."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    completed_steps: dict[str, bool] = Field(default_factory=dict)


class SqlPreviewRequest(CamelModel):
    """Rule tree to render as SQL."""

    rule_json: Optional[dict[str, Any]] = None


class SqlPreviewResponse(BaseModel):
    """Generated WHERE-clause preview."""

    sql: str


class SnapshotCreateRequest(CamelModel):
    """Snapshot request body."""

    user_id: Optional[str] = None


class SnapshotResponse(CamelModel):
    """Created version snapshot."""

    id: str
    version_number: int
    snapshot: dict[str, Any]


class VersionComparisonResponse(BaseModel):
    """Two versions with the structural diff between them."""

    base: PolicyVersionRecord
    compare: PolicyVersionRecord
    diff: list[dict[str, Any]] = Field(default_factory=list)
