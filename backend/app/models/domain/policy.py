"""Policy configuration documents, simulation results and version snapshots."""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime,
    Enum as SQLEnum,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.enums import DocumentKind
from app.db.base import BaseModel


class Policy(BaseModel):
    """Policy attributes read by validation and version snapshots."""

    __tablename__ = "policies"

    policy_id: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    policy_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    effective_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    tags: Mapped[Optional[list[str]]] = mapped_column(ARRAY(String(100)), nullable=True)

    def __repr__(self) -> str:
        return f"<Policy(policy_id={self.policy_id!r}, version={self.version})>"


class PolicyDocument(BaseModel):
    """
    One JSON configuration document per policy and kind.

    Holds the eligibility rule tree, the scoring configuration, the decision
    tree or the clause list, depending on ``kind``.
    """

    __tablename__ = "policy_documents"
    __table_args__ = (UniqueConstraint("policy_id", "kind", name="uq_policy_document_kind"),)

    policy_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    kind: Mapped[DocumentKind] = mapped_column(
        SQLEnum(
            DocumentKind,
            name="document_kind",
            values_callable=lambda kinds: [kind.value for kind in kinds],
        ),
        nullable=False,
    )
    document: Mapped[Optional[dict]] = mapped_column(JSONB, nullable=True)
    last_tested_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<PolicyDocument(policy_id={self.policy_id!r}, kind={self.kind.value})>"


class SimulationRecord(BaseModel):
    """Persisted simulation input and result."""

    __tablename__ = "simulation_results"

    policy_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    simulation_input: Mapped[Optional[dict]] = mapped_column(JSONB, nullable=True)
    result: Mapped[dict] = mapped_column(JSONB, nullable=False)

    def __repr__(self) -> str:
        return f"<SimulationRecord(id={self.id}, policy_id={self.policy_id!r})>"


class PolicyVersion(BaseModel):
    """Immutable configuration snapshot keyed by policy and version number."""

    __tablename__ = "policy_versions"

    policy_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    json_snapshot: Mapped[dict] = mapped_column(JSONB, nullable=False)
    status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<PolicyVersion(id={self.id}, policy_id={self.policy_id!r}, "
            f"version={self.version_number})>"
        )
