"""Version snapshot endpoints."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from app.deps import get_version_service
from app.models.schemas.simulation import (
    SnapshotCreateRequest,
    SnapshotResponse,
    VersionComparisonResponse,
)
from app.services.config_source import PolicyNotFoundError, VersionNotFoundError
from app.services.version_service import VersionService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/{policy_id}/snapshot",
    response_model=SnapshotResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a version snapshot",
    description="Capture the policy attributes and configuration documents",
)
async def create_snapshot(
    policy_id: str,
    service: Annotated[VersionService, Depends(get_version_service)],
    request: Annotated[Optional[SnapshotCreateRequest], Body()] = None,
) -> SnapshotResponse:
    """Snapshot the current configuration of a policy."""
    created_by = (request.user_id if request else None) or "system"
    try:
        return await service.create_snapshot(policy_id, created_by=created_by)
    except PolicyNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Policy not found",
        )


@router.get(
    "/{policy_id}/compare",
    response_model=VersionComparisonResponse,
    summary="Compare two versions",
    description="Structural diff between two version snapshots",
)
async def compare_versions(
    policy_id: str,
    base: Annotated[str, Query(description="Base version ID")],
    compare: Annotated[str, Query(description="Version ID to compare against the base")],
    service: Annotated[VersionService, Depends(get_version_service)],
) -> VersionComparisonResponse:
    """
    Compare two versions.

    Each diff entry has a ``type`` (added, removed, modified), a dot-separated
    ``path``, and ``oldValue``/``newValue`` where applicable.
    """
    try:
        return await service.compare_versions(base, compare)
    except VersionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Version not found",
        )
