"""Simulation endpoints for running, validating and reviewing policy simulations."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from app.deps import get_simulation_service
from app.models.schemas.simulation import (
    PolicyValidationResponse,
    SimulationHistoryItem,
    SimulationResultResponse,
)
from app.services.config_source import PolicyNotFoundError
from app.services.rule_engine.base import StructuralError
from app.services.simulation_service import SimulationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/{policy_id}/simulate-full",
    response_model=SimulationResultResponse,
    summary="Run a full simulation",
    description="Run eligibility, scoring and the decision tree for an applicant",
)
async def simulate_full(
    policy_id: str,
    applicant_data: Annotated[dict[str, Any], Body()],
    service: Annotated[SimulationService, Depends(get_simulation_service)],
) -> SimulationResultResponse:
    """
    Run a full simulation for a policy.

    The pipeline:
    1. Eligibility filter (failure rejects immediately with score 0)
    2. Weighted scoring
    3. Decision tree, or default score bands when no tree is configured

    The response carries the combined trace of every condition evaluated.
    """
    try:
        result = await service.run_simulation(policy_id, applicant_data)
    except StructuralError as e:
        logger.warning(f"Malformed configuration for policy {policy_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    return SimulationResultResponse(**result.to_dict())


@router.post(
    "/{policy_id}/validate",
    response_model=PolicyValidationResponse,
    summary="Validate policy completeness",
    description="Check every configuration step of a policy",
)
async def validate_policy(
    policy_id: str,
    service: Annotated[SimulationService, Depends(get_simulation_service)],
) -> PolicyValidationResponse:
    """Validate that rules, scoring, decision tree, clauses and dates are complete."""
    try:
        return await service.validate_policy(policy_id)
    except PolicyNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Policy not found",
        )
    except StructuralError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )


@router.get(
    "/{policy_id}/history",
    response_model=list[SimulationHistoryItem],
    summary="Get simulation history",
    description="Retrieve the most recent simulation results for a policy",
)
async def get_simulation_history(
    policy_id: str,
    service: Annotated[SimulationService, Depends(get_simulation_service)],
    limit: Annotated[
        int, Query(ge=1, le=100, description="Maximum number of results")
    ] = 20,
) -> list[SimulationHistoryItem]:
    """Most recent simulation results, newest first."""
    return await service.get_history(policy_id, limit=limit)
