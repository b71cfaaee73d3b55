"""Decision tree endpoints."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from app.deps import get_simulation_service
from app.models.schemas.simulation import DecisionTreeTestResponse
from app.services.rule_engine.base import StructuralError
from app.services.simulation_service import SimulationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/{policy_id}/test",
    response_model=DecisionTreeTestResponse,
    summary="Test a decision tree",
    description="Evaluate the stored decision tree against sample applicant data",
)
async def test_decision_tree(
    policy_id: str,
    sample_data: Annotated[dict[str, Any], Body()],
    service: Annotated[SimulationService, Depends(get_simulation_service)],
) -> DecisionTreeTestResponse:
    """
    Walk the stored decision tree with sample data.

    No score is computed here; the response exposes the guard trace as both
    ``trace`` and ``path``.
    """
    try:
        result = await service.test_decision_tree(policy_id, sample_data)
    except StructuralError as e:
        logger.warning(f"Malformed decision tree for policy {policy_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    if result is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No decision tree configured",
        )

    return DecisionTreeTestResponse(**result.to_dict(include_path=True))
