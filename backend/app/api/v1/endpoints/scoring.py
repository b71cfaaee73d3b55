"""Scoring configuration endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.deps import get_policy_source
from app.models.schemas.simulation import ScoringValidationResponse
from app.services.config_source import PolicyConfigSource
from app.services.rule_engine.base import StructuralError
from app.services.rule_engine.scoring import ScoringEngine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/{policy_id}/validate",
    response_model=ScoringValidationResponse,
    summary="Validate scoring configuration",
    description="Check that categories have parameters and weights total 100",
)
async def validate_scoring(
    policy_id: str,
    source: Annotated[PolicyConfigSource, Depends(get_policy_source)],
) -> ScoringValidationResponse:
    """Validate the stored scoring configuration of a policy."""
    scoring_config = await source.get_scoring(policy_id)
    try:
        report = ScoringEngine().validate(scoring_config)
    except StructuralError as e:
        logger.warning(f"Malformed scoring configuration for policy {policy_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    return ScoringValidationResponse(**report.to_dict())
