"""Eligibility rule endpoints."""

import logging

from fastapi import APIRouter, HTTPException, status

from app.models.schemas.simulation import SqlPreviewRequest, SqlPreviewResponse
from app.services.rule_engine.base import StructuralError
from app.services.rule_engine.sql_generator import generate_sql

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/generate-sql",
    response_model=SqlPreviewResponse,
    summary="Preview rules as SQL",
    description="Render an eligibility rule tree as a SQL WHERE clause",
)
async def generate_sql_preview(request: SqlPreviewRequest) -> SqlPreviewResponse:
    """Render the rule tree for display; the SQL is never executed."""
    try:
        return SqlPreviewResponse(sql=generate_sql(request.rule_json))
    except StructuralError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
