"""ESG questionnaire API router."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.core.database import get_db
from app.modules.esg import service
from app.modules.esg.metadata import METRICS_METADATA
from app.modules.esg.schemas import (
    ESGResponseEnvelope,
    ESGResponseListEnvelope,
    ESGResponseRead,
    ESGResponseUpsertRequest,
    ESGSummaryEnvelope,
    FinancialYearsEnvelope,
    MetadataEnvelope,
)
from app.schemas.auth import CurrentUser
from app.schemas.common import MessageResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/esg", tags=["esg"])


def _server_error(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


# ── Metadata (public) ─────────────────────────────────────────────────────────


@router.get("/metadata", response_model=MetadataEnvelope)
async def get_metrics_metadata():
    """Questionnaire fields grouped by pillar, with units and formulas."""
    return MetadataEnvelope(
        message="ESG metrics metadata retrieved successfully",
        data=METRICS_METADATA,
    )


# ── Responses ─────────────────────────────────────────────────────────────────


@router.post("/responses", response_model=ESGResponseEnvelope)
async def save_response(
    body: ESGResponseUpsertRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create or replace the response for a financial year."""
    try:
        record = await service.create_or_update(
            db, current_user.user_id, body.financial_year, body.raw_fields()
        )
    except SQLAlchemyError as exc:
        logger.error(
            "esg_upsert_failed",
            user_id=str(current_user.user_id),
            financial_year=body.financial_year,
            error=str(exc),
        )
        raise _server_error("Failed to save ESG response.") from exc
    return ESGResponseEnvelope(
        message="ESG response saved successfully",
        data=ESGResponseRead.model_validate(record),
    )


@router.get("/responses", response_model=ESGResponseListEnvelope)
async def list_responses(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """All of the user's responses, newest financial year first."""
    try:
        records = await service.get_by_user_id(db, current_user.user_id)
    except SQLAlchemyError as exc:
        logger.error("esg_list_failed", user_id=str(current_user.user_id), error=str(exc))
        raise _server_error("Failed to retrieve ESG responses.") from exc
    return ESGResponseListEnvelope(
        message="ESG responses retrieved successfully",
        data=[ESGResponseRead.model_validate(r) for r in records],
    )


@router.get("/responses/{year}", response_model=ESGResponseEnvelope)
async def get_response(
    year: int = Path(..., description="Financial year, e.g. 2024"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        record = await service.get_by_user_and_year(db, current_user.user_id, year)
    except SQLAlchemyError as exc:
        logger.error("esg_get_failed", user_id=str(current_user.user_id), year=year, error=str(exc))
        raise _server_error("Failed to retrieve ESG response.") from exc
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="ESG response not found for the specified year",
        )
    return ESGResponseEnvelope(
        message="ESG response retrieved successfully",
        data=ESGResponseRead.model_validate(record),
    )


@router.delete("/responses/{year}", response_model=MessageResponse)
async def delete_response(
    year: int = Path(..., description="Financial year, e.g. 2024"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        await service.delete(db, current_user.user_id, year)
    except service.ESGResponseNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="ESG response not found for the specified year",
        ) from exc
    except SQLAlchemyError as exc:
        logger.error("esg_delete_failed", user_id=str(current_user.user_id), year=year, error=str(exc))
        raise _server_error("Failed to delete ESG response.") from exc
    return MessageResponse(message="ESG response deleted successfully")


# ── Dashboard helpers ─────────────────────────────────────────────────────────


@router.get("/years", response_model=FinancialYearsEnvelope)
async def list_financial_years(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        years = await service.get_financial_years(db, current_user.user_id)
    except SQLAlchemyError as exc:
        logger.error("esg_years_failed", user_id=str(current_user.user_id), error=str(exc))
        raise _server_error("Failed to retrieve financial years.") from exc
    return FinancialYearsEnvelope(message="Financial years retrieved successfully", data=years)


@router.get("/summary", response_model=ESGSummaryEnvelope)
async def get_summary(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Counts, year list, latest response and per-year trends for the dashboard."""
    try:
        records = await service.get_by_user_id(db, current_user.user_id)
    except SQLAlchemyError as exc:
        logger.error("esg_summary_failed", user_id=str(current_user.user_id), error=str(exc))
        raise _server_error("Failed to retrieve ESG summary.") from exc
    return ESGSummaryEnvelope(
        message="ESG summary retrieved successfully",
        data=service.build_summary(records),
    )
