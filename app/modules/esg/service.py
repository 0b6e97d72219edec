"""ESG response repository: upsert by (user, financial year) plus scoped reads."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import structlog
from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import utcnow
from app.models.esg import ESGResponse
from app.modules.esg.calculator import CALCULATED_FIELDS, calculate_metrics
from app.modules.esg.schemas import ESGResponseRead, ESGSummary, ESGTrends, TrendPoint

logger = structlog.get_logger()

RAW_FIELDS: tuple[str, ...] = (
    "total_electricity_consumption",
    "renewable_electricity_consumption",
    "total_fuel_consumption",
    "carbon_emissions",
    "total_employees",
    "female_employees",
    "average_training_hours",
    "community_investment_spend",
    "independent_board_members_percent",
    "has_data_privacy_policy",
    "total_revenue",
)

TREND_FIELDS: tuple[str, ...] = (
    "carbon_emissions",
    "total_revenue",
    "total_employees",
    "diversity_ratio",
)

_INSERT_BY_DIALECT: dict[str, Callable[..., Any]] = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class ESGResponseNotFoundError(LookupError):
    """No ESG response exists for the requested (user, financial year)."""

    def __init__(self, user_id: uuid.UUID, financial_year: int) -> None:
        super().__init__(f"ESG response not found for financial year {financial_year}")
        self.user_id = user_id
        self.financial_year = financial_year


def _insert_for(db: AsyncSession) -> Callable[..., Any]:
    dialect = db.get_bind().dialect.name
    try:
        return _INSERT_BY_DIALECT[dialect]
    except KeyError:
        raise NotImplementedError(f"Upsert is not supported on dialect {dialect!r}") from None


# ── Upsert ────────────────────────────────────────────────────────────────────


async def create_or_update(
    db: AsyncSession,
    user_id: uuid.UUID,
    financial_year: int,
    data: Mapping[str, Any],
) -> ESGResponse:
    """Store the answers for (user_id, financial_year) together with derived ratios.

    Every raw and derived column is written on both the insert and the update
    path: answers missing from ``data`` become NULL, and ratios that cannot be
    computed are cleared. The write is a single INSERT ... ON CONFLICT DO UPDATE
    against the (user_id, financial_year) unique constraint.
    """
    values: dict[str, Any] = {field: data.get(field) for field in RAW_FIELDS}
    values.update(dict.fromkeys(CALCULATED_FIELDS))
    values.update(calculate_metrics(values))

    now = utcnow()
    insert = _insert_for(db)
    stmt = (
        insert(ESGResponse)
        .values(
            id=uuid.uuid4(),
            user_id=user_id,
            financial_year=financial_year,
            created_at=now,
            updated_at=now,
            **values,
        )
        .on_conflict_do_update(
            index_elements=["user_id", "financial_year"],
            set_={**values, "updated_at": now},
        )
        .returning(ESGResponse)
    )
    result = await db.scalars(stmt, execution_options={"populate_existing": True})
    record = result.one()
    logger.info(
        "esg_response_upserted",
        user_id=str(user_id),
        financial_year=financial_year,
        calculated=[f for f in CALCULATED_FIELDS if values[f] is not None],
    )
    return record


# ── Reads ─────────────────────────────────────────────────────────────────────


async def get_by_user_id(db: AsyncSession, user_id: uuid.UUID) -> list[ESGResponse]:
    """Return all of a user's responses, newest financial year first."""
    stmt = (
        select(ESGResponse)
        .where(ESGResponse.user_id == user_id)
        .order_by(ESGResponse.financial_year.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_by_user_and_year(
    db: AsyncSession,
    user_id: uuid.UUID,
    financial_year: int,
) -> ESGResponse | None:
    stmt = select(ESGResponse).where(
        ESGResponse.user_id == user_id,
        ESGResponse.financial_year == financial_year,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_financial_years(db: AsyncSession, user_id: uuid.UUID) -> list[int]:
    stmt = (
        select(ESGResponse.financial_year)
        .where(ESGResponse.user_id == user_id)
        .order_by(ESGResponse.financial_year.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


# ── Delete ────────────────────────────────────────────────────────────────────


async def delete(db: AsyncSession, user_id: uuid.UUID, financial_year: int) -> None:
    """Hard-delete a response; raises ESGResponseNotFoundError if there is none."""
    stmt = sa_delete(ESGResponse).where(
        ESGResponse.user_id == user_id,
        ESGResponse.financial_year == financial_year,
    )
    result = await db.execute(stmt)
    if result.rowcount == 0:
        raise ESGResponseNotFoundError(user_id, financial_year)
    logger.info("esg_response_deleted", user_id=str(user_id), financial_year=financial_year)


# ── Summary ───────────────────────────────────────────────────────────────────


def build_summary(responses: Sequence[ESGResponse]) -> ESGSummary:
    """Dashboard summary over a user's responses (expects newest year first)."""
    trends: dict[str, list[TrendPoint]] = {}
    for field in TREND_FIELDS:
        trends[field] = [
            TrendPoint(year=r.financial_year, value=getattr(r, field))
            for r in responses
            if getattr(r, field) is not None
        ]

    return ESGSummary(
        total_responses=len(responses),
        financial_years=sorted((r.financial_year for r in responses), reverse=True),
        latest_response=ESGResponseRead.model_validate(responses[0]) if responses else None,
        trends=ESGTrends(**trends),
    )
