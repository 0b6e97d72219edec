"""Pydantic schemas for the ESG questionnaire.

Field names travel over the wire in camelCase (the dashboard's contract) and
are snake_case in Python.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

MIN_FINANCIAL_YEAR = 2000


def max_financial_year() -> int:
    return datetime.now(timezone.utc).year + 1


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── Request / Upsert ─────────────────────────────────────────────────────────


class ESGResponseUpsertRequest(CamelModel):
    financial_year: int

    # Environmental
    total_electricity_consumption: float | None = None
    renewable_electricity_consumption: float | None = None
    total_fuel_consumption: float | None = None
    carbon_emissions: float | None = None

    # Social
    total_employees: int | None = None
    female_employees: int | None = None
    average_training_hours: float | None = None
    community_investment_spend: float | None = None

    # Governance
    independent_board_members_percent: float | None = None
    has_data_privacy_policy: bool | None = None  # accepts true/false or "Yes"/"No"
    total_revenue: float | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("financial_year")
    @classmethod
    def _financial_year_in_range(cls, value: int) -> int:
        upper = max_financial_year()
        if not MIN_FINANCIAL_YEAR <= value <= upper:
            raise ValueError(f"Financial year must be between {MIN_FINANCIAL_YEAR} and {upper}")
        return value

    def raw_fields(self) -> dict[str, Any]:
        """Questionnaire answers without the natural key, keyed by column name."""
        return self.model_dump(exclude={"financial_year"})


# ── Stored record ─────────────────────────────────────────────────────────────


class ESGResponseRead(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    financial_year: int

    total_electricity_consumption: float | None
    renewable_electricity_consumption: float | None
    total_fuel_consumption: float | None
    carbon_emissions: float | None

    total_employees: int | None
    female_employees: int | None
    average_training_hours: float | None
    community_investment_spend: float | None

    independent_board_members_percent: float | None
    has_data_privacy_policy: bool | None
    total_revenue: float | None

    carbon_intensity: float | None
    renewable_electricity_ratio: float | None
    diversity_ratio: float | None
    community_spend_ratio: float | None

    created_at: datetime
    updated_at: datetime


# ── Summary ───────────────────────────────────────────────────────────────────


class TrendPoint(CamelModel):
    year: int
    value: float


class ESGTrends(CamelModel):
    carbon_emissions: list[TrendPoint]
    total_revenue: list[TrendPoint]
    total_employees: list[TrendPoint]
    diversity_ratio: list[TrendPoint]


class ESGSummary(CamelModel):
    total_responses: int
    financial_years: list[int]
    latest_response: ESGResponseRead | None
    trends: ESGTrends


# ── Envelopes ─────────────────────────────────────────────────────────────────


class ESGResponseEnvelope(BaseModel):
    message: str
    data: ESGResponseRead


class ESGResponseListEnvelope(BaseModel):
    message: str
    data: list[ESGResponseRead]


class FinancialYearsEnvelope(BaseModel):
    message: str
    data: list[int]


class ESGSummaryEnvelope(BaseModel):
    message: str
    data: ESGSummary


class MetadataEnvelope(BaseModel):
    message: str
    data: dict[str, list[dict[str, Any]]]
