"""ESG questionnaire response model: one row per user per financial year."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Float, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.core import User


class ESGResponse(BaseModel):
    __tablename__ = "esg_responses"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    financial_year: Mapped[int] = mapped_column(Integer, nullable=False)

    # ── Environmental ─────────────────────────────────────────────────────────
    total_electricity_consumption: Mapped[float | None] = mapped_column(Float)  # kWh
    renewable_electricity_consumption: Mapped[float | None] = mapped_column(Float)  # kWh
    total_fuel_consumption: Mapped[float | None] = mapped_column(Float)  # liters
    carbon_emissions: Mapped[float | None] = mapped_column(Float)  # T CO2e

    # ── Social ────────────────────────────────────────────────────────────────
    total_employees: Mapped[int | None] = mapped_column(Integer)
    female_employees: Mapped[int | None] = mapped_column(Integer)
    average_training_hours: Mapped[float | None] = mapped_column(Float)
    community_investment_spend: Mapped[float | None] = mapped_column(Float)  # INR

    # ── Governance ────────────────────────────────────────────────────────────
    independent_board_members_percent: Mapped[float | None] = mapped_column(Float)
    has_data_privacy_policy: Mapped[bool | None] = mapped_column(Boolean)
    total_revenue: Mapped[float | None] = mapped_column(Float)  # INR

    # ── Auto-calculated ───────────────────────────────────────────────────────
    carbon_intensity: Mapped[float | None] = mapped_column(Float)  # T CO2e / INR
    renewable_electricity_ratio: Mapped[float | None] = mapped_column(Float)  # %
    diversity_ratio: Mapped[float | None] = mapped_column(Float)  # %
    community_spend_ratio: Mapped[float | None] = mapped_column(Float)  # %

    user: Mapped[User] = relationship(back_populates="esg_responses")

    __table_args__ = (
        UniqueConstraint("user_id", "financial_year", name="uq_esg_response_user_year"),
    )
