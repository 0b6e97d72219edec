#!/usr/bin/env python3
"""Development seed script for the ESG Questionnaire API.

Creates a demo user and a sample FY2023 questionnaire response. Safe to
re-run: the user is looked up first and the response is upserted.

Usage:
    # From the repo root:
    python scripts/seed.py
    python scripts/seed.py --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Allow running from the repo root or from scripts/
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.core.database import async_session_factory, dispose_engine
from app.auth import service as auth_service
from app.modules.esg import service as esg_service
from app.schemas.auth import RegisterRequest

DEMO_USER = {
    "username": "testuser",
    "email": "test@example.com",
    "full_name": "Test User",
    "password": "password123",
}

SAMPLE_YEAR = 2023
SAMPLE_RESPONSE = {
    "total_electricity_consumption": 1_000_000,
    "renewable_electricity_consumption": 250_000,
    "total_fuel_consumption": 50_000,
    "carbon_emissions": 1_500,
    "total_employees": 100,
    "female_employees": 45,
    "average_training_hours": 40,
    "community_investment_spend": 500_000,
    "independent_board_members_percent": 60,
    "has_data_privacy_policy": True,
    "total_revenue": 10_000_000,
}


async def seed(dry_run: bool) -> None:
    async with async_session_factory() as session:
        user = await auth_service.find_by_email_or_username(
            session, DEMO_USER["email"], DEMO_USER["username"]
        )
        if user is None:
            user = await auth_service.create_user(session, RegisterRequest(**DEMO_USER))
            print(f"  [+] user {user.email}")
        else:
            print(f"  [=] user {user.email} already exists")

        record = await esg_service.create_or_update(
            session, user.id, SAMPLE_YEAR, SAMPLE_RESPONSE
        )
        print(
            f"  [+] FY{record.financial_year}: carbon_intensity={record.carbon_intensity}, "
            f"renewable_electricity_ratio={record.renewable_electricity_ratio}, "
            f"diversity_ratio={record.diversity_ratio}, "
            f"community_spend_ratio={record.community_spend_ratio}"
        )

        if dry_run:
            await session.rollback()
            print("\n[DRY RUN] No changes committed.")
        else:
            await session.commit()
            print("\n[OK] All changes committed.")

    await dispose_engine()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the ESG database with demo data.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would be seeded without committing anything",
    )
    args = parser.parse_args()

    if args.dry_run:
        print("=" * 60)
        print("DRY RUN: no changes will be committed")
        print("=" * 60)

    asyncio.run(seed(args.dry_run))


if __name__ == "__main__":
    main()
