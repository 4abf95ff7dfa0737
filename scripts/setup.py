#!/usr/bin/env python3
"""Setup script for the tour booking workflow API."""

import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

import jwt  # noqa: E402
from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
from sqlalchemy import func, select  # noqa: E402

from tour_booking.core.config import settings  # noqa: E402
from tour_booking.core.database import async_session_factory, close_db  # noqa: E402
from tour_booking.models import Tour, User  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_TOURS = [
    {
        "slug": "ha-long-bay-cruise",
        "title": "Ha Long Bay Overnight Cruise",
        "location": "Quang Ninh",
        "duration": "2 days 1 night",
        "price": Decimal("1000000.00"),
        "original_price": Decimal("1250000.00"),
    },
    {
        "slug": "sapa-trekking",
        "title": "Sapa Rice Terrace Trek",
        "location": "Lao Cai",
        "duration": "3 days 2 nights",
        "price": Decimal("2450000.00"),
        "original_price": None,
    },
    {
        "slug": "mekong-delta-discovery",
        "title": "Mekong Delta Discovery",
        "location": "Can Tho",
        "duration": "1 day",
        "price": Decimal("650000.00"),
        "original_price": Decimal("800000.00"),
    },
]

ADMIN_EMAIL = "admin@example.com"


def run_migrations():
    """Apply Alembic migrations up to head."""
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))

    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data():
    """Create sample tours and an admin account."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        try:
            existing_tours = await db.execute(select(func.count(Tour.id)))
            if existing_tours.scalar() > 0:
                logger.info("Sample data already exists, skipping...")
                return

            for tour_data in SAMPLE_TOURS:
                db.add(Tour(**tour_data))

            db.add(User(email=ADMIN_EMAIL, full_name="Back Office", role=settings.admin_role))

            await db.commit()
            logger.info("Sample data created successfully!")

        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to create sample data: {e}")
            raise


async def issue_development_token():
    """Log a short-lived admin bearer token for local testing."""
    async with async_session_factory() as db:
        result = await db.execute(select(User).where(User.email == ADMIN_EMAIL))
        admin = result.scalar_one_or_none()

    if admin is None:
        return

    token = jwt.encode(
        {
            "sub": str(admin.id),
            "role": admin.role,
            "email": admin.email,
            "exp": datetime.now(timezone.utc) + timedelta(hours=8),
        },
        settings.bearer_token_secret,
        algorithm="HS256",
    )
    logger.info(f"Development admin token (8h): {token}")


async def seed():
    try:
        await create_sample_data()
        if settings.debug:
            await issue_development_token()
    finally:
        await close_db()


def main():
    """Main setup function."""
    logger.info("Starting tour booking workflow setup...")

    run_migrations()
    asyncio.run(seed())

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn tour_booking.main:app --reload")


if __name__ == "__main__":
    main()
