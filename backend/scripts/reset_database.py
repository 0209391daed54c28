#!/usr/bin/env python3
"""
Script to completely reset the database - drops the ferry logistics tables and recreates them.

WARNING: This will delete ALL orders, bookings and chat history!

Usage:
    python scripts/reset_database.py          # asks for confirmation
    python scripts/reset_database.py --yes    # no prompt (CI / local dev)
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load environment variables from .env file if it exists
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env'))

from sqlalchemy import inspect, text
from app.config import settings
from app.database import engine, Base
from app.models import (
    Supplier, InventoryItem, Order, Booking, Ferry, ChatMessage
)
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def reset_database(assume_yes: bool = False):
    """Drop all tables and recreate them from the current models"""
    db_url = settings.database_url
    logger.warning("=" * 60)
    logger.warning("WARNING: This will DELETE ALL DATA in the database!")
    logger.warning(f"Database: {db_url.split('@')[-1]}")
    logger.warning(f"Tables: {', '.join(sorted(Base.metadata.tables))}")
    logger.warning("=" * 60)

    if not assume_yes:
        response = input("Are you sure you want to continue? (yes/no): ")
        if response.lower() != "yes":
            logger.info("Aborted.")
            return

    try:
        logger.info("Dropping all tables...")
        Base.metadata.drop_all(bind=engine)

        logger.info("Creating all tables...")
        Base.metadata.create_all(bind=engine)

        # Tables now match head; a stale alembic_version would make the next upgrade fail
        if inspect(engine).has_table("alembic_version"):
            with engine.connect() as conn:
                conn.execute(text("DELETE FROM alembic_version"))
                conn.commit()
            logger.info("Alembic version table cleared.")

        logger.info("=" * 60)
        logger.info("Database reset complete!")
        logger.info("Run: alembic stamp head")
        logger.info("to mark the initial schema as applied.")
        logger.info("=" * 60)

    except Exception as e:
        logger.error(f"Error resetting database: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    reset_database(assume_yes="--yes" in sys.argv[1:])
