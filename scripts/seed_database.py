#!/usr/bin/env python3
"""
Create the soil health tables and load the sample data set.

Uses DATABASE_URL from the environment (or .env).
"""
import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from soil_health.database import Base, engine, init_db
from soil_health.models import database_models  # noqa: F401

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("seed_database")


def main():
    parser = argparse.ArgumentParser(description="Seed the soil health database")
    parser.add_argument("--reset", action="store_true", help="Drop all tables before seeding")
    args = parser.parse_args()

    if args.reset:
        logger.warning(f"Dropping all tables on {engine.url}")
        Base.metadata.drop_all(bind=engine)

    init_db(seed=True)
    logger.info("Database ready")


if __name__ == "__main__":
    main()
