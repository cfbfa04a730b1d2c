# seed_db.py
"""
Database Seeding Script
=======================

Command-line utilities to prepare a clinic database for development.

It supports two modes:
- `init`: Create the schema and seed clinic settings, doctors, services and
  Monday-Friday schedules. Tables that already hold rows are left alone.
- `patients`: Insert a number of approved, active test patients.

Usage:
    python seed_db.py init
    python seed_db.py init --reset
    python seed_db.py patients --records 50

Requirements:
    - A valid database configuration (via environment variables or .env).
"""

import sys
import argparse
import asyncio
from scripts.db import seed_db, seed_reference_data, PATIENT_DATA_TEMPLATE
from app.db import DbManager
from common.config import DatabaseConfig, get_config, initialize_config
from common.api_error import ConfigurationError
from dotenv import load_dotenv


def get_db_config() -> DatabaseConfig:
    """
    Load and validate database configuration.

    Raises:
        SystemExit: If configuration cannot be loaded or has no database.
    """
    try:
        initialize_config()
    except ConfigurationError as e:
        print(f"FATAL: Configuration error:\n{e}")
        sys.exit(1)

    db_cfg = get_config().database
    if db_cfg is None:
        print("FATAL: Database configuration required (set DB_DRIVER and DB_NAME)")
        sys.exit(1)
    return db_cfg


async def run_init(_db_config: DatabaseConfig, reset: bool) -> None:
    """
    Create tables and seed reference data.

    Example:
        >>> asyncio.run(run_init(db_cfg, reset=False))
    """
    db_manager = DbManager.from_config(_db_config)
    try:
        await db_manager.verify_connection()
        if reset:
            await db_manager.drop_schema()
        await db_manager.create_schema()
        inserted = await seed_reference_data(db_manager)
        print(f"Seeded: {inserted}")
    finally:
        await db_manager.dispose()


async def run_seed_patients(
    _db_config: DatabaseConfig, records: int, start_index: int
) -> None:
    """
    Insert templated patients.

    Example:
        >>> asyncio.run(run_seed_patients(db_cfg, records=200, start_index=0))
    """
    db_manager = DbManager.from_config(_db_config)
    try:
        await db_manager.verify_connection()
        await seed_db(
            db_manager=db_manager,
            data_template={"patients": PATIENT_DATA_TEMPLATE},
            records=records,
            start_index=start_index,
        )
    finally:
        await db_manager.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the clinic database")
    subparsers = parser.add_subparsers(dest="mode", required=True)

    init_parser = subparsers.add_parser(
        "init", help="Create the schema and seed reference data"
    )
    init_parser.add_argument(
        "--reset", action="store_true", help="Drop all clinic tables first"
    )

    patients_parser = subparsers.add_parser("patients", help="Seed test patients")
    patients_parser.add_argument(
        "--records",
        type=int,
        required=True,
        help="Number of patients to insert (REQUIRED)",
    )
    patients_parser.add_argument(
        "--start-index",
        type=int,
        default=0,
        help="First index used in generated names and emails",
    )

    args = parser.parse_args()
    _db_config = get_db_config()

    if args.mode == "init":
        asyncio.run(run_init(_db_config, args.reset))
    elif args.mode == "patients":
        asyncio.run(run_seed_patients(_db_config, args.records, args.start_index))


if __name__ == "__main__":
    load_dotenv()
    main()
