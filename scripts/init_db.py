#!/usr/bin/env python3
"""Create the Jobly schema and optionally load companies/jobs from JSON.

The seed file holds {"companies": [...], "jobs": [...]} using the same
external field names as the MCP tools (numEmployees, companyHandle, ...).
Records that already exist are skipped.
"""
import argparse
import json
import logging
from pathlib import Path

from db import companies, jobs
from db.connection import DbWriter, resolve_db_path
from models.errors import ErrorCode, ToolError
from schemas.companies import CompanyNewRequest
from schemas.jobs import JobNewRequest
from utils.pydantic_error_mapper import validate_request

logger = logging.getLogger("init_db")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create the Jobly SQLite schema and seed it.")
    parser.add_argument(
        "--db",
        default=None,
        help="SQLite DB path (default: $JOBLY_DB or data/jobly.db).",
    )
    parser.add_argument(
        "--seed",
        default=None,
        help="Optional JSON file with companies and jobs to insert.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every inserted record.",
    )
    return parser.parse_args(argv)


def load_seed(path: Path) -> dict:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Seed file must hold a JSON object, got {type(data).__name__}")
    return data


def _insert_all(conn, records, request_cls, create) -> tuple[int, int]:
    inserted = 0
    skipped = 0
    for record in records:
        request = validate_request(request_cls, record)
        try:
            create(conn, request.payload())
            inserted += 1
        except ToolError as e:
            # Duplicates are expected on re-runs; anything else aborts the load.
            if e.code != ErrorCode.VALIDATION_ERROR or not e.message.startswith("Duplicate"):
                raise
            logger.debug("Skipped: %s", e.message)
            skipped += 1
    return inserted, skipped


def seed_database(db_path, seed: dict) -> dict:
    """Insert seed companies then jobs in one transaction; returns counts."""
    with DbWriter(db_path) as writer:
        companies_inserted, companies_skipped = _insert_all(
            writer.conn, seed.get("companies", []), CompanyNewRequest, companies.create
        )
        jobs_inserted, jobs_skipped = _insert_all(
            writer.conn, seed.get("jobs", []), JobNewRequest, jobs.create
        )
        writer.commit()

    return {
        "companies_inserted": companies_inserted,
        "companies_skipped": companies_skipped,
        "jobs_inserted": jobs_inserted,
        "jobs_skipped": jobs_skipped,
    }


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        seed = load_seed(Path(args.seed)) if args.seed else {}
        counts = seed_database(args.db, seed)
    except ToolError as e:
        logger.error("%s: %s", e.code.value, e.message)
        return 1
    except (OSError, ValueError) as e:
        logger.error("Cannot load seed file %s: %s", args.seed, e)
        return 1

    print(
        f"companies: {counts['companies_inserted']} inserted, {counts['companies_skipped']} skipped; "
        f"jobs: {counts['jobs_inserted']} inserted, {counts['jobs_skipped']} skipped"
    )
    print(f"db: {resolve_db_path(args.db)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
