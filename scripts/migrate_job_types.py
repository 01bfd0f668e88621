from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.core.errors import PersistenceFailure, ValidationFailure
from app.db.session import SessionLocal
from app.services.job_migration_service import JobTypeMigrationService, parse_migration_map


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Migrate legacy job types (AIR_FREIGHT, SEA_FREIGHT, ROAD_FREIGHT) "
        "to import/export types and allocate new AAL job numbers.",
    )
    parser.add_argument(
        "--year",
        type=int,
        default=None,
        help="Bucket year for new numbers (default: JOB_MIGRATION_YEAR_SOURCE).",
    )
    parser.add_argument(
        "--map",
        dest="mapping",
        default="",
        help="Overrides as LEGACY=CANONICAL pairs, e.g. AIR_FREIGHT=AIR_FREIGHT_EXPORT.",
    )
    parser.add_argument("--json", action="store_true", help="Print the report as JSON.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    args = _parse_args(argv)

    try:
        mapping = parse_migration_map(args.mapping)
    except ValueError as e:
        print(f"Invalid --map: {e}", file=sys.stderr)
        return 2

    db = SessionLocal()
    try:
        report = JobTypeMigrationService.migrate_all(db, mapping=mapping, year=args.year)
    except ValidationFailure as e:
        print(e.message, file=sys.stderr)
        return 2
    except PersistenceFailure as e:
        print(f"Migration aborted: {e.message}", file=sys.stderr)
        if e.report is not None:
            print(json.dumps(e.report.as_dict(), indent=2, default=str))
        return 1
    finally:
        db.close()

    if args.json:
        print(json.dumps(report.as_dict(), indent=2, default=str))
    else:
        for entry in report.entries:
            if entry.outcome == "migrated":
                print(
                    f"Migrated job {entry.old_job_number} -> {entry.new_job_number} "
                    f"({entry.old_job_type.value} -> {entry.new_job_type.value})"
                )
            elif entry.outcome == "failed":
                print(f"Failed job {entry.job_id}: {entry.reason}")
        print(
            f"Migration complete. migrated={len(report.migrated)} "
            f"skipped={len(report.skipped)} failed={len(report.failed)}"
        )
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
