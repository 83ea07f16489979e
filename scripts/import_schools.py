#!/usr/bin/env python3
"""Import the Department of Basic Education school master list.

Reads a CSV export of the national master list and upserts every row into
the schools table keyed on nat_emis, 100 rows per statement batch.

Run inside Docker:
    docker compose exec backend python scripts/import_schools.py /app/data/schools.csv

Or locally with the right DATABASE_URL:
    python scripts/import_schools.py data/schools.csv --organization-id <uuid>
"""

import argparse
import csv
import sys
import uuid
from pathlib import Path

# In Docker: script is at /app/scripts/, backend code is at /app/
# Locally: script is at scripts/, backend code is at backend/
script_dir = Path(__file__).resolve().parent
backend_dir = script_dir.parent / "backend"
if backend_dir.exists():
    sys.path.insert(0, str(backend_dir))
else:
    sys.path.insert(0, str(script_dir.parent))

from sqlalchemy import text
from app.models.base import SyncSessionLocal
from app.services.school_import import SCHOOL_COLUMNS, batched, parse_school_row

BATCH_SIZE = 100

_UPDATE_COLUMNS = [c for c in SCHOOL_COLUMNS if c != "nat_emis"]

UPSERT_SQL = text(f"""
    INSERT INTO schools (id, organization_id, {", ".join(SCHOOL_COLUMNS)}, created_at, updated_at)
    VALUES (:id, :organization_id, {", ".join(":" + c for c in SCHOOL_COLUMNS)}, NOW(), NOW())
    ON CONFLICT (nat_emis) DO UPDATE SET
        {", ".join(f"{c} = EXCLUDED.{c}" for c in _UPDATE_COLUMNS)},
        organization_id = COALESCE(EXCLUDED.organization_id, schools.organization_id),
        updated_at = NOW()
""")


def read_rows(csv_path: Path) -> list[dict]:
    # DBE exports are usually saved from Excel with a BOM
    with csv_path.open(newline="", encoding="utf-8-sig") as f:
        return list(csv.DictReader(f))


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("csv_path", type=Path)
    parser.add_argument("--organization-id", default=None, help="Owning organization UUID")
    args = parser.parse_args()

    if not args.csv_path.exists():
        print(f"CSV not found at {args.csv_path}")
        sys.exit(1)

    raw_rows = read_rows(args.csv_path)
    print(f"Read {len(raw_rows)} rows from {args.csv_path}")

    # Last row wins for repeated EMIS numbers; ON CONFLICT cannot touch a row twice per statement
    by_emis = {}
    skipped = 0
    for row in raw_rows:
        school = parse_school_row(row)
        if school is None:
            skipped += 1
            continue
        by_emis[school["nat_emis"]] = school
    schools = list(by_emis.values())

    session = SyncSessionLocal()
    try:
        imported = 0
        for number, batch in enumerate(batched(schools, BATCH_SIZE), start=1):
            session.execute(UPSERT_SQL, [
                {**school, "id": str(uuid.uuid4()), "organization_id": args.organization_id}
                for school in batch
            ])
            session.commit()
            imported += len(batch)
            print(f"  Imported batch {number} ({imported}/{len(schools)})")

        print(f"\nInserted/updated: {imported}")
        print(f"Skipped (no NatEmis): {skipped}")

    except Exception as e:
        session.rollback()
        print(f"Error: {e}", file=sys.stderr)
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
