"""
Create the shop service-record tables and load sample data.

Tables seeded (only when empty):
  - oil_change_records
  - emissions_test_records
  - tire_installation_records
  - customer_vehicle_profiles
  - label_templates (created, not seeded)

Uses DATABASE_URL from the environment / .env, like the API itself. After
running it, the tables are served by the dynamic API on the next start.
"""

from __future__ import annotations

import argparse

from inspection_api.core.flow_logging import configure_logging
from inspection_api.db.example_data import seed_example_tables
from inspection_api.db.session import build_engine


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--database-url",
        default=None,
        help="Override DATABASE_URL for this run.",
    )
    args = parser.parse_args()

    configure_logging()
    engine = build_engine(args.database_url)
    inserted = seed_example_tables(engine)
    for table_name, count in inserted.items():
        print(f"{table_name}: {count} row(s) inserted")
    print("Seed completed.")


if __name__ == "__main__":
    main()
