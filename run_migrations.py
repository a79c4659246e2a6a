"""Apply schema migrations (and optionally the starter dataset) from the CLI.

Usage: python run_migrations.py [--database-url URL] [--seed] [--status]
"""
import argparse
from typing import Optional

from academia.config import settings
from academia.database import RecordStore
from academia.migrations import MIGRATIONS, create_schema, current_version
from academia.seed import seed_if_empty


def run(database_url: Optional[str] = None, seed: bool = False, status_only: bool = False) -> int:
    """Bring the database at `database_url` up to the latest schema version.

    With `status_only` nothing is applied; the current and latest
    versions are printed. Returns the resulting schema version.
    """
    url = database_url or settings.DATABASE_URL
    print("Using database:", url)
    store = RecordStore(url)
    try:
        if status_only:
            version = current_version(store)
            print(f"Schema version {version} of {MIGRATIONS[-1][0]}")
            return version
        version = create_schema(store)
        print("Schema at version", version)
        if seed:
            print("Seeded starter data." if seed_if_empty(store) else "Store already populated, nothing seeded.")
        return version
    finally:
        store.dispose()


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--database-url', help='SQLAlchemy URL (defaults to DATABASE_URL)')
    parser.add_argument('--seed', action='store_true', help='Load the starter dataset into an empty store')
    parser.add_argument('--status', action='store_true', help='Only print the current schema version')
    args = parser.parse_args()
    run(database_url=args.database_url, seed=args.seed, status_only=args.status)
