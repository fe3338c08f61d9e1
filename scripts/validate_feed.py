#!/usr/bin/env python3
"""
Check a rebuilt recentchanges table against the source tables.

Usage:
    python scripts/validate_feed.py --db data/wiki.db
"""

import argparse
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from feedrebuild.config import RebuildConfig
from feedrebuild.database import FeedEntry, get_session
from feedrebuild.verify import check_change_sources, check_duplicates, check_linkage


def validate(db_path: Path, config: RebuildConfig) -> bool:
    """
    Run all checks and print a report.

    Returns True if the table is consistent, False otherwise.
    """
    print(f"Querying database at {db_path}...")
    session = get_session(db_path)
    try:
        total = session.query(FeedEntry).count()
        print(f"  {total} feed entries")

        checks = [
            ("change sources", check_change_sources(session)),
            ("linkage", check_linkage(session)),
            ("upload duplicates", check_duplicates(session, config)),
        ]
    finally:
        session.close()

    ok = True
    for name, problems in checks:
        if problems:
            ok = False
            print(f"\n❌ {name}: {len(problems)} problems")
            for p in problems[:10]:
                print(f"   {p}")
            if len(problems) > 10:
                print(f"   ... and {len(problems) - 10} more")
        else:
            print(f"✅ {name}")

    return ok


def main():
    parser = argparse.ArgumentParser(description="Validate a rebuilt recentchanges table")
    parser.add_argument("--db", type=Path, help="Path to SQLite database file (default: FEEDREBUILD_DB_PATH)")

    args = parser.parse_args()
    config = RebuildConfig.from_env()
    db_path = args.db or config.db_path

    if not db_path.exists():
        print(f"❌ Database not found: {db_path}")
        sys.exit(1)

    sys.exit(0 if validate(db_path, config) else 1)


if __name__ == "__main__":
    main()
