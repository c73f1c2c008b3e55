#!/usr/bin/env python3
"""
Initialize the editor database.

Creates the tables for edited documents and extracted text blocks.
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from data.database import DatabaseManager
from utils.logging import configure_logging


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Initialize PDF editor database'
    )
    parser.add_argument(
        '--database-url',
        type=str,
        default=None,
        help='Database URL (default: DATABASE_URL setting)'
    )
    parser.add_argument(
        '--drop-existing',
        action='store_true',
        help='Drop existing tables before creating new ones (WARNING: destroys data!)'
    )
    parser.add_argument(
        '--yes',
        action='store_true',
        help='Do not ask for confirmation when dropping tables'
    )

    args = parser.parse_args(argv)
    configure_logging(json_output=False)

    db_manager = DatabaseManager(args.database_url)

    print("=" * 60)
    print("PDF Editor Database Initialization")
    print("=" * 60)
    print(f"Database URL: {db_manager.database_url}")
    print()

    if args.drop_existing:
        confirm = 'yes' if args.yes else input(
            "⚠️  Drop existing tables? This will DELETE ALL DATA! (yes/no): "
        )
        if confirm.lower() != 'yes':
            print("Aborted.")
            return 1
        db_manager.drop_tables()

    db_manager.create_tables()

    print()
    print("✓ Database initialized successfully!")
    print()
    print("Tables created:")
    print("  - documents")
    print("  - text_blocks")
    print()
    print("Start the API server: uvicorn serving.editor_api:app --port 8002")
    return 0


if __name__ == '__main__':
    sys.exit(main())
