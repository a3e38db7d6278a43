#!/usr/bin/env python3
"""
Migrate trucks between storage backends.
Copies every truck, ids and timestamps included, from one backend to another,
for example from per-record files into the single index document. The target
collection is replaced.
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

load_dotenv()

from config import settings
from errors import TruckStoreError
from repositories.factory import create_repository

BACKENDS = ["index", "per_record", "local", "remote"]


def migrate(source_backend: str, target_backend: str, backup_file: Path = None) -> int:
    """Copy all trucks from the source backend into the target backend"""
    if target_backend == "local" and not settings.local_storage_path:
        raise ValueError("LOCAL_STORAGE_PATH must be set to migrate into local storage")

    source = create_repository(backend=source_backend)
    target = create_repository(backend=target_backend)

    document = source.export_data()
    print(f"Loaded {document['truckCount']} trucks from {source.storage_type} storage")

    if backup_file:
        with open(backup_file, "w", encoding="utf-8") as f:
            json.dump(target.export_data(), f, indent=2)
        print(f"Saved backup of {target.storage_type} storage to {backup_file}")

    for truck in document["trucks"]:
        print(f"Migrating truck {truck['id']}: {truck.get('year')} {truck.get('make')} {truck.get('model')}")

    result = target.import_data(document)
    return result["importedCount"]


def main():
    parser = argparse.ArgumentParser(description="Copy trucks from one storage backend to another")
    parser.add_argument("--source", choices=BACKENDS, default="per_record", help="Backend to read from")
    parser.add_argument("--target", choices=BACKENDS, default="index", help="Backend to write to")
    parser.add_argument("--backup", type=Path, help="Write the target's current data to this file first")
    args = parser.parse_args()

    if args.source == args.target:
        print("❌ Source and target backends must differ")
        sys.exit(1)

    try:
        count = migrate(args.source, args.target, args.backup)
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)
    except TruckStoreError as e:
        print(f"❌ Migration failed: {e.message}")
        sys.exit(1)

    print(f"✅ Migrated {count} trucks from {args.source} to {args.target} storage")


if __name__ == "__main__":
    main()
