#!/usr/bin/env python3
"""
Restore trucks from a backup file.
Reads a JSON document in the export format ({"trucks": [...]}) and replaces
the configured store's collection with it.
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

load_dotenv()

from errors import TruckStoreError
from repositories.factory import create_repository


def main():
    parser = argparse.ArgumentParser(description="Restore trucks from an export backup")
    parser.add_argument("backup_file", help="Path to the backup JSON file")
    parser.add_argument("--backend", choices=["index", "per_record", "local", "remote"],
                        help="Storage backend to restore into (defaults to STORAGE_BACKEND)")
    args = parser.parse_args()

    backup_path = Path(args.backup_file)
    try:
        with open(backup_path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"❌ Cannot read backup {backup_path}: {e}")
        sys.exit(1)

    repo = create_repository(backend=args.backend)
    try:
        result = repo.import_data(document)
    except TruckStoreError as e:
        print(f"❌ Import failed: {e.message}")
        sys.exit(1)

    print(f"✅ Restored {result['importedCount']} trucks into {repo.storage_type} storage")


if __name__ == "__main__":
    main()
