#!/usr/bin/env python3
"""
Clear all truck data.
Empties the configured truck store and deletes every file in the images
directory. Cannot be undone: export a backup first.
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

load_dotenv()

from config import settings
from repositories.factory import create_repository


def clear_images(images_dir: Path) -> int:
    """Delete every file in the images directory"""
    if not images_dir.is_dir():
        print("ℹ️  Images directory is already empty or doesn't exist")
        return 0

    deleted = 0
    for path in sorted(images_dir.iterdir()):
        if path.is_file():
            path.unlink()
            deleted += 1
            print(f"🗑️  Deleted image: {path.name}")
    print(f"✅ Cleared {deleted} images from {images_dir}")
    return deleted


def main():
    parser = argparse.ArgumentParser(description="Delete every truck and truck image")
    parser.add_argument("--backend", choices=["index", "per_record", "local", "remote"],
                        help="Storage backend to clear (defaults to STORAGE_BACKEND)")
    parser.add_argument("--keep-images", action="store_true", help="Do not delete image files")
    parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    args = parser.parse_args()

    repo = create_repository(backend=args.backend)

    if not args.yes:
        answer = input(f"Delete ALL trucks from {repo.storage_type} storage? [y/N] ")
        if answer.strip().lower() != "y":
            print("Operation cancelled")
            return

    print("🧹 Starting complete data cleanup...")
    repo.import_data({"trucks": []})
    print(f"✅ Cleared all trucks from {repo.storage_type} storage")

    if not args.keep_images:
        clear_images(settings.images_dir)

    print("\n🎉 All truck data has been cleared!")


if __name__ == "__main__":
    main()
