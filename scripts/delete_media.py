"""
Delete orphaned report media from object storage.

report_service.create_report logs the object path when a report fails to
save after its media was uploaded. Pass those paths here to remove them.

Usage:
  - Dry run (default): python scripts/delete_media.py pakair/reports/abc.jpg
  - Apply:             python scripts/delete_media.py --apply pakair/reports/abc.jpg
"""

import argparse
import asyncio
import sys

from app.core import errors
from app.core.logging_config import configure_logging
from app.core.settings import settings
from app.services.media_service import get_media_service


def delete_objects(object_paths, apply: bool = False) -> int:
    """Delete the given objects; returns how many were (or would be) deleted."""
    folder = settings.MEDIA_FOLDER.strip("/") + "/"
    service = get_media_service()
    deleted = 0
    for object_path in object_paths:
        if not object_path.startswith(folder):
            print(f"Skipping path outside {folder}: {object_path}")
            continue
        print(f"Preparing: {object_path}")
        deleted += 1
        if not apply:
            continue
        asyncio.run(service.discard(object_path))
        print(f"Deleted: {object_path}")
    return deleted


def main(argv=None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("paths", nargs="+", help="Object paths as logged by the report service")
    parser.add_argument("--apply", action="store_true", help="Delete instead of dry-run")
    args = parser.parse_args(argv)

    configure_logging()
    try:
        count = delete_objects(args.paths, apply=args.apply)
    except errors.UpstreamFailure as e:
        print(f"Delete failed: {e.message} ({e.error})")
        return 1

    if args.apply:
        print(f"Deleted {count} objects.")
    else:
        print("Dry run complete. Re-run with --apply to delete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
