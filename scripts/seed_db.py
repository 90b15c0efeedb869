"""
Seed script for the read-only relay collections (mock DB or Firestore).

In production these collections are written by the external air-quality
pipeline; this script fills them for local development.

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to configured DB: python scripts/seed_db.py --apply
  - Custom file: python scripts/seed_db.py --file ./relay_seed.json --apply

Behavior:
  - Loads `db_seed.json` from repo root: {collection: {doc_id: data}}.
  - Gets DB via `app.config.firebase.get_db()` which will return the mock DB or real Firestore depending on settings.
  - Only the model-data and recommendation collections are written unless --any-collection is passed.
"""

import argparse
import json
import os
from typing import Any, Iterable

from app.config.firebase import get_db
from app.core.settings import settings


def load_seed(path: str = "./db_seed.json") -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def relay_collections() -> set:
    return {settings.MODEL_DATA_COLLECTION, settings.RECOMMENDATIONS_COLLECTION}


def write_to_db(db: Any, seed: dict, apply: bool = False, allowed: Iterable[str] = None) -> int:
    """Write seed documents; returns how many documents were (or would be) written."""
    allowed = set(allowed) if allowed is not None else None
    written = 0
    for collection, docs in seed.items():
        if allowed is not None and collection not in allowed:
            print(f"Skipping collection not owned by the relay pipeline: {collection}")
            continue
        for doc_id, data in docs.items():
            print(f"Preparing: {collection}/{doc_id}")
            written += 1
            if not apply:
                continue
            # Firestore client and MockFirestore share .collection(name).document(id).set(data)
            db.collection(collection).document(doc_id).set(data)
            print(f"Wrote: {collection}/{doc_id}")
    return written


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to the DB instead of dry-run")
    parser.add_argument("--file", default=os.path.join(os.getcwd(), "db_seed.json"), help="Seed JSON path")
    parser.add_argument("--any-collection", action="store_true", help="Allow collections other than the relay ones")
    args = parser.parse_args()

    if not os.path.exists(args.file):
        print(f"Seed file not found: {args.file}")
        return

    seed = load_seed(args.file)
    db = get_db()

    allowed = None if args.any_collection else relay_collections()
    count = write_to_db(db, seed, apply=args.apply, allowed=allowed)

    if args.apply:
        print(f"Seeding completed ({count} documents).")
    else:
        print("Dry run complete. Re-run with --apply to write to DB.")


if __name__ == "__main__":
    main()
