"""
run_backup
----------
Tiny CLI to snapshot collections to JSON before running the migration.

Usage:
    python run_backup.py [--out backups] [collection ...]
    # with no collection names, every legacy and kept collection is saved
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

from consolidate import rules
from consolidate.backup import backup_collections
from consolidate.reader import CollectionReader


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Back up Firestore collections to JSON")
    ap.add_argument("collections", nargs="*", default=None)
    ap.add_argument("--out", default="backups", help="parent directory for the dated backup")
    ap.add_argument("--credentials", default=None, help="service account key file")
    ap.add_argument("--project", default=None, help="Firebase project id")
    args = ap.parse_args(argv)

    from store_adaptor import FirestoreStore
    store = FirestoreStore.from_env(args.credentials, args.project)

    print("🔄 Starting backup...\n")
    summary = backup_collections(CollectionReader(store), args.collections or rules.BACKUP_COLLECTIONS,
                                 Path(args.out), datetime.now(timezone.utc))
    print("=" * 50)
    print("✅ BACKUP COMPLETED")
    print(f"📊 Total documents backed up: {summary['totalDocuments']}")
    print(f"📁 Backup location: {summary['path']}")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
