"""
consolidate.backup
------------------
Snapshot collections to JSON files before migrating, one file per
collection plus a summary, under <out_dir>/<YYYY-MM-DD>/.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Sequence

from normalize.records import Origin

from .reader import CollectionReader, NotFound


def backup_collections(reader: CollectionReader, collections: Sequence[str],
                       out_dir: Path, now: datetime) -> Dict[str, Any]:
    backup_dir = Path(out_dir) / now.date().isoformat()
    backup_dir.mkdir(parents=True, exist_ok=True)
    print(f"📁 Backup directory: {backup_dir}")

    summary: Dict[str, Any] = {
        "timestamp": now.isoformat(),
        "collections": {},
        "totalDocuments": 0,
    }

    for name in collections:
        print(f"📥 Backing up collection: {name}")
        try:
            result = reader.read(name, Origin.KEPT)
        except Exception as exc:
            # one unreadable collection should not stop the snapshot
            print(f"   ❌ Error backing up {name}: {exc}")
            continue

        if isinstance(result, NotFound):
            print("   ⚠️ No documents found")
            summary["collections"][name] = 0
            continue

        docs = [{"id": rec.id, "data": {k: v for k, v in rec.data.items() if k != "id"}}
                for rec in result.records]
        path = backup_dir / f"{name}.json"
        path.write_text(json.dumps(docs, indent=2, default=str), encoding="utf-8")
        summary["collections"][name] = len(docs)
        summary["totalDocuments"] += len(docs)
        print(f"   ✅ Backed up {len(docs)} documents")

    (backup_dir / "backup-summary.json").write_text(json.dumps(summary, indent=2), encoding="utf-8")
    summary["path"] = str(backup_dir)
    return summary
