"""Migra la colección legacy `collectibles` a `papers` (type="collectible").

Uso típico:
  PYTHONPATH=. python scripts/migrate_collectibles_to_paper.py migrate
  PYTHONPATH=. python scripts/migrate_collectibles_to_paper.py validate

Transformación:
  - userId → createdBy
  - itemId/provider/registryData/status/quantity/created → data
  - tags (ObjectId) y timestamps se conservan
  - Items ya migrados (mismo data.itemId + createdBy) se saltan
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List

from pymongo.database import Database
from pymongo.errors import PyMongoError

from app.core.config import settings
from app.core.logging import setup_logging
from app.infrastructure.db.mongo import get_db, init_mongo
from app.repositories import paper_repo

LEGACY_COLLECTION = "collectibles"
_log = logging.getLogger("maple.migrate")

_DATA_FIELDS = ("itemId", "provider", "registryData", "status", "quantity", "created")


def _to_paper(collectible: Dict[str, Any]) -> Dict[str, Any]:
    created = collectible.get("created")
    return {
        "tags": list(collectible.get("tags") or []),
        "type": "collectible",
        "createdBy": collectible.get("userId"),
        "data": {k: collectible.get(k) for k in _DATA_FIELDS if k in collectible},
        "createdAt": collectible.get("createdAt") or created,
        "updatedAt": collectible.get("updatedAt") or created,
    }


def migrate_collectibles_to_paper(db: Database) -> Dict[str, Any]:
    result: Dict[str, Any] = {"total": 0, "migrated": 0, "skipped": 0, "errors": []}
    collectibles = list(db[LEGACY_COLLECTION].find({}))
    result["total"] = len(collectibles)
    _log.info("%s collectibles por migrar", result["total"])

    for c in collectibles:
        item_id = c.get("itemId")
        existing = paper_repo.find_one(db, {
            "type": "collectible",
            "data.itemId": item_id,
            "createdBy": c.get("userId"),
        })
        if existing:
            _log.info("Saltando %s (ya migrado)", item_id)
            result["skipped"] += 1
            continue
        try:
            db[paper_repo.COLLECTION].insert_one(_to_paper(c))
        except PyMongoError as e:
            _log.error("Error migrando %s: %s", item_id, e)
            result["errors"].append({"itemId": item_id, "error": str(e)})
            continue
        result["migrated"] += 1

    _log.info(
        "Resumen: total=%s migrados=%s saltados=%s errores=%s",
        result["total"], result["migrated"], result["skipped"], len(result["errors"]),
    )
    return result


def validate_migration(db: Database, sample_size: int = 5) -> Dict[str, Any]:
    """Compara conteos y revisa una muestra de items (datos + tags en orden)."""
    collectible_count = db[LEGACY_COLLECTION].count_documents({})
    paper_count = paper_repo.count(db, {"type": "collectible"})
    samples: List[Dict[str, Any]] = []

    for c in db[LEGACY_COLLECTION].find({}).limit(sample_size):
        paper = paper_repo.find_one(db, {
            "type": "collectible",
            "data.itemId": c.get("itemId"),
            "createdBy": c.get("userId"),
        })
        if not paper:
            samples.append({"itemId": c.get("itemId"), "status": "missing"})
            continue
        data = paper.get("data") or {}
        data_ok = all(data.get(k) == c.get(k) for k in ("itemId", "provider", "status", "quantity"))
        tags_ok = list(paper.get("tags") or []) == list(c.get("tags") or [])
        samples.append({"itemId": c.get("itemId"), "status": "valid" if data_ok and tags_ok else "mismatch"})

    report = {
        "collectibles": collectible_count,
        "papers": paper_count,
        "countsMatch": collectible_count == paper_count,
        "samples": samples,
    }
    _log.info("Validación: collectibles=%s papers=%s", collectible_count, paper_count)
    for s in samples:
        _log.info("  %s: %s", s["itemId"], s["status"])
    return report


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Migra collectibles legacy a papers")
    ap.add_argument("command", nargs="?", default="migrate", choices=["migrate", "validate"])
    ap.add_argument("--sample-size", type=int, default=5)
    args = ap.parse_args(argv)

    setup_logging(settings.log_level)
    init_mongo()
    db = get_db()
    if args.command == "validate":
        validate_migration(db, sample_size=args.sample_size)
        return 0
    result = migrate_collectibles_to_paper(db)
    return 1 if result["errors"] else 0


if __name__ == "__main__":
    sys.exit(main())
