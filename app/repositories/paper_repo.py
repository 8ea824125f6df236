"""Repo de la colección `papers`.

- `tags` es una lista de ObjectId (referencias a `tags`); `data` es libre y
  su forma depende de `type`.
- Las lecturas hacia fuera siempre "populan" los tags (objeto completo, no id).
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database

from app.repositories import tag_repo

COLLECTION = "papers"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def serialize(doc: Dict[str, Any], tags_by_id: Dict[ObjectId, Dict[str, Any]]) -> Dict[str, Any]:
    # Tags borrados/inexistentes se omiten (equivale a populate → null filtrado)
    tags = [tag_repo.serialize(tags_by_id[t]) for t in doc.get("tags") or [] if t in tags_by_id]
    return {
        "id": str(doc["_id"]),
        "tags": tags,
        "type": doc.get("type"),
        "data": doc.get("data") or {},
        "createdBy": doc.get("createdBy"),
        "createdAt": doc.get("createdAt"),
        "updatedAt": doc.get("updatedAt"),
    }


def populate(db: Database, docs: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Resuelve los tags de varios papers con una sola consulta."""
    ids = {t for d in docs for t in d.get("tags") or []}
    tags_by_id = {t["_id"]: t for t in tag_repo.find_tags_by_ids(db, ids)}
    return [serialize(d, tags_by_id) for d in docs]


def populate_one(db: Database, doc: Dict[str, Any]) -> Dict[str, Any]:
    return populate(db, [doc])[0]


def insert_paper(db: Database, *, tags: List[ObjectId], type_: str, data: Dict[str, Any], created_by: str) -> Dict[str, Any]:
    now = _now()
    doc = {
        "tags": tags,
        "type": type_,
        "data": data,
        "createdBy": created_by,
        "createdAt": now,
        "updatedAt": now,
    }
    res = db[COLLECTION].insert_one(doc)
    doc["_id"] = res.inserted_id
    return doc


def find_paper(db: Database, paper_id: Any) -> Optional[Dict[str, Any]]:
    oid = tag_repo.to_object_id(paper_id)
    if oid is None:
        return None
    return db[COLLECTION].find_one({"_id": oid})


def find_one(db: Database, filtro: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return db[COLLECTION].find_one(filtro)


def find_papers(
    db: Database,
    filtro: Dict[str, Any],
    *,
    sort: Optional[List[Tuple[str, int]]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    cur = db[COLLECTION].find(filtro)
    if sort:
        cur = cur.sort(sort)
    if limit:
        cur = cur.limit(int(limit))
    return list(cur)


def update_paper_fields(db: Database, paper_id: ObjectId, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    set_ops = dict(fields)
    set_ops["updatedAt"] = _now()
    return db[COLLECTION].find_one_and_update(
        {"_id": paper_id},
        {"$set": set_ops},
        return_document=ReturnDocument.AFTER,
    )


def update_where(db: Database, filtro: Dict[str, Any], set_ops: Dict[str, Any]) -> int:
    """Actualiza el primer paper que cumpla el filtro; devuelve matched_count."""
    ops = dict(set_ops)
    ops["updatedAt"] = _now()
    res = db[COLLECTION].update_one(filtro, {"$set": ops})
    return res.matched_count


def push_to_data_list(db: Database, paper_id: ObjectId, field: str, entry: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """`$push` atómico sobre `data.<field>` (crea la lista si no existe)."""
    return db[COLLECTION].find_one_and_update(
        {"_id": paper_id},
        {"$push": {f"data.{field}": entry}, "$set": {"updatedAt": _now()}},
        return_document=ReturnDocument.AFTER,
    )


def delete_paper(db: Database, paper_id: ObjectId) -> int:
    return db[COLLECTION].delete_one({"_id": paper_id}).deleted_count


def count(db: Database, filtro: Dict[str, Any]) -> int:
    return db[COLLECTION].count_documents(filtro)


def object_ids(values: Iterable[Any]) -> Optional[List[ObjectId]]:
    """Convierte una lista de ids; None si alguno es inválido."""
    out: List[ObjectId] = []
    for v in values:
        oid = tag_repo.to_object_id(v)
        if oid is None:
            return None
        if oid not in out:
            out.append(oid)
    return out
