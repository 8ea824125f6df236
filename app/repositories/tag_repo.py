"""Repo de la colección `tags`.

- `sharing.sharedWith` guarda los grants `{userId, accessLevel}`; es la única
  fuente de permisos (los papers no tienen ACL propia).
- Los tags "con nombre" por usuario (p. ej. recordings) llevan `ownerUserId`
  para poder hacer upsert con índice único `(ownerUserId, kind, value)`.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

COLLECTION = "tags"

TAG_KINDS = ("folder", "itemType", "genre", "custom", "system")
ACCESS_LEVELS = ("read", "write")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Convierte str/ObjectId a ObjectId; None si no es un id válido."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def levels_satisfying(required: str) -> List[str]:
    """`read` lo cumple read o write; `write` sólo write."""
    return ["write"] if required == "write" else list(ACCESS_LEVELS)


def grant_filter(user_id: str, levels: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    match: Dict[str, Any] = {"userId": user_id}
    if levels is not None:
        match["accessLevel"] = {"$in": list(levels)}
    return {"sharing.sharedWith": {"$elemMatch": match}}


def serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Forma pública del tag (expone `id` como str)."""
    sharing = doc.get("sharing") or {}
    out = {
        "id": str(doc["_id"]),
        "kind": doc.get("kind"),
        "value": doc.get("value"),
        "label": doc.get("label"),
        "sharing": {
            "sharedWith": [
                {"userId": g.get("userId"), "accessLevel": g.get("accessLevel")}
                for g in sharing.get("sharedWith") or []
            ],
            "isPublic": bool(sharing.get("isPublic", False)),
        },
        "createdAt": doc.get("createdAt"),
        "updatedAt": doc.get("updatedAt"),
    }
    if doc.get("ownerUserId"):
        out["ownerUserId"] = doc["ownerUserId"]
    return out


def new_tag_doc(user_id: str, kind: str, value: str, label: Optional[str] = None) -> Dict[str, Any]:
    """Documento base: el creador queda como único grantee con write."""
    now = _now()
    return {
        "kind": kind,
        "value": value,
        "label": label,
        "sharing": {
            "sharedWith": [{"userId": user_id, "accessLevel": "write"}],
            "isPublic": False,
        },
        "createdAt": now,
        "updatedAt": now,
    }


def insert_tag(db: Database, doc: Dict[str, Any]) -> Dict[str, Any]:
    res = db[COLLECTION].insert_one(doc)
    doc["_id"] = res.inserted_id
    return doc


def find_tag(db: Database, tag_id: Any) -> Optional[Dict[str, Any]]:
    oid = to_object_id(tag_id)
    if oid is None:
        return None
    return db[COLLECTION].find_one({"_id": oid})


def find_tag_with_grant(db: Database, tag_id: Any, user_id: str, levels: Optional[Iterable[str]] = None) -> Optional[Dict[str, Any]]:
    oid = to_object_id(tag_id)
    if oid is None:
        return None
    return db[COLLECTION].find_one({"_id": oid, **grant_filter(user_id, levels)})


def find_tags_with_grant(
    db: Database,
    user_id: str,
    levels: Optional[Iterable[str]] = None,
    tag_ids: Optional[Iterable[ObjectId]] = None,
) -> List[Dict[str, Any]]:
    filtro: Dict[str, Any] = grant_filter(user_id, levels)
    if tag_ids is not None:
        filtro["_id"] = {"$in": list(tag_ids)}
    return list(db[COLLECTION].find(filtro))


def find_tags_by_ids(db: Database, tag_ids: Iterable[ObjectId]) -> List[Dict[str, Any]]:
    ids = list(tag_ids)
    if not ids:
        return []
    return list(db[COLLECTION].find({"_id": {"$in": ids}}))


def update_tag_fields(db: Database, tag_id: ObjectId, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    set_ops = dict(fields)
    set_ops["updatedAt"] = _now()
    return db[COLLECTION].find_one_and_update(
        {"_id": tag_id},
        {"$set": set_ops},
        return_document=ReturnDocument.AFTER,
    )


def set_grants(db: Database, tag_id: ObjectId, grants: List[Dict[str, str]]) -> Optional[Dict[str, Any]]:
    return db[COLLECTION].find_one_and_update(
        {"_id": tag_id},
        {"$set": {"sharing.sharedWith": grants, "updatedAt": _now()}},
        return_document=ReturnDocument.AFTER,
    )


def upsert_named_tag(db: Database, user_id: str, kind: str, value: str, label: Optional[str] = None) -> Dict[str, Any]:
    """Get-or-create atómico del tag `(ownerUserId, kind, value)`.

    Si dos requests compiten, el índice único hace fallar a uno con
    DuplicateKeyError y ese relee el documento ganador.
    """
    filtro = {"ownerUserId": user_id, "kind": kind, "value": value}
    base = new_tag_doc(user_id, kind, value, label)
    on_insert = {k: v for k, v in base.items() if k not in ("kind", "value")}
    try:
        return db[COLLECTION].find_one_and_update(
            filtro,
            {"$setOnInsert": on_insert},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        return db[COLLECTION].find_one(filtro)
