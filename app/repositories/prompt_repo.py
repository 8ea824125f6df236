"""Repo de la colección `custom_prompts` (prompts por trigger word)."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database

from app.repositories.tag_repo import to_object_id

COLLECTION = "custom_prompts"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_trigger(word: str) -> str:
    return (word or "").strip().lower()


def serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    d = dict(doc)
    d["id"] = str(d.pop("_id", ""))
    return d


def insert_prompt(db: Database, doc: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(doc)
    now = _now()
    data["triggerWord"] = normalize_trigger(data.get("triggerWord", ""))
    data.setdefault("icon", "mic")
    data.setdefault("color", "blue")
    data.setdefault("isBuiltIn", False)
    data.setdefault("isActive", True)
    data.setdefault("createdAt", now)
    data["updatedAt"] = now
    res = db[COLLECTION].insert_one(data)
    data["_id"] = res.inserted_id
    return data


def insert_many(db: Database, docs: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [insert_prompt(db, d) for d in docs]


def find_for_users(db: Database, user_ids: List[str], active_only: bool = False) -> List[Dict[str, Any]]:
    filtro: Dict[str, Any] = {"userId": {"$in": user_ids}}
    if active_only:
        filtro["isActive"] = True
    return list(db[COLLECTION].find(filtro))


def find_by_trigger(
    db: Database,
    user_ids: List[str],
    trigger_word: str,
    active_only: bool = True,
    exclude_id: Optional[ObjectId] = None,
) -> Optional[Dict[str, Any]]:
    filtro: Dict[str, Any] = {
        "userId": {"$in": user_ids},
        "triggerWord": normalize_trigger(trigger_word),
    }
    if active_only:
        filtro["isActive"] = True
    if exclude_id is not None:
        filtro["_id"] = {"$ne": exclude_id}
    return db[COLLECTION].find_one(filtro)


def find_owned(db: Database, prompt_id: Any, user_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(prompt_id)
    if oid is None:
        return None
    return db[COLLECTION].find_one({"_id": oid, "userId": user_id})


def update_prompt(db: Database, prompt_id: ObjectId, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    set_ops = dict(fields)
    set_ops["updatedAt"] = _now()
    return db[COLLECTION].find_one_and_update(
        {"_id": prompt_id},
        {"$set": set_ops},
        return_document=ReturnDocument.AFTER,
    )


def delete_prompt(db: Database, prompt_id: ObjectId) -> int:
    return db[COLLECTION].delete_one({"_id": prompt_id}).deleted_count


def count_for_user(db: Database, user_id: str) -> int:
    return db[COLLECTION].count_documents({"userId": user_id})
