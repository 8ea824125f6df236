"""Repo de la colección `maple_users` (usuarios de Sign in with Apple)."""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pymongo.database import Database

COLLECTION = "maple_users"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def find_by_apple_id(db: Database, apple_user_id: str) -> Optional[Dict[str, Any]]:
    return db[COLLECTION].find_one({"appleUserId": apple_user_id})


def insert_user(db: Database, apple_user_id: str, email: str) -> Dict[str, Any]:
    now = _now()
    doc = {
        "appleUserId": apple_user_id,
        "email": email.strip().lower(),
        "defaultPromptId": None,
        "settings": {"autoDeleteAudioAfterDays": None, "preferredLanguage": "en"},
        "createdAt": now,
        "updatedAt": now,
    }
    res = db[COLLECTION].insert_one(doc)
    doc["_id"] = res.inserted_id
    return doc


def set_email(db: Database, apple_user_id: str, email: str) -> None:
    db[COLLECTION].update_one(
        {"appleUserId": apple_user_id},
        {"$set": {"email": email.strip().lower(), "updatedAt": _now()}},
    )


def public_user(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(doc["_id"]),
        "appleUserId": doc.get("appleUserId"),
        "email": doc.get("email"),
        "settings": doc.get("settings") or {},
    }
