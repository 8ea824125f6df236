"""
Bootstrap de la base Mongo: define y aplica validadores (JSON Schema) e índices.
Se ejecuta al inicio de la app para asegurar colecciones mínimas y consistencia.
No tumba la app si algo falla; deja warnings en casos no críticos.

`papers.data` queda sin esquema a nivel store; la forma por `type` se valida en
la capa de aplicación (app.domain.papers.schemas).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pymongo.database import Database
from pymongo.errors import PyMongoError

from app.infrastructure.db.mongo import get_db

_log = logging.getLogger("maple.mongo.bootstrap")

_TIMESTAMPS = {
    "createdAt": {"bsonType": "date"},
    "updatedAt": {"bsonType": "date"},
}


def _collmod_or_create(db: Database, name: str, validator: Optional[Dict[str, Any]]) -> None:
    try:
        if name not in db.list_collection_names():
            if validator:
                db.create_collection(name, validator={"$jsonSchema": validator}, validationLevel="moderate")
            else:
                db.create_collection(name)
            return
        if validator:
            db.command({
                "collMod": name,
                "validator": {"$jsonSchema": validator},
                "validationLevel": "moderate",
            })
    except PyMongoError as e:
        # Algunos motores no aceptan collMod sin privilegios; seguimos sin validator
        _log.warning("No se pudo aplicar validator en '%s': %s", name, e)


def _ensure_indexes(db: Database, name: str, indexes: List[Dict[str, Any]]) -> None:
    coll = db[name]
    for ix in indexes:
        opts = dict(ix)
        keys = opts.pop("keys")
        try:
            coll.create_index(keys, **opts)
        except PyMongoError as e:
            # Ignora fallas de índice (e.g., ya existe con otras opciones o datos duplicados previos)
            _log.warning("No se pudo crear índice en '%s' (%s): %s", name, keys, e)


TAG_VALIDATOR = {
    "bsonType": "object",
    "required": ["kind", "value", "sharing", "createdAt", "updatedAt"],
    "properties": {
        "kind": {"bsonType": "string", "enum": ["folder", "itemType", "genre", "custom", "system"]},
        "value": {"bsonType": "string", "minLength": 1},
        "label": {"bsonType": ["string", "null"]},
        "ownerUserId": {"bsonType": "string"},
        "sharing": {
            "bsonType": "object",
            "required": ["sharedWith"],
            "properties": {
                "sharedWith": {
                    "bsonType": "array",
                    "items": {
                        "bsonType": "object",
                        "required": ["userId", "accessLevel"],
                        "properties": {
                            "userId": {"bsonType": "string"},
                            "accessLevel": {"bsonType": "string", "enum": ["read", "write"]},
                        },
                    },
                },
                "isPublic": {"bsonType": "bool"},
            },
        },
        **_TIMESTAMPS,
    },
    "additionalProperties": True,
}

PAPER_VALIDATOR = {
    "bsonType": "object",
    "required": ["tags", "type", "data", "createdBy", "createdAt", "updatedAt"],
    "properties": {
        "tags": {"bsonType": "array", "minItems": 1, "items": {"bsonType": "objectId"}},
        "type": {"bsonType": "string", "minLength": 1},
        "data": {"bsonType": "object"},
        "createdBy": {"bsonType": "string", "minLength": 1},
        **_TIMESTAMPS,
    },
    "additionalProperties": True,
}

PROMPT_VALIDATOR = {
    "bsonType": "object",
    "required": ["userId", "triggerWord", "promptText", "isBuiltIn", "isActive"],
    "properties": {
        "userId": {"bsonType": "string"},
        "triggerWord": {"bsonType": "string", "minLength": 1},
        "promptText": {"bsonType": "string", "minLength": 1},
        "icon": {"bsonType": "string"},
        "color": {"bsonType": "string"},
        "isBuiltIn": {"bsonType": "bool"},
        "isActive": {"bsonType": "bool"},
        **_TIMESTAMPS,
    },
    "additionalProperties": True,
}

TAG_INDEXES: List[Dict[str, Any]] = [
    {"keys": [("sharing.sharedWith.userId", 1)], "name": "ix_grant_user"},
    # Tags con nombre por usuario (get-or-create); tags creados a mano no llevan ownerUserId
    {
        "keys": [("ownerUserId", 1), ("kind", 1), ("value", 1)],
        "unique": True,
        "partialFilterExpression": {"ownerUserId": {"$exists": True}},
        "name": "uniq_owner_kind_value",
    },
]

USER_VALIDATOR = {
    "bsonType": "object",
    "required": ["appleUserId", "email", "createdAt"],
    "properties": {
        "appleUserId": {"bsonType": "string"},
        "email": {"bsonType": "string", "minLength": 3, "description": "lowercase"},
        "defaultPromptId": {"bsonType": ["objectId", "null"]},
        "settings": {"bsonType": "object"},
        **_TIMESTAMPS,
    },
    "additionalProperties": True,
}


def ensure_collections(db: Optional[Database] = None) -> None:
    """
    Garantiza colecciones, validadores e índices mínimos.
    """
    db = db if db is not None else get_db()

    _collmod_or_create(db, "tags", TAG_VALIDATOR)
    _ensure_indexes(db, "tags", TAG_INDEXES)

    _collmod_or_create(db, "papers", PAPER_VALIDATOR)
    _ensure_indexes(db, "papers", [
        {"keys": [("createdBy", 1)], "name": "ix_created_by"},
        {"keys": [("tags", 1)], "name": "ix_tags"},
        {"keys": [("tags", 1), ("createdBy", 1)], "name": "ix_tags_created_by"},
        {"keys": [("type", 1), ("tags", 1)], "name": "ix_type_tags"},
        {"keys": [("data.recordingId", 1), ("tags", 1)], "name": "ix_recording_id_tags"},
        {"keys": [("data.audioSyncStatus", 1), ("tags", 1), ("createdBy", 1)], "name": "ix_audio_sync"},
    ])

    _collmod_or_create(db, "custom_prompts", PROMPT_VALIDATOR)
    _ensure_indexes(db, "custom_prompts", [
        {"keys": [("userId", 1), ("triggerWord", 1)], "unique": True, "name": "uniq_user_trigger"},
        {"keys": [("userId", 1), ("isActive", 1)], "name": "ix_user_active"},
    ])

    _collmod_or_create(db, "maple_users", USER_VALIDATOR)
    _ensure_indexes(db, "maple_users", [
        {"keys": [("appleUserId", 1)], "unique": True, "name": "uniq_apple_user"},
    ])

    _log.info("Colecciones e índices verificados")
