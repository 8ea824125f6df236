"""
Servicio de tags: primitivas de control de acceso (grants read/write) y
creación/actualización/compartición de tags.

Reglas:
- `read` se cumple con un grant read o write; `write` exige write.
- `sharing.isPublic` se guarda pero ningún chequeo lo consulta.
- Los grants son únicos por usuario: volver a compartir con alguien ya presente
  reemplaza su nivel de acceso.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from app.core.exceptions import AccessDenied, NotFound, ValidationError
from app.repositories import tag_repo
from app.repositories.tag_repo import ACCESS_LEVELS, TAG_KINDS

_log = logging.getLogger("maple.tags")


def _require_kind(kind: Any) -> str:
    if kind not in TAG_KINDS:
        raise ValidationError(f"kind must be one of: {', '.join(TAG_KINDS)}")
    return kind


def _require_value(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("value is required")
    return value.strip()


def _require_level(level: Any) -> str:
    if level not in ACCESS_LEVELS:
        raise ValidationError(f"accessLevel must be one of: {', '.join(ACCESS_LEVELS)}")
    return level


class TagService:
    def __init__(self, db: Database, default_tag_value: str = "Lego"):
        self.db = db
        self.default_tag_value = default_tag_value

    # --- control de acceso ---

    def has_access(self, tag_id: Any, user_id: str, required_level: str = "read") -> bool:
        levels = tag_repo.levels_satisfying(_require_level(required_level))
        return tag_repo.find_tag_with_grant(self.db, tag_id, user_id, levels) is not None

    def accessible_tag_ids(self, user_id: str, required_level: str = "read", among: Optional[List[Any]] = None) -> List[Any]:
        """Ids de tags (opcionalmente dentro de `among`) donde el usuario tiene el nivel pedido."""
        levels = tag_repo.levels_satisfying(required_level)
        docs = tag_repo.find_tags_with_grant(self.db, user_id, levels, tag_ids=among)
        return [d["_id"] for d in docs]

    def _get_writable(self, tag_id: Any, user_id: str) -> Dict[str, Any]:
        tag = tag_repo.find_tag(self.db, tag_id)
        if not tag:
            raise NotFound("Tag not found")
        grants = (tag.get("sharing") or {}).get("sharedWith") or []
        if not any(g.get("userId") == user_id and g.get("accessLevel") == "write" for g in grants):
            raise AccessDenied("Tag not found or user does not have write access")
        return tag

    # --- operaciones ---

    def create_tag(self, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Crea un tag con el creador como único grantee (write)."""
        kind = _require_kind(payload.get("kind"))
        value = _require_value(payload.get("value"))
        doc = tag_repo.new_tag_doc(user_id, kind, value, payload.get("label"))
        tag = tag_repo.insert_tag(self.db, doc)
        _log.info("tag creado id=%s kind=%s user=%s", tag["_id"], kind, user_id)
        return tag_repo.serialize(tag)

    def update_tag(self, tag_id: Any, patch: Dict[str, Any], requesting_user_id: str) -> Dict[str, Any]:
        """Aplica sólo `kind`/`value`; `sharing` nunca se modifica por esta vía."""
        tag = self._get_writable(tag_id, requesting_user_id)
        fields: Dict[str, Any] = {}
        if patch.get("kind"):
            fields["kind"] = _require_kind(patch["kind"])
        if patch.get("value"):
            fields["value"] = _require_value(patch["value"])
        if not fields:
            return tag_repo.serialize(tag)
        updated = tag_repo.update_tag_fields(self.db, tag["_id"], fields)
        if not updated:
            raise NotFound("Tag not found")
        return tag_repo.serialize(updated)

    def add_user_to_tag(self, tag_id: Any, target_user_id: str, access_level: str, requesting_user_id: str) -> Dict[str, Any]:
        """Comparte el tag con `target_user_id`; requiere write del solicitante."""
        level = _require_level(access_level)
        if not target_user_id:
            raise ValidationError("userId is required")
        tag = self._get_writable(tag_id, requesting_user_id)
        grants = [dict(g) for g in (tag.get("sharing") or {}).get("sharedWith") or []]
        for g in grants:
            if g.get("userId") == target_user_id:
                g["accessLevel"] = level
                break
        else:
            grants.append({"userId": target_user_id, "accessLevel": level})
        updated = tag_repo.set_grants(self.db, tag["_id"], grants)
        if not updated:
            raise NotFound("Tag not found")
        _log.info("tag compartido id=%s target=%s level=%s", tag["_id"], target_user_id, level)
        return tag_repo.serialize(updated)

    def get_or_create_named_tag(self, user_id: str, kind: str, value: str, label: Optional[str] = None) -> Dict[str, Any]:
        """Tag bien conocido por usuario (p. ej. carpeta "recordings"); idempotente."""
        tag = tag_repo.upsert_named_tag(self.db, user_id, _require_kind(kind), _require_value(value), label)
        return tag_repo.serialize(tag)

    def list_user_tags(self, user_id: str, default_value: Optional[str] = None) -> List[Dict[str, Any]]:
        """Tags con grant read/write; si no hay ninguno crea una carpeta por defecto."""
        docs = tag_repo.find_tags_with_grant(self.db, user_id, ACCESS_LEVELS)
        if docs:
            return [tag_repo.serialize(d) for d in docs]
        value = default_value or self.default_tag_value
        _log.info("usuario sin tags, creando carpeta por defecto user=%s value=%s", user_id, value)
        return [self.get_or_create_named_tag(user_id, "folder", value)]
