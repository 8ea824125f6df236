"""
Servicio de papers: CRUD con control de acceso mediado por tags.

- Lectura: dueño (`createdBy`) o grant read/write en CUALQUIERA de sus tags
  (unión, no intersección).
- Update: dueño o grant write en cualquiera de sus tags.
- Delete: sólo el dueño; un grant write compartido no alcanza.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from app.core.exceptions import AccessDenied, NotFound, NotFoundOrDenied, ValidationError
from app.domain.papers.schemas import validate_paper_data
from app.repositories import paper_repo, tag_repo
from app.services.tag_service import TagService

_log = logging.getLogger("maple.papers")

# Campos que nunca se aceptan desde un update
_IMMUTABLE_FIELDS = ("createdBy", "_id", "id", "createdAt", "updatedAt")

# El historial de una grabación sólo crece vía reprocesamiento (dueño)
_RECORDING_TYPE = "recording"


class PaperService:
    def __init__(self, db: Database, tags: Optional[TagService] = None):
        self.db = db
        self.tags = tags or TagService(db)

    def _check_access(self, paper_id: Any, user_id: str, required_level: str = "read") -> Dict[str, Any]:
        paper = paper_repo.find_paper(self.db, paper_id)
        if not paper:
            raise NotFound("Paper not found")
        if paper.get("createdBy") == user_id:
            return paper
        tag_ids = paper.get("tags") or []
        if tag_ids and self.tags.accessible_tag_ids(user_id, required_level, among=tag_ids):
            return paper
        raise AccessDenied("Access denied")

    def _tag_ids(self, raw: Any) -> List[Any]:
        if not isinstance(raw, list) or not raw:
            raise ValidationError("A tag is required")
        ids = paper_repo.object_ids(raw)
        if ids is None:
            raise ValidationError("Invalid tag id")
        return ids

    def create_paper(self, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not payload.get("tags"):
            raise ValidationError("A tag is required")
        type_ = payload.get("type")
        if not type_:
            raise ValidationError("Type is required")
        tag_ids = self._tag_ids(payload["tags"])

        # Sólo el primer tag se verifica (debe tener write sobre él)
        if not self.tags.has_access(tag_ids[0], user_id, "write"):
            raise NotFoundOrDenied("Tag not found or access denied")

        data = validate_paper_data(type_, payload.get("data") or {})
        doc = paper_repo.insert_paper(self.db, tags=tag_ids, type_=type_, data=data, created_by=user_id)
        _log.info("paper creado id=%s type=%s user=%s", doc["_id"], type_, user_id)
        return paper_repo.populate_one(self.db, doc)

    def get_paper(self, paper_id: Any, user_id: str) -> Dict[str, Any]:
        return paper_repo.populate_one(self.db, self._check_access(paper_id, user_id, "read"))

    def list_user_papers(self, user_id: str, type_: Optional[str] = None) -> List[Dict[str, Any]]:
        """Papers propios + papers ajenos con algún tag donde el usuario tiene grant."""
        owned_q: Dict[str, Any] = {"createdBy": user_id}
        if type_:
            owned_q["type"] = type_
        owned = paper_repo.find_papers(self.db, owned_q)

        tag_ids = self.tags.accessible_tag_ids(user_id, "read")
        shared: List[Dict[str, Any]] = []
        if tag_ids:
            shared_q: Dict[str, Any] = {"tags": {"$in": tag_ids}, "createdBy": {"$ne": user_id}}
            if type_:
                shared_q["type"] = type_
            shared = paper_repo.find_papers(self.db, shared_q)

        seen = set()
        result = []
        for p in owned + shared:
            if p["_id"] in seen:
                continue
            seen.add(p["_id"])
            result.append(p)
        return paper_repo.populate(self.db, result)

    def list_papers_by_tag(self, user_id: str, tag_id: Any, type_: Optional[str] = None) -> List[Dict[str, Any]]:
        tag = tag_repo.find_tag_with_grant(self.db, tag_id, user_id)
        if not tag:
            raise NotFound("Tag not found or access denied")
        # Con acceso al tag, la propiedad del paper ya no importa
        query: Dict[str, Any] = {"tags": tag["_id"]}
        if type_:
            query["type"] = type_
        return paper_repo.populate(self.db, paper_repo.find_papers(self.db, query))

    def update_paper(self, paper_id: Any, user_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        paper = self._check_access(paper_id, user_id, "write")

        changes = {k: v for k, v in (updates or {}).items() if k not in _IMMUTABLE_FIELDS}
        fields: Dict[str, Any] = {}
        if "tags" in changes:
            fields["tags"] = self._tag_ids(changes["tags"])
        type_ = stored_type = paper.get("type")
        if changes.get("type") and changes["type"] != stored_type:
            if _RECORDING_TYPE in (stored_type, changes["type"]):
                raise ValidationError("Cannot change the type of a recording")
            type_ = fields["type"] = changes["type"]
        if "data" in changes or "type" in fields:
            new_data = changes.get("data") or {}
            if not isinstance(new_data, dict):
                raise ValidationError("data must be an object")
            if type_ == _RECORDING_TYPE and "processingHistory" in new_data:
                raise ValidationError("processingHistory can only be extended by reprocessing")
            # Merge de un nivel: claves guardadas se conservan salvo que se reemplacen
            merged = {**(paper.get("data") or {}), **new_data}
            fields["data"] = validate_paper_data(type_, merged)
        if not fields:
            return paper_repo.populate_one(self.db, paper)

        updated = paper_repo.update_paper_fields(self.db, paper["_id"], fields)
        if not updated:
            raise NotFound("Paper not found")
        return paper_repo.populate_one(self.db, updated)

    def delete_paper(self, paper_id: Any, user_id: str) -> Dict[str, bool]:
        paper = paper_repo.find_paper(self.db, paper_id)
        if not paper:
            raise NotFound("Paper not found")
        if paper.get("createdBy") != user_id:
            raise AccessDenied("Only the owner can delete a paper")
        paper_repo.delete_paper(self.db, paper["_id"])
        _log.info("paper eliminado id=%s user=%s", paper["_id"], user_id)
        return {"success": True}
