"""
Trazos de dibujo guardados como papers `type="path"`.

- Alta (uno o varios): todos los tags deben ser accesibles para el usuario y
  el primero con write, igual que cualquier paper. Se valida todo el lote
  antes de insertar.
- Listado: sólo los trazos propios; filtrar por tag exige write sobre ese tag.
- Borrado: sólo el autor del trazo.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from pymongo.database import Database

from app.core.exceptions import NotFoundOrDenied, ValidationError
from app.domain.papers.schemas import validate_paper_data
from app.repositories import paper_repo, tag_repo
from app.services.tag_service import TagService

_log = logging.getLogger("maple.paths")

PATH_TYPE = "path"

# Campos del envoltorio que el cliente no puede fijar en un trazo
_ENVELOPE_FIELDS = ("_id", "tags", "type", "createdBy", "userId", "createdAt", "updatedAt", "created")


class PathService:
    def __init__(self, db: Database, tags: Optional[TagService] = None):
        self.db = db
        self.tags = tags or TagService(db)

    def _validate_tags(self, user_id: str, raw: Any) -> List[ObjectId]:
        if not isinstance(raw, list) or not raw:
            raise ValidationError("A tag is required")
        ids = paper_repo.object_ids(raw)
        if ids is None:
            raise ValidationError("Invalid tag id")
        if len(self.tags.accessible_tag_ids(user_id, "read", among=ids)) != len(ids):
            raise NotFoundOrDenied("One or more tags are invalid or not accessible")
        if not self.tags.has_access(ids[0], user_id, "write"):
            raise NotFoundOrDenied("Tag not found or access denied")
        return ids

    def _prepare(self, user_id: str, item: Any) -> Dict[str, Any]:
        if not isinstance(item, dict):
            raise ValidationError("Each path must be an object")
        tag_ids = self._validate_tags(user_id, item.get("tags"))
        data = validate_paper_data(PATH_TYPE, {k: v for k, v in item.items() if k not in _ENVELOPE_FIELDS})
        return {"tags": tag_ids, "data": data}

    def add_paths(
        self,
        user_id: str,
        payload: Union[Dict[str, Any], List[Dict[str, Any]]],
    ) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        """Guarda un trazo o una lista; devuelve lo mismo que recibió (objeto o lista)."""
        items = payload if isinstance(payload, list) else [payload]
        if not items:
            raise ValidationError("At least one path is required")
        prepared = [self._prepare(user_id, item) for item in items]

        docs = [
            paper_repo.insert_paper(self.db, tags=p["tags"], type_=PATH_TYPE, data=p["data"], created_by=user_id)
            for p in prepared
        ]
        _log.info("trazos guardados count=%s user=%s", len(docs), user_id)
        saved = paper_repo.populate(self.db, docs)
        return saved if isinstance(payload, list) else saved[0]

    def list_paths(self, user_id: str) -> List[Dict[str, Any]]:
        docs = paper_repo.find_papers(
            self.db,
            {"type": PATH_TYPE, "createdBy": user_id},
            sort=[("createdAt", -1)],
        )
        return paper_repo.populate(self.db, docs)

    def list_paths_by_tag(self, user_id: str, tag_id: Any) -> List[Dict[str, Any]]:
        if not self.tags.has_access(tag_id, user_id, "write"):
            raise NotFoundOrDenied("Tag not found or access denied")
        docs = paper_repo.find_papers(
            self.db,
            {"type": PATH_TYPE, "tags": tag_repo.to_object_id(tag_id), "createdBy": user_id},
            sort=[("createdAt", -1)],
        )
        return paper_repo.populate(self.db, docs)

    def delete_path(self, user_id: str, path_id: Any) -> Dict[str, bool]:
        oid = tag_repo.to_object_id(path_id)
        doc = paper_repo.find_one(self.db, {"_id": oid, "type": PATH_TYPE, "createdBy": user_id}) if oid else None
        if not doc:
            raise NotFoundOrDenied("Path not found or access denied")
        paper_repo.delete_paper(self.db, doc["_id"])
        _log.info("trazo eliminado id=%s user=%s", doc["_id"], user_id)
        return {"success": True}
