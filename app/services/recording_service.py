"""
Grabaciones de voz guardadas como papers `type="recording"`.

Todas las grabaciones de un usuario cuelgan de su tag "recordings"
(carpeta creada la primera vez que se usa). `processingHistory` es
append-only: reprocesar agrega una entrada y la salida vigente es la última.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from app.core.exceptions import NotFound, NotFoundOrDenied, ValidationError
from app.domain.papers.schemas import AUDIO_SYNC_STATUSES
from app.repositories import paper_repo, tag_repo
from app.services.paper_service import PaperService
from app.services.tag_service import TagService

_log = logging.getLogger("maple.recordings")

RECORDING_TYPE = "recording"
RECORDINGS_TAG = ("folder", "recordings", "Recordings")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _prompt_used(raw: Optional[Dict[str, Any]]) -> Dict[str, str]:
    raw = raw or {}
    return {
        "triggerWord": raw.get("triggerWord") or "none",
        "promptText": raw.get("promptText") or "No processing applied",
    }


class RecordingPaperService:
    def __init__(
        self,
        db: Database,
        tags: Optional[TagService] = None,
        papers: Optional[PaperService] = None,
        list_limit: int = 100,
    ):
        self.db = db
        self.tags = tags or TagService(db)
        self.papers = papers or PaperService(db, self.tags)
        self.list_limit = list_limit

    def recordings_tag(self, user_id: str) -> Dict[str, Any]:
        kind, value, label = RECORDINGS_TAG
        return self.tags.get_or_create_named_tag(user_id, kind, value, label)

    def _base_filter(self, user_id: str) -> Dict[str, Any]:
        tag_oid = tag_repo.to_object_id(self.recordings_tag(user_id)["id"])
        return {"type": RECORDING_TYPE, "tags": tag_oid}

    def create_recording(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Crea el paper con `processingHistory` sembrado con una sola entrada."""
        tag = self.recordings_tag(user_id)
        data = {
            "recordingId": fields.get("recordingId"),
            "transcript": fields.get("transcript") or "",
            "duration": fields.get("duration") or 0,
            "timestamp": fields.get("timestamp") or _now(),
            "audioUrl": fields.get("audioUrl"),
            "audioSyncStatus": "pending",
            "processingHistory": [{
                "processedAt": _now(),
                "promptUsed": _prompt_used(fields.get("promptUsed")),
                "output": fields.get("processedOutput") or "",
            }],
        }
        paper = self.papers.create_paper(user_id, {"tags": [tag["id"]], "type": RECORDING_TYPE, "data": data})
        _log.info("grabación creada paper=%s recording=%s user=%s", paper["id"], data["recordingId"], user_id)
        return paper

    def list_recordings(self, user_id: str) -> List[Dict[str, Any]]:
        docs = paper_repo.find_papers(
            self.db,
            self._base_filter(user_id),
            sort=[("data.timestamp", -1)],
            limit=self.list_limit,
        )
        return paper_repo.populate(self.db, docs)

    def _find_owned(self, user_id: str, recording_id: str) -> Optional[Dict[str, Any]]:
        filtro = self._base_filter(user_id)
        filtro.update({"data.recordingId": recording_id, "createdBy": user_id})
        return paper_repo.find_one(self.db, filtro)

    def get_recording(self, user_id: str, recording_id: str) -> Dict[str, Any]:
        doc = self._find_owned(user_id, recording_id)
        if not doc:
            raise NotFound("Recording not found")
        return paper_repo.populate_one(self.db, doc)

    def list_pending_sync(self, user_id: str) -> List[Dict[str, Any]]:
        """Grabaciones cuyo audio aún no se subió, más antiguas primero."""
        filtro = self._base_filter(user_id)
        filtro.update({"createdBy": user_id, "data.audioSyncStatus": "pending"})
        docs = paper_repo.find_papers(self.db, filtro, sort=[("data.timestamp", 1)])
        return paper_repo.populate(self.db, docs)

    def reprocess_recording(
        self,
        paper_id: Any,
        user_id: str,
        new_output: str,
        prompt_used: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Agrega una entrada al historial; sólo el dueño (no basta un tag compartido)."""
        paper = paper_repo.find_paper(self.db, paper_id)
        if not paper or paper.get("createdBy") != user_id or paper.get("type") != RECORDING_TYPE:
            raise NotFoundOrDenied("Recording not found or access denied")
        entry = {
            "processedAt": _now(),
            "promptUsed": _prompt_used(prompt_used),
            "output": new_output,
        }
        updated = paper_repo.push_to_data_list(self.db, paper["_id"], "processingHistory", entry)
        if not updated:
            raise NotFoundOrDenied("Recording not found or access denied")
        return paper_repo.populate_one(self.db, updated)

    def update_audio_status(
        self,
        recording_id: str,
        user_id: str,
        status: str,
        audio_url: Optional[str] = None,
    ) -> bool:
        """Actualiza el estado del audio; si no hay match para el usuario no hace nada.

        Devuelve True si encontró la grabación.
        """
        if status not in AUDIO_SYNC_STATUSES:
            raise ValidationError(f"audioSyncStatus must be one of: {', '.join(AUDIO_SYNC_STATUSES)}")
        filtro = self._base_filter(user_id)
        filtro.update({"data.recordingId": recording_id, "createdBy": user_id})
        set_ops: Dict[str, Any] = {"data.audioSyncStatus": status}
        if audio_url:
            set_ops["data.audioUrl"] = audio_url
        matched = paper_repo.update_where(self.db, filtro, set_ops)
        if not matched:
            _log.debug("audio-status sin match recording=%s user=%s", recording_id, user_id)
        return bool(matched)

    def delete_recording(self, user_id: str, recording_id: str) -> Dict[str, bool]:
        doc = self._find_owned(user_id, recording_id)
        if not doc:
            raise NotFound("Recording not found")
        return self.papers.delete_paper(doc["_id"], user_id)

    @staticmethod
    def get_latest_processed_output(paper: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        history = (paper.get("data") or {}).get("processingHistory") or []
        return history[-1] if history else None
