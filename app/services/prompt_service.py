"""
Servicio de prompts personalizados (trigger word → instrucción para el LLM).

Los prompts de sistema pertenecen a `system_user_id` y los ve todo usuario;
los built-in de un usuario no se pueden editar ni borrar.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from app.core.exceptions import AccessDenied, Conflict, NotFound, ValidationError
from app.repositories import prompt_repo

_log = logging.getLogger("maple.prompts")

BUILT_IN_PROMPTS: List[Dict[str, Any]] = [
    {
        "triggerWord": "email",
        "promptText": (
            "Clean up this transcript while preserving the speaker's natural voice and "
            "communication style. Fix transcription errors and unclear words, keep the "
            "speaker's tone and sentence structure, and format it as a readable email with "
            "a subject line that matches that tone. Do NOT make it overly formal if the "
            "speaker is being casual."
        ),
        "icon": "envelope",
        "color": "blue",
    },
    {
        "triggerWord": "notes",
        "promptText": (
            "Structure this transcript as organized meeting notes. Use bullet points, headers "
            "for different topics, and highlight action items and key decisions."
        ),
        "icon": "note",
        "color": "yellow",
    },
    {
        "triggerWord": "summarize",
        "promptText": (
            "Create a concise summary of this transcript. Extract the main points and key "
            "takeaways. Keep it brief but comprehensive."
        ),
        "icon": "doc.text",
        "color": "green",
    },
    {
        "triggerWord": "to do",
        "promptText": (
            "Extract all action items and tasks from this transcript. Format as a clear todo "
            "list with each item on its own line. Include any mentioned deadlines or priorities."
        ),
        "icon": "checkmark.circle",
        "color": "orange",
    },
    {
        "triggerWord": "clean",
        "promptText": (
            "Clean up this transcript by removing filler words, fixing grammar, and improving "
            "clarity while maintaining the original meaning and tone."
        ),
        "icon": "sparkles",
        "color": "purple",
    },
]

_EDITABLE = ("promptText", "icon", "color", "isActive")


class PromptService:
    def __init__(self, db: Database, system_user_id: str):
        self.db = db
        self.system_user_id = system_user_id

    def _owners(self, user_id: str) -> List[str]:
        return [self.system_user_id, user_id]

    def list_prompts(self, user_id: str) -> List[Dict[str, Any]]:
        return [prompt_repo.serialize(p) for p in prompt_repo.find_for_users(self.db, self._owners(user_id))]

    def active_prompts(self, user_id: str) -> List[Dict[str, Any]]:
        """Prompts activos de sistema + usuario (candidatos para el matching)."""
        return prompt_repo.find_for_users(self.db, self._owners(user_id), active_only=True)

    def find_by_trigger(self, user_id: str, trigger_word: str) -> Optional[Dict[str, Any]]:
        return prompt_repo.find_by_trigger(self.db, self._owners(user_id), trigger_word)

    def create_prompt(self, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        trigger = prompt_repo.normalize_trigger(payload.get("triggerWord") or "")
        text = payload.get("promptText")
        if not trigger or not text:
            raise ValidationError("Missing required fields: triggerWord, promptText")
        if prompt_repo.find_by_trigger(self.db, [user_id], trigger, active_only=False):
            raise Conflict("Trigger word already exists")
        doc = prompt_repo.insert_prompt(self.db, {
            "userId": user_id,
            "triggerWord": trigger,
            "promptText": text,
            "icon": payload.get("icon") or "mic",
            "color": payload.get("color") or "blue",
            "isBuiltIn": False,
            "isActive": True,
        })
        return prompt_repo.serialize(doc)

    def update_prompt(self, user_id: str, prompt_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        prompt = prompt_repo.find_owned(self.db, prompt_id, user_id)
        if not prompt:
            raise NotFound("Prompt not found")
        if prompt.get("isBuiltIn"):
            raise AccessDenied("Cannot modify built-in prompts")

        fields: Dict[str, Any] = {k: payload[k] for k in _EDITABLE if payload.get(k) is not None}
        if payload.get("triggerWord") is not None:
            trigger = prompt_repo.normalize_trigger(payload["triggerWord"])
            if not trigger:
                raise ValidationError("triggerWord cannot be empty")
            clash = prompt_repo.find_by_trigger(
                self.db, [user_id], trigger, active_only=False, exclude_id=prompt["_id"],
            )
            if clash:
                raise Conflict("Trigger word already exists")
            fields["triggerWord"] = trigger
        if not fields:
            return prompt_repo.serialize(prompt)
        return prompt_repo.serialize(prompt_repo.update_prompt(self.db, prompt["_id"], fields))

    def delete_prompt(self, user_id: str, prompt_id: str) -> Dict[str, str]:
        prompt = prompt_repo.find_owned(self.db, prompt_id, user_id)
        if not prompt:
            raise NotFound("Prompt not found")
        if prompt.get("isBuiltIn"):
            raise AccessDenied("Cannot delete built-in prompts")
        prompt_repo.delete_prompt(self.db, prompt["_id"])
        return {"message": "Prompt deleted successfully"}

    def initialize_built_in_prompts(self, user_id: str) -> List[Dict[str, Any]]:
        """Crea los built-in que falten para el usuario (idempotente)."""
        created = []
        for builtin in BUILT_IN_PROMPTS:
            if prompt_repo.find_by_trigger(self.db, [user_id], builtin["triggerWord"], active_only=False):
                continue
            doc = prompt_repo.insert_prompt(self.db, {**builtin, "userId": user_id, "isBuiltIn": True})
            created.append(prompt_repo.serialize(doc))
        return created

    def initialize_system_prompts(self) -> Dict[str, Any]:
        existing = prompt_repo.count_for_user(self.db, self.system_user_id)
        if existing > 0:
            return {"message": "System prompts already initialized", "count": existing}
        prompt_repo.insert_many(self.db, [
            {**builtin, "userId": self.system_user_id, "isBuiltIn": True} for builtin in BUILT_IN_PROMPTS
        ])
        _log.info("prompts de sistema inicializados count=%s", len(BUILT_IN_PROMPTS))
        return {"message": f"Initialized {len(BUILT_IN_PROMPTS)} system prompts", "count": len(BUILT_IN_PROMPTS)}
