"""
Pipeline de transcripciones: trigger word → prompt → LLM → grabación.

Sin prompt que aplique (o sin LLM configurado) la transcripción pasa tal
cual y se registra `promptUsed = {triggerWord, "No processing applied"}`.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from openai import OpenAI

from app.core.exceptions import NotFound, NotFoundOrDenied, ValidationError
from app.infrastructure.ai.openai_client import complete
from app.repositories import paper_repo
from app.services.prompt_service import PromptService
from app.services.recording_service import RecordingPaperService
from app.services.trigger_match import match_prompt, strip_trigger

_log = logging.getLogger("maple.ai")

NO_PROCESSING = "No processing applied"


class TranscriptService:
    def __init__(
        self,
        prompts: PromptService,
        recordings: RecordingPaperService,
        llm: Optional[OpenAI] = None,
    ):
        self.prompts = prompts
        self.recordings = recordings
        self.llm = llm

    def reformat(self, transcript: str, prompt_text: str) -> str:
        if self.llm is None:
            _log.info("LLM no configurado; transcripción sin procesar")
            return transcript
        output = complete(self.llm, f"{prompt_text}\n\nTranscript:\n{transcript}")
        return output if output is not None else transcript

    def process(
        self,
        user_id: str,
        recording_id: str,
        transcript: str,
        trigger_word: Optional[str] = None,
        duration: float = 0,
        timestamp: Any = None,
    ) -> Dict[str, Any]:
        if not recording_id or transcript is None:
            raise ValidationError("Missing required fields: recordingId, transcript")

        prompt, trigger = match_prompt(transcript, self.prompts.active_prompts(user_id), trigger_word)
        if prompt is None:
            output = transcript
            prompt_used = {"triggerWord": trigger_word or "none", "promptText": NO_PROCESSING}
        else:
            cleaned = strip_trigger(transcript, trigger)
            output = self.reformat(cleaned, prompt["promptText"])
            prompt_used = {"triggerWord": prompt["triggerWord"], "promptText": prompt["promptText"]}
            _log.info("transcripción procesada recording=%s trigger=%s", recording_id, trigger)

        return self.recordings.create_recording(user_id, {
            "recordingId": recording_id,
            "transcript": transcript,
            "duration": duration,
            "timestamp": timestamp,
            "promptUsed": prompt_used,
            "processedOutput": output,
        })

    def reprocess(self, user_id: str, paper_id: str, trigger_word: str) -> Dict[str, Any]:
        if not trigger_word:
            raise ValidationError("triggerWord is required")
        paper = paper_repo.find_paper(self.prompts.db, paper_id)
        if not paper or paper.get("createdBy") != user_id:
            raise NotFoundOrDenied("Recording not found or access denied")
        prompt = self.prompts.find_by_trigger(user_id, trigger_word)
        if not prompt:
            raise NotFound("Prompt not found")

        transcript = (paper.get("data") or {}).get("transcript") or ""
        cleaned = strip_trigger(transcript, prompt["triggerWord"])
        output = self.reformat(cleaned, prompt["promptText"])
        return self.recordings.reprocess_recording(
            paper["_id"],
            user_id,
            output,
            {"triggerWord": prompt["triggerWord"], "promptText": prompt["promptText"]},
        )
