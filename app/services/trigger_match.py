"""
Matching de trigger words al inicio de una transcripción.

Ejemplo: con prompts "to" y "to do", "To do: call mom" elige "to do"
(se prueban primero los triggers más largos).
"""
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, Optional, Tuple

_LEADING_PUNCT = re.compile(r"^[.,!?;:]+")
_TRAILING_PUNCT = re.compile(r"[.,!?;:]+$")


def normalize_transcript(transcript: str) -> str:
    return _LEADING_PUNCT.sub("", (transcript or "").lower().strip()).strip()


def normalize_trigger(trigger_word: str) -> str:
    return _TRAILING_PUNCT.sub("", (trigger_word or "").strip().lower())


def starts_with_trigger(normalized_transcript: str, trigger: str) -> bool:
    """El trigger debe ser prefijo de palabra completa: seguido de espacio, puntuación o fin."""
    if not trigger:
        return False
    return re.match(rf"^{re.escape(trigger)}(?=[\s.,!?;:]|$)", normalized_transcript) is not None


def match_prompt(
    transcript: str,
    prompts: Iterable[Dict[str, Any]],
    fallback_trigger_word: Optional[str] = None,
) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Devuelve `(prompt, trigger_normalizado)` o `(None, None)` si nada aplica.

    1) Prefijo de la transcripción, triggers más largos primero.
    2) Si no hubo match y viene `fallback_trigger_word`, match exacto (sin mayúsculas).
    """
    candidates = sorted(prompts, key=lambda p: len(p.get("triggerWord") or ""), reverse=True)
    text = normalize_transcript(transcript)
    for prompt in candidates:
        trigger = normalize_trigger(prompt.get("triggerWord") or "")
        if starts_with_trigger(text, trigger):
            return prompt, trigger

    if fallback_trigger_word:
        wanted = normalize_trigger(fallback_trigger_word)
        for prompt in candidates:
            if normalize_trigger(prompt.get("triggerWord") or "") == wanted:
                return prompt, wanted
    return None, None


def strip_trigger(transcript: str, trigger: Optional[str]) -> str:
    """Quita el trigger (y la puntuación/espacios que lo siguen) del inicio."""
    if not trigger:
        return transcript
    pattern = rf"^\s*[.,!?;:]*\s*{re.escape(normalize_trigger(trigger))}[.,!?;:]*\s*"
    return re.sub(pattern, "", transcript, count=1, flags=re.IGNORECASE)
