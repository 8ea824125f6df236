# app/infrastructure/ai/openai_client.py
import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from app.core.config import settings

_client: Optional[OpenAI] = None
_log = logging.getLogger("maple.ai")


def get_openai() -> Optional[OpenAI]:
    """
    Devuelve un cliente de OpenAI si hay API key en settings.
    Mantiene una instancia única en memoria.
    """
    global _client
    if _client is not None:
        return _client

    if not settings.openai_configured:
        return None

    _client = OpenAI(api_key=settings.openai_api_key)
    return _client


def complete(client: OpenAI, prompt: str) -> Optional[str]:
    """Una vuelta de chat (sólo mensaje de usuario); None si la API falla."""
    try:
        resp = client.chat.completions.create(
            model=settings.openai_model,
            messages=[{"role": "user", "content": prompt}],
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
        )
    except OpenAIError as e:
        _log.warning("OpenAI falló: %s", e)
        return None
    if not resp.choices:
        return None
    return (resp.choices[0].message.content or "").strip() or None
