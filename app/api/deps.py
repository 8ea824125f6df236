"""
Dependencias reutilizables para routers (FastAPI Depends).

- Autenticación: extrae y valida el Bearer token, devuelve el userId (`sub`).
- Servicios: se construyen por request a partir del `Database` compartido.
  Los tests sobreescriben `get_database` para usar mongomock.
"""
from typing import Optional

from fastapi import Depends, Header, Request
from pymongo.database import Database

from app.core.config import settings
from app.core.exceptions import Unauthorized
from app.infrastructure.ai.openai_client import get_openai
from app.infrastructure.db.mongo import get_db
from app.services.auth_service import AuthService
from app.services.paper_service import PaperService
from app.services.path_service import PathService
from app.services.prompt_service import PromptService
from app.services.recording_service import RecordingPaperService
from app.services.tag_service import TagService
from app.services.token_service import verify_access_token
from app.services.transcript_service import TranscriptService


def get_database() -> Database:
    return get_db()


def get_current_user_id(request: Request, authorization: Optional[str] = Header(default=None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized("Missing or invalid Authorization header")
    payload = verify_access_token(authorization.split(" ", 1)[1])
    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Invalid token")
    request.state.user_id = str(user_id)
    return str(user_id)


def get_tag_service(db: Database = Depends(get_database)) -> TagService:
    return TagService(db, default_tag_value=settings.default_tag_value)


def get_paper_service(
    db: Database = Depends(get_database),
    tags: TagService = Depends(get_tag_service),
) -> PaperService:
    return PaperService(db, tags)


def get_path_service(
    db: Database = Depends(get_database),
    tags: TagService = Depends(get_tag_service),
) -> PathService:
    return PathService(db, tags)


def get_recording_service(
    db: Database = Depends(get_database),
    tags: TagService = Depends(get_tag_service),
    papers: PaperService = Depends(get_paper_service),
) -> RecordingPaperService:
    return RecordingPaperService(db, tags, papers, list_limit=settings.recordings_list_limit)


def get_prompt_service(db: Database = Depends(get_database)) -> PromptService:
    return PromptService(db, settings.system_user_id)


def get_transcript_service(
    prompts: PromptService = Depends(get_prompt_service),
    recordings: RecordingPaperService = Depends(get_recording_service),
) -> TranscriptService:
    return TranscriptService(prompts, recordings, llm=get_openai())


def get_auth_service(
    db: Database = Depends(get_database),
    prompts: PromptService = Depends(get_prompt_service),
) -> AuthService:
    return AuthService(db, prompts)
