"""Endpoints de prompts personalizados (trigger words)."""
from fastapi import APIRouter, Depends, status

from app.api.deps import get_current_user_id, get_prompt_service
from app.api.schemas.prompt import MessageOut, PromptCreate, PromptListOut, PromptOut, PromptUpdate
from app.services.prompt_service import PromptService

router = APIRouter(tags=["Prompts"])


@router.get("/prompts", response_model=PromptListOut, summary="Prompts de sistema + propios")
def list_prompts(user_id: str = Depends(get_current_user_id), svc: PromptService = Depends(get_prompt_service)):
    return {"prompts": svc.list_prompts(user_id)}


@router.post("/prompts", status_code=status.HTTP_201_CREATED, response_model=PromptOut, summary="Crear prompt")
def create_prompt(
    payload: PromptCreate,
    user_id: str = Depends(get_current_user_id),
    svc: PromptService = Depends(get_prompt_service),
):
    return svc.create_prompt(user_id, payload.model_dump())


@router.put("/prompts/{prompt_id}", response_model=PromptOut, summary="Actualizar prompt propio")
def update_prompt(
    prompt_id: str,
    payload: PromptUpdate,
    user_id: str = Depends(get_current_user_id),
    svc: PromptService = Depends(get_prompt_service),
):
    return svc.update_prompt(user_id, prompt_id, payload.model_dump(exclude_none=True))


@router.delete("/prompts/{prompt_id}", response_model=MessageOut, summary="Eliminar prompt propio")
def delete_prompt(
    prompt_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: PromptService = Depends(get_prompt_service),
):
    return svc.delete_prompt(user_id, prompt_id)


@router.post("/prompts/initialize", response_model=PromptListOut, summary="Crear prompts built-in faltantes")
def initialize_prompts(user_id: str = Depends(get_current_user_id), svc: PromptService = Depends(get_prompt_service)):
    svc.initialize_built_in_prompts(user_id)
    return {"prompts": svc.list_prompts(user_id)}


@router.post("/system/init-prompts", response_model=MessageOut, summary="Inicializar prompts de sistema")
def init_system_prompts(svc: PromptService = Depends(get_prompt_service)):
    return svc.initialize_system_prompts()
