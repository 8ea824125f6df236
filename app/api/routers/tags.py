"""Endpoints de tags: listar, crear, actualizar y compartir."""
from fastapi import APIRouter, Depends, status

from app.api.deps import get_current_user_id, get_tag_service
from app.api.schemas.tag import TagCreate, TagListOut, TagOut, TagShare, TagUpdate
from app.services.tag_service import TagService

router = APIRouter(prefix="/tags", tags=["Tags"])


@router.get("", response_model=TagListOut, summary="Tags del usuario (crea la carpeta por defecto si no hay)")
def list_tags(user_id: str = Depends(get_current_user_id), svc: TagService = Depends(get_tag_service)):
    return {"tags": svc.list_user_tags(user_id)}


@router.post("", status_code=status.HTTP_201_CREATED, response_model=TagOut, summary="Crear tag")
def create_tag(
    payload: TagCreate,
    user_id: str = Depends(get_current_user_id),
    svc: TagService = Depends(get_tag_service),
):
    return svc.create_tag(user_id, payload.model_dump())


@router.patch("/{tag_id}", response_model=TagOut, summary="Actualizar kind/value (requiere write)")
def update_tag(
    tag_id: str,
    payload: TagUpdate,
    user_id: str = Depends(get_current_user_id),
    svc: TagService = Depends(get_tag_service),
):
    return svc.update_tag(tag_id, payload.model_dump(exclude_none=True), user_id)


@router.post("/{tag_id}/share", response_model=TagOut, summary="Compartir tag con otro usuario")
def share_tag(
    tag_id: str,
    payload: TagShare,
    user_id: str = Depends(get_current_user_id),
    svc: TagService = Depends(get_tag_service),
):
    return svc.add_user_to_tag(tag_id, payload.userId, payload.accessLevel, user_id)
