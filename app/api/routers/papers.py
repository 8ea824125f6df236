"""Endpoints de papers (CRUD con acceso mediado por tags)."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_current_user_id, get_paper_service
from app.api.schemas.paper import DeleteOut, PaperCreate, PaperListOut, PaperOut, PaperUpdate
from app.services.paper_service import PaperService

router = APIRouter(prefix="/papers", tags=["Papers"])


@router.get(
    "",
    response_model=PaperListOut,
    summary="Listar papers",
    description="Sin `tagId`: propios + compartidos. Con `tagId`: todos los papers del tag (requiere grant).",
)
def list_papers(
    tag_id: Optional[str] = Query(default=None, alias="tagId"),
    type_: Optional[str] = Query(default=None, alias="type"),
    user_id: str = Depends(get_current_user_id),
    svc: PaperService = Depends(get_paper_service),
):
    if tag_id:
        return {"papers": svc.list_papers_by_tag(user_id, tag_id, type_)}
    return {"papers": svc.list_user_papers(user_id, type_)}


@router.get("/{paper_id}", response_model=PaperOut, summary="Obtener paper")
def get_paper(
    paper_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: PaperService = Depends(get_paper_service),
):
    return svc.get_paper(paper_id, user_id)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=PaperOut, summary="Crear paper")
def create_paper(
    payload: PaperCreate,
    user_id: str = Depends(get_current_user_id),
    svc: PaperService = Depends(get_paper_service),
):
    return svc.create_paper(user_id, payload.model_dump())


@router.patch("/{paper_id}", response_model=PaperOut, summary="Actualizar paper (dueño o write en algún tag)")
def update_paper(
    paper_id: str,
    payload: PaperUpdate,
    user_id: str = Depends(get_current_user_id),
    svc: PaperService = Depends(get_paper_service),
):
    return svc.update_paper(paper_id, user_id, payload.model_dump(exclude_unset=True))


@router.delete("/{paper_id}", response_model=DeleteOut, summary="Eliminar paper (sólo el dueño)")
def delete_paper(
    paper_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: PaperService = Depends(get_paper_service),
):
    return svc.delete_paper(paper_id, user_id)
