"""Endpoints de trazos de dibujo asociados a tags."""
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Body, Depends, Query, status

from app.api.deps import get_current_user_id, get_path_service
from app.api.schemas.paper import DeleteOut, PaperOut
from app.api.schemas.path import PathListOut
from app.services.path_service import PathService

router = APIRouter(prefix="/paths", tags=["Paths"])


@router.get(
    "",
    response_model=PathListOut,
    summary="Listar trazos propios",
    description="Con `tagId` sólo los trazos de ese tag; requiere write sobre el tag.",
)
def list_paths(
    tag_id: Optional[str] = Query(default=None, alias="tagId"),
    user_id: str = Depends(get_current_user_id),
    svc: PathService = Depends(get_path_service),
):
    if tag_id:
        return {"paths": svc.list_paths_by_tag(user_id, tag_id)}
    return {"paths": svc.list_paths(user_id)}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Union[List[PaperOut], PaperOut],
    summary="Guardar uno o varios trazos",
)
def add_paths(
    payload: Union[List[Dict[str, Any]], Dict[str, Any]] = Body(...),
    user_id: str = Depends(get_current_user_id),
    svc: PathService = Depends(get_path_service),
):
    return svc.add_paths(user_id, payload)


@router.delete("/{path_id}", response_model=DeleteOut, summary="Eliminar trazo (sólo el autor)")
def delete_path(
    path_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: PathService = Depends(get_path_service),
):
    return svc.delete_path(user_id, path_id)
