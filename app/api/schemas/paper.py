"""Schemas de papers (envoltorio genérico; `data` depende de `type`)."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.api.schemas.tag import TagOut


class PaperOut(BaseModel):
    id: str
    tags: List[TagOut]
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
    createdBy: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class PaperCreate(BaseModel):
    # `tags`/`type` se validan en el servicio para devolver los mismos mensajes que el resto
    tags: List[str] = Field(default_factory=list)
    type: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class PaperUpdate(BaseModel):
    # `createdBy` y demás campos inmutables se descartan en el servicio
    model_config = ConfigDict(extra="allow")

    tags: Optional[List[str]] = None
    type: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class PaperListOut(BaseModel):
    papers: List[PaperOut]


class DeleteOut(BaseModel):
    success: bool
