"""Variantes de `Paper.data` según `type` (unión etiquetada).

El store guarda `data` sin esquema; aquí se valida la forma en cada escritura
para los tipos conocidos. Tipos desconocidos pasan tal cual.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ValidationError

AudioSyncStatus = Literal["pending", "uploaded", "failed"]
AUDIO_SYNC_STATUSES = ("pending", "uploaded", "failed")


class _PaperData(BaseModel):
    # Campos extra permitidos: los clientes agregan metadatos propios
    model_config = ConfigDict(extra="allow")


class PromptUsed(BaseModel):
    triggerWord: str
    promptText: str


class ProcessingEntry(BaseModel):
    processedAt: datetime
    promptUsed: PromptUsed
    output: str


class RecordingData(_PaperData):
    recordingId: str = Field(min_length=1)
    transcript: str
    duration: float = Field(ge=0)
    timestamp: datetime
    audioUrl: Optional[str] = None
    audioSyncStatus: AudioSyncStatus = "pending"
    processingHistory: List[ProcessingEntry] = Field(default_factory=list)


class CollectibleData(_PaperData):
    itemId: str = Field(min_length=1)
    provider: Optional[str] = None
    registryData: Optional[str] = None
    status: Literal["want", "have", "completed"]
    quantity: int = Field(default=1, ge=0)


class ProseMirrorDoc(BaseModel):
    """Documento TipTap/ProseMirror: sólo se exige el nodo raíz con `type`."""
    model_config = ConfigDict(extra="allow")

    type: str
    content: List[Dict[str, Any]] = Field(default_factory=list)


class DocumentData(_PaperData):
    documentId: str = Field(min_length=1)
    title: str
    content: ProseMirrorDoc
    lastModified: Optional[datetime] = None
    version: Optional[int] = Field(default=None, ge=1)


class NoteData(_PaperData):
    title: Optional[str] = None
    content: Any = None


class Point(BaseModel):
    x: float
    y: float


class Bounds(BaseModel):
    minX: float
    maxX: float
    minY: float
    maxY: float


class PathData(_PaperData):
    """Trazo de dibujo: puntos con ancho por punto, posición y escala del lienzo."""
    points: List[Point] = Field(default_factory=list)
    widths: List[float] = Field(default_factory=list)
    style: str = Field(min_length=1)
    x: float
    y: float
    scale: float
    thickness: float
    bounds: Optional[Bounds] = None


PAPER_DATA_MODELS: Dict[str, Type[_PaperData]] = {
    "recording": RecordingData,
    "collectible": CollectibleData,
    "document": DocumentData,
    "note": NoteData,
    "path": PathData,
}


def _format_errors(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"data.{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def validate_paper_data(type_: str, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Valida `data` para `type_` y devuelve el dict normalizado.

    Sólo se reemplazan los campos declarados que vienen en la entrada (fechas ISO
    pasan a datetime); no se inyectan defaults ni se tocan claves extra, así un
    update no agrega claves que el cliente nunca mandó.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("data must be an object")
    model = PAPER_DATA_MODELS.get(type_)
    if model is None:
        return dict(data)
    try:
        parsed = model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {type_} data: {_format_errors(e)}")

    out = dict(data)
    for key in model.model_fields:
        if key not in data:
            continue
        value = getattr(parsed, key)
        if isinstance(value, BaseModel):
            # Sub-documentos libres (p. ej. ProseMirror) se guardan como llegaron
            continue
        if isinstance(value, list) and value and isinstance(value[0], BaseModel):
            out[key] = [v.model_dump() for v in value]
        else:
            out[key] = value
    return out
