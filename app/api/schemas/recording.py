"""Schemas de grabaciones (papers `type="recording"`)."""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from app.api.schemas.paper import PaperOut


class RecordingProcessIn(BaseModel):
    recordingId: str = Field(min_length=1)
    transcript: str
    triggerWord: Optional[str] = None
    duration: float = Field(default=0, ge=0)
    timestamp: Optional[datetime] = None


class RecordingReprocessIn(BaseModel):
    triggerWord: str = Field(min_length=1)


class AudioStatusIn(BaseModel):
    audioSyncStatus: Literal["pending", "uploaded", "failed"]
    audioUrl: Optional[str] = None


class AudioStatusOut(BaseModel):
    updated: bool


class RecordingListOut(BaseModel):
    recordings: List[PaperOut]
