"""Schemas de prompts personalizados."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PromptOut(BaseModel):
    id: str
    userId: str
    triggerWord: str
    promptText: str
    icon: str = "mic"
    color: str = "blue"
    isBuiltIn: bool = False
    isActive: bool = True
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class PromptCreate(BaseModel):
    triggerWord: str = Field(min_length=1)
    promptText: str = Field(min_length=1)
    icon: Optional[str] = None
    color: Optional[str] = None


class PromptUpdate(BaseModel):
    triggerWord: Optional[str] = None
    promptText: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    isActive: Optional[bool] = None


class PromptListOut(BaseModel):
    prompts: List[PromptOut]


class MessageOut(BaseModel):
    message: str
    count: Optional[int] = None
