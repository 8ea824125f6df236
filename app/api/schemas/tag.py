"""Schemas de tags y grants."""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

TagKind = Literal["folder", "itemType", "genre", "custom", "system"]
AccessLevel = Literal["read", "write"]


class Grant(BaseModel):
    userId: str
    accessLevel: AccessLevel


class Sharing(BaseModel):
    sharedWith: List[Grant] = Field(default_factory=list)
    isPublic: bool = False


class TagOut(BaseModel):
    id: str
    kind: str
    value: str
    label: Optional[str] = None
    sharing: Sharing
    ownerUserId: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class TagCreate(BaseModel):
    kind: TagKind
    value: str = Field(min_length=1)
    label: Optional[str] = None


class TagUpdate(BaseModel):
    kind: Optional[TagKind] = None
    value: Optional[str] = Field(default=None, min_length=1)


class TagShare(BaseModel):
    userId: str = Field(min_length=1)
    accessLevel: AccessLevel = "read"


class TagListOut(BaseModel):
    tags: List[TagOut]
