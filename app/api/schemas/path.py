"""Schemas de trazos (papers `type="path"`)."""
from typing import List

from pydantic import BaseModel

from app.api.schemas.paper import PaperOut


class PathListOut(BaseModel):
    paths: List[PaperOut]
