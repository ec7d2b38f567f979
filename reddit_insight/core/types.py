from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class Citation(BaseModel):
    uri: str = ""
    title: str = ""


class GroundedReply(BaseModel):
    text: str = ""
    citations: List[Citation] = Field(default_factory=list)
