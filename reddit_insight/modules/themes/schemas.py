from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Theme(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    keywords: List[str] = Field(default_factory=list)
    is_active: bool = True
    last_analyzed: Optional[datetime] = None


class ThemeCreateRequest(BaseModel):
    name: str = Field(min_length=1)
