from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class BackendStatusView(BaseModel):
    configured: bool
    provider_id: Optional[str] = None
    model: Optional[str] = None
    message: str = ""


class BackendProviderView(BaseModel):
    provider_id: str
    type: str
    models: List[str]
    enabled: bool
    auth_mode: str
    is_default: bool
