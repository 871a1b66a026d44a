# FILE: pcr_app/schemas/common.py
from __future__ import annotations

from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict


class ApiError(BaseModel):
    msg: str
    code: Optional[str] = None
    details: Optional[List[str]] = None


class ApiResponse(BaseModel):
    ok: bool
    status: bool
    data: Optional[Any] = None
    error: Optional[ApiError] = None
    message: Optional[str] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)
