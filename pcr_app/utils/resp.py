# FILE: pcr_app/utils/resp.py
from __future__ import annotations

from typing import Any, List, Optional
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from pcr_app.schemas.common import ApiResponse, ApiError


def ok(data: Any = None, status_code: int = 200, message: Optional[str] = None) -> JSONResponse:
    payload = ApiResponse(ok=True, status=True, data=data, message=message)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def err(
    msg: str,
    status_code: int = 400,
    *,
    code: Optional[str] = None,
    details: Optional[List[str]] = None,
) -> JSONResponse:
    payload = ApiResponse(ok=False, status=False, error=ApiError(msg=msg, code=code, details=details))
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))
