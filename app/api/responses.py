# app/api/responses.py
from typing import Any, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from app.schemas.base_schema import ApiResponse, Meta


def _trace_id(request: Optional[Request]) -> Optional[str]:
    return getattr(request.state, "trace_id", None) if request else None


def ok(
    data: Any,
    message: str,
    request: Optional[Request] = None,
    meta: Optional[Meta] = None,
) -> ApiResponse:
    """Wrap a successful response in the standard ApiResponse envelope."""
    return ApiResponse(
        success=True,
        data=data,
        meta=meta,
        message=message,
        errors=None,
        trace_id=_trace_id(request),
    )


def fail(
    status_code: int,
    message: str,
    request: Optional[Request] = None,
    errors: Optional[List[Any]] = None,
) -> JSONResponse:
    """Render an error in the same envelope, with ``errors`` defaulting to the message."""
    body = ApiResponse(
        success=False,
        data=None,
        message=message,
        errors=errors if errors is not None else [message],
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))
