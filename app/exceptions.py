from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, Optional


class APIException(HTTPException):
    """HTTPException that carries extra top-level fields for the error body."""

    def __init__(self, status_code: int, detail: str, headers: Optional[Dict[str, str]] = None, **extra: Any):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.extra = extra


def create_error_response(error_message: str, **extra: Any) -> dict:
    """Create a standardized error response"""
    body = {"error": error_message}
    body.update(extra)
    return body


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render every HTTP error as {"error": ...}"""
    extra = getattr(exc, "extra", {}) or {}
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(str(exc.detail), **extra),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors (400), not 422"""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ())[1:])
        msg = str(first.get("msg", message))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        message = f"{field}: {msg}" if field else msg
    return JSONResponse(status_code=400, content=create_error_response(message))
