from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import DomainException


def _title_from_status(status_code: int) -> str:
    mapping = {
        400: "Bad Request",
        401: "Unauthorized",
        403: "Forbidden",
        404: "Not Found",
        409: "Conflict",
        422: "Unprocessable Entity",
        500: "Internal Server Error",
    }
    return mapping.get(status_code, "Error")


def _problem(
    *,
    status: int,
    message: Optional[str] = None,
    code: Optional[str] = None,
    details: Optional[Any] = None,
    instance: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "title": _title_from_status(status),
        "status": status,
        "message": message or "",
        "code": code,
        "details": details if details is not None else {},
        "instance": instance or "",
    }


def _parse_detail(detail: Any) -> tuple[Optional[str], Optional[str], Optional[Any]]:
    if isinstance(detail, dict):
        code = detail.get("code") if isinstance(detail.get("code"), str) else None
        message = detail.get("message") or detail.get("detail")
        detail_text = message if isinstance(message, str) else None
        details = detail.get("details") or detail.get("errors")
        return detail_text, code, details
    if isinstance(detail, str):
        return detail, None, None
    if detail is None:
        return None, None, None
    return str(detail), None, None


def register_error_handlers(app: FastAPI) -> None:
    """Render every error as ``{title, status, message, code, details, instance}``."""

    def _http_response(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message, code, details = _parse_detail(exc.detail)
        problem = _problem(
            status=exc.status_code,
            message=message,
            code=code,
            details=jsonable_encoder(details) if details is not None else None,
            instance=request.url.path,
        )
        return JSONResponse(problem, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return _http_response(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _http_response(request, exc)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        return _http_response(request, exc.to_http_exception())

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        problem = _problem(
            status=422,
            message="Request validation failed",
            code="validation_error",
            details=jsonable_encoder(exc.errors()),
            instance=request.url.path,
        )
        return JSONResponse(problem, status_code=422)

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
        problem = _problem(
            status=422,
            message="Validation failed",
            code="validation_error",
            details=jsonable_encoder(exc.errors()),
            instance=request.url.path,
        )
        return JSONResponse(problem, status_code=422)
