"""
Shared — エラー定義とハンドラ

ハンドラは例外を投げるだけ。HTTP への変換はここで登録する
例外ハンドラがまとめて行う。レスポンスは TMF の Error 形式。

    NotFoundError   → 404
    ConflictError   → 409
    ValidationError → 400
    その他の例外    → 500
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import config

logger = logging.getLogger(__name__)


class TMFError(Exception):
    status_code = 500
    reason = "Internal Server Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(TMFError):
    status_code = 404
    reason = "Not Found"

    def __init__(self, kind: str, resource_id: str) -> None:
        super().__init__(f"{kind} with id {resource_id} not found")
        self.kind = kind
        self.resource_id = resource_id


class ConflictError(TMFError):
    status_code = 409
    reason = "Conflict"


class ValidationError(TMFError):
    status_code = 400
    reason = "Bad Request"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


def error_body(status_code: int, reason: str, message: str) -> dict:
    return {
        "@type": "Error",
        "code": str(status_code),
        "reason": reason,
        "message": message,
    }


async def _tmf_error_handler(request: Request, exc: TMFError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.reason, exc.message),
    )


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = []
    for err in exc.errors():
        # loc は ("body", "callback") のような形
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{field or 'body'}: {err.get('msg', 'invalid')}")
    return JSONResponse(
        status_code=400,
        content=error_body(400, "Bad Request", "; ".join(messages)),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if config.EXPOSE_ERROR_DETAIL else "An unexpected error occurred"
    return JSONResponse(
        status_code=500,
        content=error_body(500, "Internal Server Error", message),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TMFError, _tmf_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
