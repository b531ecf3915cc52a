from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse

from models.error import ErrorData, ErrorResponse


class RestError(Exception):
    """Error surfaced to API callers as ``{"code", "message", "data": {"status"}}``."""

    def __init__(self, code: str, message: str, status_code: int):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            code=self.code,
            message=self.message,
            data=ErrorData(status=self.status_code),
        )


class Forbidden(RestError):
    """Permission check failed. The status code is supplied by the permission checker."""


class InvalidResource(RestError):
    def __init__(self, code: str, message: str = "Resource doesn't exist."):
        super().__init__(code, message, status.HTTP_404_NOT_FOUND)


class InvalidParam(RestError):
    def __init__(self, message: str):
        super().__init__("rest_invalid_param", message, status.HTTP_400_BAD_REQUEST)


async def rest_error_handler(request: Request, exc: RestError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )
