from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DynamicApiError(Exception):
    """Base class for errors the dynamic table API reports to callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict:
        return {"error": self.message}


class TableNotFoundError(DynamicApiError):
    status_code = 404

    def __init__(self, table_name: str) -> None:
        super().__init__(f"Table '{table_name}' not found")
        self.table_name = table_name


class RecordNotFoundError(DynamicApiError):
    status_code = 404

    def __init__(self, message: str = "Record not found") -> None:
        super().__init__(message)


class InvalidColumnError(DynamicApiError):
    """Raised when a request names columns the cached schema does not have."""

    status_code = 400

    def __init__(self, message: str, columns: list[str] | None = None) -> None:
        super().__init__(message)
        self.columns = list(columns or [])

    def to_body(self) -> dict:
        body = super().to_body()
        if self.columns:
            body["columns"] = self.columns
        return body


class UnderlyingStoreError(DynamicApiError):
    """
    Any database-level failure. `message` is the generic text shown to the
    caller; the original exception is chained and logged server-side only.
    """

    status_code = 500


async def _dynamic_api_error_handler(request: Request, exc: DynamicApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed method=%s path=%s error=%s cause=%r",
            request.method,
            request.url.path,
            exc.message,
            exc.__cause__,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DynamicApiError, _dynamic_api_error_handler)
