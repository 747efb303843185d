"""
FastAPI dependencies and shared error responses.

Resources live on app.state, set up by create_app(), so tests can build an
app around their own database and document store.
"""

from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

from catalog.config import Settings
from catalog.database import get_relational_db
from catalog.mongo import get_document_store

__all__ = [
    "get_app_settings",
    "get_relational_db",
    "get_document_store",
    "error_response",
    "server_error",
]


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def error_response(status_code: int, error: str, **extra) -> JSONResponse:
    """`{success: false, error, ...}` body; keys whose value is None are left out."""
    content = {"success": False, "error": error}
    content.update({key: value for key, value in extra.items() if value is not None})
    return JSONResponse(status_code=status_code, content=content)


def server_error(
    error: str,
    exc: Exception,
    settings: Settings,
    details: Optional[str] = None,
) -> JSONResponse:
    """500 response; the exception text is only exposed outside production."""
    if details is None and not settings.is_production:
        details = str(exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, error, details=details)
