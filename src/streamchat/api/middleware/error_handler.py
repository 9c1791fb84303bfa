"""Error handling middleware for FastAPI application.

This module provides centralized error handling for the API, converting
domain exceptions and validation errors into appropriate HTTP responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from streamchat.errors import ChatError, UpstreamError

logger = logging.getLogger(__name__)


def _validation_response(errors: list[dict[str, Any]]) -> JSONResponse:
    details = [
        {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"]}
        for error in errors
    ]
    return JSONResponse(
        status_code=400,
        content={
            "code": "invalid_input",
            "message": "Request validation failed",
            "errors": details,
        },
    )


def setup_error_handlers(app: FastAPI) -> None:
    """Configure exception handlers for the FastAPI application.

    Args:
        app: The FastAPI application instance to configure
    """

    @app.exception_handler(ChatError)
    async def handle_chat_error(request: Request, exc: ChatError) -> JSONResponse:
        """Convert ChatError subclasses into ``{code, message}`` responses."""
        content: dict[str, Any] = {"code": exc.code, "message": exc.message}
        if isinstance(exc, UpstreamError):
            content["upstream_status"] = exc.upstream_status
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed request bodies and parameters as 400."""
        return _validation_response(list(exc.errors()))

    @app.exception_handler(PydanticValidationError)
    async def handle_validation_error(
        request: Request, exc: PydanticValidationError
    ) -> JSONResponse:
        """Report bodies rejected by explicit model validation as 400."""
        return _validation_response(list(exc.errors()))

    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
        """Log unexpected exceptions and return a generic 500 response."""
        logger.exception("Unexpected error occurred: %s", exc)

        return JSONResponse(
            status_code=500,
            content={"code": "internal_error", "message": "An internal server error occurred"},
        )
