"""Response envelope helpers for the abilities API.

Successful responses are wrapped as ``{"data": ...}``; errors as
``{"error": {"code", "message", "details"}}``.
"""

from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .logging import get_logger

logger = get_logger(__name__)


def to_serializable(obj):
    """Recursively convert Pydantic models, lists, and dicts to serializable types."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if isinstance(obj, list):
        return [to_serializable(item) for item in obj]
    if isinstance(obj, dict):
        return {k: to_serializable(v) for k, v in obj.items()}
    return obj


class AbilityResponse:
    """Single-envelope JSON responses for API endpoints."""

    @staticmethod
    def success(
        data: Any, status_code: int = status.HTTP_200_OK, headers: dict[str, str] | None = None
    ) -> JSONResponse:
        """Wrap ``data`` in the success envelope."""
        response_content = jsonable_encoder({"data": to_serializable(data)})

        logger.debug(
            "Creating success response",
            extra={"status_code": status_code, "data_type": type(data).__name__},
        )

        return JSONResponse(content=response_content, status_code=status_code, headers=headers)

    @staticmethod
    def error(
        message: str,
        code: str = "API_ERROR",
        details: Any | None = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        headers: dict[str, str] | None = None,
    ) -> JSONResponse:
        """Build the error envelope.

        Args:
            message: Error message
            code: Error code for client handling
            details: Optional additional error details
            status_code: HTTP status code (default: 400)
            headers: Optional response headers

        """
        error_content: dict[str, Any] = {
            "error": {"code": code, "message": message, "details": to_serializable(details or {})}
        }

        logger.debug(
            "Creating error response",
            extra={"status_code": status_code, "error_code": code, "has_details": details is not None},
        )

        return JSONResponse(content=jsonable_encoder(error_content), status_code=status_code, headers=headers)
