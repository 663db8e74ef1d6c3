"""Error response builder for RFC 7807 Problem Details.

This module converts DomainErrors (from Result flows) and streaming
errors (raised before a stream starts) into problem-details responses.

Exports:
    ErrorResponseBuilder: Utility class for building RFC 7807 responses
"""

from fastapi import status
from fastapi.responses import JSONResponse

from sse_bridge.core.constants import PROBLEM_TYPE_BASE_URL
from sse_bridge.core.enums import ErrorCode
from sse_bridge.core.errors import DomainError, ValidationError
from sse_bridge.presentation.routers.api.v1.errors.problem_details import (
    ErrorDetail,
    ProblemDetails,
)


class ErrorResponseBuilder:
    """Build RFC 7807 Problem Details error responses.

    Example:
        >>> error = ValidationError(
        ...     code=ErrorCode.INVALID_CHANNEL_COMPONENT,
        ...     message="domain must not contain ':'",
        ...     field="domain",
        ... )
        >>> response = ErrorResponseBuilder.from_domain_error(
        ...     error, instance="/api/v1/streams/game:x"
        ... )
        >>> response.status_code
        400
    """

    @staticmethod
    def from_domain_error(error: DomainError, instance: str) -> JSONResponse:
        """Convert a DomainError to an RFC 7807 JSON response.

        Args:
            error: Error to convert (ValidationError adds a field entry)
            instance: Request path the error occurred on

        Returns:
            JSONResponse with ProblemDetails content
        """
        status_code = ErrorResponseBuilder._get_status_code(error.code)

        problem = ProblemDetails(
            type=f"{PROBLEM_TYPE_BASE_URL}/{error.code.value}",
            title=ErrorResponseBuilder._get_title(error.code),
            status=status_code,
            detail=error.message,
            instance=instance,
        )

        if isinstance(error, ValidationError):
            problem.errors = [
                ErrorDetail(
                    field=error.field or "unknown",
                    code=error.code.value,
                    message=error.message,
                )
            ]

        return JSONResponse(
            status_code=status_code,
            content=problem.model_dump(exclude_none=True),
        )

    @staticmethod
    def _get_status_code(code: ErrorCode) -> int:
        """Map error code to HTTP status code.

        Example:
            >>> ErrorResponseBuilder._get_status_code(
            ...     ErrorCode.STREAM_SUBSCRIBE_FAILED
            ... )
            503
        """
        mapping = {
            ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
            ErrorCode.INVALID_CHANNEL_COMPONENT: status.HTTP_400_BAD_REQUEST,
            ErrorCode.STREAM_SUBSCRIBE_FAILED: status.HTTP_503_SERVICE_UNAVAILABLE,
            ErrorCode.BACKPLANE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
        }
        return mapping.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    @staticmethod
    def _get_title(code: ErrorCode) -> str:
        """Get human-readable title for error code."""
        mapping = {
            ErrorCode.VALIDATION_FAILED: "Validation Failed",
            ErrorCode.INVALID_CHANNEL_COMPONENT: "Invalid Channel",
            ErrorCode.STREAM_SUBSCRIBE_FAILED: "Stream Unavailable",
            ErrorCode.BACKPLANE_UNAVAILABLE: "Backplane Unavailable",
        }
        return mapping.get(code, "Internal Server Error")
