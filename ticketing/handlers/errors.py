"""Maps domain errors to HTTP responses."""

from typing import Any

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from ticketing.domain.errors import DomainError, ErrorCode, ErrorKind

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
}


def error_body(
    code: ErrorCode, message: str, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    return {
        "error": {
            "code": code.value,
            "kind": code.kind.value,
            "message": message,
            "retryable": code.retryable,
            "details": details or {},
        }
    }


def domain_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """DRF exception handler that renders domain and input errors uniformly."""
    if isinstance(exc, DomainError):
        return Response(
            error_body(exc.code, exc.message, exc.details),
            status=STATUS_BY_KIND[exc.kind],
        )
    if isinstance(exc, exceptions.ValidationError):
        return Response(
            error_body(ErrorCode.INVALID_INPUT, "Invalid request data", {"fields": exc.detail}),
            status=status.HTTP_400_BAD_REQUEST,
        )
    return exception_handler(exc, context)
