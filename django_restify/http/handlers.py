"""
Default error and output emission handlers.

``on_error(error, ctx)`` and ``output_fn(payload, status_code, ctx)`` are
the only places responses are produced. Both can be replaced per resource
through the ``on_error``/``output_fn`` options.
"""

import logging
from typing import Any, Callable

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import DatabaseError
from django.http import HttpResponse, JsonResponse

from ..exceptions import ConfigurationError, RestifyError

logger = logging.getLogger(__name__)

TOTAL_COUNT_HEADER = "X-Total-Count"


def get_status_code(error: BaseException) -> int:
    """Map an exception to the HTTP status of its error response."""
    if isinstance(error, RestifyError):
        return error.status_code
    if isinstance(error, ObjectDoesNotExist):
        return 404
    if isinstance(error, (ValidationError, DatabaseError)):
        return 400
    return 500


def _error_details(error: BaseException) -> Any:
    if isinstance(error, RestifyError):
        return error.details
    if isinstance(error, ValidationError):
        if hasattr(error, "error_dict"):
            return error.message_dict
        return {"non_field_errors": error.messages}
    return {}


def _error_message(error: BaseException) -> str:
    if isinstance(error, RestifyError):
        return error.message
    if isinstance(error, ValidationError):
        return "Validation failed"
    return str(error) or error.__class__.__name__


def default_error_handler(restify: bool = False) -> Callable[[BaseException, Any], JsonResponse]:
    """
    Build the default error handler.

    Args:
        restify: Emit ``{"code", "message"}`` bodies instead of the default
            ``{"name", "message", "errors"}`` bodies.
    """

    def on_error(error: BaseException, ctx: Any) -> JsonResponse:
        status_code = get_status_code(error)
        operation = getattr(ctx, "operation", None)
        if status_code >= 500 and not isinstance(error, ConfigurationError):
            logger.error("Unhandled error during %s", operation, exc_info=error)
        elif isinstance(error, ConfigurationError):
            logger.error("Configuration error during %s: %s", operation, error)
        else:
            logger.info("Request failed during %s: %s", operation, error)

        if ctx is not None:
            ctx.status_code = status_code

        if restify:
            code = getattr(error, "code", None) or error.__class__.__name__
            body = {"code": code, "message": _error_message(error)}
        else:
            body = {
                "name": error.__class__.__name__,
                "message": _error_message(error),
                "errors": _error_details(error),
            }
        return JsonResponse(body, status=status_code)

    return on_error


def default_output_fn() -> Callable[[Any, int, Any], HttpResponse]:
    """Build the default output function rendering payloads as JSON."""

    def output_fn(payload: Any, status_code: int, ctx: Any) -> HttpResponse:
        if status_code == 204 or payload is None:
            response = HttpResponse(status=204 if status_code < 300 else status_code)
        else:
            response = JsonResponse(payload, status=status_code, safe=False)
        total_count = getattr(ctx, "total_count", None)
        if total_count is not None:
            response[TOTAL_COUNT_HEADER] = str(total_count)
        return response

    return output_fn
