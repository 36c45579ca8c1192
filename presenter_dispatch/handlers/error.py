"""Default error handler rendering failures as JSON."""

import structlog

from presenter_dispatch.core.errors import status_code_for
from presenter_dispatch.models.requests import InternalRequest
from presenter_dispatch.models.responses import JsonResponse

from .base import BaseHandler


logger = structlog.get_logger(__name__)


def error_type_for(exc: BaseException) -> str:
    error_type = getattr(exc, "error_type", None)
    if isinstance(error_type, str) and error_type:
        return error_type
    return "internal_server_error" if status_code_for(exc) >= 500 else "request_error"


class ErrorHandler(BaseHandler):
    """Renders the ``exception`` parameter of a forward request.

    Server errors are reported with a generic message so internal details do
    not leak to clients.
    """

    def action_default(self, request: InternalRequest) -> JsonResponse:
        exc = request.get_parameter("exception")
        failed_request = request.get_parameter("request")
        failed_handler = (
            failed_request.handler_name
            if isinstance(failed_request, InternalRequest)
            else None
        )

        if not isinstance(exc, BaseException):
            logger.warning("error_handler_without_exception", failed_handler=failed_handler)
            return JsonResponse(
                {"error": {"type": "internal_server_error", "message": "Internal server error"}}
            )

        status_code = status_code_for(exc)
        error_type = error_type_for(exc)
        log_kwargs = {
            "error_type": error_type,
            "error_message": str(exc),
            "status_code": status_code,
            "failed_handler": failed_handler,
        }
        if status_code >= 500:
            logger.error("dispatch_failed", exc_info=exc, **log_kwargs)
            message = "Internal server error"
        else:
            logger.info("dispatch_rejected", **log_kwargs)
            message = str(exc)

        return JsonResponse({"error": {"type": error_type, "message": message}})
