"""Exception types raised by the presenter dispatch layer."""

from typing import Any


class PresenterDispatchError(Exception):
    """Base exception for presenter dispatch errors."""

    def __init__(
        self,
        message: str,
        error_type: str = "internal_server_error",
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.status_code = status_code
        self.details = details or {}


class InvalidStateError(PresenterDispatchError):
    """Contract violation that is unreachable under correct usage (500)."""

    def __init__(
        self,
        message: str = "Invalid dispatcher state",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_type="invalid_state_error",
            status_code=500,
            details=details,
        )


class ApplicationError(PresenterDispatchError):
    """Application life cycle error (500)."""

    def __init__(
        self,
        message: str,
        error_type: str = "application_error",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_type=error_type,
            status_code=500,
            details=details,
        )


class TooManyLoopsError(ApplicationError):
    """Forward chain exceeded the configured loop bound."""

    def __init__(self, max_loop: int) -> None:
        super().__init__(
            message="Too many loops detected in application life cycle.",
            error_type="too_many_loops_error",
            details={"max_loop": max_loop},
        )
        self.max_loop = max_loop


class BadRequestError(PresenterDispatchError):
    """Client-attributable error.

    ``code`` is the explicit HTTP status carried by the error, if any. When it
    is missing the error maps to 404.
    """

    def __init__(
        self,
        message: str = "Bad request",
        code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_type="bad_request_error",
            status_code=code or 404,
            details=details,
        )
        self.code = code


class InvalidHandlerError(PresenterDispatchError):
    """Handler name cannot be resolved to a usable handler class."""

    def __init__(self, handler_name: str, message: str | None = None) -> None:
        super().__init__(
            message=message or f"Cannot load handler '{handler_name}', class not found.",
            error_type="invalid_handler_error",
            status_code=500,
            details={"handler": handler_name},
        )
        self.handler_name = handler_name


class AbortError(Exception):
    """Control-flow signal raised by a handler to stop its own execution.

    Not a failure: raised after a handler has stored its outcome (a forward
    or a terminal response) so the caller can pick that outcome up.
    """


def status_code_for(exc: BaseException) -> int:
    """HTTP status code a failed dispatch maps to.

    A ``BadRequestError`` maps to its explicit code or 404, any other
    exception declaring an integer ``status_code`` maps to that code, and
    everything else is a 500.
    """
    if isinstance(exc, BadRequestError):
        return exc.code or 404
    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int) and not isinstance(status_code, bool):
        return status_code
    return 500


__all__ = [
    "AbortError",
    "ApplicationError",
    "BadRequestError",
    "InvalidHandlerError",
    "InvalidStateError",
    "PresenterDispatchError",
    "TooManyLoopsError",
    "status_code_for",
]
