"""Request and response models exchanged with handlers."""

from .requests import InternalRequest
from .responses import (
    ApplicationResponse,
    CallbackResponse,
    ForwardResponse,
    HandlerResult,
    JsonResponse,
    RedirectResponse,
    TerminalResponse,
    TextResponse,
    is_terminal,
    to_transport,
    with_status,
)


__all__ = [
    "ApplicationResponse",
    "CallbackResponse",
    "ForwardResponse",
    "HandlerResult",
    "InternalRequest",
    "JsonResponse",
    "RedirectResponse",
    "TerminalResponse",
    "TextResponse",
    "is_terminal",
    "to_transport",
    "with_status",
]
