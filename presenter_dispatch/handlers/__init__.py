"""Handler base classes and the handler registry."""

from .base import ACTION_KEY, DEFAULT_ACTION, BaseHandler
from .error import ErrorHandler, error_type_for
from .registry import HandlerRegistry


__all__ = [
    "ACTION_KEY",
    "DEFAULT_ACTION",
    "BaseHandler",
    "ErrorHandler",
    "HandlerRegistry",
    "error_type_for",
]
