"""Name-based handler registry."""

from collections.abc import Mapping
from typing import Any

import structlog

from presenter_dispatch.core.errors import InvalidHandlerError
from presenter_dispatch.core.interfaces import Handler


class HandlerRegistry:
    """Maps handler names to handler classes and instantiates them on demand.

    Each ``create`` call returns a new instance, so handler state never leaks
    between dispatches.
    """

    def __init__(self, handlers: Mapping[str, type[Any]] | None = None) -> None:
        self._handlers: dict[str, type[Any]] = {}
        self._logger = structlog.get_logger(__name__)
        for name, handler_cls in (handlers or {}).items():
            self.register(name, handler_cls)

    def register(self, name: str, handler_cls: type[Any]) -> None:
        """Register ``handler_cls`` under ``name``.

        Raises:
            InvalidHandlerError: If the name is empty or the class has no
                callable ``run``
        """
        if not name:
            raise InvalidHandlerError(name, "Handler name must not be empty.")
        if not isinstance(handler_cls, type) or not callable(
            getattr(handler_cls, "run", None)
        ):
            raise InvalidHandlerError(
                name, f"Cannot load handler '{name}', {handler_cls!r} is not a handler class."
            )
        self._handlers[name] = handler_cls
        self._logger.debug("handler_registered", handler=name, cls=handler_cls.__name__)

    def unregister(self, name: str) -> None:
        self._handlers.pop(name, None)

    def names(self) -> list[str]:
        return sorted(self._handlers)

    def get_handler_class(self, name: str) -> type[Any]:
        try:
            return self._handlers[name]
        except KeyError:
            raise InvalidHandlerError(name) from None

    def create(self, name: str) -> Handler:
        handler_cls = self.get_handler_class(name)
        handler: Handler = handler_cls()
        return handler

    def __contains__(self, name: object) -> bool:
        return name in self._handlers
