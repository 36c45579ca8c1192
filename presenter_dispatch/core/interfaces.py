"""Protocols for the collaborators the dispatcher orchestrates.

The dispatcher, the recovery controller and the presenter middleware only
depend on these contracts. ``presenter_dispatch.routing`` and
``presenter_dispatch.handlers`` ship implementations of them.
"""

from collections.abc import Awaitable
from typing import Any, Protocol, runtime_checkable

from starlette.requests import Request

from presenter_dispatch.models.requests import InternalRequest
from presenter_dispatch.models.responses import HandlerResult


__all__ = [
    "ForwardCapable",
    "Handler",
    "HandlerFactory",
    "Router",
]


@runtime_checkable
class Handler(Protocol):
    """Unit executing one internal request."""

    def run(
        self, request: InternalRequest
    ) -> HandlerResult | None | Awaitable[HandlerResult | None]:
        """Execute the request.

        Returns:
            A terminal response, a ``ForwardResponse``, or an awaitable
            resolving to one of them
        """
        ...


@runtime_checkable
class ForwardCapable(Protocol):
    """Optional handler capability: forwarding through the handler itself."""

    @property
    def last_created_request(self) -> InternalRequest | None:
        """Request synthesized by the most recent ``forward`` call."""
        ...

    def forward(
        self, destination: str | InternalRequest, params: dict[str, Any] | None = None
    ) -> None:
        """Forward to ``destination``.

        Raises:
            AbortError: Always, once the forward request has been recorded
        """
        ...


@runtime_checkable
class HandlerFactory(Protocol):
    """Creates handlers by name."""

    def create(self, name: str) -> Handler:
        """Instantiate the handler registered as ``name``."""
        ...

    def get_handler_class(self, name: str) -> type[Any]:
        """Return the handler class for ``name``.

        Raises:
            InvalidHandlerError: If no usable class is known under ``name``
        """
        ...


@runtime_checkable
class Router(Protocol):
    """Resolves transport requests to internal requests."""

    def match(self, request: Request) -> InternalRequest | None:
        ...
