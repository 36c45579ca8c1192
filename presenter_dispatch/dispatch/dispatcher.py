"""Request dispatch loop.

The dispatcher resolves an internal request to a handler, runs it and keeps
following ``ForwardResponse`` results until a handler produces a terminal
response. Every processed request is appended to the dispatcher's trail,
which also bounds the number of iterations.

A dispatcher holds per-dispatch state (the trail and the active handler), so
one instance serves exactly one inbound request.
"""

import inspect
from dataclasses import dataclass

import structlog

from presenter_dispatch.core.errors import (
    BadRequestError,
    InvalidStateError,
    TooManyLoopsError,
)
from presenter_dispatch.core.interfaces import Handler, HandlerFactory
from presenter_dispatch.models.requests import InternalRequest
from presenter_dispatch.models.responses import (
    ForwardResponse,
    TerminalResponse,
    is_terminal,
)

from .trail import RequestTrail


logger = structlog.get_logger(__name__)

DEFAULT_MAX_LOOP = 20


@dataclass(frozen=True)
class DispatcherConfig:
    """Dispatcher tuning.

    Attributes:
        max_loop: Trail length beyond which the next iteration fails with
            ``TooManyLoopsError``
    """

    max_loop: int = DEFAULT_MAX_LOOP

    def __post_init__(self) -> None:
        if self.max_loop < 0:
            raise ValueError("max_loop must be greater than or equal to 0")


class Dispatcher:
    """Runs the handler loop for one inbound request."""

    def __init__(
        self,
        handler_factory: HandlerFactory,
        config: DispatcherConfig | None = None,
    ) -> None:
        self._handler_factory = handler_factory
        self._config = config or DispatcherConfig()
        self._trail = RequestTrail()
        self._handler: Handler | None = None

    @property
    def config(self) -> DispatcherConfig:
        return self._config

    @property
    def trail(self) -> RequestTrail:
        return self._trail

    @property
    def handler(self) -> Handler | None:
        """The most recently created handler."""
        return self._handler

    async def process(self, request: InternalRequest | None) -> TerminalResponse:
        """Dispatch ``request`` and follow forwards until a terminal response.

        Args:
            request: Resolved internal request

        Returns:
            The terminal response produced by the last handler

        Raises:
            InvalidStateError: If ``request`` is missing or a handler returns
                an unrecognized result
            TooManyLoopsError: If the forward chain exceeds ``max_loop``
            BadRequestError: If a handler returns no result
        """
        if request is None:
            raise InvalidStateError("Dispatcher received no request to process.")

        while True:
            if len(self._trail) > self._config.max_loop:
                logger.warning(
                    "dispatch_too_many_loops",
                    max_loop=self._config.max_loop,
                    trail=self._trail.handler_names(),
                )
                raise TooManyLoopsError(self._config.max_loop)

            self._trail.append(request)
            logger.debug(
                "dispatch_iteration",
                handler=request.handler_name,
                method=request.method,
                iteration=len(self._trail),
            )

            self._handler = self._handler_factory.create(request.handler_name)
            result = self._handler.run(request.clone())
            if inspect.isawaitable(result):
                result = await result

            if isinstance(result, ForwardResponse):
                request = result.request
                continue

            if result is None:
                raise BadRequestError("Invalid response. Nullable.")

            if not is_terminal(result):
                raise InvalidStateError(
                    f"Handler '{request.handler_name}' returned an unsupported "
                    f"result of type {type(result).__name__}."
                )

            return result
