"""Pipeline stage dispatching HTTP requests to handlers."""

from contextvars import ContextVar
from typing import TYPE_CHECKING

from starlette.requests import Request
from starlette.responses import Response

from presenter_dispatch.api.pipeline import NextStage
from presenter_dispatch.core.errors import (
    BadRequestError,
    InvalidHandlerError,
    InvalidStateError,
    status_code_for,
)
from presenter_dispatch.core.interfaces import Handler, HandlerFactory, Router
from presenter_dispatch.core.logging import get_logger
from presenter_dispatch.dispatch import Dispatcher, DispatcherConfig, RecoveryController
from presenter_dispatch.models.requests import InternalRequest
from presenter_dispatch.models.responses import to_transport, with_status


if TYPE_CHECKING:
    from presenter_dispatch.config.settings import Settings


logger = get_logger(__name__)


class PresenterMiddleware:
    """Dispatches a request to handlers and passes the response on.

    Failed dispatches are forwarded to ``error_handler`` when one is
    configured and ``catch_exceptions`` is enabled; otherwise the failure is
    re-raised unchanged. Recovery runs once per request and its own failures
    propagate.

    A new ``Dispatcher`` is created for every request. The dispatcher of the
    request being processed is available as ``request.state.dispatcher`` and
    through the ``dispatcher``, ``handler`` and ``requests`` accessors. Each
    middleware instance keeps its own context variable, and the value stays
    set in the calling context after the call returns so callers can inspect
    the finished dispatch.
    """

    def __init__(
        self,
        handler_factory: HandlerFactory,
        router: Router,
        *,
        error_handler: str | None = None,
        catch_exceptions: bool = True,
        dispatcher_config: DispatcherConfig | None = None,
    ) -> None:
        self._handler_factory = handler_factory
        self._router = router
        self._error_handler = error_handler
        self._catch_exceptions = catch_exceptions
        self._dispatcher_config = dispatcher_config or DispatcherConfig()
        self._current_dispatcher: ContextVar[Dispatcher | None] = ContextVar(
            f"presenter_dispatcher_{id(self):x}", default=None
        )

    @classmethod
    def from_settings(
        cls, settings: "Settings", handler_factory: HandlerFactory, router: Router
    ) -> "PresenterMiddleware":
        return cls(
            handler_factory,
            router,
            error_handler=settings.dispatch.error_handler,
            catch_exceptions=settings.dispatch.catch_exceptions,
            dispatcher_config=settings.dispatch.dispatcher_config(),
        )

    @property
    def error_handler(self) -> str | None:
        return self._error_handler

    @error_handler.setter
    def error_handler(self, name: str | None) -> None:
        self._error_handler = name

    @property
    def catch_exceptions(self) -> bool:
        return self._catch_exceptions

    @catch_exceptions.setter
    def catch_exceptions(self, catch: bool) -> None:
        self._catch_exceptions = catch

    @property
    def dispatcher_config(self) -> DispatcherConfig:
        return self._dispatcher_config

    @property
    def dispatcher(self) -> Dispatcher | None:
        return self._current_dispatcher.get()

    @property
    def handler(self) -> Handler | None:
        """Handler created last while processing the current request."""
        dispatcher = self._current_dispatcher.get()
        return dispatcher.handler if dispatcher is not None else None

    @property
    def requests(self) -> tuple[InternalRequest, ...]:
        """Internal requests processed for the current request."""
        dispatcher = self._current_dispatcher.get()
        return dispatcher.trail.requests if dispatcher is not None else ()

    async def __call__(
        self, request: Request, response: Response, call_next: NextStage
    ) -> Response:
        """Dispatch ``request`` and hand the resulting response to ``call_next``.

        Args:
            request: The incoming HTTP request
            response: Response shell built by the previous pipeline stages
            call_next: The next stage of the pipeline

        Returns:
            The response returned by ``call_next``
        """
        if not isinstance(request, Request):
            raise InvalidStateError(
                f"Invalid request object given. Required {Request.__qualname__} type."
            )
        if not isinstance(response, Response):
            raise InvalidStateError(
                f"Invalid response object given. Required {Response.__qualname__} type."
            )

        dispatcher = Dispatcher(self._handler_factory, self._dispatcher_config)
        self._current_dispatcher.set(dispatcher)
        request.state.dispatcher = dispatcher

        try:
            application_response = await dispatcher.process(
                self.create_initial_request(request)
            )
        except Exception as e:
            if not self._catch_exceptions or self._error_handler is None:
                raise

            status_code = status_code_for(e)
            logger.warning(
                "dispatch_recovery_started",
                error_type=type(e).__name__,
                error_message=str(e),
                status_code=status_code,
                error_handler=self._error_handler,
                trail=dispatcher.trail.handler_names(),
            )
            response = with_status(response, status_code)
            application_response = await RecoveryController(
                dispatcher, self._error_handler
            ).recover(e)

        return await call_next(request, to_transport(application_response, response))

    def create_initial_request(self, request: Request) -> InternalRequest:
        """Resolve the HTTP request into the first internal request.

        Raises:
            BadRequestError: If no route matches, the route targets the error
                handler, or the handler factory does not know the handler
        """
        internal = self._router.match(request)
        if not isinstance(internal, InternalRequest):
            raise BadRequestError("No route for HTTP request.")

        name = internal.handler_name
        if self._error_handler is not None and (
            name.casefold() == self._error_handler.casefold()
        ):
            raise BadRequestError("Invalid request. Handler is not achievable.")

        try:
            self._handler_factory.get_handler_class(name)
        except InvalidHandlerError as e:
            raise BadRequestError(e.message) from e

        return internal
