"""Recovery of failed dispatches through the configured error handler."""

from typing import Any

import structlog

from presenter_dispatch.core.errors import AbortError
from presenter_dispatch.core.interfaces import ForwardCapable
from presenter_dispatch.models.requests import InternalRequest
from presenter_dispatch.models.responses import TerminalResponse

from .dispatcher import Dispatcher


logger = structlog.get_logger(__name__)


class RecoveryController:
    """Re-enters a dispatcher with a forward to the error handler.

    Recovery reuses the dispatcher that failed, so the error handler's
    requests are appended to the same trail and count against the same loop
    bound. Exceptions raised while recovering are not recovered again.
    """

    def __init__(self, dispatcher: Dispatcher, error_handler: str) -> None:
        self._dispatcher = dispatcher
        self._error_handler = error_handler

    @property
    def error_handler(self) -> str:
        return self._error_handler

    def build_params(self, exc: BaseException) -> dict[str, Any]:
        return {
            "exception": exc,
            "request": self._dispatcher.trail.last,
        }

    async def recover(self, exc: BaseException) -> TerminalResponse:
        """Resolve ``exc`` into the error handler's response.

        Args:
            exc: The fault raised by the original dispatch

        Returns:
            The terminal response produced by the error handler chain
        """
        params = self.build_params(exc)
        handler = self._dispatcher.handler

        if isinstance(handler, ForwardCapable):
            try:
                handler.forward(self._error_handler, params)
            except AbortError:
                logger.info(
                    "recovery_forward_via_handler",
                    error_handler=self._error_handler,
                    handler=type(handler).__name__,
                    error_type=type(exc).__name__,
                )
                return await self._dispatcher.process(handler.last_created_request)

        logger.info(
            "recovery_forward_synthesized",
            error_handler=self._error_handler,
            error_type=type(exc).__name__,
        )
        return await self._dispatcher.process(
            InternalRequest.forward_to(self._error_handler, params)
        )
