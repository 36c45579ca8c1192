"""Base class for handlers with actions and handler-native forwarding."""

import inspect
from typing import Any, NoReturn

from presenter_dispatch.core.errors import AbortError, BadRequestError
from presenter_dispatch.models.requests import InternalRequest
from presenter_dispatch.models.responses import (
    ForwardResponse,
    HandlerResult,
    TerminalResponse,
)


ACTION_KEY = "action"
DEFAULT_ACTION = "default"


class BaseHandler:
    """Handler dispatching to ``action_<name>`` methods.

    The action name is read from the ``action`` request parameter. An action
    either returns its result or ends early through ``forward``,
    ``send_response`` or ``terminate``, which store the outcome and raise
    ``AbortError``. ``run`` catches the signal and returns the stored outcome.

    ``forward`` keeps the request it builds in ``last_created_request`` so a
    caller that triggers the forward from outside ``run`` can dispatch it.
    """

    def __init__(self) -> None:
        self._request: InternalRequest | None = None
        self._response: HandlerResult | None = None
        self._last_created_request: InternalRequest | None = None

    @property
    def request(self) -> InternalRequest | None:
        return self._request

    @property
    def name(self) -> str | None:
        return self._request.handler_name if self._request else None

    @property
    def action(self) -> str:
        if self._request is None:
            return DEFAULT_ACTION
        return str(self._request.get_parameter(ACTION_KEY) or DEFAULT_ACTION)

    @property
    def last_created_request(self) -> InternalRequest | None:
        return self._last_created_request

    async def run(self, request: InternalRequest) -> HandlerResult | None:
        self._request = request
        self._response = None

        method = getattr(self, f"action_{self.action}", None)
        if method is None or not callable(method):
            raise BadRequestError(
                f"Action '{self.action}' not found in handler '{request.handler_name}'."
            )

        try:
            result = method(request)
            if inspect.isawaitable(result):
                result = await result
        except AbortError:
            return self._response

        return result

    def forward(
        self, destination: str | InternalRequest, params: dict[str, Any] | None = None
    ) -> NoReturn:
        """Forward to another handler.

        Args:
            destination: Handler name, or a complete internal request
            params: Parameters of the forward request when ``destination``
                is a name

        Raises:
            AbortError: Always
        """
        if isinstance(destination, InternalRequest):
            request = destination
        else:
            request = InternalRequest.forward_to(destination, dict(params or {}))

        self._last_created_request = request
        self._response = ForwardResponse(request)
        raise AbortError()

    def send_response(self, response: TerminalResponse) -> NoReturn:
        self._response = response
        raise AbortError()

    def terminate(self) -> NoReturn:
        """Stop the action without a response."""
        raise AbortError()
