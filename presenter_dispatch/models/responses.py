"""Handler results and their conversion to Starlette responses.

A handler produces either a terminal response or a ``ForwardResponse``.
Terminal responses are ``ApplicationResponse`` instances, rendered against
the pipeline's response shell, or Starlette responses that are already
transport-native and pass through untouched.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from starlette import responses as starlette_responses
from starlette.responses import Response

from presenter_dispatch.core.errors import InvalidStateError

from .requests import InternalRequest


# Shell headers describing the shell's own (empty) body
_BODY_HEADERS = frozenset({"content-length", "content-type"})


def _shell_headers(shell: Response) -> dict[str, str]:
    return {
        key: value
        for key, value in shell.headers.items()
        if key.lower() not in _BODY_HEADERS
    }


def with_status(response: Response, status_code: int) -> Response:
    """Return a copy of the response shell carrying ``status_code``."""
    return Response(
        content=response.body,
        status_code=status_code,
        headers=_shell_headers(response),
        media_type=response.media_type,
    )


class ApplicationResponse(ABC):
    """Terminal response produced by a handler."""

    @abstractmethod
    def to_response(self, shell: Response) -> Response:
        """Render into a Starlette response based on the pipeline shell.

        Args:
            shell: Response shell holding the status code and headers set so far

        Returns:
            The transport response
        """


@dataclass(frozen=True)
class JsonResponse(ApplicationResponse):
    payload: Any
    content_type: str | None = None

    def to_response(self, shell: Response) -> Response:
        response = starlette_responses.JSONResponse(
            content=self.payload,
            status_code=shell.status_code,
            headers=_shell_headers(shell),
        )
        if self.content_type:
            response.headers["content-type"] = self.content_type
        return response


@dataclass(frozen=True)
class TextResponse(ApplicationResponse):
    source: str
    content_type: str = "text/html"

    def to_response(self, shell: Response) -> Response:
        return Response(
            content=self.source,
            status_code=shell.status_code,
            headers=_shell_headers(shell),
            media_type=self.content_type,
        )


@dataclass(frozen=True)
class RedirectResponse(ApplicationResponse):
    url: str
    status_code: int = 302

    def to_response(self, shell: Response) -> Response:
        return starlette_responses.RedirectResponse(
            url=self.url,
            status_code=self.status_code,
            headers=_shell_headers(shell),
        )


@dataclass(frozen=True)
class CallbackResponse(ApplicationResponse):
    """Delegates rendering to a callable receiving the response shell."""

    callback: Callable[[Response], Response] = field(repr=False)

    def to_response(self, shell: Response) -> Response:
        return self.callback(shell)


@dataclass(frozen=True)
class ForwardResponse:
    """Instructs the dispatcher to process ``request`` next."""

    request: InternalRequest


TerminalResponse: TypeAlias = ApplicationResponse | Response
HandlerResult: TypeAlias = TerminalResponse | ForwardResponse


def is_terminal(result: object) -> bool:
    return isinstance(result, ApplicationResponse | Response)


def to_transport(result: object, shell: Response) -> Response:
    """Convert a terminal handler result into the outbound Starlette response."""
    if isinstance(result, Response):
        return result
    if isinstance(result, ApplicationResponse):
        return result.to_response(shell)
    raise InvalidStateError(
        f"Cannot convert {type(result).__name__} to a transport response."
    )
