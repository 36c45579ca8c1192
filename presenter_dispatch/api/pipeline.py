"""ASGI application running a chain of request/response stages.

Each stage is called as ``stage(request, response, call_next)`` and returns
the outbound response, usually the result of ``call_next``. The last stage's
``call_next`` returns the response it receives unchanged.
"""

from collections.abc import Awaitable, Callable, Iterable

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from presenter_dispatch.core.errors import InvalidStateError
from presenter_dispatch.core.logging import get_logger


logger = get_logger(__name__)

NextStage = Callable[[Request, Response], Awaitable[Response]]
Stage = Callable[[Request, Response, NextStage], Awaitable[Response]]


class MiddlewarePipeline:
    """Ordered middleware stages exposed as an ASGI application."""

    def __init__(self, stages: Iterable[Stage] | None = None) -> None:
        self._stages: list[Stage] = list(stages or [])

    @property
    def stages(self) -> list[Stage]:
        return list(self._stages)

    def add(self, stage: Stage) -> "MiddlewarePipeline":
        self._stages.append(stage)
        return self

    async def handle(self, request: Request, response: Response) -> Response:
        """Run every stage in order, starting from ``response``."""

        async def call_at(index: int, req: Request, resp: Response) -> Response:
            if index >= len(self._stages):
                return resp

            async def call_next(next_req: Request, next_resp: Response) -> Response:
                return await call_at(index + 1, next_req, next_resp)

            return await self._stages[index](req, resp, call_next)

        return await call_at(0, request, response)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI application entrypoint."""
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            raise InvalidStateError(
                f"Unsupported ASGI scope type: {scope['type']!r}",
                details={"scope_type": scope["type"]},
            )

        request = Request(scope, receive)
        response = await self.handle(request, Response(status_code=200))
        logger.debug(
            "pipeline_response",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        await response(scope, receive, send)

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
