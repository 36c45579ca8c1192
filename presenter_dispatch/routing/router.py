"""Path-template router resolving Starlette requests to internal requests."""

import re
from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from starlette.requests import Request
from starlette.routing import compile_path

from presenter_dispatch.models.requests import InternalRequest


logger = structlog.get_logger(__name__)

HANDLER_PARAM = "handler"


class Route:
    """Single route using Starlette path syntax (``/{name}``, ``/{id:int}``).

    When ``handler`` is ``None`` the handler name is taken from the
    ``handler`` path parameter, e.g. ``Route("/{handler}/{action}")``.
    ``flags`` are copied onto every internal request the route produces.
    """

    def __init__(
        self,
        path: str,
        handler: str | None = None,
        defaults: Mapping[str, Any] | None = None,
        methods: Iterable[str] | None = None,
        flags: Mapping[str, bool] | None = None,
    ) -> None:
        if not path.startswith("/"):
            raise ValueError(f"Route path must start with '/': {path!r}")

        self.path = path
        self.handler = handler
        self.defaults = dict(defaults or {})
        self.methods = {method.upper() for method in methods} if methods else None
        self.flags = dict(flags or {})

        self._regex: re.Pattern[str]
        self._convertors: dict[str, Any]
        self._regex, _, self._convertors = compile_path(path)

        if handler is None and HANDLER_PARAM not in self._convertors:
            raise ValueError(
                f"Route {path!r} needs either a handler or a {{{HANDLER_PARAM}}} parameter"
            )

    def match(self, request: Request) -> InternalRequest | None:
        if self.methods is not None and request.method.upper() not in self.methods:
            return None

        found = self._regex.match(request.url.path)
        if found is None:
            return None

        path_params = {
            key: self._convertors[key].convert(value)
            for key, value in found.groupdict().items()
        }
        handler_name = self.handler or str(path_params.pop(HANDLER_PARAM, ""))
        if not handler_name:
            return None

        params: dict[str, Any] = dict(self.defaults)
        params.update(request.query_params.items())
        params.update(path_params)

        return InternalRequest(
            handler_name=handler_name,
            method=request.method,
            params=params,
            flags=dict(self.flags),
        )

    def __repr__(self) -> str:
        return f"Route(path={self.path!r}, handler={self.handler!r})"


class RouteList:
    """Ordered route collection; the first matching route wins."""

    def __init__(self, routes: Iterable[Route] | None = None) -> None:
        self._routes: list[Route] = list(routes or [])

    @property
    def routes(self) -> list[Route]:
        return list(self._routes)

    def add(
        self,
        path: str,
        handler: str | None = None,
        defaults: Mapping[str, Any] | None = None,
        methods: Iterable[str] | None = None,
        flags: Mapping[str, bool] | None = None,
    ) -> Route:
        route = Route(
            path, handler=handler, defaults=defaults, methods=methods, flags=flags
        )
        self._routes.append(route)
        return route

    def match(self, request: Request) -> InternalRequest | None:
        for route in self._routes:
            internal = route.match(request)
            if internal is not None:
                logger.debug(
                    "route_matched",
                    path=request.url.path,
                    route=route.path,
                    handler=internal.handler_name,
                )
                return internal

        logger.debug("route_not_matched", path=request.url.path, method=request.method)
        return None

    def __len__(self) -> int:
        return len(self._routes)
