"""Routing of transport requests to internal requests."""

from .router import HANDLER_PARAM, Route, RouteList


__all__ = ["HANDLER_PARAM", "Route", "RouteList"]
