"""Dispatch loop and failure recovery."""

from .dispatcher import DEFAULT_MAX_LOOP, Dispatcher, DispatcherConfig
from .recovery import RecoveryController
from .trail import RequestTrail


__all__ = [
    "DEFAULT_MAX_LOOP",
    "Dispatcher",
    "DispatcherConfig",
    "RecoveryController",
    "RequestTrail",
]
