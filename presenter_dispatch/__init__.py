"""Request-dispatch adapter bridging Starlette requests to named handlers."""

from ._version import __version__


__all__ = ["__version__"]
