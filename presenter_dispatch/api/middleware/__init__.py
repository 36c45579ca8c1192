"""Pipeline stages."""

from .presenter import PresenterMiddleware


__all__ = ["PresenterMiddleware"]
