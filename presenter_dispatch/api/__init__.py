"""HTTP boundary: pipeline, presenter middleware and application factory."""

from .app import create_app
from .middleware.presenter import PresenterMiddleware
from .pipeline import MiddlewarePipeline, NextStage, Stage


__all__ = [
    "MiddlewarePipeline",
    "NextStage",
    "PresenterMiddleware",
    "Stage",
    "create_app",
]
