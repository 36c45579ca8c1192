"""FastAPI application factory hosting the presenter pipeline."""

from collections.abc import Iterable

import structlog
from fastapi import FastAPI

from presenter_dispatch import __version__
from presenter_dispatch.api.middleware.presenter import PresenterMiddleware
from presenter_dispatch.api.pipeline import MiddlewarePipeline, Stage
from presenter_dispatch.config.settings import Settings, get_settings
from presenter_dispatch.core.interfaces import HandlerFactory, Router
from presenter_dispatch.core.logging import get_logger, setup_logging


logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    router: Router,
    handler_factory: HandlerFactory,
    stages: Iterable[Stage] = (),
    after_stages: Iterable[Stage] = (),
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings (read from the environment if None)
        router: Router resolving HTTP requests to internal requests
        handler_factory: Factory creating handlers by name
        stages: Pipeline stages running before the presenter stage
        after_stages: Pipeline stages receiving the presenter's response

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    if not structlog.is_configured():
        setup_logging(
            json_logs=settings.logging.json_logs,
            log_level_name=settings.logging.level,
            log_file=settings.logging.file,
        )

    presenter = PresenterMiddleware.from_settings(settings, handler_factory, router)
    pipeline = MiddlewarePipeline([*stages, presenter, *after_stages])

    app = FastAPI(
        title="Presenter Dispatch",
        description="HTTP adapter dispatching requests to named handlers",
        version=__version__,
    )
    app.state.settings = settings
    app.state.presenter = presenter
    app.state.pipeline = pipeline

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str | int | None]:
        return {
            "status": "ok",
            "version": __version__,
            "error_handler": settings.dispatch.error_handler,
            "max_loop": settings.dispatch.max_loop,
        }

    app.mount("/", pipeline, name="presenter")

    logger.debug(
        "app_created",
        stages=len(pipeline.stages),
        error_handler=settings.dispatch.error_handler,
        catch_exceptions=settings.dispatch.catch_exceptions,
        max_loop=settings.dispatch.max_loop,
    )
    return app
