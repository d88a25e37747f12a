"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fieldlogger.config import Settings, get_settings
from fieldlogger.infrastructure.dependencies import SyncRuntime, build_runtime
from fieldlogger.infrastructure.logging.log_config import setup_logging
from fieldlogger.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — build and start the sync core, stop it on shutdown."""
    settings: Settings = app.state.settings
    setup_logging(settings)

    runtime: SyncRuntime | None = getattr(app.state, "runtime", None)
    owns_runtime = runtime is None
    if runtime is None:
        runtime = build_runtime(settings)
        app.state.runtime = runtime
        await runtime.start()

    yield

    if owns_runtime:
        await runtime.stop()


def create_app(
    settings: Settings | None = None,
    runtime: SyncRuntime | None = None,
) -> FastAPI:
    """Factory function that builds and configures the FastAPI application.

    A pre-built ``runtime`` is used as-is and its lifecycle stays with the
    caller.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    if runtime is not None:
        app.state.runtime = runtime

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "fieldlogger.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
