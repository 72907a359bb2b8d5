from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orchestra.api.comments import router as comments_router
from orchestra.api.errors import register_exception_handlers
from orchestra.api.health import router as health_router
from orchestra.api.tasks import router as tasks_router
from orchestra.core.config import get_settings
from orchestra.core.logging import TraceContextMiddleware, configure_logging
from orchestra.db.bootstrap import initialize_database
from orchestra.db.engine import dispose_engine, get_engine


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if settings.db_auto_init:
            await initialize_database(database_url=settings.database_url)
        get_engine()
        try:
            yield
        finally:
            await dispose_engine()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        lifespan=lifespan,
    )

    register_exception_handlers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(TraceContextMiddleware)
    app.include_router(health_router)
    app.include_router(tasks_router, prefix="/api/v1")
    app.include_router(comments_router, prefix="/api/v1")
    return app


app = create_app()
