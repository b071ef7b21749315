# cancelflow/web/server.py
from __future__ import annotations

import logging
import platform
from typing import Optional

import uvicorn
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.ext.asyncio import AsyncEngine

from cancelflow.config import Settings, settings
from cancelflow.container import MemoryStores, build_memory_stores, init_db, seed_demo_subscription
from cancelflow.core.errors import CancellationError
from cancelflow.core.logging import setup_logging
from cancelflow.scheduler.jobs import setup_scheduler
from cancelflow.web.errors import (
    cancellation_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from cancelflow.web.middleware_logging import LoggingMiddleware
from cancelflow.web.routes import router as api_router

log = logging.getLogger("cancelflow.startup")


def create_app(
    cfg: Optional[Settings] = None,
    *,
    memory: Optional[MemoryStores] = None,
    engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    """
    Builds the API. ``memory`` / ``engine`` override what the settings
    would pick, which is how tests plug in their own stores.
    """
    cfg = cfg or settings
    app = FastAPI(title="Cancellation Flow API")

    if memory is None and engine is None and cfg.STORAGE_BACKEND == "memory":
        memory = build_memory_stores(cfg)

    sessionmaker = None
    if memory is None:
        # the module-level engine is only built when the db backend is in use
        from cancelflow import db

        if engine is None:
            engine, sessionmaker = db.engine, db.SessionLocal
        else:
            sessionmaker = db.make_sessionmaker(engine)
    else:
        engine = None

    app.state.settings = cfg
    app.state.memory = memory
    app.state.engine = engine
    app.state.sessionmaker = sessionmaker
    app.state.scheduler = None

    # Middleware
    app.add_middleware(LoggingMiddleware)

    # Routers
    app.include_router(api_router)

    # Errors
    app.add_exception_handler(CancellationError, cancellation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.on_event("startup")
    async def on_startup():
        setup_logging()
        log.info(
            "app_startup | platform=%s python=%s backend=%s policy=%s",
            platform.platform(),
            platform.python_version(),
            "memory" if app.state.memory is not None else "db",
            cfg.VARIANT_POLICY,
        )

        if app.state.memory is not None:
            scheduler = AsyncIOScheduler(timezone="UTC")
            if setup_scheduler(
                scheduler,
                app.state.memory.cancellations,
                app.state.memory.subscriptions,
                minutes=cfg.MEMORY_STORE_TTL_MINUTES,
            ):
                scheduler.start()
                app.state.scheduler = scheduler
                log.info("memory store purge every %s min", cfg.MEMORY_STORE_TTL_MINUTES)
        elif cfg.INIT_DB_ON_START:
            # dev-only path, production uses alembic upgrade head
            await init_db(app.state.engine)
            async with app.state.sessionmaker() as session:
                await seed_demo_subscription(session, cfg)
            log.info("DB init done (create_all enabled by ENV)")
        else:
            log.info("DB init skipped (use alembic upgrade head)")

    @app.on_event("shutdown")
    async def on_shutdown():
        if app.state.scheduler is not None:
            app.state.scheduler.shutdown(wait=False)
        if app.state.engine is not None:
            await app.state.engine.dispose()

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "cancelflow.web.server:app",
        host=settings.WEBAPP_HOST,
        port=settings.WEBAPP_PORT,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
