import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from . import __version__
from .config import Settings, get_settings
from .database import create_db_engine, create_session_factory, init_db
from .errors import register_exception_handlers
from .logging_middleware import add_audit_middleware
from .rate_limit import apply_rate_limiter
from .routers import auth, bookings

logger = logging.getLogger(__name__)

SERVICE_NAME = "bookings"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    engine = create_db_engine(settings.database_url)
    if settings.run_db_migrations:
        init_db(engine)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    logger.info("Datastore ready (%s)", engine.url.render_as_string(hide_password=True))
    try:
        yield
    finally:
        engine.dispose()
        logger.info("Datastore connections closed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the service; raises ``ValidationError`` if required config is missing."""

    settings = settings or get_settings()
    fastapi_app = FastAPI(title="Car Rental Bookings Service", version=__version__, lifespan=lifespan)
    fastapi_app.state.settings = settings
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(fastapi_app)
    apply_rate_limiter(fastapi_app, settings)
    add_audit_middleware(fastapi_app, SERVICE_NAME, settings.audit_log_dir)
    if settings.metrics_enabled:
        Instrumentator().instrument(fastapi_app).expose(fastapi_app, include_in_schema=False)

    fastapi_app.include_router(auth.router)
    fastapi_app.include_router(bookings.router)

    @fastapi_app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "service": SERVICE_NAME}

    return fastapi_app


def run() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
        stream=sys.stdout,
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
