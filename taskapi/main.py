"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskapi.api.errors import register_exception_handlers
from taskapi.api.health import router as health_router
from taskapi.api.tasks import router as tasks_router
from taskapi.api.users import router as users_router
from taskapi.config import configure_logging, get_settings
from taskapi.db.session import close_client, ensure_indexes, get_database
from taskapi.middleware import RequestLoggingMiddleware

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate settings and prepare indexes on startup; close the client on shutdown."""
    configure_logging(settings.LOG_LEVEL)
    settings.validate()
    await ensure_indexes(get_database())
    logger.info("Task API started", extra={"environment": settings.ENVIRONMENT})
    yield
    await close_client()
    logger.info("Task API stopped")


app = FastAPI(
    title="Task API",
    description="Per-user task management with email sign-in",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

# Register routers
app.include_router(health_router)
app.include_router(tasks_router)
app.include_router(users_router)
