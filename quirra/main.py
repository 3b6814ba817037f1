"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from quirra.api.routes.account_router import router as account_router
from quirra.api.routes.chat_router import router as chat_router
from quirra.api.routes.conversation_router import router as conversation_router
from quirra.api.routes.device_router import router as device_router
from quirra.api.routes.library_router import router as library_router
from quirra.api.routes.security_router import router as security_router
from quirra.api.routes.share_router import router as share_router
from quirra.api.routes.summary_router import router as summary_router
from quirra.api.routes.wellbeing_router import router as wellbeing_router
from quirra.core.config import settings
from quirra.core.database import Base, engine
from quirra.core.exceptions import (
    AppException,
    app_exception_handler,
    database_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from quirra.core.logging import setup_logging
from quirra.core.middleware import AuthMiddleware
from quirra.core.rate_limit import limiter, rate_limit_exceeded_handler
from quirra.core.redis import close_redis, init_redis
from quirra.models import (  # noqa: F401  registers tables on Base.metadata
    chat_message,
    chat_session,
    device,
    library_item,
    memory,
    profile,
    share,
    user_security,
    wellbeing,
)
from quirra.schemas.response_schema import ApiResponse, success_response

APP_VERSION = "0.1.0"

setup_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.app.env,
        analysis_configured=settings.analysis_llm.is_configured,
        chat_configured=settings.chat_llm.is_configured,
        auth_provider_configured=settings.supabase.is_configured,
    )
    await init_redis()
    if settings.app.is_development:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    yield
    await close_redis()
    await engine.dispose()
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.app.name,
    description="Quirra assistant backend: message analysis, memory, sharing and account APIs",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=settings.app.debug,
)

app.state.limiter = limiter

# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(SQLAlchemyError, database_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, unhandled_exception_handler)

# Middleware (registration order: inner→outer, execution order: outer→inner)
app.add_middleware(AuthMiddleware)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.app.is_development else [settings.app.public_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=ApiResponse[dict])
async def health_check() -> dict:
    """Health check endpoint."""
    return success_response({"status": "healthy"})


@app.get("/", response_model=ApiResponse[dict])
async def root() -> dict:
    """Root endpoint."""
    return success_response(
        {
            "app": settings.app.name,
            "version": APP_VERSION,
            "docs": "/docs",
        }
    )


# Register routers
app.include_router(summary_router)
app.include_router(chat_router)
app.include_router(conversation_router)
app.include_router(share_router)
app.include_router(account_router)
app.include_router(security_router)
app.include_router(device_router)
app.include_router(wellbeing_router)
app.include_router(library_router)


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(
        "quirra.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.app.is_development,
        log_config=None,
    )


if __name__ == "__main__":
    run()
