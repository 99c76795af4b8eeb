# Application factory and ASGI entry point
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError

from .api import auth_router, health_router, notes_router, ratings_router, register_error_handlers
from .config import Settings, get_settings
from .core.logging import LoggingMiddleware, get_logger, setup_logging
from .core.redis_client import get_redis_client
from .database import create_tables, dispose_engine

setup_logging()
logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(
        "Starting NoteGate",
        extra={"version": settings.app_version, "environment": settings.environment},
    )

    redis_client = get_redis_client()
    try:
        await redis_client.connect()
    except (RedisError, OSError) as e:
        logger.warning(f"Redis unavailable ({e}); token revocation disabled")

    # tests bring their own engine
    if os.getenv("NOTEGATE_SKIP_LIFESPAN_DB") == "1":
        logger.info("NOTEGATE_SKIP_LIFESPAN_DB=1, not touching the database")
    elif settings.environment == "development":
        await create_tables()

    yield

    logger.info("Shutting down NoteGate")
    await redis_client.disconnect()
    await dispose_engine()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Note access control, share links and rating aggregation",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    for router in (auth_router, notes_router, ratings_router, health_router):
        app.include_router(router, prefix="/api")

    @app.get("/api/")
    async def api_root():
        return {
            "message": settings.app_name,
            "version": settings.app_version,
            "documentation": {"swagger_ui": "/docs", "openapi_json": "/openapi.json"},
            "endpoints": {
                "authentication": "/api/auth/",
                "notes": "/api/notes/",
                "ratings": "/api/ratings/me",
                "health": "/api/health/",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("notegate.main:app", host=settings.host, port=settings.port, reload=settings.reload)
