"""Reelpulse — FastAPI Application Entry Point.

Social video performance dashboard API.
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.api.dashboard_routes import router as dashboard_router
from app.core.logging import get_logger, quiet_noisy_loggers

logger = get_logger("main")

IS_SERVERLESS = bool(
    os.environ.get("VERCEL") or os.environ.get("AWS_LAMBDA_FUNCTION_NAME")
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    quiet_noisy_loggers()
    logger.info("Reelpulse starting up...")
    logger.info(f"Environment: {'SERVERLESS' if IS_SERVERLESS else 'LOCAL'}")
    logger.info(f"Record store backend: {settings.store_backend}")
    if settings.store_backend == "sql":
        from app.database import check_connection, init_db

        if check_connection():
            try:
                init_db()
            except Exception as e:
                logger.error(f"Table creation failed: {e}")
        else:
            logger.error("Database NOT connected — endpoints will fail")
    elif not settings.supabase_url:
        logger.warning("SUPABASE_URL is not set — endpoints will fail")
    yield
    logger.info("Reelpulse shut down")


app = FastAPI(
    title="Reelpulse",
    description="Social video performance dashboard — KPIs, daily trends and ranked tables over scraped post metrics.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(dashboard_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "reelpulse",
        "version": "1.0.0",
        "store_backend": settings.store_backend,
    }


def run() -> None:
    """Serve the app with uvicorn (`reelpulse` console script)."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
