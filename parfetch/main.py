from fastapi import FastAPI
from contextlib import asynccontextmanager
from parfetch.api.routes import close_shared_fetchers, router
from parfetch.core.config import settings
from parfetch.core.log import init_logger

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Validate configuration and set up logging on startup.
    """
    logger = init_logger(settings.LOG_LEVEL)
    settings.validate()
    logger.info("parfetch service ready")

    yield

    close_shared_fetchers()
    logger.info("parfetch service shutting down")

app = FastAPI(
    title="parfetch",
    description="Polite football stats fetcher producing backtester CSVs",
    version="1.0.0",
    lifespan=lifespan
)

# Include API routes
app.include_router(router)

@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "service": "parfetch",
        "version": "1.0.0",
        "endpoints": {
            "players": "POST /runs/players",
            "standings": "POST /runs/standings",
            "health": "GET /health"
        }
    }
