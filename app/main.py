from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from pathlib import Path
import logging

from app.core.config import settings
from app.api.endpoints import pipeline

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# httpx logs request URLs at INFO, and the API key travels in the query string
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    Handles startup and shutdown events
    """
    logger.info("Starting up Hindi Image Translator API...")
    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set; requests to the model will be rejected")
    logger.info(f"Using model {settings.GEMINI_MODEL}")

    yield

    # Shutdown: release the HTTP client
    logger.info("Shutting down Hindi Image Translator API...")
    await pipeline.pipeline_service.aclose()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="API for extracting Hindi text from images and translating it into English or Bengali.",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(
    pipeline.router,
    prefix="/api/v1/pipeline",
    tags=["Pipeline"]
)

# Browser page
app.mount("/ui", StaticFiles(directory=STATIC_DIR, html=True), name="ui")


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "status": "running",
        "docs": "/docs",
        "ui": "/ui/",
        "pipeline_endpoint": "/api/v1/pipeline/run"
    }


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": settings.VERSION
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)
