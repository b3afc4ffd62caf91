"""
Garbler Microservice
Main application entry point

Serves character-level word generation: train a statistics library from
text, then ask for recommendations, end-of-word factors or whole words.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from garbler.config import settings
from garbler.utils.logger import setup_logger

# Setup logging
logger = setup_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for service initialization"""
    logger.info("[BOOT] Starting Garbler service...")
    logger.info(
        f"[BOOT] Case sensitive: {settings.CASE_SENSITIVE}, "
        f"ending length: {settings.ENDING_LENGTH}, "
        f"caches: {settings.PRIMARY_CACHE_SIZE}/{settings.SECONDARY_CACHE_SIZE}"
    )
    logger.info("[BOOT] Garbler service ready!")
    yield
    logger.info("[SHUTDOWN] Dropping trained models...")
    garbler_router.MODEL_CACHE.clear()
    logger.info("[SHUTDOWN] Garbler service stopped")


# Create FastAPI app
app = FastAPI(
    title="Garbler Service",
    description="Character-level statistics for procedural word generation",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"[ERR] Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "ok": False,
            "error": {
                "code": "GARBLER_SERVICE_ERROR",
                "message": "Internal server error occurred",
                "details": {"type": type(exc).__name__},
            },
        },
    )


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "ok": True,
        "data": {
            "status": "healthy",
            "models": sorted(garbler_router.MODEL_CACHE),
        },
    }


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "garbler": "/garbler/*",
        },
    }


from garbler.api.routers import garbler_router

app.include_router(garbler_router.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "garbler.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
