import os
import subprocess
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.config.logger import app_logger, log_request_start, log_request_end, log_request_error
from app.config.settings import settings
from app.api.deps import get_provider, get_record_store
from app.api.auth.router import router as auth_router
from app.api.generations.router import router as generations_router
from app.api.persona.router import router as persona_router
from app.db.base import RecordStore
from app.services.openai_provider import GenerationProvider
from app.utils.errors import StudioError, StorageError
from app.utils.responses import error_response


_git_sha_cache: Optional[str] = None


def get_git_sha() -> str:
    """Get the current Git commit SHA (cached to avoid blocking)."""
    global _git_sha_cache
    if _git_sha_cache is not None:
        return _git_sha_cache

    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            timeout=1.0
        )
        _git_sha_cache = result.stdout.strip()[:8]
        return _git_sha_cache
    except (subprocess.CalledProcessError, FileNotFoundError, subprocess.TimeoutExpired):
        _git_sha_cache = "local-dev"
        return _git_sha_cache


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the record store on startup and release it on shutdown."""
    app_logger.info(f"{settings.APP_NAME} starting up")
    app_logger.info(f"Logging system active - logs will be saved to {settings.LOG_DIR}/ directory")

    store = get_record_store()
    try:
        await store.init()
        app_logger.info(f"Record store ready ({store.backend_name})")
    except StorageError as e:
        app_logger.warning(f"Record store initialization failed: {e.message}")
        app_logger.warning("Studio endpoints will return 503 until storage is reachable.")

    app_logger.info("Application initialized successfully")

    yield

    app_logger.info(f"{settings.APP_NAME} shutting down")
    await store.close()
    app_logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    servers=[
        {
            "url": "http://localhost:8000",
            "description": "Development server",
        },
    ],
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], # Add PRODUCTION DOMAINS HERE
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing information using Loguru."""
    start_time = datetime.now()

    log_request_start(request)

    try:
        response = await call_next(request)
        process_time = (datetime.now() - start_time).total_seconds()
        log_request_end(request, response.status_code, process_time)
        return response

    except Exception as e:
        process_time = (datetime.now() - start_time).total_seconds()
        log_request_error(request, e, process_time)
        raise


@app.exception_handler(StudioError)
async def studio_error_handler(request: Request, exc: StudioError):
    """Translate domain errors into the standard error envelope."""
    if exc.status_code >= 500:
        app_logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    else:
        app_logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    body = error_response(exc.error, detail=exc.detail or exc.message)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    app_logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    body = error_response("Internal server error", detail="An unexpected error occurred.")
    return JSONResponse(status_code=500, content=body.model_dump(mode="json"))


@app.get("/", tags=["health"])
async def root():
    """Root endpoint with basic API information."""
    app_logger.info("Root endpoint accessed")
    return {
        "message": f"Welcome to {settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "status": "operational",
        "storage": settings.STORAGE_BACKEND,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/status", tags=["health"])
async def status():
    """Status endpoint with build information for CI/CD monitoring."""
    app_logger.info("Status endpoint accessed")

    # CI-injected build information
    build_number = os.getenv("BUILD_NUMBER", "local-dev")
    git_sha = os.getenv("GIT_SHA", os.getenv("GITHUB_SHA", get_git_sha()))
    environment = os.getenv("ENVIRONMENT", os.getenv("ENV", "development"))

    return {
        "status": "ok",
        "build": build_number,
        "sha": git_sha,
        "env": environment
    }


@app.get("/health/db", tags=["health"])
async def health_db(store: RecordStore = Depends(get_record_store)):
    """Record store health endpoint."""
    is_ok, message = await store.ping()
    if not is_ok:
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "db": "unavailable", "message": message}
        )
    return {"status": "ok", "db": "available", "backend": store.backend_name, "message": message}


@app.get("/health/provider", tags=["health"])
async def health_provider(provider: GenerationProvider = Depends(get_provider)):
    """Content provider health endpoint."""
    is_ok, message = await run_in_threadpool(provider.check_connection)
    if not is_ok:
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "provider": "unavailable", "message": message}
        )
    return {"status": "ok", "provider": "available", "message": message}


if settings.BINARY_STORE_BACKEND.strip().lower() == "local":
    upload_dir = Path(settings.LOCAL_UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(settings.UPLOADS_URL_PREFIX, StaticFiles(directory=upload_dir), name="uploads")


app.include_router(auth_router)
app.include_router(generations_router)
app.include_router(persona_router)


if __name__ == "__main__":
    import uvicorn

    app_logger.info(f"Starting {settings.APP_NAME} server")

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_config=None  # Use our custom logger
    )
