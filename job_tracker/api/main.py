"""
Job Tracker API

FastAPI backend for the job application tracker.
Provides REST endpoints for applications, companies, interviews,
documents, dashboard aggregates and authentication.
"""
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from job_tracker import __version__
from job_tracker.api.routers import applications, auth, companies, dashboard, documents, interviews
from job_tracker.config import config
from job_tracker.core.errors import TrackerError
from job_tracker.database.db import init_database, utc_now
from job_tracker.services.documents import upload_dir


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown"""
    logger.info("[API] Starting Job Tracker API...")
    init_database()
    upload_dir()

    yield

    logger.info("[API] Job Tracker API stopped")


app = FastAPI(
    title="Job Tracker",
    description="Job application tracking API",
    version=__version__,
    lifespan=lifespan
)

# CORS - allow the web client
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"[API] {request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f}ms)")
    return response


# ============================================
# ERROR HANDLERS
# ============================================

@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError):
    if exc.status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        # Drop the leading "body" / "query" / "path" segment
        location = [str(part) for part in error.get("loc", ())[1:]]
        errors.append({"field": ".".join(location), "message": error.get("msg", "Invalid value")})
    return JSONResponse(status_code=400, content={"message": "Validation failed", "errors": errors})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"[API] Unhandled error on {request.method} {request.url.path}: {exc}")
    content = {"message": "Internal server error"}
    if config.server.is_development:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


# Include routers
app.include_router(auth.router)
app.include_router(applications.router)
app.include_router(companies.router)
app.include_router(interviews.router)
app.include_router(documents.router)
app.include_router(dashboard.router)

# Uploaded documents
app.mount(
    documents.document_service.UPLOAD_URL_PREFIX,
    StaticFiles(directory=config.uploads.upload_dir, check_dir=False),
    name="uploads",
)


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {
        "status": "OK",
        "timestamp": utc_now().isoformat(),
        "environment": config.server.environment,
        "version": __version__,
    }
