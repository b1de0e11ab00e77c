from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Dict, Optional
import asyncio
import logging
import uuid
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from config import APP_NAME, CORS_ORIGINS, REDIS_CACHE_ENABLED
from logging_setup import setup_logging
from planhaus.ai.client import build_text_generator
from planhaus.db import get_engine, init_db
from planhaus.exceptions import (
    AccessDeniedError,
    AIServiceError,
    AIServiceUnavailableError,
    ConflictError,
    NotFoundError,
    RateLimitExceededError,
    StorageError,
)
from planhaus.rate_limit import build_rate_limit_store
import cache

# Ensure logging is configured when the app module is imported (e.g., under uvicorn)
setup_logging()

RATE_LIMIT_SWEEP_INTERVAL_SECONDS = 600

app = FastAPI(title=APP_NAME)

# --- App State ---
# Replace these in tests to inject a fake generator or a fresh counter store.
app.state.text_generator = build_text_generator()
app.state.rate_limit_store = build_rate_limit_store()


async def sweep_rate_limits_periodically():
    while True:
        await asyncio.sleep(RATE_LIMIT_SWEEP_INTERVAL_SECONDS)
        app.state.rate_limit_store.sweep()


@app.on_event("startup")
async def startup_event():
    logging.info("Application startup event.")
    await asyncio.to_thread(init_db)
    app.state.sweeper = asyncio.create_task(sweep_rate_limits_periodically())


@app.on_event("shutdown")
async def shutdown_event():
    logging.info("Application shutdown event.")
    sweeper = getattr(app.state, "sweeper", None)
    if sweeper is not None:
        sweeper.cancel()


# Custom middleware to add request context to logger
class ProcessRequestMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        project_id = request.headers.get("x-project-id") or request.query_params.get("projectId")
        user_id = request.headers.get("x-user-id")

        logging.info(f"request_id={request_id}, method={request.method}, path={request.url.path}, "
                     f"project_id={project_id}, user_id={user_id}")
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response


app.add_middleware(ProcessRequestMiddleware)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Domain error translation ---

def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(AccessDeniedError)
async def access_denied_handler(request: Request, exc: AccessDeniedError):
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN,
                        content={"detail": "You do not have access to this project."})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return _error_response(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(RateLimitExceededError)
async def rate_limit_handler(request: Request, exc: RateLimitExceededError):
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": "Too many AI requests. Please wait before making more requests.",
                 "retryAfter": exc.retry_after},
        headers={"Retry-After": str(exc.retry_after), "X-RateLimit-Remaining": "0"},
    )


@app.exception_handler(AIServiceUnavailableError)
async def ai_unavailable_handler(request: Request, exc: AIServiceUnavailableError):
    return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc)


@app.exception_handler(AIServiceError)
async def ai_error_handler(request: Request, exc: AIServiceError):
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY,
                        content={"detail": "The AI assistant could not answer. Please try again."})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logging.error(f"Storage error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        content={"detail": "A database error occurred. Please try again."})


# --- Health ---

class HealthCheckResult(BaseModel):
    status: str
    message: Optional[str] = None

class OverallHealthStatus(BaseModel):
    status: str
    checks: Dict[str, HealthCheckResult]

@app.get("/health", response_model=OverallHealthStatus, tags=["Health"])
async def health_check():
    application_status = HealthCheckResult(status="ok", message="Application is running")

    database_status, cache_status, ai_status = await asyncio.gather(
        check_database_health(),
        check_cache_health(),
        check_ai_health(),
    )

    all_checks = {
        "application": application_status,
        "database": database_status,
        "cache": cache_status,
        "ai": ai_status,
    }

    overall_status = "ok"
    if any(check.status == "unavailable" for check in all_checks.values()):
        overall_status = "unavailable"
    elif any(check.status == "degraded" for check in all_checks.values()):
        overall_status = "degraded"

    return OverallHealthStatus(status=overall_status, checks=all_checks)

def _ping_database():
    with get_engine().connect() as conn:
        conn.execute(text("SELECT 1"))

async def check_database_health() -> HealthCheckResult:
    logging.debug("Checking database health.")
    try:
        await asyncio.to_thread(_ping_database)
    except SQLAlchemyError as e:
        logging.error(f"Database health check failed: {e}", exc_info=False)
        return HealthCheckResult(status="unavailable", message="Database connection failed")
    return HealthCheckResult(status="ok", message="Database connection successful")

async def check_cache_health() -> HealthCheckResult:
    if not REDIS_CACHE_ENABLED:
        return HealthCheckResult(status="ok", message="Redis cache disabled")
    if cache.redis_client is None:
        return HealthCheckResult(status="degraded", message="Redis cache enabled but not connected")
    return HealthCheckResult(status="ok", message="Redis cache connected")

async def check_ai_health() -> HealthCheckResult:
    if app.state.text_generator is None:
        return HealthCheckResult(status="degraded", message="AI assistant not configured")
    return HealthCheckResult(status="ok", message="AI assistant configured")
