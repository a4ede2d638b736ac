from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
import sys

from app.config import get_settings
from app.errors import AppError
from app.routers import (
    strategy_calls,
    client_actions,
    listings,
)
from app.middleware.rate_limiter import RateLimitMiddleware

settings = get_settings()

# Configure loguru
logger.remove()
logger.add(
    sys.stderr,
    format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
    level=settings.log_level,
)

app = FastAPI(
    title="Apply Bureau API",
    description="Client concierge backend: strategy calls, account unlocks and dashboard listings",
    version="1.0.0",
)

# Middleware
app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.app_base_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(strategy_calls.router)
app.include_router(client_actions.router)
app.include_router(listings.router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Render domain errors as {success, error, code, details, timestamp, path, status}."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{exc.code} on {request.method} {request.url.path}: {exc.message} {exc.details}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.message,
            "code": exc.code,
            "details": exc.details,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
            "status": exc.status_code,
        },
    )


@app.get("/health")
async def health_check():
    return {"status": "ok", "version": "1.0.0"}


@app.get("/health/detailed")
async def detailed_health_check():
    """Detailed health check with dependency status."""
    health = {
        "status": "ok",
        "version": "1.0.0",
        "dependencies": {},
    }

    # Check Supabase
    try:
        from app.database import get_supabase, run_query
        db = get_supabase()
        await run_query(db.table("registered_users").select("id").limit(1), action="health")
        health["dependencies"]["supabase"] = "ok"
    except Exception as e:
        health["dependencies"]["supabase"] = f"error: {str(e)[:100]}"
        health["status"] = "degraded"

    # Check Redis
    try:
        import redis
        r = redis.from_url(settings.redis_url)
        r.ping()
        health["dependencies"]["redis"] = "ok"
    except Exception as e:
        health["dependencies"]["redis"] = f"error: {str(e)[:100]}"
        health["status"] = "degraded"

    # Check Resend API key is set
    health["dependencies"]["resend"] = (
        "ok" if settings.resend_api_key else "not configured"
    )

    return health
