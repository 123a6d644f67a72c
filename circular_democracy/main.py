from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
import sys
import uvicorn

from circular_democracy.config import get_settings
from circular_democracy.exceptions import DatastoreError
from circular_democracy.routers import (
    messages,
    stalwart,
    campaigns,
    politicians,
    reply_templates,
    login,
)

settings = get_settings()

# Configure loguru
logger.remove()
logger.add(
    sys.stderr,
    format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
    level=settings.log_level,
)

app = FastAPI(
    title="Circular Democracy API",
    description="API for processing citizen messages, managing campaigns, and more.",
    version="1.0.0",
    servers=[
        {"url": "https://api.circulardemocracy.org", "description": "Production server"},
        {"url": "http://localhost:8000", "description": "Development server"},
    ],
)

# Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Routers
app.include_router(messages.router)
app.include_router(stalwart.router)
app.include_router(campaigns.router)
app.include_router(politicians.router)
app.include_router(reply_templates.router)
app.include_router(login.router)


@app.exception_handler(DatastoreError)
async def datastore_error_handler(request: Request, exc: DatastoreError):
    logger.error(f"Datastore error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Database error", "details": str(exc)[:200]},
    )


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "service": "main-api",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "1.0.0",
    }


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
        from circular_democracy.database import get_supabase
        db = get_supabase()
        db.table("campaigns").select("id").limit(1).execute()
        health["dependencies"]["supabase"] = "ok"
    except Exception as e:
        health["dependencies"]["supabase"] = f"error: {str(e)[:100]}"
        health["status"] = "degraded"

    # Check embedding API key is set
    health["dependencies"]["embeddings"] = (
        "ok" if settings.openai_api_key else "not configured"
    )

    return health


def run():
    """Console entry point: serve the API with uvicorn."""
    uvicorn.run(
        "circular_democracy.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
