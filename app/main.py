"""
Main application entry point - FastAPI app instance and configuration.
Run with: uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.routers import activity, ai, auth, batch, users

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# ---------------------------------------------------------------------------
# CREATE FASTAPI APPLICATION
# ---------------------------------------------------------------------------
# Swagger UI at /docs, ReDoc at /redoc
app = FastAPI(
    title=settings.APP_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ---------------------------------------------------------------------------
# CORS MIDDLEWARE
# ---------------------------------------------------------------------------
# Self-hosted: the web client is usually served from the same host, but
# phone scanners and dev servers call from other origins.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# ERROR SHAPE
# ---------------------------------------------------------------------------
# Request body errors use the same {"error", "message"} detail as the
# route-level errors, so clients handle one shape.
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first.get('msg', 'Invalid request')}" if field else first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": {"error": "VALIDATION_ERROR", "message": message}},
    )


# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# auth.router: /auth/register, /auth/login
# users.router: /users/me
# ai.router: /ai/command, /ai/execute, /ai/query, /ai/test, /ai/settings
# batch.router: /batch
# activity.router: /locations/{id}/activity
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(ai.router)
app.include_router(batch.router)
app.include_router(activity.router)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
def health_check():
    """
    Liveness check for container health checks.

    Does NOT check database connectivity.

    Returns:
        {"status": "ok"}
    """
    return {"status": "ok"}
