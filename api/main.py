"""
Preflight - Pilot Flight Readiness Service
FastAPI Application Entry Point

Run with:

    uvicorn api.main:app --host 0.0.0.0 --port 8000

or `python -m api.main`, which reads host/port from settings.
"""
# Load environment variables from .env file first, before any imports
from dotenv import load_dotenv
load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from api.routes import flight, pilots, weather
from api.services.errors import PreflightError
from config.settings import settings

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Preflight",
    description="Flight readiness scoring from flight, weather, questionnaire and emotion data",
    version="0.1.0",
)

# CORS middleware for the browser front end
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(flight.router)
app.include_router(weather.router)
app.include_router(pilots.router)


@app.exception_handler(PreflightError)
async def preflight_exception_handler(request: Request, exc: PreflightError):
    """Map domain errors to their HTTP status with an {"error": ...} body."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert validation errors to 400 with clear messages."""
    errors = exc.errors()

    # Sanitize errors for JSON serialization (convert bytes to string)
    sanitized_errors = []
    for error in errors:
        sanitized = dict(error)
        if "input" in sanitized and isinstance(sanitized["input"], bytes):
            sanitized["input"] = sanitized["input"].decode("utf-8", errors="replace")
        sanitized.pop("ctx", None)
        sanitized_errors.append(sanitized)

    # Name is the most common missing field; say so plainly
    for error in errors:
        if "name" in [str(part) for part in error.get("loc", [])]:
            return JSONResponse(
                status_code=400,
                content={"error": "Name required", "detail": sanitized_errors}
            )
    return JSONResponse(
        status_code=400,
        content={"error": "Validation error", "detail": sanitized_errors}
    )


@app.get("/health")
async def health_check():
    """Health check endpoint that reports which collaborators are configured."""
    checks = {
        "anthropic_api_key_configured": settings.llm_enabled,
        "aviation_api_key_configured": bool(settings.aviation_api_key),
        "you_api_key_configured": bool(settings.you_api_key),
    }

    all_healthy = all(checks.values())

    return {
        "status": "healthy" if all_healthy else "degraded",
        "service": "preflight",
        "checks": checks,
    }


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host=settings.host, port=settings.port)
