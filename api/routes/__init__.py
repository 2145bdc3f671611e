"""
Preflight API Routes Package.

This package contains all FastAPI route handlers organized by domain.
Use this module to import routers for registration with the FastAPI app.

Example:
    from api.routes import pilots_router, flight_router

    app.include_router(pilots_router)
    app.include_router(flight_router)
"""

from api.routes.flight import router as flight_router
from api.routes.weather import router as weather_router
from api.routes.pilots import router as pilots_router


__all__ = [
    "flight_router",
    "weather_router",
    "pilots_router",
]
