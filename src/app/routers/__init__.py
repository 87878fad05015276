"""API routers for the cockpit trainer."""

from app.routers.guide import router as guide_router
from app.routers.simulation import router as simulation_router
from app.routers.ws import router as ws_router

__all__ = ["guide_router", "simulation_router", "ws_router"]
