"""SHAJJU SIMULATION - Overhead Panel Maintenance Trainer.

Main FastAPI application.
"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from app.config import settings
from app.routers import guide_router, simulation_router, ws_router
from app.routers.ws import start_session_event_bridge
from cockpit.client import create_client
from cockpit.comms.event_bus import EventBus
from cockpit.session import SimulationSession
from cockpit.simulator import ScenarioSimulator

VERSION = "2.1.0"


def create_session(client=None, event_bus: EventBus | None = None) -> SimulationSession:
    """Build the session from settings, or around an injected model client."""
    if client is None:
        client = create_client(settings)
    simulator = ScenarioSimulator(client, strict=settings.strict_coercion)
    return SimulationSession(
        simulator,
        event_bus=event_bus,
        history_limit=settings.history_limit,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("=" * 60)
    logger.info(f"  {settings.app_name} v{VERSION} - INITIALIZING")
    logger.info("=" * 60)

    event_bus = getattr(app.state, "event_bus", None) or EventBus()
    app.state.event_bus = event_bus

    if getattr(app.state, "session", None) is None:
        try:
            app.state.session = create_session(event_bus=event_bus)
            logger.info(f"Model backend: {settings.model_backend}")
        except Exception as e:
            logger.warning(f"Model client failed to initialize: {e}")
            app.state.session = None

    bridge_stop = start_session_event_bridge(event_bus, asyncio.get_running_loop())
    logger.info("Session event bridge started")

    logger.info("=" * 60)
    logger.info(f"  {settings.app_name} ONLINE")
    logger.info("=" * 60)

    yield

    bridge_stop.set()
    logger.info(f"{settings.app_name} shutting down...")


# Create FastAPI app
app = FastAPI(
    title="SHAJJU SIMULATION",
    description="Overhead Panel Maintenance Trainer",
    version=VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(simulation_router)
app.include_router(guide_router)
app.include_router(ws_router)

# Static files
frontend_path = Path(__file__).parent.parent.parent / "frontend"
if frontend_path.exists():
    app.mount("/static", StaticFiles(directory=frontend_path), name="static")


@app.middleware("http")
async def no_cache_static(request: Request, call_next):
    """Disable caching for static CSS/JS during development."""
    response = await call_next(request)
    if request.url.path.startswith("/static/"):
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    return response


@app.get("/", response_class=HTMLResponse)
async def root():
    """Serve the trainer UI."""
    index_path = frontend_path / "index.html"
    if index_path.exists():
        return FileResponse(index_path)
    return HTMLResponse(
        content=f"""
        <html>
            <head><title>{settings.app_name}</title></head>
            <body style="background: #09090b; color: #22d3ee; font-family: monospace;">
                <h1>{settings.app_name} v{VERSION}</h1>
                <p>Frontend not found. Please check installation.</p>
            </body>
        </html>
        """
    )


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "operational",
        "version": VERSION,
        "system": settings.app_name,
    }


@app.get("/api/status")
async def status(request: Request):
    """System status endpoint."""
    session = getattr(request.app.state, "session", None)
    models = []
    if session is not None:
        models = await run_in_threadpool(session.simulator.client.list_models)
    return {
        "name": settings.app_name,
        "version": VERSION,
        "model_backend": settings.model_backend,
        "models": models,
        "session": "ready" if session is not None else "unavailable",
        "active_scenario": session is not None and session.active_scenario is not None,
        "busy": session.busy if session is not None else False,
    }


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)
