"""Simulation API — generate a scenario, interact with controls, reset, close."""

from __future__ import annotations

from typing import Optional, Union

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from loguru import logger
from pydantic import BaseModel, Field

from app.config import settings
from cockpit.errors import (
    CockpitError,
    InvalidRequestError,
    ModelReplyError,
    ModelServiceError,
    NoActiveScenarioError,
    SessionBusyError,
    UnknownControlError,
    UnknownHistoryEntryError,
    UnknownTaskError,
)
from cockpit.panels import TABS, build_view
from cockpit.prompts import AIRCRAFT_FLEET, SUGGESTED_TOPICS

router = APIRouter(prefix="/api/sim", tags=["simulation"])

GENERATION_FAILED_MESSAGE = "Failed to initialize simulation. Please try again."


class GenerateRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    aircraft: Optional[str] = None  # settings.default_aircraft when omitted


class ControlValue(BaseModel):
    value: Union[bool, float, str]


def _get_session(request: Request):
    """Retrieve the SimulationSession from app state."""
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(503, "Simulation session not available")
    return session


def _to_http(e: CockpitError) -> HTTPException:
    """Map trainer errors onto HTTP status codes."""
    if isinstance(e, SessionBusyError):
        return HTTPException(409, str(e))
    if isinstance(e, (NoActiveScenarioError, UnknownControlError, UnknownTaskError, UnknownHistoryEntryError)):
        return HTTPException(404, str(e))
    if isinstance(e, InvalidRequestError):
        return HTTPException(400, str(e))
    if isinstance(e, (ModelServiceError, ModelReplyError)):
        return HTTPException(502, str(e))
    return HTTPException(500, str(e))


@router.get("/options")
async def get_options():
    """Aircraft fleet and suggested fault topics for the input area."""
    return {
        "aircraft": AIRCRAFT_FLEET,
        "default_aircraft": settings.default_aircraft,
        "suggestions": SUGGESTED_TOPICS,
        "tabs": list(TABS),
    }


@router.get("/state")
async def get_state(request: Request):
    """Current session snapshot (scenario is null when none is active)."""
    return _get_session(request).snapshot()


@router.post("/generate")
async def generate(body: GenerateRequest, request: Request):
    """Generate a new scenario from a fault topic and aircraft type."""
    session = _get_session(request)
    aircraft = body.aircraft or settings.default_aircraft
    try:
        await run_in_threadpool(session.generate, body.topic, aircraft)
    except (InvalidRequestError, SessionBusyError) as e:
        raise _to_http(e)
    except Exception as e:
        logger.error(f"Failed to generate: {e}")
        raise HTTPException(502, GENERATION_FAILED_MESSAGE)
    return session.snapshot()


@router.post("/controls/{control_id}")
async def set_control(control_id: str, body: ControlValue, request: Request):
    """Set a control value and run one simulation step."""
    session = _get_session(request)
    try:
        await run_in_threadpool(session.interact, control_id, body.value)
    except CockpitError as e:
        raise _to_http(e)
    return session.snapshot()


@router.post("/controls/{control_id}/toggle")
async def toggle_control(control_id: str, request: Request):
    """Flip a switch or press a button, then run one simulation step."""
    session = _get_session(request)
    try:
        await run_in_threadpool(session.toggle_control, control_id)
    except CockpitError as e:
        raise _to_http(e)
    return session.snapshot()


@router.post("/tasks/{task_id}/toggle")
async def toggle_task(task_id: str, request: Request):
    """Tick or untick a work-order task (no model call)."""
    session = _get_session(request)
    try:
        task = session.toggle_task(task_id)
    except CockpitError as e:
        raise _to_http(e)
    return task.to_dict()


@router.post("/reset")
async def reset(request: Request):
    """Restore the scenario to its initial generated state."""
    session = _get_session(request)
    try:
        session.reset()
    except CockpitError as e:
        raise _to_http(e)
    return session.snapshot()


@router.post("/close")
async def close(request: Request):
    """Close the active simulation."""
    session = _get_session(request)
    try:
        session.close()
    except CockpitError as e:
        raise _to_http(e)
    return {"status": "closed"}


@router.get("/history")
async def list_history(request: Request):
    """Previously generated scenarios, newest first."""
    return [entry.to_dict() for entry in _get_session(request).history]


@router.post("/history/{entry_id}/restore")
async def restore_history(entry_id: str, request: Request):
    """Reopen a scenario from history as the active simulation."""
    session = _get_session(request)
    try:
        session.restore(entry_id)
    except CockpitError as e:
        raise _to_http(e)
    return session.snapshot()


@router.get("/view")
async def get_view(request: Request, tab: str = "monitor"):
    """Rendered dashboard: panels grouped by system plus the selected EFB tab."""
    session = _get_session(request)
    if tab not in TABS:
        raise HTTPException(400, f"Unknown tab: {tab}")
    scenario = session.active_scenario
    if scenario is None:
        raise HTTPException(404, "No active scenario")
    return build_view(
        scenario,
        tab=tab,
        last_action=session.last_action,
        session_time=session.session_time,
        computing=session.operation == "simulating",
    )
