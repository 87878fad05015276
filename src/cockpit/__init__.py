"""Cockpit trainer core — state model, model contract, coercion, session."""
from .client import GeminiClient, ModelClient, OllamaClient, create_client
from .coercion import coerce_state, parse_reply, state_from_reply
from .comms.event_bus import EventBus
from .errors import (
    CockpitError,
    CoercionError,
    InvalidRequestError,
    ModelReplyError,
    ModelServiceError,
    NoActiveScenarioError,
    SessionBusyError,
    UnknownControlError,
    UnknownHistoryEntryError,
    UnknownTaskError,
)
from .models import Control, HistoryEntry, MaintenanceTask, SimulationState, TechData
from .session import SimulationSession
from .simulator import ScenarioSimulator

__all__ = [
    "CockpitError",
    "CoercionError",
    "Control",
    "EventBus",
    "GeminiClient",
    "HistoryEntry",
    "InvalidRequestError",
    "MaintenanceTask",
    "ModelClient",
    "ModelReplyError",
    "ModelServiceError",
    "NoActiveScenarioError",
    "OllamaClient",
    "ScenarioSimulator",
    "SessionBusyError",
    "SimulationSession",
    "SimulationState",
    "TechData",
    "UnknownControlError",
    "UnknownHistoryEntryError",
    "UnknownTaskError",
    "coerce_state",
    "create_client",
    "parse_reply",
    "state_from_reply",
]
