"""SimulationSession — owner of the single active training scenario.

Lifecycle::

    generate() --> active scenario + deep-copied initial state + history entry
    interact() --> optimistic local update, then step call replaces the state
    reset()    --> fresh deep copy of the initial state
    close()    --> no active scenario

A non-blocking lock is the busy flag: while a generation or step call is in
flight every other mutating operation is rejected with SessionBusyError
instead of queueing behind it.  There is no cancellation; a hung model call
keeps the session busy until the HTTP client times out.
"""

from __future__ import annotations

import threading
import time
import uuid
from datetime import datetime
from typing import Any, Callable, Optional

from loguru import logger

from .coercion import coerce_control_value
from .comms.event_bus import EventBus
from .errors import (
    InvalidRequestError,
    NoActiveScenarioError,
    SessionBusyError,
    UnknownControlError,
    UnknownHistoryEntryError,
    UnknownTaskError,
)
from .models import HistoryEntry, MaintenanceTask, SimulationState
from .prompts import describe_action
from .simulator import ScenarioSimulator

INITIAL_ACTION = "Initial State"
RESET_ACTION = "Reset to initial state"


class SimulationSession:
    """In-memory session state with an explicit create / replace / reset lifecycle."""

    def __init__(
        self,
        simulator: ScenarioSimulator,
        event_bus: Optional[EventBus] = None,
        history_limit: int = 20,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._simulator = simulator
        self._event_bus = event_bus
        self._history_limit = history_limit
        self._clock = clock
        self._busy = threading.Lock()
        self._operation: str | None = None

        self.active_scenario: SimulationState | None = None
        self.initial_state: SimulationState | None = None
        self.last_action: str = INITIAL_ACTION
        self._started_at: float | None = None
        self._history: list[HistoryEntry] = []

    # -- Status -------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    @property
    def simulator(self) -> ScenarioSimulator:
        return self._simulator

    @property
    def operation(self) -> str | None:
        """Name of the in-flight operation (``"generating"``, ``"simulating"``, ...)."""
        return self._operation

    @property
    def session_time(self) -> int:
        """Whole seconds since the scenario was generated, restored or reset."""
        if self.active_scenario is None or self._started_at is None:
            return 0
        return int(self._clock() - self._started_at)

    @property
    def history(self) -> list[HistoryEntry]:
        return list(self._history)

    def snapshot(self) -> dict[str, Any]:
        scenario = self.active_scenario
        return {
            "active": scenario is not None,
            "busy": self.busy,
            "operation": self._operation,
            "lastAction": self.last_action,
            "sessionTime": self.session_time,
            "scenario": scenario.to_dict() if scenario is not None else None,
        }

    # -- Generation ---------------------------------------------------------

    def generate(self, topic: str, aircraft: str) -> SimulationState:
        """Generate a new scenario and make it the active one.

        On any failure the session is left without an active scenario.
        """
        self._acquire("generating")
        try:
            if self.active_scenario is not None:
                raise SessionBusyError("Close the active simulation before starting a new one")

            self._publish("scenario_generating", {"topic": topic, "aircraft": aircraft})
            try:
                state = self._simulator.generate_scenario(topic, aircraft)
            except Exception as e:
                self._publish("scenario_failed", {"error": str(e)})
                raise

            self._install(state)
            entry = HistoryEntry(
                entry_id=uuid.uuid4().hex,
                name=state.scenario_title,
                timestamp=datetime.now(),
                scenario=state.copy(),
            )
            self._history.insert(0, entry)
            del self._history[self._history_limit:]

            self._publish("scenario_generated", {"history_id": entry.entry_id, "scenario": state.to_dict()})
            return state
        finally:
            self._release()

    # -- Interaction --------------------------------------------------------

    def interact(self, control_id: str, value: Any) -> SimulationState:
        """Set a control value, then ask the model for the consequence.

        The new value is applied locally before the step call.  If the call
        fails that optimistic state stays active and the error propagates.
        """
        self._acquire("simulating")
        try:
            current = self._require_active()
            control = current.get_control(control_id)
            if control is None:
                raise UnknownControlError(f"No control {control_id!r} in active scenario")

            optimistic = current.copy()
            target = optimistic.get_control(control_id)
            target.value = coerce_control_value({"type": target.type, "value": value})
            self.active_scenario = optimistic

            action = describe_action(control_id, target.value)
            self.last_action = action
            self._publish("step_started", {"action": action, "scenario": optimistic.to_dict()})

            try:
                next_state = self._simulator.simulate_step(optimistic, action)
            except Exception as e:
                self._publish("step_failed", {"action": action, "error": str(e)})
                raise

            self.active_scenario = next_state
            self._publish("step_complete", {"action": action, "scenario": next_state.to_dict()})
            return next_state
        finally:
            self._release()

    def toggle_control(self, control_id: str) -> SimulationState:
        """Flip a switch or press a button."""
        scenario = self._require_active()
        control = scenario.get_control(control_id)
        if control is None:
            raise UnknownControlError(f"No control {control_id!r} in active scenario")
        if control.type == "switch":
            return self.interact(control_id, not control.value)
        if control.type == "button":
            return self.interact(control_id, True)
        raise InvalidRequestError(f"Control {control_id!r} is a {control.type}, not a switch or button")

    def toggle_task(self, task_id: str) -> MaintenanceTask:
        """Mark a work-order task completed, or back to pending.

        Local only: no model call is made.
        """
        self._acquire("tasks")
        try:
            scenario = self._require_active()
            task = scenario.get_task(task_id)
            if task is None:
                raise UnknownTaskError(f"No task {task_id!r} in active scenario")
            task.status = "pending" if task.status == "completed" else "completed"
            logger.debug(f"Task {task_id} -> {task.status}")
            return task
        finally:
            self._release()

    # -- Lifecycle ----------------------------------------------------------

    def reset(self) -> SimulationState:
        """Restore the scenario exactly as it was first generated."""
        self._acquire("reset")
        try:
            self._require_active()
            self.active_scenario = self.initial_state.copy()
            self.last_action = RESET_ACTION
            self._started_at = self._clock()
            self._publish("scenario_reset", {"scenario": self.active_scenario.to_dict()})
            return self.active_scenario
        finally:
            self._release()

    def close(self) -> None:
        self._acquire("close")
        try:
            self.active_scenario = None
            self.initial_state = None
            self.last_action = INITIAL_ACTION
            self._started_at = None
            self._publish("scenario_closed")
        finally:
            self._release()

    def restore(self, entry_id: str) -> SimulationState:
        """Reopen a previously generated scenario from history."""
        self._acquire("restore")
        try:
            for entry in self._history:
                if entry.entry_id == entry_id:
                    state = entry.scenario.copy()
                    self._install(state)
                    self._publish("scenario_restored", {"history_id": entry_id, "scenario": state.to_dict()})
                    return state
            raise UnknownHistoryEntryError(f"No history entry {entry_id!r}")
        finally:
            self._release()

    # -- Internals ----------------------------------------------------------

    def _install(self, state: SimulationState) -> None:
        self.active_scenario = state
        self.initial_state = state.copy()
        self.last_action = INITIAL_ACTION
        self._started_at = self._clock()

    def _require_active(self) -> SimulationState:
        if self.active_scenario is None:
            raise NoActiveScenarioError("No active scenario")
        return self.active_scenario

    def _acquire(self, operation: str) -> None:
        if not self._busy.acquire(blocking=False):
            raise SessionBusyError(f"Session busy ({self._operation or 'working'})")
        self._operation = operation

    def _release(self) -> None:
        self._operation = None
        self._busy.release()

    def _publish(self, event_type: str, data: dict | None = None) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event_type, data)
