"""SimulationState — data model for a generated cockpit training scenario.

The model service speaks camelCase JSON (``scenarioTitle``,
``maintenanceTasks``, ``techData``). These dataclasses hold the same data
on the Python side; ``to_dict()`` / ``from_dict()`` convert between the two.

``from_dict`` is lenient: missing lists become empty, missing strings
become ``""``, and enum-like fields are kept as given.  The only
normalization applied to model output is the control value coercion in
:mod:`cockpit.coercion`.
"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

CONTROL_TYPES = ("switch", "button", "indicator", "gauge", "knob")
SCENARIO_STATUSES = ("active", "resolved", "critical")
TASK_STATUSES = ("pending", "completed", "skipped")


def _json_value(value: Any) -> Any:
    # NaN and infinities have no JSON spelling; they go out as null.
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


@dataclass
class Control:
    """A single overhead-panel element."""

    id: str
    label: str
    type: str  # switch, button, indicator, gauge, knob
    value: Any  # bool for switch/button, float for gauge, str otherwise
    system: str  # "ELEC", "HYD", "APU", ...
    description: str | None = None
    unit: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.type,
            "value": _json_value(self.value),
            "system": self.system,
        }
        if self.description is not None:
            d["description"] = self.description
        if self.unit is not None:
            d["unit"] = self.unit
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Control:
        return cls(
            id=str(data.get("id", "")),
            label=str(data.get("label", "")),
            type=str(data.get("type", "")),
            value=data.get("value"),
            system=str(data.get("system", "")),
            description=data.get("description"),
            unit=data.get("unit"),
        )


@dataclass
class MaintenanceTask:
    """One AMM procedure step on the work order."""

    id: str
    description: str
    status: str = "pending"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "description": self.description, "status": self.status}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MaintenanceTask:
        return cls(
            id=str(data.get("id", "")),
            description=str(data.get("description", "")),
            status=str(data.get("status", "pending")),
        )


@dataclass
class TechData:
    """System description or AMM reference text (markdown allowed)."""

    title: str = ""
    content: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> TechData:
        if not isinstance(data, dict):
            return cls()
        return cls(title=str(data.get("title", "")), content=str(data.get("content", "")))


@dataclass
class SimulationState:
    """Complete cockpit state as produced by one model call."""

    scenario_title: str
    aircraft: str
    description: str
    controls: list[Control] = field(default_factory=list)
    logs: list[str] = field(default_factory=list)
    status: str = "active"
    feedback: str | None = None
    maintenance_tasks: list[MaintenanceTask] = field(default_factory=list)
    tech_data: TechData = field(default_factory=TechData)

    def get_control(self, control_id: str) -> Control | None:
        for control in self.controls:
            if control.id == control_id:
                return control
        return None

    def get_task(self, task_id: str) -> MaintenanceTask | None:
        for task in self.maintenance_tasks:
            if task.id == task_id:
                return task
        return None

    def systems(self) -> list[str]:
        """Distinct control system tags in first-seen order."""
        seen: list[str] = []
        for control in self.controls:
            if control.system not in seen:
                seen.append(control.system)
        return seen

    def copy(self) -> SimulationState:
        return copy.deepcopy(self)

    def to_dict(self, include_feedback: bool = True) -> dict[str, Any]:
        d: dict[str, Any] = {
            "scenarioTitle": self.scenario_title,
            "aircraft": self.aircraft,
            "description": self.description,
            "controls": [c.to_dict() for c in self.controls],
            "logs": list(self.logs),
            "status": self.status,
            "maintenanceTasks": [t.to_dict() for t in self.maintenance_tasks],
            "techData": self.tech_data.to_dict(),
        }
        if include_feedback and self.feedback is not None:
            d["feedback"] = self.feedback
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SimulationState:
        controls = data.get("controls")
        tasks = data.get("maintenanceTasks")
        logs = data.get("logs")
        return cls(
            scenario_title=str(data.get("scenarioTitle", "")),
            aircraft=str(data.get("aircraft", "")),
            description=str(data.get("description", "")),
            controls=[Control.from_dict(c) for c in controls if isinstance(c, dict)]
            if isinstance(controls, list) else [],
            logs=[str(line) for line in logs] if isinstance(logs, list) else [],
            status=str(data.get("status", "active")),
            feedback=data.get("feedback"),
            maintenance_tasks=[MaintenanceTask.from_dict(t) for t in tasks if isinstance(t, dict)]
            if isinstance(tasks, list) else [],
            tech_data=TechData.from_dict(data.get("techData")),
        )


@dataclass
class HistoryEntry:
    """A previously generated scenario the user can reopen."""

    entry_id: str
    name: str
    timestamp: datetime
    scenario: SimulationState

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.entry_id,
            "name": self.name,
            "timestamp": self.timestamp.isoformat(),
            "aircraft": self.scenario.aircraft,
            "status": self.scenario.status,
        }
