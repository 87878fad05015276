"""Panel view model — what the browser draws for the active scenario.

Controls are grouped by system into overhead-panel clusters, each control
gets a widget description for its type, and the EFB side panel is split
into monitor / work order / tech data tabs.  No simulation logic lives
here; everything is derived from the current SimulationState.
"""

from __future__ import annotations

import math
from typing import Any

from .models import Control, SimulationState
from .prompts import format_value

TABS = ("monitor", "tasks", "tech")

# Needle sweep: -135 deg at 0%, +135 deg at 100%
GAUGE_SWEEP_START = -135.0
GAUGE_DEGREES_PER_PCT = 2.7
GAUGE_DEFAULT_MAX = 100.0
GAUGE_MAX_BY_UNIT = {
    "PSI": 4000.0,
    "C": 1000.0,
}

INDICATOR_STYLES = {
    "OFF": "off",
    "GREEN": "green",
    "BLUE": "blue",
    "AMBER": "amber",
    "WHITE": "white",
}
INDICATOR_WARNING_STYLE = "red"

LOG_WARNING_WORDS = ("FAIL", "FIRE", "FAULT")
LOG_CAUTION_WORDS = ("OFF",)

NORMAL_STATUS_TEXT = "SYSTEM STATUS: NORMAL"
AWAITING_FEEDBACK_TEXT = "Awaiting system response..."
NO_TASKS_TEXT = "No specific tasks generated for this scenario."
TECH_LOADING_TEXT = "Technical data loading..."


def format_session_time(seconds: int) -> str:
    """``MM:SS`` clock for the header."""
    m, s = divmod(max(0, int(seconds)), 60)
    return f"{m:02d}:{s:02d}"


def classify_log(line: str) -> str:
    """EICAS colour class: warning (red), caution (amber) or normal (green)."""
    if any(word in line for word in LOG_WARNING_WORDS):
        return "warning"
    if any(word in line for word in LOG_CAUTION_WORDS):
        return "caution"
    return "normal"


def gauge_geometry(value: Any, unit: str | None) -> dict[str, Any]:
    """Scale, needle angle and readout for a gauge widget."""
    scale_max = GAUGE_MAX_BY_UNIT.get(unit or "", GAUGE_DEFAULT_MAX)
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan

    if math.isnan(number):
        return {
            "max": scale_max,
            "percent": 0.0,
            "rotation": GAUGE_SWEEP_START,
            "readout": "---",
            "valid": False,
        }

    percent = min(100.0, max(0.0, number / scale_max * 100.0))
    return {
        "max": scale_max,
        "percent": percent,
        "rotation": GAUGE_SWEEP_START + percent * GAUGE_DEGREES_PER_PCT,
        # Round half up
        "readout": str(math.floor(number + 0.5)) if math.isfinite(number) else format_value(number),
        "valid": True,
    }


def render_control(control: Control) -> dict[str, Any]:
    """Widget description for one control."""
    widget: dict[str, Any] = {
        "id": control.id,
        "label": control.label,
        "type": control.type,
        "unit": control.unit,
        "description": control.description,
        "interactive": control.type in ("switch", "button"),
    }
    if control.type == "switch":
        on = bool(control.value)
        widget.update(on=on, caption="ON" if on else "OFF")
    elif control.type == "button":
        widget.update(pressed=bool(control.value), caption="PUSH")
    elif control.type == "indicator":
        text = str(control.value) if control.value is not None else "OFF"
        widget.update(
            text=text,
            style=INDICATOR_STYLES.get(text, INDICATOR_WARNING_STYLE),
            lit=text != "OFF",
        )
    elif control.type == "gauge":
        widget.update(gauge_geometry(control.value, control.unit))
    else:
        widget.update(position=control.value)
    return widget


def build_panels(state: SimulationState) -> list[dict[str, Any]]:
    """Group controls into one panel per system, in first-seen order."""
    return [
        {
            "system": system,
            "controls": [render_control(c) for c in state.controls if c.system == system],
        }
        for system in state.systems()
    ]


def build_monitor_tab(state: SimulationState, last_action: str, computing: bool) -> dict[str, Any]:
    lines = [{"text": f"> {line}", "level": classify_log(line)} for line in state.logs]
    return {
        "title": "EICAS DISPLAY",
        "logs": lines,
        "empty_text": NORMAL_STATUS_TEXT if not lines else None,
        "computing": computing,
        "feedback": state.feedback or None,
        "feedback_placeholder": AWAITING_FEEDBACK_TEXT,
        "last_action": last_action,
    }


def build_tasks_tab(state: SimulationState) -> dict[str, Any]:
    tasks = [
        {
            "id": t.id,
            "description": t.description,
            "status": t.status,
            "completed": t.status == "completed",
            "ref": f"Ref: {t.id}",
        }
        for t in state.maintenance_tasks
    ]
    return {
        "title": "Maintenance Work Order",
        "tasks": tasks,
        "empty_text": NO_TASKS_TEXT if not tasks else None,
    }


def build_tech_tab(state: SimulationState) -> dict[str, Any]:
    return {
        "title": "AMM Reference",
        "subtitle": f"BOEING {state.aircraft} • REV 12",
        "heading": state.tech_data.title,
        "content": state.tech_data.content or TECH_LOADING_TEXT,
    }


def build_view(
    state: SimulationState,
    tab: str = "monitor",
    last_action: str = "Initial State",
    session_time: int = 0,
    computing: bool = False,
) -> dict[str, Any]:
    """Complete dashboard view for the active scenario and selected tab."""
    if tab not in TABS:
        raise ValueError(f"Unknown tab {tab!r} (expected one of {', '.join(TABS)})")

    if tab == "monitor":
        content = build_monitor_tab(state, last_action, computing)
    elif tab == "tasks":
        content = build_tasks_tab(state)
    else:
        content = build_tech_tab(state)

    return {
        "header": {
            "title": f"{state.aircraft} | {state.scenario_title}",
            "clock": format_session_time(session_time),
            "status": state.status,
            "computing": computing,
        },
        "panels": build_panels(state),
        "tab": tab,
        "tabs": list(TABS),
        "content": content,
    }
