"""Prompt contract for the model service.

Two system instructions define the protocol: one for generating the initial
cockpit state of a fault scenario, one for computing the next state after a
user action.  The user prompts are templates filled from the topic/aircraft
or from the serialized current state.
"""

from __future__ import annotations

import json
import math
from typing import Any

from .models import SimulationState

AIRCRAFT_FLEET = ["B737NG", "B747-8", "B777-300ER", "B787-9"]
DEFAULT_AIRCRAFT = "B737NG"

SUGGESTED_TOPICS = [
    "Engine 1 Fire Loop Fault",
    "Left Hydraulic System Low Pressure",
    "APU Gen Off Bus",
    "Pack Trip Off",
]

GENERATE_SCENARIO_SYSTEM_PROMPT = """You are an expert Boeing Aviation Maintenance Instructor.
Your goal is to generate realistic maintenance training scenarios for Boeing aircraft (737NG, 747-8, 777, 787).
Focus on systems like Electrical (IDG, BUS, STBY POWER), Hydraulics (EMDP, EDP), APU, Bleed Air, and Engine Start.

When asked, generate a JSON object representing the initial state of a cockpit overhead panel for a specific fault.
The controls should be realistic and use Boeing terminology (e.g., "DISCONNECT", "STBY PWR", "L PACK", "GND CALL").

Types:
- 'switch' (boolean: true=ON, false=OFF). IMPORTANT: Switches usually default to false (OFF) or true (AUTO/ON) depending on normal state.
- 'button' (boolean: true=PRESSED)
- 'indicator' (string: 'OFF', 'GREEN', 'AMBER', 'RED', 'WHITE', 'BLUE'). Boeing often uses Amber for caution, Red for warning.
- 'gauge' (number: value)
- 'knob' (string: position)

Ensure the 'logs' array contains the initial EICAS messages corresponding to the fault.
Generate a list of 'maintenanceTasks' that correspond to the AMM (Aircraft Maintenance Manual) procedure to fix the fault.
Generate 'techData' which provides a brief technical description of the system or the specific AMM reference text.
"""

SIMULATE_STEP_SYSTEM_PROMPT = """You are a High-Fidelity Boeing Aircraft System Simulator.
You receive the current state of the cockpit controls and the last user action.
Calculate the new state of the aircraft systems (indicators, gauges, logs) based on real-world Boeing aircraft logic.

Rules:
1. Simulate realistic system latency.
2. Gauges should reflect pressure/temp changes physically (e.g. if pump off, pressure drops to 0 or accumulator pressure).
3. Indicators should follow 'Dark Cockpit' philosophy where applicable.
4. Provide technical feedback in the 'feedback' field describing the physical system response.
5. Do not rename, retype, add or remove existing controls. Keep every control 'id', 'label', 'type' and 'system' exactly as given; only change 'value'.
6. Keep each maintenance task's status as given unless the user action clearly completes or invalidates it.

Return the updated state including controls, logs, and status.
If the user solved the problem (e.g., turned on the pump, reset the generator), update the status to 'resolved'.
If they made it worse, set status to 'critical'.
"""

GENERATION_PROMPT_TEMPLATE = (
    "Create a training scenario for Boeing {aircraft} involving: {topic}.\n"
    "Include at least 10-14 relevant controls (switches, indicators, gauges) across relevant systems.\n"
    "Make sure there is a fault or a task to complete.\n"
    "Response must be valid JSON matching the SimulationState interface."
)

STEP_PROMPT_TEMPLATE = (
    "Current State: {state_json}.\n"
    "User Action: {action}.\n"
    "Update the state based on aircraft logic."
)


def build_generation_prompt(topic: str, aircraft: str) -> str:
    """Format the user prompt for a new scenario."""
    return GENERATION_PROMPT_TEMPLATE.format(aircraft=aircraft, topic=topic.strip())


def build_step_prompt(state: SimulationState, action: str) -> str:
    """Format the user prompt for a step call.

    The previous step's feedback is dropped so the model writes fresh
    feedback for this action rather than echoing the last one.
    """
    state_json = json.dumps(state.to_dict(include_feedback=False), separators=(",", ":"))
    return STEP_PROMPT_TEMPLATE.format(state_json=state_json, action=action)


def format_value(value: Any) -> str:
    """Render a control value the way the browser would print it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


def describe_action(control_id: str, value: Any) -> str:
    """Human-readable action description sent with a step call."""
    return f"User toggled {control_id} to {format_value(value)}"
