"""Response schemas sent to the model service with every request.

Both schemas describe a SimulationState in its camelCase wire shape.  Control
values travel as strings in both directions to keep the schema flat; the
reply is coerced back to typed values by :mod:`cockpit.coercion`.

The generation schema marks the scenario fields as required.  The step schema
adds ``feedback`` and leaves everything optional, since the model is only
asked to update what changed.
"""

from __future__ import annotations

import copy
from typing import Any

from .models import CONTROL_TYPES, SCENARIO_STATUSES, TASK_STATUSES

_STRING: dict[str, Any] = {"type": "string"}

_TASK = {
    "type": "object",
    "properties": {
        "id": _STRING,
        "description": _STRING,
        "status": {"type": "string", "enum": list(TASK_STATUSES)},
    },
}

_TECH_DATA = {
    "type": "object",
    "properties": {
        "title": _STRING,
        "content": _STRING,
    },
}


def _control_schema(typed: bool) -> dict[str, Any]:
    control: dict[str, Any] = {
        "type": "object",
        "properties": {
            "id": _STRING,
            "label": _STRING,
            "type": {"type": "string", "enum": list(CONTROL_TYPES)} if typed else _STRING,
            "value": _STRING,
            "system": _STRING,
            "description": _STRING,
            "unit": _STRING,
        },
    }
    if typed:
        control["required"] = ["id", "label", "type", "value", "system"]
    return control


def _state_schema(step: bool) -> dict[str, Any]:
    properties: dict[str, Any] = {
        "scenarioTitle": _STRING,
        "aircraft": _STRING,
        "description": _STRING,
        "status": {"type": "string", "enum": list(SCENARIO_STATUSES)},
    }
    if step:
        properties["feedback"] = _STRING
    properties.update({
        "logs": {"type": "array", "items": _STRING},
        "maintenanceTasks": {"type": "array", "items": _TASK},
        "techData": _TECH_DATA,
        "controls": {"type": "array", "items": _control_schema(typed=not step)},
    })
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if not step:
        schema["required"] = [
            "scenarioTitle", "aircraft", "description", "controls",
            "status", "logs", "maintenanceTasks", "techData",
        ]
    return copy.deepcopy(schema)


GENERATION_SCHEMA: dict[str, Any] = _state_schema(step=False)
STEP_SCHEMA: dict[str, Any] = _state_schema(step=True)


def to_gemini_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Rewrite JSON-schema type names into Gemini's upper-case ``Type`` enum."""
    out: dict[str, Any] = {}
    for key, value in schema.items():
        if key == "type" and isinstance(value, str):
            out[key] = value.upper()
        elif isinstance(value, dict):
            out[key] = to_gemini_schema(value)
        else:
            out[key] = copy.deepcopy(value)
    return out
