"""Reply parsing and control value coercion.

The model returns every control ``value`` as a string.  After each call the
reply goes through one normalization pass:

- switch / button  -> bool   (equal to ``"true"``, or already ``True``)
- gauge            -> float  (JavaScript ``Number()`` rules)
- anything else    -> unchanged

Malformed gauge text becomes ``nan`` in lenient mode, and ``"Infinity"`` or
overflowing text becomes ``inf``.  Strict mode raises :class:`CoercionError`
for any gauge that is not a finite number.  Nothing else in the reply is
validated.  The pass is idempotent.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

from loguru import logger

from .errors import CoercionError, ModelReplyError
from .models import SimulationState

BOOLEAN_TYPES = ("switch", "button")
NUMERIC_TYPES = ("gauge",)

_RADIX_RE = re.compile(r"^[+-]?0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")


def parse_reply(raw: str) -> dict[str, Any]:
    """Parse the model's reply text into a JSON object.

    Handles common LLM quirks:
    - JSON wrapped in markdown code blocks
    - Prose before or after the object

    Raises ModelReplyError when no JSON object can be recovered.
    """
    text = (raw or "").strip()
    if not text:
        # An empty reply parses as an empty object.
        return {}

    md_match = re.search(r"```(?:json)?\s*\n?(.*?)\n?\s*```", text, re.DOTALL)
    if md_match:
        text = md_match.group(1).strip()

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        parsed = None
        brace_match = re.search(r"\{.*\}", text, re.DOTALL)
        if brace_match:
            try:
                parsed = json.loads(brace_match.group())
            except json.JSONDecodeError:
                parsed = None

    if not isinstance(parsed, dict):
        raise ModelReplyError(f"Model reply is not a JSON object: {text[:120]!r}")
    return parsed


def to_number(value: Any) -> float:
    """Numeric conversion following JavaScript ``Number()``.

    Returns ``nan`` for anything that is not a number.
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return math.nan
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _RADIX_RE.match(text):
            if text[0] in "+-":
                return math.nan  # signed hex, octal and binary literals are NaN
            return float(int(text, 0))
        if text in ("Infinity", "+Infinity"):
            return math.inf
        if text == "-Infinity":
            return -math.inf
        if "_" in text or text.lstrip("+-").lower().startswith(("inf", "nan")):
            return math.nan
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def to_boolean(value: Any) -> bool:
    return value is True or value == "true"


def coerce_control_value(control: dict[str, Any], strict: bool = False) -> Any:
    """Return the normalized value for one raw control dict."""
    ctype = control.get("type")
    value = control.get("value")
    if ctype in BOOLEAN_TYPES:
        return to_boolean(value)
    if ctype in NUMERIC_TYPES:
        number = to_number(value)
        if strict and not math.isfinite(number):
            raise CoercionError(str(control.get("id", "")), value)
        return number
    return value


def coerce_controls(raw: dict[str, Any], strict: bool = False) -> dict[str, Any]:
    """Return a copy of ``raw`` with every control value normalized.

    A ``controls`` field that is not a list is replaced by an empty list.
    """
    coerced = dict(raw)
    controls = raw.get("controls")
    if not isinstance(controls, list):
        if controls is not None:
            logger.warning(f"Model reply 'controls' is {type(controls).__name__}, not a list")
        coerced["controls"] = []
        return coerced

    out = []
    for control in controls:
        if not isinstance(control, dict):
            out.append(control)
            continue
        out.append({**control, "value": coerce_control_value(control, strict=strict)})
    coerced["controls"] = out
    return coerced


def coerce_state(raw: dict[str, Any], strict: bool = False) -> SimulationState:
    """Normalize a parsed reply and build the SimulationState from it."""
    return SimulationState.from_dict(coerce_controls(raw, strict=strict))


def state_from_reply(text: str, strict: bool = False) -> SimulationState:
    """Parse + coerce in one step."""
    return coerce_state(parse_reply(text), strict=strict)
