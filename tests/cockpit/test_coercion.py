"""Unit tests for cockpit.coercion — reply parsing and control value normalization.

Tests:
  - parse_reply: plain JSON, markdown fences, prose around the object, empty text
  - to_number: JavaScript Number() behavior for the strings a model sends
  - coerce_controls: switch/button -> bool, gauge -> float, others untouched
  - strict mode raises CoercionError for unreadable gauges
  - coercion is idempotent
"""
from __future__ import annotations

import json
import math

import pytest

from cockpit.coercion import (
    coerce_control_value,
    coerce_controls,
    coerce_state,
    parse_reply,
    state_from_reply,
    to_boolean,
    to_number,
)
from cockpit.errors import CoercionError, ModelReplyError
from cockpit.models import SimulationState
from tests.lib.fake_model import idg_scenario_reply


@pytest.mark.unit
class TestParseReply:
    """parse_reply() — recover the JSON object from model text."""

    def test_plain_json(self):
        assert parse_reply('{"status": "active"}') == {"status": "active"}

    def test_markdown_fenced_json(self):
        text = '```json\n{"status": "resolved"}\n```'
        assert parse_reply(text) == {"status": "resolved"}

    def test_fence_without_language(self):
        assert parse_reply('```\n{"a": 1}\n```') == {"a": 1}

    def test_prose_around_object(self):
        text = 'Here is the updated state: {"status": "critical"} Hope this helps.'
        assert parse_reply(text) == {"status": "critical"}

    def test_empty_text_is_empty_object(self):
        assert parse_reply("") == {}
        assert parse_reply("   ") == {}

    def test_none_is_empty_object(self):
        assert parse_reply(None) == {}

    def test_garbage_raises(self):
        with pytest.raises(ModelReplyError):
            parse_reply("the aircraft is on fire")

    def test_json_array_raises(self):
        with pytest.raises(ModelReplyError):
            parse_reply("[1, 2, 3]")

    def test_truncated_json_raises(self):
        with pytest.raises(ModelReplyError):
            parse_reply('{"status": "active", "controls": [')


@pytest.mark.unit
class TestToNumber:
    """to_number() — Number() semantics."""

    def test_decimal_string(self):
        assert to_number("42.5") == 42.5

    def test_integer_string(self):
        assert to_number("3000") == 3000.0

    def test_surrounding_whitespace(self):
        assert to_number("  12 ") == 12.0

    def test_empty_string_is_zero(self):
        assert to_number("") == 0.0
        assert to_number("   ") == 0.0

    def test_exponent(self):
        assert to_number("1e3") == 1000.0

    def test_hex(self):
        assert to_number("0x1F") == 31.0

    def test_binary_and_octal(self):
        assert to_number("0b101") == 5.0
        assert to_number("0o17") == 15.0
        assert to_number("0B11") == 3.0

    def test_signed_or_malformed_radix_is_nan(self):
        assert math.isnan(to_number("-0x1"))
        assert math.isnan(to_number("-0b1"))
        assert math.isnan(to_number("0b102"))

    def test_infinity(self):
        assert to_number("Infinity") == math.inf
        assert to_number("-Infinity") == -math.inf

    def test_overflow_is_infinity(self):
        assert to_number("1e999") == math.inf

    def test_python_only_spellings_are_nan(self):
        assert math.isnan(to_number("inf"))
        assert math.isnan(to_number("nan"))
        assert math.isnan(to_number("1_000"))

    def test_units_in_text_are_nan(self):
        assert math.isnan(to_number("3000 PSI"))

    def test_none_is_nan(self):
        assert math.isnan(to_number(None))

    def test_booleans(self):
        assert to_number(True) == 1.0
        assert to_number(False) == 0.0

    def test_numbers_pass_through(self):
        assert to_number(7) == 7.0
        assert to_number(2.25) == 2.25

    def test_other_types_are_nan(self):
        assert math.isnan(to_number([1]))


@pytest.mark.unit
class TestToBoolean:
    """to_boolean() — only "true" or True count as on."""

    @pytest.mark.parametrize("value", ["true", True])
    def test_true_values(self, value):
        assert to_boolean(value) is True

    @pytest.mark.parametrize("value", ["false", False, "TRUE", "True", "1", 1, "", None, "on"])
    def test_everything_else_is_false(self, value):
        assert to_boolean(value) is False


@pytest.mark.unit
class TestCoerceControls:
    """coerce_controls() — one normalization pass over the reply."""

    def test_switch_and_button_become_bool(self):
        out = coerce_controls(idg_scenario_reply())
        by_id = {c["id"]: c for c in out["controls"]}
        assert by_id["GEN2"]["value"] is False
        assert by_id["BUS_TRANSFER"]["value"] is True
        assert by_id["GND_CALL"]["value"] is False

    def test_gauge_becomes_float(self):
        out = coerce_controls(idg_scenario_reply())
        by_id = {c["id"]: c for c in out["controls"]}
        assert by_id["IDG_TEMP"]["value"] == 142.5
        assert by_id["HYD_B_PRESS"]["value"] == 3000.0
        assert by_id["APU_EGT"]["value"] == 0.0

    def test_indicator_and_knob_untouched(self):
        out = coerce_controls(idg_scenario_reply())
        by_id = {c["id"]: c for c in out["controls"]}
        assert by_id["DRIVE2"]["value"] == "AMBER"
        assert by_id["APU_START"]["value"] == "OFF"

    def test_input_not_mutated(self):
        raw = idg_scenario_reply()
        coerce_controls(raw)
        assert raw["controls"][0]["value"] == "false"

    def test_unreadable_gauge_is_nan(self):
        raw = {"controls": [{"id": "EGT", "type": "gauge", "value": "high"}]}
        out = coerce_controls(raw)
        assert math.isnan(out["controls"][0]["value"])

    def test_missing_controls_become_empty_list(self):
        assert coerce_controls({"status": "active"})["controls"] == []

    def test_non_list_controls_become_empty_list(self):
        assert coerce_controls({"controls": "none"})["controls"] == []

    def test_idempotent(self):
        once = coerce_controls(idg_scenario_reply())
        twice = coerce_controls(once)
        assert twice == once

    def test_unknown_type_untouched(self):
        raw = {"controls": [{"id": "X", "type": "lever", "value": "DOWN"}]}
        assert coerce_controls(raw)["controls"][0]["value"] == "DOWN"


@pytest.mark.unit
class TestStrictMode:
    """strict=True rejects gauges that cannot be read as numbers."""

    def test_strict_raises_on_bad_gauge(self):
        control = {"id": "EGT", "type": "gauge", "value": "high"}
        with pytest.raises(CoercionError) as exc_info:
            coerce_control_value(control, strict=True)
        assert exc_info.value.control_id == "EGT"
        assert exc_info.value.raw_value == "high"

    def test_strict_error_is_a_reply_error(self):
        with pytest.raises(ModelReplyError):
            coerce_controls({"controls": [{"id": "EGT", "type": "gauge", "value": None}]}, strict=True)

    @pytest.mark.parametrize("value", ["Infinity", "-Infinity", "1e999"])
    def test_strict_raises_on_infinite_gauge(self, value):
        control = {"id": "EGT", "type": "gauge", "value": value}
        with pytest.raises(CoercionError):
            coerce_control_value(control, strict=True)

    def test_lenient_keeps_infinity(self):
        control = {"id": "EGT", "type": "gauge", "value": "Infinity"}
        assert coerce_control_value(control) == math.inf

    def test_strict_accepts_good_reply(self):
        out = coerce_controls(idg_scenario_reply(), strict=True)
        assert len(out["controls"]) == 10

    def test_strict_leaves_booleans_alone(self):
        control = {"id": "GEN2", "type": "switch", "value": "maybe"}
        assert coerce_control_value(control, strict=True) is False


@pytest.mark.unit
class TestStateFromReply:
    """state_from_reply() / coerce_state() — reply text to SimulationState."""

    def test_builds_state(self):
        state = state_from_reply(json.dumps(idg_scenario_reply()))
        assert isinstance(state, SimulationState)
        assert state.scenario_title == "Right IDG Disconnect"
        assert state.get_control("GEN2").value is False
        assert state.get_control("IDG_TEMP").value == 142.5
        assert len(state.maintenance_tasks) == 2
        assert state.tech_data.title == "AMM 24-11-00"

    def test_empty_reply_gives_empty_state(self):
        state = state_from_reply("")
        assert state.controls == []
        assert state.logs == []
        assert state.status == "active"

    def test_coerce_state_from_dict(self):
        state = coerce_state({"controls": [{"id": "P", "type": "gauge", "value": "12", "system": "HYD"}]})
        assert state.controls[0].value == 12.0
