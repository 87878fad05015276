"""ScenarioSimulator — the two model calls behind the trainer.

generate_scenario(topic, aircraft)
    Build the generation prompt, send it with the generation schema and
    system instruction, coerce the reply into the initial SimulationState.

simulate_step(state, action)
    Send the current state (minus feedback) and an action description with
    the step schema; the coerced reply is the complete next state.

Any network, parse or (strict) coercion failure is logged and re-raised.
There is no retry.
"""

from __future__ import annotations

from loguru import logger

from .client import ModelClient
from .coercion import state_from_reply
from .errors import InvalidRequestError
from .models import SimulationState
from .prompts import (
    AIRCRAFT_FLEET,
    GENERATE_SCENARIO_SYSTEM_PROMPT,
    SIMULATE_STEP_SYSTEM_PROMPT,
    build_generation_prompt,
    build_step_prompt,
)
from .schema import GENERATION_SCHEMA, STEP_SCHEMA


class ScenarioSimulator:
    """Packages cockpit state into prompts and parses the model's replies."""

    def __init__(self, client: ModelClient, strict: bool = False) -> None:
        self.client = client
        self.strict = strict

    def generate_scenario(self, topic: str, aircraft: str) -> SimulationState:
        if not topic or not topic.strip():
            raise InvalidRequestError("Scenario topic must not be empty")
        if aircraft not in AIRCRAFT_FLEET:
            raise InvalidRequestError(
                f"Unknown aircraft {aircraft!r} (expected one of {', '.join(AIRCRAFT_FLEET)})"
            )

        prompt = build_generation_prompt(topic, aircraft)
        logger.info(f"Generating scenario: {aircraft} / {topic.strip()!r}")
        try:
            text = self.client.generate(GENERATE_SCENARIO_SYSTEM_PROMPT, prompt, GENERATION_SCHEMA)
            state = state_from_reply(text, strict=self.strict)
        except Exception as e:
            logger.error(f"Scenario generation failed: {e}")
            raise

        logger.info(
            f"Scenario ready: {state.scenario_title!r} "
            f"({len(state.controls)} controls, {len(state.maintenance_tasks)} tasks)"
        )
        return state

    def simulate_step(self, state: SimulationState, action: str) -> SimulationState:
        prompt = build_step_prompt(state, action)
        logger.info(f"Simulation step: {action}")
        try:
            text = self.client.generate(SIMULATE_STEP_SYSTEM_PROMPT, prompt, STEP_SCHEMA)
            next_state = state_from_reply(text, strict=self.strict)
        except Exception as e:
            logger.error(f"Simulation step failed: {e}")
            raise

        if next_state.status != state.status:
            logger.info(f"Scenario status: {state.status} -> {next_state.status}")
        return next_state
