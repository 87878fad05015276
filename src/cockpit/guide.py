"""Operational manual shown in the user guide modal."""

from __future__ import annotations

from .prompts import AIRCRAFT_FLEET

GUIDE_VERSION = "Operational Manual V2.1"

USER_GUIDE = {
    "title": "User Guide",
    "version": GUIDE_VERSION,
    "sections": [
        {
            "heading": "1. Initialization",
            "items": [
                {
                    "title": "Select Aircraft",
                    "text": (
                        f"Choose your target aircraft ({', '.join(AIRCRAFT_FLEET[:-1])}, "
                        f"or {AIRCRAFT_FLEET[-1]}). System logic adapts to the selected airframe."
                    ),
                },
                {
                    "title": "Define Fault",
                    "text": (
                        'Enter a specific fault (e.g., "Left Engine Fire Loop Fault") '
                        "or use the quick suggestion chips."
                    ),
                },
            ],
            "note": (
                "The AI generates a unique initial state including cockpit controls, "
                "sensor logs, and maintenance tasks."
            ),
        },
        {
            "heading": "2. The Simulation Dashboard",
            "items": [
                {
                    "title": "Overhead Panel",
                    "text": (
                        "Controls are grouped by aircraft system. Click switches to toggle "
                        "them and press buttons to actuate. Indicators and gauges are read-only."
                    ),
                },
                {
                    "title": "Electronic Flight Bag",
                    "text": (
                        "Monitor shows EICAS messages and instructor feedback, Work Order lists "
                        "the AMM tasks you can tick off, and Tech Data holds the reference text."
                    ),
                },
            ],
            "note": (
                "Every action triggers an AI simulation step. Watch for updates in the "
                '"Instructor Feedback" panel after toggling switches.'
            ),
        },
        {
            "heading": "3. Interpreting Results",
            "items": [
                {
                    "title": "RESOLVED",
                    "text": (
                        "The fault has been cleared successfully. Logs indicate normal "
                        "operation, and checklist items are verified."
                    ),
                },
                {
                    "title": "CRITICAL",
                    "text": (
                        "Incorrect actions have worsened the situation (e.g., overheating, "
                        "bus isolation). Review Tech Data immediately."
                    ),
                },
                {
                    "title": "ACTIVE",
                    "text": (
                        "The scenario is ongoing. Continue troubleshooting using the "
                        "Work Order steps."
                    ),
                },
            ],
            "note": "The simulation tracks the aircraft state after every action. Check the status badge in the header.",
        },
    ],
}
