"""Exception types raised by the cockpit trainer.

Routers translate these into HTTP status codes; everything else lets them
propagate to the caller.
"""

from __future__ import annotations


class CockpitError(Exception):
    """Base class for all trainer errors."""


class InvalidRequestError(CockpitError):
    """Caller supplied a bad topic, aircraft, or value."""


class ModelServiceError(CockpitError):
    """The model service could not be reached or returned an HTTP error."""


class ModelReplyError(CockpitError):
    """The model replied, but the text is not a JSON object."""


class CoercionError(ModelReplyError):
    """A control value could not be normalized (strict mode only)."""

    def __init__(self, control_id: str, raw_value: object) -> None:
        super().__init__(
            f"Control {control_id!r}: cannot coerce {raw_value!r} to a gauge reading"
        )
        self.control_id = control_id
        self.raw_value = raw_value


class SessionBusyError(CockpitError):
    """A generation or step call is already in flight."""


class NoActiveScenarioError(CockpitError):
    """The session has no active scenario."""


class UnknownControlError(CockpitError):
    """No control with the given id exists in the active scenario."""


class UnknownTaskError(CockpitError):
    """No maintenance task with the given id exists in the active scenario."""


class UnknownHistoryEntryError(CockpitError):
    """No history entry with the given id exists."""
