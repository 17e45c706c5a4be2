"""Survey form state and its transitions.

All transitions return a new :class:`FormState`; a previous state (and its
``responses`` mapping) is never modified in place.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Optional, Union

from questions import RATING_KEYS, RATING_MIN, RATING_MAX, RATINGS

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("name", "email", "suggestions")
EMAIL_RE = re.compile(r"\S+@\S+\.\S+")

# one color per integer rating 0..5
SLIDER_COLORS = ("#d1d5db", "#FF0000", "#FF8000", "#FF8C00", "#FFFF00", "#22c55e")

SUBMIT_FAILED_MESSAGE = "Submission failed."
CONFIRMATION_PATH = "/thank-you"


class UnknownFieldError(KeyError):
    """Raised when a form field name is neither a text field nor a rating key."""


@dataclass(frozen=True)
class FormState:
    name: str = ""
    email: str = ""
    responses: dict = field(default_factory=dict)
    suggestions: str = ""
    submitting: bool = False

    @classmethod
    def initial(cls) -> "FormState":
        """Fresh form as shown to a client: every slider at 0."""
        return cls(responses={k: str(RATING_MIN) for k in RATING_KEYS})

    @classmethod
    def blank(cls) -> "FormState":
        """Form with no ratings chosen; used to build state from API payloads."""
        return cls(responses={k: "" for k in RATING_KEYS})

    def to_record(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "responses": dict(self.responses),
            "suggestions": self.suggestions,
        }


@dataclass(frozen=True)
class FieldUpdate:
    field: str
    value: str


@dataclass(frozen=True)
class RatingUpdate:
    key: str
    value: str


FormEvent = Union[FieldUpdate, RatingUpdate]


def field_event(name: str, value) -> FormEvent:
    """Resolve a raw input name to the event it stands for."""
    if name in RATING_KEYS:
        return RatingUpdate(name, "" if value is None else str(value))
    if name in TEXT_FIELDS:
        return FieldUpdate(name, "" if value is None else str(value))
    raise UnknownFieldError(name)


def apply_update(state: FormState, event: FormEvent) -> FormState:
    if isinstance(event, RatingUpdate):
        return replace(state, responses={**state.responses, event.key: event.value})
    if isinstance(event, FieldUpdate):
        return replace(state, **{event.field: event.value})
    raise TypeError(f"Unsupported form event: {event!r}")


def update_field(state: FormState, name: str, value) -> FormState:
    return apply_update(state, field_event(name, value))


def _rating_error(value: str) -> Optional[str]:
    if not value:
        return "Required"
    # only the canonical text "0".."5" is stored
    if value not in RATINGS:
        return f"Must be between {RATING_MIN} and {RATING_MAX}"
    return None


def validate(state: FormState) -> dict[str, str]:
    """Check the form before submission.

    Returns:
        dict[str, str]: field name -> message; empty when the form is valid.
    """
    errors = {}
    if not state.name.strip():
        errors["name"] = "Name is required"
    if not state.email.strip():
        errors["email"] = "Email is required"
    elif not EMAIL_RE.search(state.email):
        errors["email"] = "Invalid email"
    for key in RATING_KEYS:
        msg = _rating_error(str(state.responses.get(key, "") or ""))
        if msg:
            errors[key] = msg
    return errors


@dataclass(frozen=True)
class SubmitOutcome:
    state: FormState
    status: str                      # busy | invalid | failed | submitted
    errors: dict = field(default_factory=dict)
    record: object = None
    message: str = ""
    redirect: Optional[str] = None


def submit(state: FormState, store) -> SubmitOutcome:
    """Validate and send the form to ``store.insert_one``.

    The ``submitting`` flag guards against re-entry while an insert is
    outstanding; a busy or invalid form never reaches the store.
    """
    if state.submitting:
        return SubmitOutcome(state, "busy")
    errors = validate(state)
    if errors:
        logger.info("Survey submission rejected: %s", sorted(errors))
        return SubmitOutcome(state, "invalid", errors=errors)

    in_flight = replace(state, submitting=True)
    result = store.insert_one(in_flight.to_record())
    done = replace(in_flight, submitting=False)
    if not result.ok:
        return SubmitOutcome(done, "failed", message=SUBMIT_FAILED_MESSAGE)
    return SubmitOutcome(done, "submitted", record=result.data, redirect=CONFIRMATION_PATH)


@dataclass(frozen=True)
class SliderDisplay:
    value: int
    color: str
    percent: float

    @property
    def tooltip_left(self) -> str:
        return f"{self.percent:g}%"

    @property
    def track_background(self) -> str:
        p = f"{self.percent:g}%"
        return (
            f"linear-gradient(to right, {self.color} 0%, {self.color} {p}, "
            f"#d1d5db {p}, #d1d5db 100%)"
        )


def slider_display(value) -> SliderDisplay:
    try:
        v = int(value)
    except (TypeError, ValueError):
        v = RATING_MIN
    v = max(RATING_MIN, min(RATING_MAX, v))
    return SliderDisplay(value=v, color=SLIDER_COLORS[v], percent=v / RATING_MAX * 100)
