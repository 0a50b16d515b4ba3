"""Session status as an immutable record with a pure transition function.

``reduce(state, action)`` never mutates its input. Setting a busy status
clears both messages; an error clears any success message and vice versa.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal, Union

AppStatus = Literal["idle", "fetchingSchema", "processingAI", "refiningAI", "uploadingNotion"]

BUSY_STATUSES = frozenset({"fetchingSchema", "processingAI", "refiningAI", "uploadingNotion"})


@dataclass(frozen=True)
class AppState:
    status: AppStatus = "idle"
    error: str = ""
    success_message: str = ""

    @property
    def busy(self) -> bool:
        return self.status in BUSY_STATUSES


@dataclass(frozen=True)
class SetStatus:
    status: AppStatus


@dataclass(frozen=True)
class SetError:
    message: str


@dataclass(frozen=True)
class SetSuccess:
    message: str


@dataclass(frozen=True)
class Reset:
    pass


Action = Union[SetStatus, SetError, SetSuccess, Reset]

INITIAL_STATE = AppState()


def reduce(state: AppState, action: Action) -> AppState:
    """Return the state that follows *state* after *action*."""
    if isinstance(action, SetStatus):
        return replace(state, status=action.status, error="", success_message="")
    if isinstance(action, SetError):
        return replace(state, status="idle", error=action.message, success_message="")
    if isinstance(action, SetSuccess):
        return replace(state, status="idle", success_message=action.message, error="")
    if isinstance(action, Reset):
        return INITIAL_STATE
    return state
