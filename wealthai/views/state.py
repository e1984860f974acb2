"""
Page View State

Every page follows the same flow: fetch the profile, derive, render. The
state machine makes that explicit:

    LOADING -> LOADED(data) | ERROR(reason) | NEEDS_ONBOARDING
    LOADED | ERROR | NEEDS_ONBOARDING -> LOADING   (reload)

Anything else is a bug and raises InvalidTransitionError.
"""

from enum import Enum
from typing import Generic, Optional, TypeVar


T = TypeVar("T")


class ViewStatus(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"
    NEEDS_ONBOARDING = "needs_onboarding"


_ALLOWED = {
    ViewStatus.LOADING: {ViewStatus.LOADED, ViewStatus.ERROR, ViewStatus.NEEDS_ONBOARDING},
    ViewStatus.LOADED: {ViewStatus.LOADING},
    ViewStatus.ERROR: {ViewStatus.LOADING},
    ViewStatus.NEEDS_ONBOARDING: {ViewStatus.LOADING},
}


class InvalidTransitionError(Exception):
    """A view tried to move between states that aren't connected."""
    pass


class ViewState(Generic[T]):
    """Load state of one page, with the data or error that came with it."""

    def __init__(self):
        self._status = ViewStatus.LOADING
        self._data: Optional[T] = None
        self._error: Optional[str] = None

    def __repr__(self) -> str:
        return f"ViewState(status={self._status.value!r}, error={self._error!r})"

    @property
    def status(self) -> ViewStatus:
        return self._status

    @property
    def data(self) -> Optional[T]:
        return self._data

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def is_loading(self) -> bool:
        return self._status == ViewStatus.LOADING

    @property
    def is_loaded(self) -> bool:
        return self._status == ViewStatus.LOADED

    def _move(self, target: ViewStatus) -> None:
        if target not in _ALLOWED[self._status]:
            raise InvalidTransitionError(
                f"Cannot go from {self._status.value} to {target.value}"
            )
        self._status = target

    def loaded(self, data: T) -> None:
        self._move(ViewStatus.LOADED)
        self._data = data
        self._error = None

    def failed(self, reason: str) -> None:
        self._move(ViewStatus.ERROR)
        self._data = None
        self._error = reason

    def needs_onboarding(self) -> None:
        self._move(ViewStatus.NEEDS_ONBOARDING)
        self._data = None
        self._error = None

    def reload(self) -> None:
        self._move(ViewStatus.LOADING)
