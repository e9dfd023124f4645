"""Routing destinations and a recording navigator."""

import logging
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class Destination(Enum):
    LOGIN = "/login"
    DASHBOARD = "/dashboard"
    ONBOARDING = "/onboarding"


NavigationCallback = Callable[[Destination], None]


class Navigator:
    """
    Records screen transitions and forwards them to callbacks.

    The onboarding core only ever asks to "go to X"; how that happens is up to
    whoever supplies the callback.
    """

    def __init__(self, on_navigate: NavigationCallback | None = None):
        self._callbacks: list[NavigationCallback] = []
        if on_navigate is not None:
            self._callbacks.append(on_navigate)
        self.history: list[Destination] = []

    @property
    def current(self) -> Destination | None:
        return self.history[-1] if self.history else None

    def subscribe(self, callback: NavigationCallback) -> None:
        self._callbacks.append(callback)

    def go(self, destination: Destination) -> None:
        logger.info(f"Navigating to {destination.value}")
        self.history.append(destination)
        for callback in list(self._callbacks):
            callback(destination)
