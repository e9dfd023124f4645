"""
Step Controller Base Classes.

A step controller owns a draft copy of its step's data. The draft is derived
from the committed WorkflowState when the step is entered, edited locally, and
written back to the store only when the user advances.

Controllers that can ask the remote service to fill their data in
(GeneratingStepController) also handle the asynchronous side:

- on_enter() fires one background generation when upstream data exists and
  the step's own data is still empty
- regenerate() is the user-triggered version and may be called repeatedly
- every request is stamped; only the most recently issued request of an
  active controller may apply its result, so late responses from superseded
  requests or from a step the user already left are dropped
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from ..client import OnboardingClient
from ..errors import AuthenticationError, ServiceError
from ..navigation import Destination, Navigator
from ..state import WorkflowState, WorkflowStore
from ..steps import StepDefinition, get_step
from ..storage import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class StepContext:
    """Collaborators handed to every controller."""
    store: WorkflowStore
    client: OnboardingClient
    navigator: Navigator
    storage: KeyValueStore


class StepController(ABC):
    """Draft/validate/commit behaviour shared by every step."""

    step_id: int = 0

    def __init__(self, context: StepContext):
        self.context = context
        self.step: StepDefinition = get_step(self.step_id)
        self.active = False

    @property
    def store(self) -> WorkflowStore:
        return self.context.store

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def on_enter(self) -> None:
        """Called once by the session when this step becomes the active one."""
        self.active = True
        self.load_draft()

    def on_exit(self) -> None:
        """Called once by the session when the user leaves this step."""
        self.active = False
        # A step's failure message never follows the user to another step
        if self.store.state.error is not None:
            self.store.set_error(None)

    async def wait_idle(self) -> None:
        """Wait for background work started by this controller."""

    # =========================================================================
    # Draft
    # =========================================================================

    def load_draft(self) -> None:
        """Re-derive the draft from committed state."""

    def draft_state(self) -> WorkflowState:
        """Committed state with this step's draft substituted in."""
        return self.store.state

    def commit(self) -> None:
        """Write the draft to the store."""

    # =========================================================================
    # Navigation
    # =========================================================================

    @property
    def can_advance(self) -> bool:
        return self.step.validate(self.draft_state())

    def advance(self) -> bool:
        """Commit the draft and move forward. Returns False if the gate is closed."""
        if not self.can_advance:
            logger.debug(f"Advance blocked on step {self.step.key}")
            return False
        self.commit()
        self.store.next_step()
        return True

    def retreat(self) -> None:
        """Move back without committing; the draft is discarded."""
        self.store.prev_step()


class GeneratingStepController(StepController):
    """A step whose data can be generated by the remote AI service."""

    failure_message = "Something went wrong. Please try again."

    def __init__(self, context: StepContext):
        super().__init__(context)
        self.is_generating = False
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()

    @abstractmethod
    def has_prerequisites(self) -> bool:
        """Whether the upstream data needed for a generation request exists."""
        ...

    def should_auto_populate(self) -> bool:
        """Whether entering the step should trigger a generation by itself."""
        return False

    @abstractmethod
    async def request_generation(self) -> Any:
        """Issue the remote generation request and return its parsed result."""
        ...

    @abstractmethod
    def apply_generated(self, result: Any) -> None:
        """Apply a fresh generation result to the draft (and store, where applicable)."""
        ...

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def on_enter(self) -> None:
        await super().on_enter()
        if self.should_auto_populate():
            logger.info(f"Auto-populating step {self.step.key}")
            self.start_regenerate()

    def on_exit(self) -> None:
        super().on_exit()
        self._generation += 1  # In-flight responses are now stale
        for task in list(self._tasks):
            task.cancel()
        if self.is_generating:
            self.is_generating = False
            self.store.set_loading(False)

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # =========================================================================
    # Generation
    # =========================================================================

    def start_regenerate(self) -> asyncio.Task:
        """Run regenerate() in the background, tracked for cancellation."""
        task = asyncio.create_task(self.regenerate())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def regenerate(self) -> bool:
        """
        Request fresh data from the service.

        Returns True if the result was applied. Failures set the step's error
        message and keep the current draft.
        """
        if not self.active or not self.has_prerequisites():
            return False

        self._generation += 1
        stamp = self._generation
        self.is_generating = True
        self.store.set_loading(True)
        self.store.set_error(None)

        try:
            result = await self.request_generation()
        except AuthenticationError:
            if self._settle(stamp):
                self.context.navigator.go(Destination.LOGIN)
            return False
        except ServiceError as e:
            logger.warning(f"Generation failed on step {self.step.key}: {e}")
            if self._settle(stamp):
                self.store.set_error(self.failure_message)
            return False
        except Exception:
            logger.exception(f"Unexpected generation failure on step {self.step.key}")
            if self._settle(stamp):
                self.store.set_error(self.failure_message)
            return False

        if not self._settle(stamp):
            logger.info(f"Discarding stale response on step {self.step.key}")
            return False

        self.apply_generated(result)
        return True

    def _settle(self, stamp: int) -> bool:
        """Finish request `stamp`. True if it is still the latest one of an active step."""
        if not self.active or stamp != self._generation:
            return False
        self.is_generating = False
        self.store.set_loading(False)
        return True
