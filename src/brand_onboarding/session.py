"""
Onboarding Session Orchestrator.

One OnboardingSession is one visit to the onboarding screen: a fresh
WorkflowStore, the entry check, and exactly one active step controller at a
time. Switching steps exits the old controller (dropping any generation still
in flight) before the new one is entered.

Usage:
    session = OnboardingSession(token)
    decision = await session.start()
    if decision is EntryDecision.ENTER_WORKFLOW:
        session.controller.set_field("domain", "acme.com")
        ...
        await session.advance()
    await session.aclose()
"""

import logging

from .action_log import ActionLogger
from .client import OnboardingClient
from .config import OnboardingSettings, get_settings
from .controllers import IntegrationController, StepContext, StepController, build_controller
from .guard import EntryDecision, evaluate_entry
from .navigation import Destination, Navigator
from .progress import ProgressEntry, project_progress
from .state import WorkflowStore
from .storage import JsonFileKeyValueStore, KeyValueStore, mirror_domain

logger = logging.getLogger(__name__)


class OnboardingSession:
    """Drives the six-step workflow for one signed-in user."""

    def __init__(
        self,
        credential: str | None,
        *,
        client: OnboardingClient | None = None,
        storage: KeyValueStore | None = None,
        navigator: Navigator | None = None,
        settings: OnboardingSettings | None = None,
        action_log: ActionLogger | None = None,
    ):
        self.credential = credential
        self.settings = settings or get_settings()

        if client is None and credential:
            client = OnboardingClient.from_settings(credential, self.settings)
        self.client = client

        if storage is None:
            storage = JsonFileKeyValueStore(self.settings.onboarding_state_file)
        self.storage = storage

        self.navigator = navigator or Navigator()
        self.navigator.subscribe(self._on_navigate)

        self.action_log = action_log
        self.store = WorkflowStore()
        self.store.subscribe(mirror_domain(self.storage))
        if action_log is not None:
            self.store.subscribe(action_log.record_action)

        self.controller: StepController | None = None
        self.decision: EntryDecision | None = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> EntryDecision:
        """Run the entry check and, if the user belongs here, enter the current step."""
        self.decision = await evaluate_entry(self.credential, self.client)

        if self.decision == EntryDecision.REDIRECT_LOGIN:
            self.navigator.go(Destination.LOGIN)
        elif self.decision == EntryDecision.REDIRECT_DASHBOARD:
            self.navigator.go(Destination.DASHBOARD)
        else:
            self.navigator.go(Destination.ONBOARDING)
            await self._sync_controller()

        return self.decision

    def abandon(self) -> None:
        """Leave the onboarding screen without completing."""
        if self.controller is not None:
            logger.info(f"Leaving onboarding on step {self.controller.step.key}")
            self.controller.on_exit()
            self.controller = None

    async def wait_idle(self) -> None:
        """Wait for the active step's background generation to settle."""
        if self.controller is not None:
            await self.controller.wait_idle()

    async def aclose(self) -> None:
        self.abandon()
        if self.client is not None:
            await self.client.aclose()
        if self.action_log is not None:
            path = self.action_log.close()
            if path:
                logger.info(f"Action log written to {path}")

    # =========================================================================
    # Navigation
    # =========================================================================

    async def advance(self) -> bool:
        """Commit the current step and move on. False if the step's gate is closed."""
        controller = self._require_controller()
        if not controller.advance():
            return False
        await self._sync_controller()
        return True

    async def retreat(self) -> None:
        """Go back one step, discarding the current step's draft."""
        controller = self._require_controller()
        controller.retreat()
        await self._sync_controller()

    async def complete(self) -> bool:
        """Finalize onboarding. Only valid on the last step."""
        controller = self._require_controller()
        if not isinstance(controller, IntegrationController):
            logger.warning(f"Cannot complete from step {controller.step.key}")
            return False
        return await controller.complete()

    def progress(self) -> list[ProgressEntry]:
        state = self.store.state
        return project_progress(state.current_step, state.total_steps)

    # =========================================================================
    # Internals
    # =========================================================================

    def _require_controller(self) -> StepController:
        if self.controller is None:
            raise RuntimeError("Onboarding session is not active; call start() first")
        return self.controller

    async def _sync_controller(self) -> None:
        """Make the active controller match the store's current step."""
        step_id = self.store.state.current_step
        if self.controller is not None and self.controller.step_id == step_id:
            return

        if self.controller is not None:
            self.controller.on_exit()

        context = StepContext(
            store=self.store,
            client=self.client,
            navigator=self.navigator,
            storage=self.storage,
        )
        self.controller = build_controller(step_id, context)
        logger.debug(f"Entering step {self.controller.step.key}")
        await self.controller.on_enter()

    def _on_navigate(self, destination: Destination) -> None:
        if self.action_log is not None:
            self.action_log.navigation(destination.value)
        if destination != Destination.ONBOARDING:
            self.abandon()
