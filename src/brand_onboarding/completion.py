"""
Onboarding Completion.

Submits the finalize request on the last step. On success the workflow state
is cleared and the user goes to the dashboard. On failure the state is left
exactly as it was so the user can retry without redoing earlier steps.
"""

import logging

from .client import OnboardingClient
from .errors import AuthenticationError, ServiceError
from .navigation import Destination, Navigator
from .state import WorkflowStore
from .storage import DOMAIN_KEY, KeyValueStore

logger = logging.getLogger(__name__)

COMPLETION_FAILED_MESSAGE = "Failed to complete onboarding. Please try again."


class CompletionHandler:
    """Finalizes onboarding against the remote service."""

    def __init__(
        self,
        store: WorkflowStore,
        client: OnboardingClient,
        navigator: Navigator,
        storage: KeyValueStore,
    ):
        self.store = store
        self.client = client
        self.navigator = navigator
        self.storage = storage
        # Shown on the terminal step only; WorkflowState.error is not touched
        self.error: str | None = None
        self.is_submitting = False

    async def finalize(self) -> bool:
        """
        Send the finalize request.

        Returns True when onboarding completed. A call made while another is
        still in flight is ignored and returns False.
        """
        if self.is_submitting:
            logger.info("Completion already in flight, ignoring")
            return False

        self.is_submitting = True
        self.error = None
        try:
            await self.client.finalize()
        except AuthenticationError:
            logger.info("Credential rejected on completion, redirecting to login")
            self.navigator.go(Destination.LOGIN)
            return False
        except ServiceError as e:
            logger.error(f"Onboarding completion failed: {e}")
            self.error = COMPLETION_FAILED_MESSAGE
            return False
        finally:
            self.is_submitting = False

        self.store.reset()
        self.storage.delete(DOMAIN_KEY)
        logger.info("Onboarding completed")
        self.navigator.go(Destination.DASHBOARD)
        return True
