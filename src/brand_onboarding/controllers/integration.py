"""
Step 6: Integration.

Terminal step. Completing it submits the finalize request through the
CompletionHandler; there is no further step to advance to.
"""

from ..completion import CompletionHandler
from .base import StepContext, StepController


class IntegrationController(StepController):
    step_id = 6

    def __init__(self, context: StepContext):
        super().__init__(context)
        self.completion = CompletionHandler(
            store=context.store,
            client=context.client,
            navigator=context.navigator,
            storage=context.storage,
        )

    @property
    def error(self) -> str | None:
        return self.completion.error

    @property
    def is_submitting(self) -> bool:
        return self.completion.is_submitting

    @property
    def can_retry(self) -> bool:
        return self.completion.error is not None and not self.completion.is_submitting

    def advance(self) -> bool:
        """The last step has nowhere to advance to; use complete()."""
        return False

    async def complete(self) -> bool:
        return await self.completion.finalize()
