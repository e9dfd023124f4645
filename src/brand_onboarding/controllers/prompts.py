"""
Step 4: Prompts.

AI-generated content prompts, one or more per category, editable in place.
"""

from dataclasses import replace

from ..models import Prompt
from ..state import WorkflowState
from .base import GeneratingStepController


class PromptsController(GeneratingStepController):
    step_id = 4
    failure_message = "Failed to generate prompts. Please try again."

    def __init__(self, context):
        super().__init__(context)
        self.draft: list[Prompt] = []

    def load_draft(self) -> None:
        self.draft = list(self.store.state.prompts)

    def draft_state(self) -> WorkflowState:
        return replace(self.store.state, prompts=tuple(self.draft))

    def commit(self) -> None:
        self.store.set_prompts(self.draft)

    def edit_prompt(self, index: int, text: str) -> bool:
        if index < 0 or index >= len(self.draft):
            return False
        self.draft[index] = self.draft[index].with_text(text)
        return True

    def has_prerequisites(self) -> bool:
        return len(self.store.state.categories) > 0

    def should_auto_populate(self) -> bool:
        return self.has_prerequisites() and not self.store.state.prompts

    async def request_generation(self) -> list[Prompt]:
        return await self.context.client.generate_prompts(self.store.state.categories)

    def apply_generated(self, result: list[Prompt]) -> None:
        self.draft = list(result)
        self.store.set_prompts(result)
