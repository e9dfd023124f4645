"""
Step 2: Competitors.

Between 3 and 7 competitor domains. Fetched from the service on entry when
the business domain is known and no competitors are stored yet.
"""

from dataclasses import replace

from ..models import append_unique, dedupe, remove_at
from ..state import WorkflowState
from .base import GeneratingStepController


class CompetitorsController(GeneratingStepController):
    step_id = 2
    failure_message = "Failed to fetch competitors. Please try again."

    def __init__(self, context):
        super().__init__(context)
        self.draft: list[str] = []

    def load_draft(self) -> None:
        self.draft = list(self.store.state.competitors)

    def draft_state(self) -> WorkflowState:
        return replace(self.store.state, competitors=tuple(self.draft))

    def commit(self) -> None:
        self.store.set_competitors(self.draft)

    def add_competitor(self, competitor: str) -> bool:
        """Add a competitor. Returns False for blanks and exact duplicates."""
        before = len(self.draft)
        self.draft = append_unique(self.draft, competitor)
        return len(self.draft) > before

    def remove_competitor(self, index: int) -> None:
        self.draft = remove_at(self.draft, index)

    def has_prerequisites(self) -> bool:
        return bool(self.store.state.business_profile.domain)

    def should_auto_populate(self) -> bool:
        return self.has_prerequisites() and not self.store.state.competitors

    async def request_generation(self) -> list[str]:
        return await self.context.client.fetch_competitors(self.store.state.business_profile)

    def apply_generated(self, result: list[str]) -> None:
        competitors = dedupe(result)
        self.draft = competitors
        self.store.set_competitors(competitors)
