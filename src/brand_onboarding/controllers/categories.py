"""
Step 3: Categories.

Content categories generated from the business profile and competitors.
The service returns saved records with ids; categories added by hand stay
bare labels until the service persists them.
"""

from dataclasses import replace

from ..models import (
    Category,
    CategoryLabel,
    category_key,
    category_name,
    remove_at,
)
from ..state import WorkflowState
from .base import GeneratingStepController


class CategoriesController(GeneratingStepController):
    step_id = 3
    failure_message = "Failed to generate categories. Please try again."

    def __init__(self, context):
        super().__init__(context)
        self.draft: list[Category] = []

    def load_draft(self) -> None:
        self.draft = list(self.store.state.categories)

    def draft_state(self) -> WorkflowState:
        return replace(self.store.state, categories=tuple(self.draft))

    def commit(self) -> None:
        self.store.set_categories(self.draft)

    # =========================================================================
    # Editing
    # =========================================================================

    def add_category(self, name: str) -> bool:
        """Add a category by label. Returns False for blanks and duplicate names."""
        name = (name or "").strip()
        if not name or name in {category_name(c) for c in self.draft}:
            return False
        self.draft = [*self.draft, CategoryLabel(name=name)]
        return True

    def remove_category(self, index: int) -> None:
        self.draft = remove_at(self.draft, index)

    def toggle_category(self, category: Category) -> None:
        """Deselect the category if present (matched by key), otherwise select it."""
        key = category_key(category)
        if any(category_key(c) == key for c in self.draft):
            self.draft = [c for c in self.draft if category_key(c) != key]
        else:
            self.draft = [*self.draft, category]

    def is_selected(self, category: Category) -> bool:
        key = category_key(category)
        return any(category_key(c) == key for c in self.draft)

    # =========================================================================
    # Generation
    # =========================================================================

    def has_prerequisites(self) -> bool:
        return bool(self.store.state.business_profile.domain)

    def should_auto_populate(self) -> bool:
        return self.has_prerequisites() and not self.store.state.categories

    async def request_generation(self) -> list[Category]:
        state = self.store.state
        return await self.context.client.generate_categories(
            state.business_profile,
            state.competitors,
        )

    def apply_generated(self, result: list[Category]) -> None:
        self.draft = list(result)
        self.store.set_categories(result)
