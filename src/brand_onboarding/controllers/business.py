"""
Step 1: Business.

Collects domain, business name, description and target audiences. The
"Autocomplete with AI" action analyzes the domain and fills in the rest of
the draft; it is only ever triggered by the user.

The typed domain is mirrored to durable storage so it survives a reload
before the user leaves this step.
"""

import logging
from dataclasses import replace

from ..client import DomainAnalysis
from ..models import BusinessProfile, append_unique, dedupe, remove_at
from ..state import WorkflowState
from ..storage import DOMAIN_KEY
from .base import GeneratingStepController

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("domain", "business_name", "description")


class BusinessController(GeneratingStepController):
    step_id = 1
    failure_message = "Failed to analyze domain. Please try again."

    def __init__(self, context):
        super().__init__(context)
        self.draft = BusinessProfile()

    def load_draft(self) -> None:
        draft = self.store.state.business_profile
        if not draft.domain:
            saved = self.context.storage.get(DOMAIN_KEY)
            if saved:
                logger.debug(f"Restored domain {saved!r} from storage")
                draft = draft.merge({"domain": saved})
        self.draft = draft

    def draft_state(self) -> WorkflowState:
        return replace(self.store.state, business_profile=self.draft)

    def commit(self) -> None:
        self.store.set_business_profile(self.draft.to_dict())

    # =========================================================================
    # Editing
    # =========================================================================

    def set_field(self, name: str, value: str) -> None:
        if name not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown business field: {name}")
        self.draft = self.draft.merge({name: value})
        if name == "domain" and (value or "").strip():
            self.context.storage.set(DOMAIN_KEY, value)

    def add_audience(self, audience: str) -> bool:
        """Add a target audience. Returns False for blanks and duplicates."""
        before = len(self.draft.target_audiences)
        audiences = append_unique(self.draft.target_audiences, audience)
        self.draft = self.draft.merge({"target_audiences": audiences})
        return len(audiences) > before

    def remove_audience(self, index: int) -> None:
        audiences = remove_at(self.draft.target_audiences, index)
        self.draft = self.draft.merge({"target_audiences": audiences})

    # =========================================================================
    # Generation
    # =========================================================================

    def has_prerequisites(self) -> bool:
        return bool(self.draft.domain.strip())

    async def request_generation(self) -> DomainAnalysis:
        return await self.context.client.analyze_domain(self.draft.domain.strip())

    def apply_generated(self, result: DomainAnalysis) -> None:
        # Keep what the user typed as the domain, replace everything else
        self.draft = BusinessProfile(
            domain=self.draft.domain,
            business_name=result.business_name,
            description=result.description,
            target_audiences=tuple(dedupe(result.target_audiences)),
        )
