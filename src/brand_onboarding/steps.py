"""
Onboarding Step Registry.

Static, ordered table of the six onboarding steps. Each step carries the
validation rule that gates advancing past it.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .state import WorkflowState


TOTAL_STEPS = 6

MIN_COMPETITORS = 3
MAX_COMPETITORS = 7


@dataclass(frozen=True)
class StepDefinition:
    """One stage of the onboarding sequence."""
    id: int
    key: str
    title: str
    description: str
    validate: Callable[["WorkflowState"], bool]


# =============================================================================
# Validation Rules
# =============================================================================


def _business_valid(state: "WorkflowState") -> bool:
    profile = state.business_profile
    return bool(profile.domain.strip() and profile.business_name.strip())


def _competitors_valid(state: "WorkflowState") -> bool:
    return MIN_COMPETITORS <= len(state.competitors) <= MAX_COMPETITORS


def _categories_valid(state: "WorkflowState") -> bool:
    return len(state.categories) >= 1


def _prompts_valid(state: "WorkflowState") -> bool:
    return len(state.prompts) >= 1


def _always_valid(state: "WorkflowState") -> bool:
    return True


# =============================================================================
# Registry
# =============================================================================

STEPS: tuple[StepDefinition, ...] = (
    StepDefinition(
        id=1,
        key="business",
        title="Business",
        description="Tell us about your business",
        validate=_business_valid,
    ),
    StepDefinition(
        id=2,
        key="competitors",
        title="Competitors",
        description="List your competitors",
        validate=_competitors_valid,
    ),
    StepDefinition(
        id=3,
        key="categories",
        title="Categories",
        description="Select your business categories",
        validate=_categories_valid,
    ),
    StepDefinition(
        id=4,
        key="prompts",
        title="Prompts",
        description="Review and edit AI-generated prompts",
        validate=_prompts_valid,
    ),
    StepDefinition(
        id=5,
        key="blog",
        title="Blog",
        description="Blog content strategy",
        validate=_always_valid,
    ),
    StepDefinition(
        id=6,
        key="integration",
        title="Integration",
        description="Complete your setup",
        validate=_always_valid,
    ),
)

_STEPS_BY_ID = {step.id: step for step in STEPS}


def get_step(step_id: int) -> StepDefinition:
    """Look up a step by id. Raises KeyError for ids outside 1..TOTAL_STEPS."""
    return _STEPS_BY_ID[step_id]


def get_steps() -> tuple[StepDefinition, ...]:
    return STEPS
