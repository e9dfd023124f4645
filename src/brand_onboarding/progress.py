"""Progress projection: which steps are done, which is current, which are ahead."""

from dataclasses import dataclass
from enum import Enum

from .steps import STEPS, TOTAL_STEPS, StepDefinition


class StepStatus(Enum):
    COMPLETED = "completed"
    CURRENT = "current"
    PENDING = "pending"


@dataclass(frozen=True)
class ProgressEntry:
    step: StepDefinition
    status: StepStatus


def step_status(step_id: int, current_step: int) -> StepStatus:
    if step_id < current_step:
        return StepStatus.COMPLETED
    if step_id == current_step:
        return StepStatus.CURRENT
    return StepStatus.PENDING


def project_progress(current_step: int, total_steps: int = TOTAL_STEPS) -> list[ProgressEntry]:
    """Status of every registered step up to total_steps, in order."""
    return [
        ProgressEntry(step=step, status=step_status(step.id, current_step))
        for step in STEPS[:total_steps]
    ]


_MARKERS = {
    StepStatus.COMPLETED: "✓",
    StepStatus.CURRENT: "●",
    StepStatus.PENDING: "○",
}


def format_progress(entries: list[ProgressEntry]) -> str:
    """One-line text rendering, e.g. '✓ Business → ● Competitors → ○ Categories'."""
    return " → ".join(f"{_MARKERS[e.status]} {e.step.title}" for e in entries)
