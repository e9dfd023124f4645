"""Step 5: Blog. Informational only; always advanceable."""

from .base import StepController


class BlogController(StepController):
    step_id = 5
