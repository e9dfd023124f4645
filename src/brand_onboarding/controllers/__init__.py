"""
Step controllers, one per onboarding step.

build_controller() picks the controller for a step id.
"""

from .base import GeneratingStepController, StepContext, StepController
from .blog import BlogController
from .business import BusinessController
from .categories import CategoriesController
from .competitors import CompetitorsController
from .integration import IntegrationController
from .prompts import PromptsController

CONTROLLERS: dict[int, type[StepController]] = {
    BusinessController.step_id: BusinessController,
    CompetitorsController.step_id: CompetitorsController,
    CategoriesController.step_id: CategoriesController,
    PromptsController.step_id: PromptsController,
    BlogController.step_id: BlogController,
    IntegrationController.step_id: IntegrationController,
}


def build_controller(step_id: int, context: StepContext) -> StepController:
    """Create the controller for a step. Raises KeyError for unknown ids."""
    return CONTROLLERS[step_id](context)


__all__ = [
    "BlogController",
    "BusinessController",
    "CategoriesController",
    "CompetitorsController",
    "GeneratingStepController",
    "IntegrationController",
    "PromptsController",
    "StepContext",
    "StepController",
    "build_controller",
]
