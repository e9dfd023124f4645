"""
Onboarding Entry Guard.

Decides, when the onboarding screen is entered, whether the user belongs in
the workflow at all. An unreachable status check never blocks the user: any
failure other than a rejected credential keeps them in the workflow.
"""

import logging
from enum import Enum

from .client import OnboardingClient
from .errors import AuthenticationError, ServiceError

logger = logging.getLogger(__name__)


class EntryDecision(Enum):
    ENTER_WORKFLOW = "enter_workflow"
    REDIRECT_DASHBOARD = "redirect_dashboard"
    REDIRECT_LOGIN = "redirect_login"


async def evaluate_entry(
    credential: str | None,
    client: OnboardingClient | None,
) -> EntryDecision:
    """
    Run the entry check.

    Returns:
        REDIRECT_LOGIN if there is no credential or the service rejects it,
        REDIRECT_DASHBOARD if the account is already set up,
        ENTER_WORKFLOW otherwise (including when the status check fails).
    """
    if not credential or client is None:
        logger.info("No credential present, redirecting to login")
        return EntryDecision.REDIRECT_LOGIN

    try:
        status = await client.get_status()
    except AuthenticationError:
        logger.info("Credential rejected by status check, redirecting to login")
        return EntryDecision.REDIRECT_LOGIN
    except ServiceError as e:
        logger.warning(f"Status check failed, staying in onboarding: {e}")
        return EntryDecision.ENTER_WORKFLOW

    logger.debug(f"Onboarding status: {status.model_dump()}")
    if status.should_redirect_to_dashboard:
        logger.info("Account already configured, redirecting to dashboard")
        return EntryDecision.REDIRECT_DASHBOARD

    return EntryDecision.ENTER_WORKFLOW
