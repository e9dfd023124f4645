"""
Brand Onboarding.

Six-step onboarding workflow for a brand-visibility product. Collects a
business profile, competitors, content categories and prompts (the last
three with AI assistance from the remote onboarding service) and finalizes
the account.

Steps:
1. Business - domain, name, description, target audiences
2. Competitors - 3 to 7 competitor domains
3. Categories - content categories
4. Prompts - AI-generated prompts per category
5. Blog - informational
6. Integration - finalize
"""

__version__ = "0.1.0"

from .guard import EntryDecision
from .session import OnboardingSession
from .state import WorkflowState, WorkflowStore

__all__ = [
    "EntryDecision",
    "OnboardingSession",
    "WorkflowState",
    "WorkflowStore",
]
