"""
Pytest configuration and fixtures for brand onboarding tests.
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment before importing brand_onboarding modules
os.environ["ONBOARDING_ENV"] = "development"
os.environ["ONBOARDING_API_URL"] = "http://onboarding.test"
os.environ["ONBOARDING_LOG_ACTIONS"] = "false"
os.environ.pop("ONBOARDING_AUTH_TOKEN", None)

from brand_onboarding.controllers import StepContext  # noqa: E402
from brand_onboarding.models import BusinessProfile, PersistedCategory, Prompt  # noqa: E402
from brand_onboarding.navigation import Navigator  # noqa: E402
from brand_onboarding.state import WorkflowStore  # noqa: E402
from brand_onboarding.storage import MemoryKeyValueStore  # noqa: E402


@pytest.fixture
def store():
    return WorkflowStore()


@pytest.fixture
def storage():
    return MemoryKeyValueStore()


@pytest.fixture
def navigator():
    return Navigator()


@pytest.fixture
def mock_client():
    """AsyncMock stand-in for OnboardingClient with harmless defaults."""
    client = MagicMock()
    client.get_status = AsyncMock()
    client.analyze_domain = AsyncMock()
    client.fetch_competitors = AsyncMock(return_value=[])
    client.generate_categories = AsyncMock(return_value=[])
    client.generate_prompts = AsyncMock(return_value=[])
    client.finalize = AsyncMock(return_value=None)
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def context(store, mock_client, navigator, storage):
    return StepContext(store=store, client=mock_client, navigator=navigator, storage=storage)


@pytest.fixture
def sample_profile():
    return BusinessProfile(
        domain="acme.com",
        business_name="Acme",
        description="Anvils and rockets",
        target_audiences=("coyotes", "hunters"),
    )


@pytest.fixture
def sample_categories():
    return [
        PersistedCategory(id="c1", name="Product reviews"),
        PersistedCategory(id="c2", name="How-to guides"),
    ]


@pytest.fixture
def sample_prompts(sample_categories):
    return [
        Prompt(text="Best anvil for beginners?", category=sample_categories[0], id="p1"),
        Prompt(text="How do I launch a rocket safely?", category=sample_categories[1], id="p2"),
    ]


@pytest.fixture
def garbled_client():
    """Factory for a real client whose responses claim gzip but are not."""
    import httpx

    from brand_onboarding.client import OnboardingClient

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-encoding": "gzip"}, content=b"not gzip at all")

    def make() -> OnboardingClient:
        return OnboardingClient(token="t", base_url="http://onboarding.test", transport=httpx.MockTransport(handler))

    return make
