"""
Tests for the entry guard decision table.
"""

import asyncio
from unittest.mock import AsyncMock

from brand_onboarding.client import AccountStatus
from brand_onboarding.errors import AuthenticationError, MalformedResponseError, ServiceUnavailableError
from brand_onboarding.guard import EntryDecision, evaluate_entry

from fake_service import FakeService


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


class TestEvaluateEntry:
    """Test each row of the decision table with a mocked client."""

    def test_no_credential(self, mock_client):
        assert _run(evaluate_entry(None, mock_client)) == EntryDecision.REDIRECT_LOGIN
        assert _run(evaluate_entry("", mock_client)) == EntryDecision.REDIRECT_LOGIN
        mock_client.get_status.assert_not_called()

    def test_no_client(self):
        assert _run(evaluate_entry("token", None)) == EntryDecision.REDIRECT_LOGIN

    def test_already_configured(self, mock_client):
        mock_client.get_status = AsyncMock(return_value=AccountStatus(should_redirect_to_dashboard=True))
        assert _run(evaluate_entry("token", mock_client)) == EntryDecision.REDIRECT_DASHBOARD

    def test_needs_onboarding(self, mock_client):
        mock_client.get_status = AsyncMock(return_value=AccountStatus())
        assert _run(evaluate_entry("token", mock_client)) == EntryDecision.ENTER_WORKFLOW

    def test_rejected_credential(self, mock_client):
        mock_client.get_status = AsyncMock(side_effect=AuthenticationError("401"))
        assert _run(evaluate_entry("token", mock_client)) == EntryDecision.REDIRECT_LOGIN

    def test_service_down_fails_open(self, mock_client):
        mock_client.get_status = AsyncMock(side_effect=ServiceUnavailableError("down"))
        assert _run(evaluate_entry("token", mock_client)) == EntryDecision.ENTER_WORKFLOW

    def test_garbage_response_fails_open(self, mock_client):
        mock_client.get_status = AsyncMock(side_effect=MalformedResponseError("bad json"))
        assert _run(evaluate_entry("token", mock_client)) == EntryDecision.ENTER_WORKFLOW


class TestEvaluateEntryOverHttp:
    """Same table, through the fake service."""

    def _decide(self, service: FakeService, token: str = "test-token") -> EntryDecision:
        async def scenario():
            async with service.client(token) as client:
                return await evaluate_entry(token, client)

        return _run(scenario())

    def test_enter(self):
        assert self._decide(FakeService()) == EntryDecision.ENTER_WORKFLOW

    def test_dashboard(self):
        service = FakeService()
        service.responses["status"] = {"shouldRedirectToDashboard": True}
        assert self._decide(service) == EntryDecision.REDIRECT_DASHBOARD

    def test_expired_token(self):
        assert self._decide(FakeService(), token="expired") == EntryDecision.REDIRECT_LOGIN

    def test_server_error(self):
        service = FakeService()
        service.fail("status", 503)
        assert self._decide(service) == EntryDecision.ENTER_WORKFLOW

    def test_undecodable_body_fails_open(self, garbled_client):
        async def scenario():
            async with garbled_client() as client:
                return await evaluate_entry("t", client)

        assert _run(scenario()) == EntryDecision.ENTER_WORKFLOW
