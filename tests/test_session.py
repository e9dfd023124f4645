"""
End-to-end session tests against the in-process fake service.
"""

import asyncio

import pytest

from brand_onboarding.action_log import ActionLogger, load_actions
from brand_onboarding.controllers import BusinessController, CompetitorsController, IntegrationController
from brand_onboarding.guard import EntryDecision
from brand_onboarding.navigation import Destination, Navigator
from brand_onboarding.progress import StepStatus
from brand_onboarding.session import OnboardingSession
from brand_onboarding.state import WorkflowState, replay
from brand_onboarding.storage import DOMAIN_KEY, MemoryKeyValueStore

from fake_service import TOKEN, FakeService


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


async def _fill_business(session: OnboardingSession) -> None:
    session.controller.set_field("domain", "acme.com")
    session.controller.set_field("business_name", "Acme")
    assert await session.advance()
    await session.wait_idle()


async def _walk_to_integration(session: OnboardingSession) -> None:
    await _fill_business(session)
    for _ in range(4):
        assert await session.advance()
        await session.wait_idle()


class TestEntry:
    """Test how a session starts."""

    def test_no_credential_goes_to_login(self):
        async def scenario():
            session = OnboardingSession(None, storage=MemoryKeyValueStore())
            decision = await session.start()
            await session.aclose()
            return session, decision

        session, decision = _run(scenario())
        assert decision == EntryDecision.REDIRECT_LOGIN
        assert session.navigator.current == Destination.LOGIN
        assert session.controller is None
        assert session.client is None

    def test_configured_account_goes_to_dashboard(self):
        service = FakeService()
        service.responses["status"] = {"shouldRedirectToDashboard": True}

        async def scenario():
            session = OnboardingSession(TOKEN, client=service.client(), storage=MemoryKeyValueStore())
            decision = await session.start()
            await session.aclose()
            return session, decision

        session, decision = _run(scenario())
        assert decision == EntryDecision.REDIRECT_DASHBOARD
        assert session.navigator.history == [Destination.DASHBOARD]
        assert session.controller is None

    def test_enter_activates_first_step(self):
        service = FakeService()

        async def scenario():
            session = OnboardingSession(TOKEN, client=service.client(), storage=MemoryKeyValueStore())
            await session.start()
            controller = session.controller
            await session.aclose()
            return session, controller

        session, controller = _run(scenario())
        assert isinstance(controller, BusinessController)
        assert session.navigator.history == [Destination.ONBOARDING]

    def test_not_started(self):
        session = OnboardingSession(None, storage=MemoryKeyValueStore())
        with pytest.raises(RuntimeError):
            _run(session.advance())


class TestWorkflow:
    """Test walking the six steps."""

    def test_happy_path(self):
        service = FakeService()
        storage = MemoryKeyValueStore()

        async def scenario():
            session = OnboardingSession(TOKEN, client=service.client(), storage=storage)
            await session.start()

            await _fill_business(session)
            assert isinstance(session.controller, CompetitorsController)
            assert len(session.store.state.competitors) == 4
            assert await session.advance()
            await session.wait_idle()

            assert len(session.store.state.categories) == 2
            assert await session.advance()
            await session.wait_idle()

            assert len(session.store.state.prompts) == 2
            assert await session.advance()  # prompts -> blog
            assert await session.advance()  # blog -> integration
            assert isinstance(session.controller, IntegrationController)
            assert not await session.advance()

            completed = await session.complete()
            await session.aclose()
            return session, completed

        session, completed = _run(scenario())
        assert completed
        assert session.navigator.current == Destination.DASHBOARD
        assert session.controller is None
        assert session.store.state == WorkflowState()
        assert storage.get(DOMAIN_KEY) is None
        assert service.calls_to("fetch-competitors")[0]["businessName"] == "Acme"
        assert len(service.calls_to("complete")) == 1

    def test_gate_blocks_advance(self):
        service = FakeService()

        async def scenario():
            session = OnboardingSession(TOKEN, client=service.client(), storage=MemoryKeyValueStore())
            await session.start()
            session.controller.set_field("domain", "acme.com")
            advanced = await session.advance()
            step = session.store.state.current_step
            await session.aclose()
            return advanced, step

        assert _run(scenario()) == (False, 1)

    def test_retreat_and_reenter_keeps_data(self):
        service = FakeService()

        async def scenario():
            session = OnboardingSession(TOKEN, client=service.client(), storage=MemoryKeyValueStore())
            await session.start()
            await _fill_business(session)
            await session.retreat()
            business = session.controller
            await session.advance()
            await session.wait_idle()
            await session.aclose()
            return business

        business = _run(scenario())
        assert isinstance(business, BusinessController)
        assert business.draft.domain == "acme.com"
        # Competitors were already stored, so re-entering does not fetch again
        assert len(service.calls_to("fetch-competitors")) == 1

    def test_complete_only_on_last_step(self):
        service = FakeService()

        async def scenario():
            session = OnboardingSession(TOKEN, client=service.client(), storage=MemoryKeyValueStore())
            await session.start()
            completed = await session.complete()
            await session.aclose()
            return completed

        assert _run(scenario()) is False
        assert service.calls_to("complete") == []

    def test_progress(self):
        service = FakeService()

        async def scenario():
            session = OnboardingSession(TOKEN, client=service.client(), storage=MemoryKeyValueStore())
            await session.start()
            await _fill_business(session)
            progress = session.progress()
            await session.aclose()
            return progress

        statuses = [e.status for e in _run(scenario())]
        assert statuses[:2] == [StepStatus.COMPLETED, StepStatus.CURRENT]
        assert statuses[2:] == [StepStatus.PENDING] * 4


class TestFailures:
    """Test failure routing through a whole session."""

    def test_completion_failure_allows_retry(self):
        service = FakeService()
        service.fail("complete", 500)

        async def scenario():
            session = OnboardingSession(TOKEN, client=service.client(), storage=MemoryKeyValueStore())
            await session.start()
            await _walk_to_integration(session)
            before = session.store.state
            first = await session.complete()
            error = session.controller.error
            service.recover("complete")
            second = await session.complete()
            await session.aclose()
            return before, first, error, second, session

        before, first, error, second, session = _run(scenario())
        assert before.current_step == 6
        assert first is False
        assert error == "Failed to complete onboarding. Please try again."
        assert second is True
        assert session.navigator.current == Destination.DASHBOARD

    def test_expired_credential_mid_session(self):
        service = FakeService()

        async def scenario():
            session = OnboardingSession(TOKEN, client=service.client(), storage=MemoryKeyValueStore())
            await session.start()
            service.token = "rotated"
            await _fill_business(session)
            await session.aclose()
            return session

        session = _run(scenario())
        assert session.navigator.current == Destination.LOGIN
        assert session.controller is None
        assert not session.store.state.is_loading

    def test_generation_failure_shows_message(self):
        service = FakeService()
        service.fail("fetch-competitors", 500)

        async def scenario():
            session = OnboardingSession(TOKEN, client=service.client(), storage=MemoryKeyValueStore())
            await session.start()
            await _fill_business(session)
            state = session.store.state
            await session.aclose()
            return state

        state = _run(scenario())
        assert state.current_step == 2
        assert state.competitors == ()
        assert state.error == "Failed to fetch competitors. Please try again."
        assert not state.is_loading


class TestPersistence:
    """Test what survives a reload."""

    def test_domain_restored_on_new_session(self):
        service = FakeService()
        storage = MemoryKeyValueStore()

        async def scenario():
            first = OnboardingSession(TOKEN, client=service.client(), storage=storage)
            await first.start()
            first.controller.set_field("domain", "acme.com")
            await first.aclose()

            second = OnboardingSession(TOKEN, client=service.client(), storage=storage)
            await second.start()
            restored = second.controller.draft.domain
            await second.aclose()
            return restored

        assert _run(scenario()) == "acme.com"

    def test_action_log_replays_session(self, tmp_path):
        service = FakeService()

        async def scenario():
            log = ActionLogger(log_dir=tmp_path, session_id="replay")
            session = OnboardingSession(
                TOKEN,
                client=service.client(),
                storage=MemoryKeyValueStore(),
                navigator=Navigator(),
                action_log=log,
            )
            await session.start()
            await _fill_business(session)
            assert await session.advance()
            await session.wait_idle()
            await session.aclose()
            return session, log.log_path

        session, path = _run(scenario())
        actions = load_actions(path)
        assert actions == list(session.store.history)
        assert replay(actions)[-1] == session.store.state
        assert session.store.state.current_step == 3
