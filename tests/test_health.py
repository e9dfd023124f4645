"""Basic health check tests."""


def test_import_brand_onboarding():
    """Test that the package can be imported."""
    import brand_onboarding
    assert brand_onboarding.__version__ == "0.1.0"


def test_import_state():
    """Test that state models can be imported."""
    from brand_onboarding.state import WorkflowState, WorkflowStore

    store = WorkflowStore()
    assert isinstance(store.state, WorkflowState)
    assert store.state.current_step == 1
    assert store.state.total_steps == 6


def test_settings_defaults():
    """Test that settings load with test environment overrides."""
    from brand_onboarding.config import OnboardingSettings

    settings = OnboardingSettings(_env_file=None)
    assert settings.onboarding_api_url == "http://onboarding.test"
    assert settings.onboarding_api_prefix == "/api/v1/onboarding"
    assert settings.onboarding_request_timeout == 180.0
    assert settings.is_development
    assert not settings.is_production
