"""
Onboarding error types.

Raised by the remote service client and converted to user-facing state at the
controller, guard and completion boundaries. Nothing here is meant to reach a
global handler.
"""


class OnboardingError(Exception):
    """Base class for onboarding failures."""


class AuthenticationError(OnboardingError):
    """Bearer credential missing or rejected (HTTP 401). Routes to login."""


class ServiceError(OnboardingError):
    """Remote service call failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ServiceUnavailableError(ServiceError):
    """Network failure or timeout - no HTTP response was received."""


class MalformedResponseError(ServiceError):
    """Response body could not be decoded into the expected shape."""
