"""
Remote Onboarding Service Client.

Thin async wrapper over the onboarding endpoints of the remote service.
Every call carries the bearer credential; failures are mapped onto the
exceptions in brand_onboarding.errors so callers never handle httpx types.
"""

import logging
from typing import Any, Sequence

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import OnboardingSettings, get_settings
from .errors import (
    AuthenticationError,
    MalformedResponseError,
    ServiceError,
    ServiceUnavailableError,
)
from .models import (
    BusinessProfile,
    Category,
    Prompt,
    category_to_wire,
    parse_category,
    parse_prompt,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Request/Response Models
# =============================================================================


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AccountStatus(_WireModel):
    """Server-reported account state, used by the entry guard."""
    should_redirect_to_dashboard: bool = Field(default=False, alias="shouldRedirectToDashboard")
    status: str | None = None
    current_step: int | None = Field(default=None, alias="currentStep")
    is_completed: bool = Field(default=False, alias="isCompleted")


class DomainAnalysis(_WireModel):
    """Business details inferred from a website."""
    business_name: str = Field(default="", alias="businessName")
    description: str = ""
    target_audiences: list[str] = Field(default_factory=list, alias="targetAudiences")

    @field_validator("business_name", "description", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("target_audiences", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return [] if v is None else v


class CompetitorsResponse(_WireModel):
    competitors: list[str] = Field(default_factory=list)

    @field_validator("competitors", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return [] if v is None else v


class CategoriesResponse(_WireModel):
    categories: list[Any] = Field(default_factory=list)


class PromptsResponse(_WireModel):
    prompts: list[Any] = Field(default_factory=list)


class AnalyzeDomainRequest(_WireModel):
    domain: str


class FetchCompetitorsRequest(_WireModel):
    domain: str
    business_name: str = Field(alias="businessName")
    description: str = ""


class GenerateCategoriesRequest(FetchCompetitorsRequest):
    competitors: list[str] = Field(default_factory=list)


class GeneratePromptsRequest(_WireModel):
    categories: list[str | dict]


# =============================================================================
# Client
# =============================================================================


class OnboardingClient:
    """
    Async client for the onboarding endpoints.

    Usage:
        async with OnboardingClient.from_settings(token) as client:
            status = await client.get_status()
    """

    def __init__(
        self,
        token: str,
        base_url: str,
        prefix: str = "/api/v1/onboarding",
        timeout: float = 180.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.prefix = prefix.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Authorization": f"Bearer {token}"},
        )

    @classmethod
    def from_settings(
        cls,
        token: str,
        settings: OnboardingSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "OnboardingClient":
        settings = settings or get_settings()
        return cls(
            token=token,
            base_url=settings.onboarding_api_url,
            prefix=settings.onboarding_api_prefix,
            timeout=settings.onboarding_request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "OnboardingClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # =========================================================================
    # Transport
    # =========================================================================

    async def _request(self, method: str, path: str, body: BaseModel | None = None) -> Any:
        url = f"{self.prefix}{path}"
        kwargs: dict[str, Any] = {}
        if body is not None:
            kwargs["json"] = body.model_dump(by_alias=True)

        logger.debug(f"{method} {url}")
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise ServiceUnavailableError(f"{method} {url} timed out") from e
        except httpx.RequestError as e:
            raise ServiceUnavailableError(f"{method} {url} failed: {e}") from e

        if response.status_code == 401:
            raise AuthenticationError(f"{method} {url} rejected the credential")
        if response.is_error:
            raise ServiceError(
                f"{method} {url} failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"{method} {url} returned invalid JSON",
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _parse(model: type[BaseModel], data: Any) -> Any:
        try:
            return model.model_validate(data if data is not None else {})
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected {model.__name__} payload: {e}") from e

    # =========================================================================
    # Endpoints
    # =========================================================================

    async def get_status(self) -> AccountStatus:
        data = await self._request("GET", "/status")
        return self._parse(AccountStatus, data)

    async def analyze_domain(self, domain: str) -> DomainAnalysis:
        data = await self._request("POST", "/analyze-domain", AnalyzeDomainRequest(domain=domain))
        return self._parse(DomainAnalysis, data)

    async def fetch_competitors(self, profile: BusinessProfile) -> list[str]:
        body = FetchCompetitorsRequest(
            domain=profile.domain,
            business_name=profile.business_name,
            description=profile.description,
        )
        data = await self._request("POST", "/fetch-competitors", body)
        return self._parse(CompetitorsResponse, data).competitors

    async def generate_categories(
        self,
        profile: BusinessProfile,
        competitors: Sequence[str],
    ) -> list[Category]:
        body = GenerateCategoriesRequest(
            domain=profile.domain,
            business_name=profile.business_name,
            description=profile.description,
            competitors=list(competitors),
        )
        data = await self._request("POST", "/generate-categories", body)
        raw = self._parse(CategoriesResponse, data).categories
        return [parse_category(c) for c in raw]

    async def generate_prompts(self, categories: Sequence[Category]) -> list[Prompt]:
        body = GeneratePromptsRequest(categories=[category_to_wire(c) for c in categories])
        data = await self._request("POST", "/generate-prompts", body)
        raw = self._parse(PromptsResponse, data).prompts
        return [parse_prompt(p) for p in raw]

    async def finalize(self) -> None:
        """Mark onboarding complete. The service already holds the step data."""
        await self._request("POST", "/complete")
