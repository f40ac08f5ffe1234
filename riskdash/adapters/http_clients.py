"""
HTTP boundary for the external collaborators.

Every response is validated against an explicit model before it reaches the
services. Unreachable services, non-2xx answers and malformed payloads all
fail closed with UpstreamError; nothing is retried here.
"""

from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from riskdash.config import EndpointsConfig
from riskdash.domain.models import (
    AssistantAnswer,
    AssistantQuery,
    FinanceAssessmentInput,
    FinancialStabilityResult,
    HealthAssessmentInput,
    HealthPredictionResult,
)
from riskdash.errors import UpstreamError

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class NarrativeResponse(BaseModel):
    """Narrative endpoint reply."""

    analysis: str


class RiskServicesClient:
    """
    Async client for the finance/health prediction, narrative and assistant services.

    Pass an ``httpx.AsyncClient`` to share a connection pool or to inject a
    mock transport; otherwise the client creates and owns one.
    """

    def __init__(
        self, endpoints: EndpointsConfig, http_client: httpx.AsyncClient | None = None
    ) -> None:
        self.endpoints = endpoints
        self.logger = logger.bind(component="risk_services_client")
        self._owns_client = http_client is None
        if http_client is None:
            client_kwargs: dict[str, Any] = {}
            if endpoints.request_timeout_seconds is not None:
                client_kwargs["timeout"] = endpoints.request_timeout_seconds
            http_client = httpx.AsyncClient(**client_kwargs)
        self._http = http_client

    async def __aenter__(self) -> "RiskServicesClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def predict_finance(self, form: FinanceAssessmentInput) -> FinancialStabilityResult:
        data = await self._post_json(
            "finance",
            self.endpoints.finance_predict_url,
            form.to_wire(),
            failure_message="Failed to get finance prediction",
        )
        return self._validate("finance", FinancialStabilityResult, data)

    async def predict_health(self, form: HealthAssessmentInput) -> HealthPredictionResult:
        data = await self._post_json(
            "health",
            self.endpoints.health_predict_url,
            form.to_wire(),
            failure_message="Failed to get health prediction",
        )
        return self._validate("health", HealthPredictionResult, data)

    async def generate_analysis(self, prompt: str) -> str:
        data = await self._post_json(
            "analysis",
            self.endpoints.analysis_url,
            {"prompt": prompt},
            failure_message="Failed to generate analysis",
        )
        return self._validate("analysis", NarrativeResponse, data).analysis

    async def ask(self, query: AssistantQuery) -> AssistantAnswer:
        data = await self._post_json(
            "assistant",
            self.endpoints.ask_url,
            query.model_dump(mode="json"),
            failure_message="Failed to get an answer from the assistant",
        )
        return self._validate("assistant", AssistantAnswer, data)

    async def _post_json(
        self, service: str, url: str, payload: dict[str, Any], failure_message: str
    ) -> Any:
        try:
            response = await self._http.post(url, json=payload)
        except httpx.HTTPError as e:
            self.logger.error("upstream_unreachable", service=service, url=url, error=str(e))
            raise UpstreamError(service, f"{failure_message}: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            message = data.get("message") if isinstance(data, dict) else None
            self.logger.warning(
                "upstream_error_response",
                service=service,
                status_code=response.status_code,
                message=message,
            )
            raise UpstreamError(service, message or failure_message, response.status_code)

        if data is None:
            raise UpstreamError(
                service, f"{failure_message}: response is not JSON", response.status_code
            )

        self.logger.debug("upstream_response_received", service=service)
        return data

    def _validate(self, service: str, model: type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            self.logger.error("upstream_payload_malformed", service=service, error=str(e))
            raise UpstreamError(service, f"Malformed {service} response") from e
