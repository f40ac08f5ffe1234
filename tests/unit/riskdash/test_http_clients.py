"""
Tests for the HTTP boundary.

Covers:
- Request bodies use the services' wire names
- Successful responses are validated into models
- Non-2xx responses surface the service's message, or a fixed fallback
- Malformed and non-JSON payloads fail closed
- Network errors become UpstreamError

Uses httpx.MockTransport; no sockets are opened.
"""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from riskdash.adapters.http_clients import RiskServicesClient
from riskdash.config import EndpointsConfig
from riskdash.domain.models import (
    AssistantQuery,
    FinanceAssessmentInput,
    FinancialStabilityResult,
    HealthAssessmentInput,
)
from riskdash.errors import UpstreamError

Handler = Callable[[httpx.Request], httpx.Response]


def _client(handler: Handler) -> RiskServicesClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RiskServicesClient(EndpointsConfig(), http_client=http)


@pytest.mark.asyncio
async def test_predict_finance_posts_wire_names(finance_form: FinanceAssessmentInput) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"FSI": 0.42, "risk": "Medium", "model": "xgb"})

    client = _client(handler)
    result = await client.predict_finance(finance_form)

    assert isinstance(result, FinancialStabilityResult)
    assert result.fsi == 0.42
    assert result.risk == "Medium"
    assert result.model_extra == {"model": "xgb"}

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "http://localhost:8000/finance/predict"
    body = json.loads(request.content)
    assert body["Loan_Amount"] == 17000
    assert body["Education_Level"] == "Master's"
    assert "loan_amount" not in body


@pytest.mark.asyncio
async def test_predict_health_posts_wire_names(health_form: HealthAssessmentInput) -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"risk": "Low", "score": 0.07, "probability": 0.07})

    result = await _client(handler).predict_health(health_form)

    assert result.risk == "Low"
    assert result.score == 0.07
    assert seen[0]["sysBP"] == 130
    assert seen[0]["currentSmoker"] == 0


@pytest.mark.asyncio
async def test_error_response_uses_service_message(finance_form: FinanceAssessmentInput) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"message": "Credit_Score out of range"})

    with pytest.raises(UpstreamError) as exc_info:
        await _client(handler).predict_finance(finance_form)

    error = exc_info.value
    assert error.service == "finance"
    assert error.message == "Credit_Score out of range"
    assert error.status_code == 422


@pytest.mark.asyncio
async def test_error_response_without_message_uses_fallback(
    health_form: HealthAssessmentInput,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="Internal Server Error")

    with pytest.raises(UpstreamError) as exc_info:
        await _client(handler).predict_health(health_form)

    assert exc_info.value.message == "Failed to get health prediction"
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_malformed_payload_fails_closed(finance_form: FinanceAssessmentInput) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"FSI": "very risky"})

    with pytest.raises(UpstreamError, match="Malformed finance response"):
        await _client(handler).predict_finance(finance_form)


@pytest.mark.asyncio
async def test_non_json_success_body_fails_closed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>ok</html>")

    with pytest.raises(UpstreamError, match="not JSON"):
        await _client(handler).generate_analysis("prompt")


@pytest.mark.asyncio
async def test_connect_error_becomes_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as exc_info:
        await _client(handler).generate_analysis("prompt")

    assert exc_info.value.service == "analysis"
    assert exc_info.value.status_code is None
    assert "connection refused" in exc_info.value.message


@pytest.mark.asyncio
async def test_generate_analysis_returns_text() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"analysis": "Keep it up."})

    text = await _client(handler).generate_analysis("Provide a short analysis")

    assert text == "Keep it up."
    assert seen == [{"prompt": "Provide a short analysis"}]


@pytest.mark.asyncio
async def test_ask_sends_question_with_risk_context() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"answer": "Build an emergency fund.", "sources": ["a"]})

    query = AssistantQuery(
        input="What should I do?",
        health_risk="Low Risk",
        health_score=100,
        finance_risk="Low Risk",
        finance_score=75,
        time_horizon_risk="Long-term safe zone",
        time_horizon_score=88,
    )

    answer = await _client(handler).ask(query)

    assert answer.answer == "Build an emergency fund."
    assert answer.sources == ["a"]
    assert seen[0]["input"] == "What should I do?"
    assert seen[0]["finance_score"] == 75
    assert seen[0]["time_horizon_risk"] == "Long-term safe zone"


@pytest.mark.asyncio
async def test_ask_tolerates_missing_answer_fields() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    answer = await _client(handler).ask(AssistantQuery(input="hello"))

    assert answer.answer == ""
    assert answer.sources == []


@pytest.mark.asyncio
async def test_injected_client_is_not_closed() -> None:
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))

    async with RiskServicesClient(EndpointsConfig(), http_client=http):
        pass

    assert not http.is_closed
    await http.aclose()


@pytest.mark.asyncio
async def test_owned_client_is_closed_and_uses_configured_timeout() -> None:
    client = RiskServicesClient(EndpointsConfig(request_timeout_seconds=3.0))

    assert client._http.timeout.connect == 3.0
    await client.aclose()
    assert client._http.is_closed
