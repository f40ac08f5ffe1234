"""
Tests for the narrative text generators.

Covers:
- Backend selection from NarrativeConfig
- HttpTextGenerator delegating to the analysis endpoint
- AgentTextGenerator returning the agent output

These tests avoid real model calls by patching the underlying Agent.run to
return pre-constructed results with an `.output` attribute, or by using the
pydantic-ai "test" model.
"""

from __future__ import annotations

import httpx
import pytest

from riskdash.adapters.http_clients import RiskServicesClient
from riskdash.config import EndpointsConfig, NarrativeConfig
from riskdash.errors import UpstreamError
from riskdash.services.narrative import (
    AgentTextGenerator,
    HttpTextGenerator,
    build_text_generator,
)


class _FakeAgentResult:
    """Minimal stand-in for pydantic-ai AgentRunResult with .output"""

    def __init__(self, output: str) -> None:
        self.output = output


def _client(handler) -> RiskServicesClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RiskServicesClient(EndpointsConfig(), http_client=http)


def test_http_backend_is_the_default() -> None:
    client = _client(lambda request: httpx.Response(200, json={"analysis": "x"}))

    generator = build_text_generator(NarrativeConfig(), client)

    assert isinstance(generator, HttpTextGenerator)


def test_agent_backend_builds_agent() -> None:
    client = _client(lambda request: httpx.Response(200))
    config = NarrativeConfig(backend="agent", model_name="test")

    generator = build_text_generator(config, client)

    assert isinstance(generator, AgentTextGenerator)


@pytest.mark.asyncio
async def test_http_generator_returns_analysis_text() -> None:
    client = _client(lambda request: httpx.Response(200, json={"analysis": "Solid finances."}))

    text = await HttpTextGenerator(client).generate("Provide a short analysis")

    assert text == "Solid finances."


@pytest.mark.asyncio
async def test_http_generator_propagates_upstream_errors() -> None:
    client = _client(lambda request: httpx.Response(502, json={"message": "bad gateway"}))

    with pytest.raises(UpstreamError, match="bad gateway"):
        await HttpTextGenerator(client).generate("Provide a short analysis")


@pytest.mark.asyncio
async def test_agent_generator_returns_run_output() -> None:
    generator = AgentTextGenerator(NarrativeConfig(backend="agent", model_name="test"))
    prompts: list[str] = []

    async def fake_run(prompt, *args, **kwargs):
        prompts.append(prompt)
        return _FakeAgentResult("Blood pressure is well controlled.")

    # Patch the underlying pydantic-ai Agent.run
    generator.agent.run = fake_run  # type: ignore[method-assign]

    text = await generator.generate("Provide a short analysis (1-2 lines) of a health score")

    assert text == "Blood pressure is well controlled."
    assert prompts == ["Provide a short analysis (1-2 lines) of a health score"]


@pytest.mark.asyncio
async def test_agent_generator_with_test_model_produces_text() -> None:
    generator = AgentTextGenerator(NarrativeConfig(backend="agent", model_name="test"))

    text = await generator.generate("Provide a short analysis (1-2 lines) of a finance score")

    assert isinstance(text, str)
    assert text
