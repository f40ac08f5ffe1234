"""
Text-generation collaborators for the per-score narratives.

Two interchangeable backends behind the TextGenerator protocol:
- HttpTextGenerator posts the prompt to the analysis endpoint.
- AgentTextGenerator runs a pydantic-ai agent against the configured model.
"""

from typing import Protocol

import structlog
from pydantic_ai import Agent

from riskdash.adapters.http_clients import RiskServicesClient
from riskdash.config import NarrativeConfig

logger = structlog.get_logger(__name__)


class TextGenerator(Protocol):
    """Turns a prompt into a short piece of text. May raise on any failure."""

    async def generate(self, prompt: str) -> str: ...


class HttpTextGenerator:
    """Delegates to the remote narrative endpoint."""

    def __init__(self, client: RiskServicesClient) -> None:
        self.client = client

    async def generate(self, prompt: str) -> str:
        return await self.client.generate_analysis(prompt)


class AgentTextGenerator:
    """Generates narratives with a pydantic-ai agent (Gemini by default)."""

    def __init__(self, config: NarrativeConfig) -> None:
        self.config = config
        self.logger = logger.bind(component="narrative_agent", model=config.model_name)
        self.agent = Agent(
            model=config.model_name,
            output_type=str,
            system_prompt=self._build_system_prompt(),
            model_settings={"temperature": config.temperature, "max_tokens": config.max_tokens},
        )

    def _build_system_prompt(self) -> str:
        return """You are a risk advisor commenting on a personal risk dashboard.

Scores run from 0 to 100 where higher means safer. Answer with one or two short
sentences: what the score means and one concrete next step. No disclaimers,
no markdown. This is supplementary information, not medical or financial advice."""

    async def generate(self, prompt: str) -> str:
        result = await self.agent.run(prompt)
        return result.output


def build_text_generator(config: NarrativeConfig, client: RiskServicesClient) -> TextGenerator:
    if config.backend == "agent":
        return AgentTextGenerator(config)
    return HttpTextGenerator(client)
