"""
LLM Client Abstraction

One interface over OpenAI and Anthropic Claude for report generation.
Providers are tried in order: the configured primary first, then the
other one when it has a key.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


@dataclass
class LLMConfig:
    """Configuration for LLM client."""

    provider: LLMProvider
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-3-5-haiku-latest"
    max_tokens: int = 3000
    temperature: float = 0.7


@dataclass
class LLMResponse:
    """Text returned by a provider."""

    content: str
    model: str
    provider: LLMProvider
    usage: dict = field(default_factory=dict)


class BaseLLMClient(ABC):
    """A single provider. Subclasses implement `_complete`."""

    provider: LLMProvider

    def __init__(self, api_key: str, model: str, max_tokens: int, temperature: float):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = None

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        try:
            return await self._complete(
                system_prompt,
                user_prompt,
                self.temperature if temperature is None else temperature,
                self.max_tokens if max_tokens is None else max_tokens,
            )
        except Exception as e:
            logger.error(f"{self.provider.value} API error ({self.model}): {e}")
            raise

    @abstractmethod
    async def _complete(
        self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int
    ) -> LLMResponse:
        pass


class OpenAIClient(BaseLLMClient):
    """OpenAI chat completions."""

    provider = LLMProvider.OPENAI

    def _get_client(self):
        if self._client is None:
            import openai

            self._client = openai.AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def _complete(self, system_prompt, user_prompt, temperature, max_tokens):
        response = await self._get_client().chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        usage = response.usage
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=self.model,
            provider=self.provider,
            usage={"total_tokens": usage.total_tokens} if usage else {},
        )


class AnthropicClient(BaseLLMClient):
    """Anthropic messages API."""

    provider = LLMProvider.ANTHROPIC

    def _get_client(self):
        if self._client is None:
            import anthropic

            self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def _complete(self, system_prompt, user_prompt, temperature, max_tokens):
        response = await self._get_client().messages.create(
            model=self.model,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        usage = response.usage
        return LLMResponse(
            content="".join(b.text for b in response.content if hasattr(b, "text")),
            model=self.model,
            provider=self.provider,
            usage={"total_tokens": usage.input_tokens + usage.output_tokens} if usage else {},
        )


class LLMClient:
    """
    Ordered provider chain.

    Each provider is tried once; the last error is re-raised when all
    of them fail.
    """

    def __init__(self, config: LLMConfig):
        self.config = config
        self._clients: list[BaseLLMClient] = self._build_chain(config)
        if not self._clients:
            logger.warning("No LLM API keys configured. Report generation disabled.")

    @staticmethod
    def _build_chain(config: LLMConfig) -> list[BaseLLMClient]:
        available = {}
        if config.openai_api_key:
            available[LLMProvider.OPENAI] = OpenAIClient(
                config.openai_api_key, config.openai_model, config.max_tokens, config.temperature
            )
        if config.anthropic_api_key:
            available[LLMProvider.ANTHROPIC] = AnthropicClient(
                config.anthropic_api_key, config.anthropic_model, config.max_tokens, config.temperature
            )

        order = [config.provider] + [p for p in LLMProvider if p != config.provider]
        return [available[p] for p in order if p in available]

    @property
    def providers(self) -> list[LLMProvider]:
        return [c.provider for c in self._clients]

    @property
    def is_configured(self) -> bool:
        return bool(self._clients)

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate with the first provider that answers."""
        if not self._clients:
            raise RuntimeError("No LLM providers configured")

        last_error: Optional[Exception] = None
        for client in self._clients:
            try:
                return await client.generate(system_prompt, user_prompt, temperature, max_tokens)
            except Exception as e:
                last_error = e
                logger.warning(f"{client.provider.value} failed, trying next provider")

        raise last_error


def build_llm_client(settings) -> LLMClient:
    """Create an LLM client from application settings."""
    return LLMClient(
        LLMConfig(
            provider=LLMProvider(settings.llm_primary_provider),
            openai_api_key=settings.openai_api_key,
            anthropic_api_key=settings.anthropic_api_key,
            openai_model=settings.openai_model,
            anthropic_model=settings.anthropic_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        )
    )
