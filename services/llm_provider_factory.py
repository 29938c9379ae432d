"""
LLM Provider Factory
Provides a unified interface for text-generation providers (Anthropic, OpenAI)
Allows swapping providers via the LLM_PROVIDER setting

Providers send one prompt and return the raw response text. SDK-level retries
are switched off: the model gateway owns the retry policy, so every provider
maps its SDK errors onto TransientNetworkError (worth retrying) or
UpstreamRejected (not worth retrying).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from config import Settings
from services.errors import ConfigError, TransientNetworkError, UpstreamRejected

logger = logging.getLogger(__name__)


def _status_error_message(error: Any) -> str:
    """Pull the provider's human-readable message out of an API status error."""
    body = getattr(error, "body", None)
    if isinstance(body, dict):
        detail = body.get("error")
        if isinstance(detail, dict) and detail.get("message"):
            return str(detail["message"])
        if isinstance(detail, str):
            return detail
    return str(getattr(error, "status_code", None) or error)


def _classify_status(status_code: int, message: str) -> Exception:
    if status_code >= 500:
        return TransientNetworkError(f"Provider returned {status_code}: {message}", status=status_code)
    return UpstreamRejected(message, status=status_code)


class LLMProvider(ABC):
    """Abstract base class for LLM providers"""

    DEFAULT_MODEL: str = ""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        timeout: float = 60.0,
    ) -> str:
        """
        Send a single-turn prompt and return the raw text of the reply.

        Raises:
            TransientNetworkError: On timeout, connection failure or 5xx
            UpstreamRejected: On any other non-success status (4xx)
        """
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the provider name ('anthropic', 'openai')"""
        pass


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API provider implementation"""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"

    def __init__(self, api_key: str, timeout: float = 60.0, client: Any = None):
        """Initialize Anthropic provider with API key"""
        if client is None:
            import anthropic

            client = anthropic.Anthropic(api_key=api_key, max_retries=0, timeout=timeout)

        self.client = client
        logger.info("Initialized Anthropic provider")

    def complete(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        timeout: float = 60.0,
    ) -> str:
        """Create a message using the Anthropic API and return its text blocks"""
        import anthropic

        try:
            response = self.client.messages.create(
                model=model or self.DEFAULT_MODEL,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
                timeout=timeout,
            )
        except anthropic.APIConnectionError as e:
            # Also covers APITimeoutError
            raise TransientNetworkError(f"Anthropic connection failed: {e}") from e
        except anthropic.APIStatusError as e:
            raise _classify_status(e.status_code, _status_error_message(e)) from e

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.info(
                f"Anthropic completion: {response.model}, "
                f"input_tokens={usage.input_tokens}, output_tokens={usage.output_tokens}"
            )

        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )

    def get_provider_name(self) -> str:
        return "anthropic"


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions provider implementation"""

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(self, api_key: str, timeout: float = 60.0, client: Any = None):
        """Initialize OpenAI provider with API key"""
        if client is None:
            from openai import OpenAI

            client = OpenAI(api_key=api_key, max_retries=0, timeout=timeout)

        self.client = client
        logger.info("Initialized OpenAI provider")

    def complete(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        timeout: float = 60.0,
    ) -> str:
        """Create a chat completion using the OpenAI API and return its content"""
        import openai

        try:
            response = self.client.chat.completions.create(
                model=model or self.DEFAULT_MODEL,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
                timeout=timeout,
            )
        except openai.APIConnectionError as e:
            raise TransientNetworkError(f"OpenAI connection failed: {e}") from e
        except openai.APIStatusError as e:
            raise _classify_status(e.status_code, _status_error_message(e)) from e

        logger.info(f"OpenAI completion: {response.model}, tokens={response.usage.total_tokens}")
        return response.choices[0].message.content or ""

    def get_provider_name(self) -> str:
        return "openai"


class LLMProviderFactory:
    """Factory class for creating LLM provider instances"""

    PROVIDERS: Dict[str, type] = {
        "anthropic": AnthropicProvider,
        "openai": OpenAIProvider,
    }

    API_KEY_SETTINGS = {
        "anthropic": ("anthropic_api_key", "ANTHROPIC_API_KEY"),
        "openai": ("openai_api_key", "OPENAI_API_KEY"),
    }

    @staticmethod
    def create_provider(settings: Settings) -> LLMProvider:
        """
        Create an LLM provider instance from settings.

        Raises:
            ConfigError: If the provider is unknown or its API key is missing.
                Raised before any client is built, so no network call happens.
        """
        provider_name = settings.llm_provider
        provider_class = LLMProviderFactory.PROVIDERS.get(provider_name)
        if provider_class is None:
            raise ConfigError(
                f"Unsupported LLM provider: {provider_name}. "
                f"Supported providers: {', '.join(LLMProviderFactory.PROVIDERS)}"
            )

        attribute, env_name = LLMProviderFactory.API_KEY_SETTINGS[provider_name]
        api_key = getattr(settings, attribute)
        if not api_key:
            raise ConfigError(f"{env_name} not configured")

        logger.debug(f"Creating LLM provider: {provider_name}")
        return provider_class(api_key=api_key, timeout=settings.llm_timeout)

    @staticmethod
    def get_default_model(settings: Settings) -> str:
        if settings.llm_model:
            return settings.llm_model
        provider_class = LLMProviderFactory.PROVIDERS.get(settings.llm_provider, AnthropicProvider)
        return provider_class.DEFAULT_MODEL
