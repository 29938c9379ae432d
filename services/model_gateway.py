"""
Model Gateway
Sends a translation prompt to the configured text-generation provider and
returns a validated TranslationResult.

Retry policy: transient failures (timeout, connection error, 5xx) are retried
with exponential backoff; 4xx responses, unparseable output and schema
violations are not.
"""

import json
import logging
import time
from typing import Any, Callable, Optional

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from config import Settings
from services.errors import MalformedResponse, SchemaViolation, TransientNetworkError, UpstreamRejected
from services.llm_models.translation_models import TranslationResult
from services.llm_provider_factory import LLMProvider, LLMProviderFactory
from services.response_validator import validate_translation

logger = logging.getLogger(__name__)

BACKOFF_FACTOR = 2


def extract_json_document(raw_text: str) -> Any:
    """
    Parse the provider's raw text as a JSON document.

    Tries the text as-is first; then the slice from the first '{' to the last
    '}', which drops code fences and any prose around the object.

    Raises:
        MalformedResponse: If neither attempt parses
    """
    try:
        return json.loads(raw_text)
    except (json.JSONDecodeError, TypeError):
        pass

    text = raw_text or ""
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(text[start:end + 1])
        except json.JSONDecodeError:
            pass

    raise MalformedResponse(text)


class ModelGateway:
    """Translate prompts through an LLM provider with retries and validation."""

    def __init__(
        self,
        settings: Settings,
        provider: Optional[LLMProvider] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self._provider = provider
        self._sleep = sleep

    def _get_provider(self) -> LLMProvider:
        if self._provider is None:
            # Raises ConfigError when the API key is missing, before any request
            self._provider = LLMProviderFactory.create_provider(self.settings)
        return self._provider

    def _log_retry(self, retry_state) -> None:
        error = retry_state.outcome.exception()
        logger.warning(
            f"Transient provider failure (attempt {retry_state.attempt_number}), "
            f"retrying in {retry_state.next_action.sleep:.2f}s: {error}"
        )

    def complete(self, prompt: str) -> str:
        """Call the provider, retrying transient failures. Returns the raw text."""
        provider = self._get_provider()
        model = LLMProviderFactory.get_default_model(self.settings)

        retrying = Retrying(
            stop=stop_after_attempt(self.settings.llm_max_retries + 1),
            wait=wait_exponential(multiplier=self.settings.llm_backoff_base, exp_base=BACKOFF_FACTOR),
            retry=retry_if_exception_type(TransientNetworkError),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )

        try:
            return retrying(
                provider.complete,
                prompt,
                model=model,
                max_tokens=self.settings.llm_max_tokens,
                timeout=self.settings.llm_timeout,
            )
        except TransientNetworkError as e:
            attempts = self.settings.llm_max_retries + 1
            logger.error(f"Provider still failing after {attempts} attempts: {e}")
            raise UpstreamRejected(
                f"AI provider unavailable after {attempts} attempts", status=e.status
            ) from e

    def translate(self, prompt: str) -> TranslationResult:
        """
        Translate a prompt into a validated TranslationResult.

        Raises:
            ConfigError: Provider credential missing
            UpstreamRejected: Provider rejected the request or stayed unavailable
            MalformedResponse: Response holds no parseable JSON
            SchemaViolation: JSON does not match the translation schema
        """
        started = time.monotonic()
        raw_text = self.complete(prompt)

        try:
            parsed = extract_json_document(raw_text)
        except MalformedResponse:
            logger.error(f"Invalid AI response: {raw_text[:2000]!r}")
            raise

        try:
            result = validate_translation(parsed)
        except SchemaViolation as e:
            logger.error(f"AI response failed schema validation ({e.message}): {raw_text[:2000]!r}")
            raise

        logger.info(
            f"Translation successful: {len(result.words)} words, "
            f"{(time.monotonic() - started) * 1000:.0f}ms"
        )
        return result
