"""
Tests for the model gateway: retry policy, JSON extraction and validation,
plus the SDK error mapping done by the providers.
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from types import SimpleNamespace
from unittest.mock import MagicMock

import anthropic
import httpx
import openai
import pytest

from config import Settings
from services.errors import (
    ConfigError,
    MalformedResponse,
    SchemaViolation,
    TransientNetworkError,
    UpstreamRejected,
)
from services.llm_provider_factory import (
    AnthropicProvider,
    LLMProviderFactory,
    OpenAIProvider,
)
from services.model_gateway import ModelGateway, extract_json_document
from tests.fakes import EATING_JSON, FakeProvider


@pytest.fixture
def settings():
    return Settings(anthropic_api_key='test-key', llm_max_retries=2, llm_backoff_base=0.5)


def make_gateway(settings, replies):
    sleeps = []
    provider = FakeProvider(replies)
    gateway = ModelGateway(settings, provider=provider, sleep=sleeps.append)
    return gateway, provider, sleeps


class TestExtractJsonDocument:

    def test_plain_json(self):
        assert extract_json_document('{"a": 1}') == {'a': 1}

    def test_code_fence(self):
        assert extract_json_document('```json\n{"a": 1}\n```') == {'a': 1}

    def test_prose_around_object(self):
        assert extract_json_document('Sure! Here it is: {"a": {"b": 2}} Hope that helps.') == {'a': {'b': 2}}

    @pytest.mark.parametrize('raw', ['no json here', '', '{not valid}', '} backwards {'])
    def test_unparseable(self, raw):
        with pytest.raises(MalformedResponse):
            extract_json_document(raw)


class TestRetryPolicy:

    def test_success_first_try(self, settings):
        gateway, provider, sleeps = make_gateway(settings, [EATING_JSON])

        result = gateway.translate('prompt')

        assert provider.calls == 1
        assert sleeps == []
        assert result.words[0].dictionary_form == '食べる'

    def test_transient_failures_retried_with_backoff(self, settings):
        gateway, provider, sleeps = make_gateway(settings, [
            TransientNetworkError('timeout'),
            TransientNetworkError('503', status=503),
            EATING_JSON,
        ])

        result = gateway.translate('prompt')

        assert provider.calls == 3
        assert sleeps == [0.5, 1.0]
        assert result.full_translation == '食べています。'

    def test_retries_exhausted(self, settings):
        gateway, provider, sleeps = make_gateway(settings, [TransientNetworkError('down', status=502)])

        with pytest.raises(UpstreamRejected) as exc_info:
            gateway.translate('prompt')

        assert provider.calls == settings.llm_max_retries + 1
        assert len(sleeps) == settings.llm_max_retries
        assert exc_info.value.status == 502
        assert exc_info.value.to_public_message().startswith('Failed to get translation from AI: ')

    def test_client_error_not_retried(self, settings):
        gateway, provider, sleeps = make_gateway(settings, [UpstreamRejected('invalid model', status=400)])

        with pytest.raises(UpstreamRejected) as exc_info:
            gateway.translate('prompt')

        assert provider.calls == 1
        assert sleeps == []
        assert exc_info.value.to_public_message() == 'Failed to get translation from AI: invalid model'

    def test_zero_retries(self):
        settings = Settings(anthropic_api_key='test-key', llm_max_retries=0)
        gateway, provider, sleeps = make_gateway(settings, [TransientNetworkError('timeout')])

        with pytest.raises(UpstreamRejected):
            gateway.translate('prompt')
        assert provider.calls == 1

    def test_malformed_output_not_retried(self, settings):
        gateway, provider, _ = make_gateway(settings, ['I cannot help with that.'])

        with pytest.raises(MalformedResponse) as exc_info:
            gateway.translate('prompt')

        assert provider.calls == 1
        assert exc_info.value.raw_text == 'I cannot help with that.'
        assert exc_info.value.to_public_message() == 'Invalid response format from AI'

    def test_schema_violation_not_retried(self, settings):
        gateway, provider, _ = make_gateway(settings, ['{"fullTranslation": "食べています。"}'])

        with pytest.raises(SchemaViolation):
            gateway.translate('prompt')
        assert provider.calls == 1

    def test_fenced_response_accepted(self, settings):
        gateway, _, _ = make_gateway(settings, [f'```json\n{EATING_JSON}\n```'])
        assert gateway.translate('prompt').words[0].surface_form == '食べています'

    def test_missing_api_key_fails_before_any_call(self):
        gateway = ModelGateway(Settings(anthropic_api_key=None))

        with pytest.raises(ConfigError) as exc_info:
            gateway.translate('prompt')
        assert exc_info.value.message == 'ANTHROPIC_API_KEY not configured'


class TestProviderFactory:

    def test_creates_anthropic_provider(self):
        provider = LLMProviderFactory.create_provider(Settings(anthropic_api_key='test-key'))
        assert provider.get_provider_name() == 'anthropic'

    def test_openai_requires_its_key(self):
        with pytest.raises(ConfigError) as exc_info:
            LLMProviderFactory.create_provider(Settings(llm_provider='openai', anthropic_api_key='test-key'))
        assert exc_info.value.message == 'OPENAI_API_KEY not configured'

    def test_unknown_provider(self):
        with pytest.raises(ConfigError):
            LLMProviderFactory.create_provider(Settings(llm_provider='mystery', anthropic_api_key='k'))

    def test_default_model(self):
        assert LLMProviderFactory.get_default_model(Settings()) == AnthropicProvider.DEFAULT_MODEL
        assert LLMProviderFactory.get_default_model(Settings(llm_provider='openai')) == OpenAIProvider.DEFAULT_MODEL
        assert LLMProviderFactory.get_default_model(Settings(llm_model='custom')) == 'custom'


ANTHROPIC_REQUEST = httpx.Request('POST', 'https://api.anthropic.com/v1/messages')
OPENAI_REQUEST = httpx.Request('POST', 'https://api.openai.com/v1/chat/completions')


class TestAnthropicProvider:

    def make_provider(self):
        client = MagicMock()
        return AnthropicProvider(api_key='test-key', client=client), client

    def test_returns_joined_text_blocks(self):
        provider, client = self.make_provider()
        client.messages.create.return_value = SimpleNamespace(
            model='claude-test',
            usage=SimpleNamespace(input_tokens=10, output_tokens=20),
            content=[
                SimpleNamespace(type='text', text='{"a": '),
                SimpleNamespace(type='text', text='1}'),
            ],
        )

        assert provider.complete('prompt', model='claude-test', max_tokens=100, timeout=5) == '{"a": 1}'
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs['model'] == 'claude-test'
        assert kwargs['messages'] == [{'role': 'user', 'content': 'prompt'}]

    def test_connection_error_is_transient(self):
        provider, client = self.make_provider()
        client.messages.create.side_effect = anthropic.APIConnectionError(request=ANTHROPIC_REQUEST)

        with pytest.raises(TransientNetworkError):
            provider.complete('prompt')

    def test_timeout_is_transient(self):
        provider, client = self.make_provider()
        client.messages.create.side_effect = anthropic.APITimeoutError(request=ANTHROPIC_REQUEST)

        with pytest.raises(TransientNetworkError):
            provider.complete('prompt')

    def test_server_error_is_transient(self):
        provider, client = self.make_provider()
        client.messages.create.side_effect = anthropic.InternalServerError(
            'overloaded', response=httpx.Response(529, request=ANTHROPIC_REQUEST), body=None
        )

        with pytest.raises(TransientNetworkError) as exc_info:
            provider.complete('prompt')
        assert exc_info.value.status == 529

    def test_client_error_is_rejected(self):
        provider, client = self.make_provider()
        client.messages.create.side_effect = anthropic.BadRequestError(
            'bad request',
            response=httpx.Response(400, request=ANTHROPIC_REQUEST),
            body={'type': 'error', 'error': {'type': 'invalid_request_error', 'message': 'model not found'}},
        )

        with pytest.raises(UpstreamRejected) as exc_info:
            provider.complete('prompt')
        assert exc_info.value.status == 400
        assert exc_info.value.message == 'model not found'


class TestOpenAIProvider:

    def test_returns_message_content(self):
        client = MagicMock()
        client.chat.completions.create.return_value = SimpleNamespace(
            model='gpt-test',
            usage=SimpleNamespace(total_tokens=30),
            choices=[SimpleNamespace(message=SimpleNamespace(content='{"a": 1}'))],
        )
        provider = OpenAIProvider(api_key='test-key', client=client)

        assert provider.complete('prompt') == '{"a": 1}'

    def test_rate_limit_is_rejected(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = openai.RateLimitError(
            'slow down', response=httpx.Response(429, request=OPENAI_REQUEST), body=None
        )
        provider = OpenAIProvider(api_key='test-key', client=client)

        with pytest.raises(UpstreamRejected) as exc_info:
            provider.complete('prompt')
        assert exc_info.value.status == 429

    def test_connection_error_is_transient(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = openai.APIConnectionError(request=OPENAI_REQUEST)
        provider = OpenAIProvider(api_key='test-key', client=client)

        with pytest.raises(TransientNetworkError):
            provider.complete('prompt')
