"""
Tests for the completion dispatcher and the chat-completions backends.

Backends get an ``httpx.MockTransport`` so every outbound request is recorded
and no network is touched.
"""

import json
from typing import Callable, List

import httpx
import pytest

from finchat.config import Settings
from finchat.providers.errors import (
    AccessForbiddenError,
    AuthenticationError,
    ConfigurationError,
    ErrorCategory,
    InvalidRequestError,
    MalformedResponseError,
    RateLimitedError,
    TransportError,
    UnclassifiedBackendError,
)
from finchat.providers.llm import (
    GroqProvider,
    LLMProviderFactory,
    OpenAIProvider,
    ProviderDispatcher,
    ProviderId,
    ProviderMessage,
    ProviderRequest,
    UserContext,
    get_available_providers,
    inject_user_context,
    resolve_provider_id,
)
from finchat.providers.llm.chat_completions import DEFAULT_SAMPLING


def _completion(text="Hello!", model="llama3-8b-8192"):
    return {
        "id": "chatcmpl-1",
        "model": model,
        "choices": [{"index": 0, "message": {"role": "assistant", "content": text}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
    }


class RecordingTransport(httpx.MockTransport):
    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


def _settings(**overrides):
    values = {"groq_api_key": "groq-test", "openai_api_key": "openai-test"}
    values.update(overrides)
    return Settings(**values)


def _request(*messages, user_context=None, model_id=None):
    return ProviderRequest(
        messages=[ProviderMessage(role=role, text=text) for role, text in messages],
        user_context=user_context,
        model_id=model_id,
    )


class TestDispatchSuccess:
    @pytest.mark.asyncio
    async def test_groq_round_trip(self):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=_completion("Save 20%.")))
        dispatcher = ProviderDispatcher(_settings(), transport=transport)

        reply = await dispatcher.complete(_request(("user", "How should I budget?")), "groq")

        assert reply.text == "Save 20%."
        assert reply.provider_model == "llama3-8b-8192"
        assert reply.usage.total_tokens == 15
        assert reply.finish_reason == "stop"

        (sent,) = transport.requests
        assert sent.method == "POST"
        assert str(sent.url) == "https://api.groq.com/openai/v1/chat/completions"
        assert sent.headers["Authorization"] == "Bearer groq-test"

    @pytest.mark.asyncio
    async def test_payload_carries_sampling_and_default_model(self):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=_completion(model="gpt-4o-mini")))
        dispatcher = ProviderDispatcher(_settings(), transport=transport)

        await dispatcher.complete(_request(("user", "hi")), ProviderId.OPENAI)

        body = json.loads(transport.requests[0].content)
        assert str(transport.requests[0].url) == "https://api.openai.com/v1/chat/completions"
        assert body["model"] == "gpt-4o-mini"
        for key, value in DEFAULT_SAMPLING.items():
            assert body[key] == value

    @pytest.mark.asyncio
    async def test_explicit_model_wins(self):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=_completion(model="gpt-4o")))
        dispatcher = ProviderDispatcher(_settings(), transport=transport)

        reply = await dispatcher.complete(_request(("user", "hi"), model_id="gpt-4o"), "gpt")

        assert json.loads(transport.requests[0].content)["model"] == "gpt-4o"
        assert reply.provider_model == "gpt-4o"

    @pytest.mark.asyncio
    async def test_user_context_appended_to_system_message(self):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=_completion()))
        dispatcher = ProviderDispatcher(_settings(), transport=transport)
        context = UserContext(name="Alex", currency="USD", monthly_income=5000.0, goal_count=3)

        await dispatcher.complete(
            _request(("system", "You are a finance assistant."), ("user", "hi"), user_context=context),
            "groq",
        )

        messages = json.loads(transport.requests[0].content)["messages"]
        assert messages[0]["content"] == (
            "You are a finance assistant.\n\nUser Context:\n- Name: Alex\n- Currency: USD"
            "\n- Monthly Income: 5000\n- Number of Goals: 3"
        )
        assert messages[1] == {"role": "user", "content": "hi"}

    @pytest.mark.asyncio
    async def test_list_content_is_joined(self):
        body = _completion()
        body["choices"][0]["message"]["content"] = [{"type": "text", "text": "Part one. "}, "Part two."]
        transport = RecordingTransport(lambda request: httpx.Response(200, json=body))
        dispatcher = ProviderDispatcher(_settings(), transport=transport)

        reply = await dispatcher.complete(_request(("user", "hi")), "groq")

        assert reply.text == "Part one. Part two."


class TestDispatchErrors:
    @pytest.mark.asyncio
    async def test_missing_key_makes_no_request(self):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=_completion()))
        dispatcher = ProviderDispatcher(_settings(groq_api_key=""), transport=transport)

        with pytest.raises(ConfigurationError) as exc_info:
            await dispatcher.complete(_request(("user", "hi")), "groq")

        assert exc_info.value.category == ErrorCategory.CONFIGURATION
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_unknown_provider(self):
        dispatcher = ProviderDispatcher(_settings())
        with pytest.raises(ValueError, match="Unsupported provider"):
            await dispatcher.complete(_request(("user", "hi")), "mistral")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, error_cls",
        [
            (400, InvalidRequestError),
            (401, AuthenticationError),
            (403, AccessForbiddenError),
            (429, RateLimitedError),
            (500, UnclassifiedBackendError),
            (503, UnclassifiedBackendError),
        ],
    )
    async def test_status_classification(self, status, error_cls):
        raw = '{"error": {"message": "secret backend detail"}}'
        transport = RecordingTransport(lambda request: httpx.Response(status, text=raw))
        dispatcher = ProviderDispatcher(_settings(), transport=transport)

        with pytest.raises(error_cls) as exc_info:
            await dispatcher.complete(_request(("user", "hi")), "groq")

        error = exc_info.value
        assert error.status_code == status
        assert error.provider == "groq"
        assert error.detail == raw
        assert "secret backend detail" not in error.message
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"id": "x"},
            {"choices": []},
            {"choices": [{"index": 0}]},
        ],
    )
    async def test_malformed_success(self, body):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=body))
        dispatcher = ProviderDispatcher(_settings(), transport=transport)

        with pytest.raises(MalformedResponseError) as exc_info:
            await dispatcher.complete(_request(("user", "hi")), "groq")

        assert exc_info.value.status_code == 200

    @pytest.mark.asyncio
    async def test_non_json_success(self):
        transport = RecordingTransport(lambda request: httpx.Response(200, text="<html>oops</html>"))
        dispatcher = ProviderDispatcher(_settings(), transport=transport)

        with pytest.raises(MalformedResponseError):
            await dispatcher.complete(_request(("user", "hi")), "groq")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("exc", [httpx.ConnectError("refused"), httpx.ReadTimeout("slow")])
    async def test_transport_failures(self, exc):
        def fail(request):
            raise exc

        dispatcher = ProviderDispatcher(_settings(), transport=RecordingTransport(fail))

        with pytest.raises(TransportError) as exc_info:
            await dispatcher.complete(_request(("user", "hi")), "openai")

        assert exc_info.value.status_code is None
        assert exc_info.value.provider == "openai"


class TestProviderRegistry:
    def test_aliases(self):
        assert resolve_provider_id("llama") == ProviderId.GROQ
        assert resolve_provider_id(" GPT ") == ProviderId.OPENAI
        assert resolve_provider_id(ProviderId.GROQ) == ProviderId.GROQ

    def test_factory_builds_backend(self):
        groq = LLMProviderFactory.create_provider("groq", api_key="k", model="llama3-8b-8192")
        openai = LLMProviderFactory.create_provider(ProviderId.OPENAI, api_key="k", model="gpt-4o-mini")

        assert isinstance(groq, GroqProvider)
        assert isinstance(openai, OpenAIProvider)

    def test_factory_requires_model(self):
        with pytest.raises(ValueError):
            LLMProviderFactory.create_provider("groq", api_key="k", model=None)

    def test_available_providers(self):
        providers = get_available_providers()

        assert set(providers) == {"groq", "openai"}
        assert providers["groq"]["display_name"] == "Groq Llama"
        assert providers["openai"]["default_model"] == "gpt-4o-mini"
        assert providers["groq"]["status"] in {"available", "unavailable"}

    def test_available_providers_follow_configured_keys(self, monkeypatch):
        monkeypatch.setattr("finchat.config.settings", _settings(openai_api_key=""))

        providers = get_available_providers()

        assert providers["groq"]["status"] == "available"
        assert providers["openai"]["status"] == "unavailable"
        assert providers["openai"]["reason"] == "API key not configured"


class TestInjectUserContext:
    def test_only_when_first_message_is_system(self):
        context = UserContext(name="Alex", currency="USD")
        messages = [
            ProviderMessage(role="user", text="hi"),
            ProviderMessage(role="system", text="You are helpful."),
        ]

        rendered = inject_user_context(messages, context)

        assert [m["content"] for m in rendered] == ["hi", "You are helpful."]

    def test_income_not_set(self):
        context = UserContext(name="Alex", currency="USD")
        rendered = inject_user_context([ProviderMessage(role="system", text="Base")], context)
        assert "- Monthly Income: Not set" in rendered[0]["content"]
        assert rendered[0]["content"].endswith("- Number of Goals: 0")

    def test_no_context_passes_through(self):
        rendered = inject_user_context([ProviderMessage(role="system", text="Base")], None)
        assert rendered == [{"role": "system", "content": "Base"}]


class TestHealthCheck:
    @pytest.mark.asyncio
    async def test_rate_limited_is_degraded(self):
        transport = RecordingTransport(lambda request: httpx.Response(429, text="slow down"))
        provider = GroqProvider(api_key="k", model="llama3-8b-8192", transport=transport)

        async with provider:
            health = await provider.health_check()

        assert health["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_healthy(self):
        transport = RecordingTransport(lambda request: httpx.Response(200, json=_completion("API test successful")))
        provider = GroqProvider(api_key="k", model="llama3-8b-8192", transport=transport)

        async with provider:
            health = await provider.health_check()

        assert health["status"] == "healthy"
        assert health["model"] == "llama3-8b-8192"
