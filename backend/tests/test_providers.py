import asyncio
import json

import httpx
import pytest

from hiremind.config import Settings
from hiremind.fallback import FallbackEngine
from hiremind.errors import InvalidCredential
from hiremind.providers import GeminiProvider, OpenAIProvider, ProviderError, build_providers


def run(coro):
    return asyncio.run(coro)


def test_openai_provider_sends_chat_completion():
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "Hello from mock"}}]})

    provider = OpenAIProvider("sk-test", "gpt-4o-mini", "https://api.example.com/v1/", transport=httpx.MockTransport(handler))
    assert run(provider.generate("Say hi", "Be brief")) == "Hello from mock"
    assert seen["url"] == "https://api.example.com/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["messages"] == [
        {"role": "system", "content": "Be brief"},
        {"role": "user", "content": "Say hi"},
    ]


def test_gemini_provider_joins_candidate_parts():
    def handler(request: httpx.Request):
        assert request.headers["x-goog-api-key"] == "g-key"
        assert request.url.path.endswith("/models/gemini-1.5-flash:generateContent")
        body = json.loads(request.content)
        assert body["systemInstruction"]["parts"][0]["text"] == "Be brief"
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "Hel"}, {"text": "lo"}]}}]})

    provider = GeminiProvider("g-key", "gemini-1.5-flash", "https://gen.example.com/v1beta", transport=httpx.MockTransport(handler))
    assert run(provider.generate("Say hi", "Be brief")) == "Hello"


def test_error_status_raises_provider_error_with_reason():
    def handler(request):
        return httpx.Response(400, json={"error": {
            "message": "API key not valid.",
            "status": "INVALID_ARGUMENT",
            "details": [{"reason": "API_KEY_INVALID"}],
        }})

    provider = GeminiProvider("bad", "gemini-1.5-flash", "https://gen.example.com/v1beta", transport=httpx.MockTransport(handler))
    with pytest.raises(ProviderError) as exc:
        run(provider.generate("p", "i"))
    assert exc.value.status_code == 400
    assert exc.value.reason == "API_KEY_INVALID"


def test_transport_failure_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    provider = OpenAIProvider("sk", "m", "https://api.example.com/v1", transport=httpx.MockTransport(handler))
    with pytest.raises(ProviderError) as exc:
        run(provider.generate("p", "i"))
    assert exc.value.status_code is None
    assert isinstance(exc.value.__cause__, httpx.ConnectError)


def test_unexpected_body_raises_provider_error():
    provider = OpenAIProvider(
        "sk", "m", "https://api.example.com/v1",
        transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"choices": []})),
    )
    with pytest.raises(ProviderError):
        run(provider.generate("p", "i"))


def test_build_providers_only_registers_configured_keys():
    providers = build_providers(Settings(openai_api_key=None, gemini_api_key="g"))
    assert list(providers) == ["gemini"]
    assert build_providers(Settings()) == {}


def test_engine_falls_back_across_real_clients_on_server_error():
    def handler(request: httpx.Request):
        if "chat/completions" in request.url.path:
            return httpx.Response(500, text="upstream exploded")
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "gemini wins"}]}}]})

    settings = Settings(openai_api_key="sk", gemini_api_key="g")
    engine = FallbackEngine(build_providers(settings, transport=httpx.MockTransport(handler)), ["openai", "gemini"])
    assert run(engine.generate("p", "i")) == "gemini wins"


def test_engine_stops_on_openai_401():
    calls = []

    def handler(request: httpx.Request):
        calls.append(request.url.path)
        return httpx.Response(401, json={"error": {"message": "Incorrect API key provided", "code": "invalid_api_key"}})

    settings = Settings(openai_api_key="sk", gemini_api_key="g")
    engine = FallbackEngine(build_providers(settings, transport=httpx.MockTransport(handler)), ["openai", "gemini"])
    with pytest.raises(InvalidCredential):
        run(engine.generate("p", "i"))
    assert len(calls) == 1
