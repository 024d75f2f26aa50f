import json
from unittest.mock import AsyncMock

import httpx
import pytest

from commstyle.gemini_client import GeminiClient, GeminiError
from commstyle.settings import Settings


def _ok(text="Hello from Gemini"):
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def _client(handler, **overrides):
    cfg = Settings(GEMINI_MAX_ATTEMPTS=3, GEMINI_INITIAL_BACKOFF_SECONDS=0.5, **overrides)
    return GeminiClient(api_key="test-key", app_settings=cfg, transport=httpx.MockTransport(handler))


@pytest.fixture
def no_sleep(mocker):
    return mocker.patch("commstyle.gemini_client.asyncio.sleep", new=AsyncMock())


def test_missing_api_key_is_rejected():
    with pytest.raises(ValueError):
        GeminiClient(app_settings=Settings(GEMINI_API_KEY=None))


async def test_generate_chat_sends_instruction_history_and_temperature():
    seen = []

    def handler(request):
        seen.append(request)
        return _ok()

    client = _client(handler)
    text = await client.generate_chat(
        [{"role": "user", "text": "hi"}, {"role": "model", "text": "hello"}, {"role": "user", "text": "help"}],
        system_instruction="be a coach",
        temperature=0.7,
    )
    await client.aclose()

    assert text == "Hello from Gemini"
    body = json.loads(seen[0].content)
    assert body["systemInstruction"] == {"parts": [{"text": "be a coach"}]}
    assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]
    assert body["generationConfig"] == {"temperature": 0.7}
    assert seen[0].url.params["key"] == "test-key"
    assert "gemini-2.5-flash:generateContent" in str(seen[0].url)


async def test_vertex_provider_uses_header_auth():
    seen = []

    def handler(request):
        seen.append(request)
        return _ok()

    client = _client(handler, GEMINI_PROVIDER="vertex", GEMINI_VERTEX_PROJECT="proj")
    await client.generate("hi")
    await client.aclose()
    assert seen[0].headers["x-goog-api-key"] == "test-key"
    assert "aiplatform.googleapis.com" in str(seen[0].url)
    assert "key" not in seen[0].url.params


async def test_retries_overloaded_with_exponential_backoff(no_sleep):
    responses = [httpx.Response(503, text="The model is overloaded."), httpx.Response(503), _ok("finally")]

    def handler(request):
        return responses.pop(0)

    client = _client(handler)
    assert await client.generate("hi") == "finally"
    await client.aclose()
    assert [call.args[0] for call in no_sleep.await_args_list] == [0.5, 1.0]


async def test_gives_up_after_max_attempts(no_sleep):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503, text="overloaded")

    client = _client(handler)
    with pytest.raises(GeminiError) as excinfo:
        await client.generate("hi")
    await client.aclose()
    assert len(calls) == 3
    assert excinfo.value.status_code == 503


async def test_client_errors_are_not_retried(no_sleep):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(400, text="API key not valid. Please pass a valid API key.")

    client = _client(handler)
    with pytest.raises(GeminiError) as excinfo:
        await client.generate("hi")
    await client.aclose()
    assert len(calls) == 1
    assert "API key not valid" in excinfo.value.body
    no_sleep.assert_not_awaited()


async def test_unexpected_payload_raises():
    client = _client(lambda request: httpx.Response(200, json={"candidates": []}))
    with pytest.raises(GeminiError):
        await client.generate("hi")
    await client.aclose()


async def test_falls_back_to_openrouter(no_sleep):
    seen = []

    def handler(request):
        seen.append(request)
        if "openrouter" in str(request.url):
            return httpx.Response(200, json={"choices": [{"message": {"content": "from fallback"}}]})
        return httpx.Response(500, text="boom")

    client = _client(handler, OPENROUTER_API_KEY="or-key")
    text = await client.generate_chat(
        [{"role": "user", "text": "q1"}, {"role": "model", "text": "a1"}, {"role": "user", "text": "q2"}],
        system_instruction="sys",
    )
    await client.aclose()

    assert text == "from fallback"
    body = json.loads(seen[-1].content)
    assert [m["role"] for m in body["messages"]] == ["system", "user", "assistant", "user"]
    assert seen[-1].headers["Authorization"] == "Bearer or-key"
