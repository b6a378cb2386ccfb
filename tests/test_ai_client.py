"""Tests for the OpenAI-compatible AI client."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, cast

import httpx
import pytest

from openai import AsyncOpenAI

from inkwell.ai.client import AIClient, ClientSettings, CONTINUE_PROMPT, TRUNCATION_NOTICE
from inkwell.ai.orchestration.types import Message
from inkwell.errors import ModelInvocationError


def _response(content: Any, finish_reason: str = "stop") -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content), finish_reason=finish_reason)]
    )


class _FakeCompletions:
    def __init__(self, outcomes: list[Any]) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class _FakeClient:
    def __init__(self, *outcomes: Any) -> None:
        self.chat = SimpleNamespace(completions=_FakeCompletions(list(outcomes)))
        self.closed = False

    async def close(self) -> None:
        self.closed = True

    @property
    def calls(self) -> list[dict[str, Any]]:
        return self.chat.completions.calls


def _settings(**overrides: Any) -> ClientSettings:
    base = {
        "base_url": "https://example.invalid/v1",
        "api_key": "test",
        "model": "test-model",
        "retry_min_seconds": 0.0,
        "retry_max_seconds": 0.0,
    }
    base.update(overrides)
    return ClientSettings(**base)


def _client(fake: _FakeClient, **overrides: Any) -> AIClient:
    return AIClient(_settings(**overrides), client=cast(AsyncOpenAI, fake))


@pytest.mark.asyncio
async def test_complete_merges_system_messages() -> None:
    fake = _FakeClient(_response("hello"))
    client = _client(fake, max_tokens=256)

    text = await client.complete(
        [
            Message.system("First rule."),
            Message.user("Hi"),
            {"role": "system", "content": "Second rule."},
            Message.assistant("Earlier reply"),
        ]
    )

    assert text == "hello"
    payload = fake.calls[0]
    assert payload["model"] == "test-model"
    assert payload["stream"] is False
    assert payload["max_tokens"] == 256
    assert payload["temperature"] == pytest.approx(0.7)
    assert payload["messages"] == [
        {"role": "system", "content": "First rule.\n\nSecond rule."},
        {"role": "user", "content": "Hi"},
        {"role": "assistant", "content": "Earlier reply"},
    ]


@pytest.mark.asyncio
async def test_truncated_reply_is_continued_once() -> None:
    fake = _FakeClient(_response("Part one", "length"), _response(" and two"))
    client = _client(fake)

    text = await client.complete([Message.user("Write")])

    assert text == "Part one and two"
    follow_up = fake.calls[1]["messages"]
    assert follow_up[-2] == {"role": "assistant", "content": "Part one"}
    assert follow_up[-1] == {"role": "user", "content": CONTINUE_PROMPT}


@pytest.mark.asyncio
async def test_second_truncation_appends_notice() -> None:
    fake = _FakeClient(_response("A", "length"), _response("B", "length"))

    text = await _client(fake).complete([Message.user("Write")])

    assert text == "AB" + TRUNCATION_NOTICE
    assert len(fake.calls) == 2


@pytest.mark.asyncio
async def test_missing_content_is_an_error() -> None:
    with pytest.raises(ModelInvocationError):
        await _client(_FakeClient(_response(None))).complete([Message.user("x")])
    with pytest.raises(ModelInvocationError):
        await _client(_FakeClient(SimpleNamespace(choices=[]))).complete([Message.user("x")])


@pytest.mark.asyncio
async def test_empty_history_is_rejected() -> None:
    fake = _FakeClient()

    with pytest.raises(ModelInvocationError):
        await _client(fake).complete([])
    assert fake.calls == []


@pytest.mark.asyncio
async def test_transient_errors_are_retried() -> None:
    fake = _FakeClient(httpx.ConnectTimeout("slow"), _response("ok"))

    text = await _client(fake, max_retries=3).complete([Message.user("x")])

    assert text == "ok"
    assert len(fake.calls) == 2


@pytest.mark.asyncio
async def test_exhausted_retries_raise_model_error() -> None:
    fake = _FakeClient(httpx.ConnectTimeout("slow"), httpx.ConnectTimeout("still slow"))

    with pytest.raises(ModelInvocationError):
        await _client(fake, max_retries=2).complete([Message.user("x")])
    assert len(fake.calls) == 2


@pytest.mark.asyncio
async def test_invoker_and_aclose() -> None:
    fake = _FakeClient(_response("from invoker"))
    client = _client(fake, temperature=None)

    invoke = client.invoker()
    text = await invoke([Message.user("x")])
    await client.aclose()

    assert text == "from invoker"
    assert "temperature" not in fake.calls[0]
    assert fake.closed
