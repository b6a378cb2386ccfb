"""Async AI client wrapper built around OpenAI-compatible endpoints."""

from __future__ import annotations

import inspect
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence

import httpx
from openai import APIConnectionError, APIError, APIStatusError, AsyncOpenAI, RateLimitError
from openai.types.chat import ChatCompletionMessageParam
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import ModelInvocationError
from .ai_types import ModelInvoker
from .orchestration.types import Message

__all__ = ["AIClient", "ClientSettings", "CONTINUE_PROMPT", "TRUNCATION_NOTICE"]

LOGGER = logging.getLogger(__name__)

CONTINUE_PROMPT = "Continue from where the previous answer stopped without repeating anything."
TRUNCATION_NOTICE = "\n\n[Output may have been cut off by the length limit; reply \"continue\" for more]"

_RETRYABLE_ERRORS = (
    APIError,
    APIStatusError,
    APIConnectionError,
    RateLimitError,
    httpx.TimeoutException,
    httpx.TransportError,
)


@dataclass(slots=True)
class ClientSettings:
    """Subset of settings required to configure the AI client."""

    base_url: str
    api_key: str
    model: str
    temperature: float | None = 0.7
    max_tokens: int | None = None
    request_timeout: float | None = 90.0
    max_retries: int = 3
    retry_min_seconds: float = 0.5
    retry_max_seconds: float = 6.0
    default_headers: Mapping[str, str] | None = None
    debug_logging: bool = False


@dataclass(slots=True)
class _Completion:
    text: str
    finish_reason: str | None


class AIClient:
    """Async client issuing non-streaming chat completions with retry semantics."""

    def __init__(self, settings: ClientSettings, *, client: AsyncOpenAI | None = None) -> None:
        self._settings = settings
        self._client = client or self._build_client(settings)

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    async def complete(self, messages: Iterable[Message | Mapping[str, Any]]) -> str:
        """Return the assistant reply for ``messages``.

        System messages are merged into one leading system message. A reply cut
        off by the length limit triggers one continuation request; if that one
        is cut off too, a notice is appended.

        Raises:
            ModelInvocationError: On exhausted retries, provider errors or an
                empty reply.
        """

        payload_messages = self._merge_system_messages(messages)
        first = await self._send(payload_messages)
        text = first.text
        if first.finish_reason != "length":
            return text

        LOGGER.debug("Reply truncated by length limit; requesting continuation")
        continuation = [
            *payload_messages,
            {"role": "assistant", "content": text},
            {"role": "user", "content": CONTINUE_PROMPT},
        ]
        second = await self._send(continuation)
        if second.text.strip():
            text += second.text
        if second.finish_reason == "length":
            text += TRUNCATION_NOTICE
        return text

    def invoker(self) -> ModelInvoker:
        """Return the ``invoke(history) -> text`` capability used by the agent."""

        async def invoke(history: Sequence[Message]) -> str:
            return await self.complete(history)

        return invoke

    async def aclose(self) -> None:
        """Close the underlying OpenAI client to release network resources."""

        close = getattr(self._client, "close", None)
        if close is None:
            return
        result = close()
        if inspect.isawaitable(result):
            await result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _build_client(self, settings: ClientSettings) -> AsyncOpenAI:
        headers = dict(settings.default_headers) if settings.default_headers else None
        return AsyncOpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.request_timeout,
            max_retries=0,
            default_headers=headers,
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(max(1, self._settings.max_retries)),
            wait=wait_exponential(
                multiplier=self._settings.retry_min_seconds,
                max=self._settings.retry_max_seconds,
            ),
            retry=retry_if_exception_type(_RETRYABLE_ERRORS),
        )

    async def _send(self, messages: Sequence[ChatCompletionMessageParam]) -> _Completion:
        payload = self._build_chat_payload(messages)
        LOGGER.debug(
            "Starting chat completion via %s with %s message(s)",
            self._settings.model,
            len(payload["messages"]),
        )
        if self._settings.debug_logging:
            self._log_prompt_payload(payload)
        try:
            async for attempt in self._retrying():
                with attempt:
                    response = await self._client.chat.completions.create(**payload)
        except _RETRYABLE_ERRORS as exc:
            raise ModelInvocationError(f"chat completion failed: {exc}") from exc
        return self._extract(response)

    def _build_chat_payload(self, messages: Sequence[ChatCompletionMessageParam]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self._settings.model,
            "messages": list(messages),
            "stream": False,
        }
        if self._settings.temperature is not None:
            payload["temperature"] = self._settings.temperature
        if self._settings.max_tokens is not None:
            payload["max_tokens"] = self._settings.max_tokens
        return payload

    @staticmethod
    def _merge_system_messages(
        messages: Iterable[Message | Mapping[str, Any]],
    ) -> List[ChatCompletionMessageParam]:
        system_parts: List[str] = []
        rest: List[ChatCompletionMessageParam] = []
        for message in messages:
            item = message if isinstance(message, Message) else Message.from_chat_param(message)
            if item.role == "system":
                if item.content.strip():
                    system_parts.append(item.content.strip())
                continue
            rest.append(item.to_chat_param())
        if not system_parts and not rest:
            raise ModelInvocationError("at least one message is required")
        if system_parts:
            rest.insert(0, {"role": "system", "content": "\n\n".join(system_parts)})
        return rest

    @staticmethod
    def _extract(response: Any) -> _Completion:
        choices = getattr(response, "choices", None) or []
        if not choices:
            raise ModelInvocationError("provider returned no choices")
        choice = choices[0]
        message = getattr(choice, "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str):
            raise ModelInvocationError("missing choices[0].message.content")
        return _Completion(text=content, finish_reason=getattr(choice, "finish_reason", None))

    def _log_prompt_payload(self, payload: Mapping[str, Any]) -> None:
        try:
            serialized = json.dumps(payload, ensure_ascii=False, indent=2)
        except (TypeError, ValueError):
            LOGGER.debug("AI prompt payload (unserializable): %s", payload)
        else:
            LOGGER.debug("AI prompt payload:\n%s", serialized)
