"""Async provider for OpenAI-compatible chat completion APIs."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import httpx

from ..errors import MalformedResponseError, ProviderError, RateLimitedError, TransportError, classify_status
from .base import LLMProvider, ProviderId, ProviderMessage, ProviderReply, ProviderRequest, Usage, inject_user_context

# Sampling is policy, not caller-tunable.
DEFAULT_SAMPLING: Dict[str, Any] = {
    "temperature": 0.7,
    "max_tokens": 1024,
    "top_p": 1,
    "frequency_penalty": 0,
    "presence_penalty": 0,
}


class ChatCompletionsProvider(LLMProvider):
    """Bearer-authenticated ``/v1/chat/completions`` backend."""

    provider_id: ProviderId
    default_base_url: str = ""
    chat_completions_path: str = "/v1/chat/completions"
    sampling: Dict[str, Any] = DEFAULT_SAMPLING

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        base_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: Any,
    ) -> None:
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.timeout = timeout
        super().__init__(api_key, model, transport=transport, **kwargs)

    def _setup_client(self, transport: httpx.AsyncBaseTransport | None = None, **kwargs: Any) -> None:
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    async def _post(self, path: str, json: Dict[str, Any]) -> Any:
        provider = self.provider_id.value
        response: httpx.Response | None = None
        try:
            response = await self._client.post(path, json=json)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            body = exc.response.text
            self.logger.warning(f"{provider} API error ({status}): {body}")
            raise classify_status(status, body, provider) from exc
        except httpx.RequestError as exc:
            self.logger.warning(f"{provider} request error: {exc!r}")
            raise TransportError(detail=repr(exc), provider=provider) from exc
        except ValueError as exc:
            raise MalformedResponseError(
                detail=f"Response body is not JSON: {exc}",
                status_code=response.status_code if response is not None else None,
                provider=provider,
            ) from exc

    def build_payload(self, request: ProviderRequest) -> Dict[str, Any]:
        return {
            "model": request.model_id or self.model,
            "messages": inject_user_context(request.messages, request.user_context),
            **self.sampling,
        }

    async def complete(self, request: ProviderRequest) -> ProviderReply:
        start_time = time.time()
        payload = self.build_payload(request)

        data = await self._post(self.chat_completions_path, json=payload)

        choice = self._first_choice(data)
        message = choice["message"]
        usage = data.get("usage")

        return ProviderReply(
            text=self._normalize_content(message.get("content")),
            usage=Usage(**usage) if isinstance(usage, dict) else None,
            provider_model=data.get("model") or payload["model"],
            finish_reason=choice.get("finish_reason"),
            response_time_ms=self._measure_time(start_time),
        )

    def _first_choice(self, data: Any) -> Dict[str, Any]:
        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices:
            raise MalformedResponseError(
                detail=f"Response missing choices: {str(data)[:500]}",
                status_code=200,
                provider=self.provider_id.value,
            )
        choice = choices[0]
        if not isinstance(choice, dict) or not isinstance(choice.get("message"), dict):
            raise MalformedResponseError(
                detail=f"First choice has no message: {str(choice)[:500]}",
                status_code=200,
                provider=self.provider_id.value,
            )
        return choice

    async def health_check(self) -> Dict[str, Any]:
        try:
            reply = await self.complete(
                ProviderRequest(
                    messages=[ProviderMessage(role="user", text='Say "API test successful"')],
                )
            )
            return {
                "status": "healthy",
                "provider": self.provider_id.value,
                "model": reply.provider_model,
                "response_preview": reply.text[:32],
                "response_time_ms": reply.response_time_ms,
            }
        except ProviderError as exc:
            return {
                "status": "degraded" if isinstance(exc, RateLimitedError) else "error",
                "provider": self.provider_id.value,
                "model": self.model,
                "error": exc.message,
            }

    async def close(self) -> None:
        await self._client.aclose()

    def _normalize_content(self, content: Any) -> str:
        if content is None:
            return ""
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts: List[str] = []
            for item in content:
                if isinstance(item, str):
                    parts.append(item)
                elif isinstance(item, dict) and item.get("text") is not None:
                    parts.append(str(item["text"]))
            return "".join(parts)
        return str(content)


__all__ = ["ChatCompletionsProvider", "DEFAULT_SAMPLING"]
