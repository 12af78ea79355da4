"""
Provider dispatcher.

Resolves a ``ProviderId`` to a backend and credential, performs exactly one
completion call, and lets classified ``ProviderError`` failures propagate.
Nothing is retried or cached here; every call builds its own client.
"""

from __future__ import annotations

import time
from typing import Optional, Union

import httpx

from ...config import Settings, get_settings
from ...logging_config import get_logger
from ..errors import ConfigurationError, ProviderError
from . import LLMProviderFactory, resolve_provider_id
from .base import ProviderId, ProviderReply, ProviderRequest

logger = get_logger("finchat.dispatch")


class ProviderDispatcher:
    """Single entry point for completion calls across backends."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    async def complete(self, request: ProviderRequest, provider: Union[ProviderId, str]) -> ProviderReply:
        provider_id = resolve_provider_id(provider)

        api_key = self.settings.api_key_for(provider_id.value)
        if not api_key:
            raise ConfigurationError(
                detail=f"No API key configured for provider: {provider_id.value}",
                provider=provider_id.value,
            )

        model = request.model_id or self.settings.resolve_default_model(provider_id.value)
        if not model:
            raise ConfigurationError(
                message="No model configured.",
                detail=f"No model provided or configured for provider: {provider_id.value}",
                provider=provider_id.value,
            )

        backend = LLMProviderFactory.create_provider(
            provider_id,
            api_key=api_key,
            model=model,
            base_url=self.settings.base_url_for(provider_id.value),
            timeout=self.settings.request_timeout_seconds,
            transport=self._transport,
        )

        start = time.perf_counter()
        async with backend:
            try:
                reply = await backend.complete(request)
            except ProviderError as exc:
                logger.warning(
                    "completion_failed",
                    provider=provider_id.value,
                    model=model,
                    category=exc.category.value,
                    status=exc.status_code,
                    detail=exc.detail,
                    duration_ms=round((time.perf_counter() - start) * 1000, 1),
                )
                raise

        logger.info(
            "completion_succeeded",
            provider=provider_id.value,
            model=reply.provider_model,
            total_tokens=reply.usage.total_tokens if reply.usage else None,
            duration_ms=round((time.perf_counter() - start) * 1000, 1),
        )
        return reply


__all__ = ["ProviderDispatcher"]
