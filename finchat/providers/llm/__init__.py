from typing import Any, Dict, Optional, Type, Union

from .base import (
    LLMProvider,
    ProviderId,
    ProviderMessage,
    ProviderReply,
    ProviderRequest,
    Usage,
    UserContext,
    inject_user_context,
)
from .groq import GroqProvider
from .openai import OpenAIProvider

PROVIDER_ALIAS_MAP: Dict[str, str] = {
    "llama": "groq",
    "gpt": "openai",
}

PROVIDER_DISPLAY_NAMES: Dict[str, str] = {
    "groq": "Groq Llama",
    "openai": "OpenAI GPT",
}

# Registry of available completion backends
PROVIDER_REGISTRY: Dict[ProviderId, Type[LLMProvider]] = {
    ProviderId.GROQ: GroqProvider,
    ProviderId.OPENAI: OpenAIProvider,
}


def canonical_provider_name(name: str) -> str:
    """Normalize provider aliases to their canonical identifier."""

    return PROVIDER_ALIAS_MAP.get(name.lower(), name.lower())


def resolve_provider_id(provider: Union[ProviderId, str]) -> ProviderId:
    if isinstance(provider, ProviderId):
        return provider
    try:
        return ProviderId(canonical_provider_name(provider.strip()))
    except ValueError:
        available_providers = ", ".join(p.value for p in PROVIDER_REGISTRY)
        raise ValueError(
            f"Unsupported provider '{provider}'. "
            f"Available providers: {available_providers}"
        )


class LLMProviderFactory:
    """Factory for creating provider instances."""

    @staticmethod
    def create_provider(
        provider: Union[ProviderId, str],
        api_key: str,
        model: Optional[str] = None,
        **kwargs,
    ) -> LLMProvider:
        provider_id = resolve_provider_id(provider)
        provider_class = PROVIDER_REGISTRY[provider_id]

        if not model:
            raise ValueError(f"No model provided for provider '{provider_id.value}'.")

        return provider_class(api_key=api_key, model=model, **kwargs)


def get_available_providers() -> Dict[str, Dict[str, Any]]:
    """Return metadata about supported providers, keyed by canonical id."""

    from ...config import settings  # Local import to avoid circular dependency

    key_present = {ProviderId.GROQ: settings.has_groq_key, ProviderId.OPENAI: settings.has_openai_key}

    providers_info: Dict[str, Dict[str, Any]] = {}
    for provider_id in PROVIDER_REGISTRY:
        name = provider_id.value
        configured = key_present.get(provider_id, False)
        providers_info[name] = {
            "status": "available" if configured else "unavailable",
            "reason": None if configured else "API key not configured",
            "display_name": PROVIDER_DISPLAY_NAMES.get(name, name.title()),
            "default_model": settings.resolve_default_model(name),
            "models": settings.provider_models_catalog.get(name, []),
        }
    return providers_info


from .dispatcher import ProviderDispatcher  # noqa: E402  (needs the registry above)

__all__ = [
    "GroqProvider",
    "LLMProvider",
    "LLMProviderFactory",
    "OpenAIProvider",
    "PROVIDER_REGISTRY",
    "ProviderDispatcher",
    "ProviderId",
    "ProviderMessage",
    "ProviderReply",
    "ProviderRequest",
    "Usage",
    "UserContext",
    "canonical_provider_name",
    "get_available_providers",
    "inject_user_context",
    "resolve_provider_id",
]
