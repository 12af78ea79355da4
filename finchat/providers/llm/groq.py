"""Groq's OpenAI-compatible endpoint. Primary backend."""

from .base import ProviderId
from .chat_completions import ChatCompletionsProvider


class GroqProvider(ChatCompletionsProvider):
    """Groq chat completion provider."""

    provider_id = ProviderId.GROQ
    default_base_url = "https://api.groq.com/openai"
