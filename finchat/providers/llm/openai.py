"""OpenAI chat completions. Persona-aware fallback backend."""

from .base import ProviderId
from .chat_completions import ChatCompletionsProvider


class OpenAIProvider(ChatCompletionsProvider):
    """OpenAI chat completion provider."""

    provider_id = ProviderId.OPENAI
    default_base_url = "https://api.openai.com"
