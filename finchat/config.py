import os

from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Pick up legacy environment variable aliases."""

        super().model_post_init(__context)

        if not self.elevenlabs_api_key:
            fallback = os.getenv("XI_API_KEY")
            if fallback:
                object.__setattr__(self, "elevenlabs_api_key", fallback)

    log_level: str = Field(default="INFO", description="Logging level")
    request_timeout_seconds: float = Field(default=30.0, description="Outbound HTTP timeout")

    # LLM Provider Settings
    llm_provider: str = Field(default="groq", description="Default LLM provider")
    groq_api_key: str = Field(default="", description="Groq API key")
    openai_api_key: str = Field(default="", description="OpenAI API key")
    groq_base_url: str = Field(default="https://api.groq.com/openai", description="Groq API base URL")
    openai_base_url: str = Field(default="https://api.openai.com", description="OpenAI API base URL")

    # Speech
    elevenlabs_api_key: str = Field(
        default="",
        description="ElevenLabs API key",
        validation_alias=AliasChoices("elevenlabs_api_key", "ELEVENLABS_API_KEY", "ELEVEN_API_KEY"),
    )
    elevenlabs_voice_id: str = Field(default="pNInz6obpgDQGcFmaJgB", description="Default voice (Adam)")
    elevenlabs_model_id: str = Field(default="eleven_monolingual_v1", description="Speech model id")
    elevenlabs_base_url: str = Field(default="https://api.elevenlabs.io", description="ElevenLabs API base URL")
    tts_max_characters: int = Field(default=2500, ge=0, description="Maximum characters sent to speech backend")

    provider_models_catalog: Dict[str, List[Dict[str, Any]]] = Field(
        default_factory=lambda: {
            "groq": [
                {
                    "id": "llama3-8b-8192",
                    "label": "Llama 3 8B (Groq)",
                    "description": "Fast default with generous rate limits.",
                    "default": True,
                },
            ],
            "openai": [
                {
                    "id": "gpt-4o-mini",
                    "label": "GPT-4o mini",
                    "description": "Persona-aware fallback.",
                    "default": True,
                },
                {
                    "id": "gpt-4o",
                    "label": "GPT-4o",
                    "description": "Higher quality, slower.",
                },
            ],
        },
        description="Provider models metadata surfaced to clients",
    )

    @property
    def has_groq_key(self) -> bool:
        return bool(self.groq_api_key)

    @property
    def has_openai_key(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def has_elevenlabs_key(self) -> bool:
        return bool(self.elevenlabs_api_key)

    def api_key_for(self, provider: str) -> str:
        provider_lower = provider.lower()
        if provider_lower == "groq":
            return self.groq_api_key
        if provider_lower == "openai":
            return self.openai_api_key
        return ""

    def base_url_for(self, provider: str) -> Optional[str]:
        provider_lower = provider.lower()
        if provider_lower == "groq":
            return self.groq_base_url
        if provider_lower == "openai":
            return self.openai_base_url
        return None

    def resolve_default_model(self, provider: str) -> Optional[str]:
        options = self.provider_models_catalog.get(provider.lower(), [])
        for option in options:
            default_flag = option.get("default")
            if isinstance(default_flag, str):
                is_default = default_flag.lower() in {"true", "1", "yes"}
            else:
                is_default = bool(default_flag)
            if is_default:
                return option.get("id")
        if options:
            return options[0].get("id")
        return None


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    return settings
