import logging
from typing import Any, Dict, Optional

import httpx

from ..config import Settings, get_settings
from .base import SpeechProvider
from .errors import ConfigurationError, ProviderError, TransportError, classify_status

logger = logging.getLogger(__name__)

DEFAULT_VOICE_SETTINGS: Dict[str, Any] = {
    "stability": 0.5,
    "similarity_boost": 0.5,
    "style": 0.0,
    "use_speaker_boost": True,
}


class ElevenLabsProvider(SpeechProvider):
    """ElevenLabs text-to-speech provider"""

    name = "elevenlabs"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        voice_id: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.api_key = self.settings.elevenlabs_api_key
        self.base_url = self.settings.elevenlabs_base_url.rstrip("/")
        self.voice_id = voice_id or self.settings.elevenlabs_voice_id
        self.model_id = self.settings.elevenlabs_model_id
        self.timeout_s = self.settings.request_timeout_seconds
        self._transport = transport

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Accept": self.content_type,
            "Content-Type": "application/json",
            "xi-api-key": self.api_key,
        }

    def build_payload(self, text: str) -> Dict[str, Any]:
        return {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": dict(DEFAULT_VOICE_SETTINGS),
        }

    async def ready(self) -> bool:
        return self.settings.has_elevenlabs_key

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "ElevenLabs API key not configured"}

        try:
            audio = await self.synthesize("This is a test of the text to speech system.")
            return {"status": "healthy", "voice_id": self.voice_id, "audio_bytes": len(audio)}
        except ProviderError as e:
            return {"status": "error", "reason": e.message}

    async def synthesize(self, text: str) -> bytes:
        if not self.api_key:
            raise ConfigurationError(
                message="ElevenLabs API key not configured.",
                detail="ELEVENLABS_API_KEY is not set",
                provider=self.name,
            )

        url = f"{self.base_url}/v1/text-to-speech/{self.voice_id}"
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout_s) as client:
            try:
                response = await client.post(url, headers=self._build_headers(), json=self.build_payload(text))
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                logger.warning(f"ElevenLabs API error ({status}): {exc.response.text}")
                raise classify_status(status, exc.response.text, self.name) from exc
            except httpx.RequestError as exc:
                logger.warning(f"ElevenLabs request error: {exc!r}")
                raise TransportError(detail=repr(exc), provider=self.name) from exc

        return response.content
