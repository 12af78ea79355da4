"""
Speech preparation.

``sanitize`` turns markdown-ish assistant output into plain text a speech
backend can read aloud, bounded to a maximum length. The passes run in a
fixed order and each one operates on the output of the previous one.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict

from ..config import get_settings
from ..providers.base import SpeechProvider
from ..types.content import ContentBlock, to_plain_text

logger = logging.getLogger(__name__)

DEFAULT_MAX_LENGTH = 2500
CODE_PLACEHOLDER = "code block"
ELLIPSIS = "..."

_PASSES = (
    (re.compile(r"```[\s\S]*?```"), CODE_PLACEHOLDER),     # fenced code
    (re.compile(r"`([^`]+)`"), r"\1"),                      # inline code
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),                  # bold
    (re.compile(r"\*(.*?)\*"), r"\1"),                      # italic
    (re.compile(r"#{1,6}\s"), ""),                          # heading markers
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),          # links
    (re.compile(r"\n+"), " "),                              # newline runs
)


class SanitizedSpeechPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    truncated: bool = False


def _strip_markup(text: str) -> str:
    for pattern, replacement in _PASSES:
        text = pattern.sub(replacement, text)
    return text.strip()


def sanitize(text: Optional[str], max_length: int = DEFAULT_MAX_LENGTH) -> SanitizedSpeechPayload:
    """Strip markup and bound the result to ``max_length`` characters.

    When the cleaned text is too long it is cut so that the text plus the
    ellipsis marker fits in ``max_length``. Never raises.
    """
    cleaned = _strip_markup(text or "")
    limit = max(max_length, 0)

    if len(cleaned) <= limit:
        return SanitizedSpeechPayload(text=cleaned, truncated=False)

    keep = max(limit - len(ELLIPSIS), 0)
    shortened = (cleaned[:keep] + ELLIPSIS)[:limit]
    return SanitizedSpeechPayload(text=shortened, truncated=True)


def sanitize_blocks(blocks: Sequence[ContentBlock], max_length: int = DEFAULT_MAX_LENGTH) -> SanitizedSpeechPayload:
    return sanitize(to_plain_text(blocks), max_length)


class SpeechResult(BaseModel):
    audio: bytes
    content_type: str
    payload: SanitizedSpeechPayload


class SpeechService:
    """Sanitizes text and hands it to a speech backend."""

    def __init__(self, provider: SpeechProvider, max_length: Optional[int] = None):
        self.provider = provider
        self.max_length = get_settings().tts_max_characters if max_length is None else max_length

    async def speak(self, content: Union[str, Sequence[ContentBlock]]) -> SpeechResult:
        if isinstance(content, str):
            payload = sanitize(content, self.max_length)
        else:
            payload = sanitize_blocks(content, self.max_length)

        if not payload.text:
            raise ValueError("Text is required")

        if payload.truncated:
            logger.info(f"Speech text truncated to {len(payload.text)} characters")

        audio = await self.provider.synthesize(payload.text)
        return SpeechResult(audio=audio, content_type=self.provider.content_type, payload=payload)


__all__ = [
    "CODE_PLACEHOLDER",
    "DEFAULT_MAX_LENGTH",
    "ELLIPSIS",
    "SanitizedSpeechPayload",
    "SpeechResult",
    "SpeechService",
    "sanitize",
    "sanitize_blocks",
]
