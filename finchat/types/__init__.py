from .content import AssistantType, BlockType, ChatMessage, ContentBlock, ContentValidationError
from .requests import ChatRequest, SpeechRequest, UserProfile
from .responses import ActionButton, ChatResponse

__all__ = [
    "AssistantType",
    "BlockType",
    "ChatMessage",
    "ContentBlock",
    "ContentValidationError",
    "ChatRequest",
    "SpeechRequest",
    "UserProfile",
    "ActionButton",
    "ChatResponse",
]
