from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .content import ChatMessage


class UserProfile(BaseModel):
    """Profile summary supplied by the caller alongside the conversation."""

    name: str = Field(description="Display name")
    currency: str = Field(default="USD", description="Preferred currency code")
    income: Optional[float] = Field(default=None, description="Monthly income, if known")
    goals: int = Field(default=0, ge=0, description="Number of financial goals")


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: List[ChatMessage] = Field(description="Chat conversation history")
    user: UserProfile = Field(description="Profile summary used as model context")
    model: Optional[str] = Field(default=None, description="Override the provider's default model")
    provider: Optional[str] = Field(default=None, description="Override the default provider (groq, openai)")

    @field_validator("messages")
    @classmethod
    def _require_messages(cls, value: List[ChatMessage]) -> List[ChatMessage]:
        if not value:
            raise ValueError("messages must not be empty")
        return value

    def last_user_message(self) -> Optional[ChatMessage]:
        for message in reversed(self.messages):
            if message.role == "user":
                return message
        return None


class SpeechRequest(BaseModel):
    text: str = Field(min_length=1, description="Text to read aloud; markdown is stripped")
