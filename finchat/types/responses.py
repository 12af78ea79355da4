from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..core.transfer import TransferIntent
from .content import ChatMessage, ContentBlock


class ActionButton(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str = Field(description="Button text")
    action: str = Field(description="Action identifier handled by the client")
    variant: Literal["primary", "secondary"] = Field(default="primary")


class ChatResponse(BaseModel):
    kind: Literal["reply", "transfer"] = Field(description="Assistant reply or detected transfer")
    message: ChatMessage = Field(description="Assistant message to append to the conversation")
    transfer: Optional[TransferIntent] = Field(default=None, description="Detected transfer, when kind is 'transfer'")
    suggestions: Tuple[str, ...] = Field(default=(), description="Follow-up prompts")
    action_buttons: Tuple[ActionButton, ...] = Field(default=(), description="Client actions")
    llm_provider: Optional[str] = Field(default=None, description="Provider that generated the reply")
    llm_model: Optional[str] = Field(default=None, description="Model reported by the provider")
    tokens_used: Optional[int] = Field(default=None, description="Total tokens consumed")

    @property
    def blocks(self) -> List[ContentBlock]:
        return list(self.message.content)
