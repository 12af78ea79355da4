from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Literal, Optional
import logging
import time

from pydantic import BaseModel, ConfigDict, Field


class ProviderId(str, Enum):
    """Completion backends a caller can select."""
    GROQ = "groq"
    OPENAI = "openai"


# =============================================================================
# Request / Reply Models
# =============================================================================

class ProviderMessage(BaseModel):
    """One conversation turn as sent to a backend"""
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    text: str


class UserContext(BaseModel):
    """Profile summary appended to the first system message"""
    model_config = ConfigDict(frozen=True)

    name: str
    currency: str
    monthly_income: Optional[float] = None
    goal_count: int = 0

    def format_block(self) -> str:
        income = "Not set" if self.monthly_income is None else _format_number(self.monthly_income)
        return (
            "\n\nUser Context:"
            f"\n- Name: {self.name}"
            f"\n- Currency: {self.currency}"
            f"\n- Monthly Income: {income}"
            f"\n- Number of Goals: {self.goal_count}"
        )


class ProviderRequest(BaseModel):
    messages: List[ProviderMessage] = Field(default_factory=list)
    model_id: Optional[str] = Field(default=None, description="Backend model; provider default when omitted")
    user_context: Optional[UserContext] = None


class Usage(BaseModel):
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class ProviderReply(BaseModel):
    """Standardized reply from completion backends"""
    text: str
    usage: Optional[Usage] = None
    provider_model: str
    finish_reason: Optional[str] = None
    response_time_ms: Optional[float] = None


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def inject_user_context(
    messages: List[ProviderMessage],
    user_context: Optional[UserContext],
) -> List[Dict[str, str]]:
    """Render messages to wire dicts, appending the context block to the first
    message when it is a system message. Everything else passes through."""

    rendered: List[Dict[str, str]] = []
    for index, msg in enumerate(messages):
        content = msg.text
        if index == 0 and msg.role == "system" and user_context is not None:
            content = content + user_context.format_block()
        rendered.append({"role": msg.role, "content": content})
    return rendered


class LLMProvider(ABC):
    """Abstract base class for completion backends"""

    provider_id: ProviderId

    def __init__(self, api_key: str, model: str, **kwargs):
        self.api_key = api_key
        self.model = model
        self.logger = logging.getLogger(f"{self.__class__.__name__}")
        self._setup_client(**kwargs)

    @abstractmethod
    def _setup_client(self, **kwargs) -> None:
        """Initialize the provider-specific client"""
        pass

    @abstractmethod
    async def complete(self, request: ProviderRequest) -> ProviderReply:
        """Issue one completion call.

        Raises:
            ProviderError: one of the classified subclasses in
                ``finchat.providers.errors``; never a raw transport exception.
        """
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Check if the provider is healthy and responding"""
        pass

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    def _measure_time(self, start_time: float) -> float:
        """Helper to measure response time in milliseconds"""
        return (time.time() - start_time) * 1000
