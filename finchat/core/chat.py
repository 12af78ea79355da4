"""
Chat pipeline.

One user turn goes through here: transfer detection first, and only when
the message is not a transfer does it reach a completion backend. The
reply text is shaped into content blocks and decorated with follow-up
suggestions and action buttons.
"""

from __future__ import annotations

from typing import List, Optional

from ..config import Settings, get_settings
from ..logging_config import get_logger
from ..providers.llm import ProviderDispatcher, canonical_provider_name
from ..providers.llm.base import ProviderMessage, ProviderRequest, UserContext
from ..types.content import ChatMessage, text_block
from ..types.requests import ChatRequest, UserProfile
from ..types.responses import ChatResponse
from .agent.personas import PersonaManager
from .formatting import blocks_from_markdown
from .suggestions import TRANSFER_BUTTONS, generate_action_buttons, generate_suggestions
from .transfer import describe_transfer, detect_transfer

logger = get_logger("finchat.chat")


def user_context_for(profile: UserProfile) -> UserContext:
    return UserContext(
        name=profile.name,
        currency=profile.currency,
        monthly_income=profile.income,
        goal_count=profile.goals,
    )


class ChatPipeline:
    """Turns a ``ChatRequest`` into a ``ChatResponse``."""

    def __init__(
        self,
        dispatcher: Optional[ProviderDispatcher] = None,
        persona_manager: Optional[PersonaManager] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.dispatcher = dispatcher or ProviderDispatcher(self.settings)
        self.persona_manager = persona_manager or PersonaManager()

    async def handle(self, request: ChatRequest) -> ChatResponse:
        last = request.messages[-1]
        last_user = request.last_user_message()
        user_text = last_user.plain_text() if last_user is not None else ""

        intent = detect_transfer(user_text)
        if intent is not None:
            logger.info("transfer_detected", amount=str(intent.amount), to=intent.short_address)
            return ChatResponse(
                kind="transfer",
                message=ChatMessage(role="assistant", content=[text_block(describe_transfer(intent))]),
                transfer=intent,
                action_buttons=TRANSFER_BUTTONS,
            )

        provider = request.provider or self.settings.llm_provider
        reply = await self.dispatcher.complete(self._build_request(request), provider)

        return ChatResponse(
            kind="reply",
            message=ChatMessage(
                role="assistant",
                content=blocks_from_markdown(reply.text),
                assistant_type=last.assistant_type,
            ),
            suggestions=generate_suggestions(reply.text, user_text),
            action_buttons=generate_action_buttons(reply.text, user_text),
            llm_provider=canonical_provider_name(provider),
            llm_model=reply.provider_model,
            tokens_used=reply.usage.total_tokens if reply.usage else None,
        )

    def _build_request(self, request: ChatRequest) -> ProviderRequest:
        persona = self.persona_manager.get_persona(request.messages[-1].assistant_type)
        messages: List[ProviderMessage] = [
            ProviderMessage(role="system", text=persona.render_system_prompt(request.user)),
        ]
        for message in request.messages:
            text = message.plain_text()
            if text:
                messages.append(ProviderMessage(role=message.role, text=text))

        return ProviderRequest(
            messages=messages,
            model_id=request.model,
            user_context=user_context_for(request.user),
        )


__all__ = ["ChatPipeline", "user_context_for"]
