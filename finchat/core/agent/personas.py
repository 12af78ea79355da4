"""
Persona Management

Each assistant type gets its own system prompt template, loaded from the
YAML files shipped in ``finchat/personas``. A built-in finance persona is
always available so a broken or missing file never takes chat down.
"""

from typing import Dict, List, Optional
import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from ...types.content import AssistantType
from ...types.requests import UserProfile

PERSONAS_DIR = Path(__file__).resolve().parent.parent.parent / "personas"

_NOT_SET = "Not set"


def _format_income(income: Optional[float]) -> str:
    if income is None:
        return _NOT_SET
    if float(income).is_integer():
        return str(int(income))
    return str(income)


class Persona(BaseModel):
    """Assistant persona with its system prompt template"""

    name: AssistantType = Field(description="Assistant type this persona serves")
    display_name: str = Field(description="Human-readable persona name")
    description: str = Field(default="", description="Brief description of persona characteristics")
    system_prompt: str = Field(description="System prompt template with profile placeholders")
    tone: str = Field(default="friendly", description="Overall communication tone")
    specializations: List[str] = Field(default_factory=list, description="Areas of specialized knowledge")

    def render_system_prompt(self, profile: UserProfile) -> str:
        """Fill ``{user_name}``, ``{currency}``, ``{income}`` and ``{goals}``"""
        values = {
            "{user_name}": profile.name,
            "{currency}": profile.currency,
            "{income}": _format_income(profile.income),
            "{goals}": str(profile.goals),
        }
        prompt = self.system_prompt
        for placeholder, value in values.items():
            prompt = prompt.replace(placeholder, value)
        return prompt


FALLBACK_PERSONA = Persona(
    name=AssistantType.GENERAL,
    display_name="Finance Assistant",
    description="Personal finance assistant with SUI transfer support",
    system_prompt=(
        "You are a specialized personal finance assistant with SUI cryptocurrency capabilities.\n\n"
        "User Information:\n"
        "- Name: {user_name}\n"
        "- Preferred Currency: {currency}\n"
        "- Monthly Income: {income}\n"
        "- Financial Goals: {goals}\n\n"
        "Help with transactions, budgets, bills, savings goals and financial insights. "
        "Give actionable advice tailored to the user's income and goals."
    ),
    tone="encouraging",
    specializations=["budgeting", "sui_transfers"],
)


class PersonaManager:
    """Loads persona definitions and picks one per assistant type"""

    def __init__(self, personas_dir: Optional[Path] = None, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.personas_dir = Path(personas_dir) if personas_dir is not None else PERSONAS_DIR
        self._personas: Dict[AssistantType, Persona] = {}
        self._load_personas()

    def _load_personas(self) -> None:
        self._personas = {}

        if self.personas_dir.exists():
            for yaml_file in sorted(self.personas_dir.glob("*.yaml")):
                persona = self._load_persona_from_yaml(yaml_file)
                if persona:
                    self._personas[persona.name] = persona
                    self.logger.info(f"Loaded persona: {persona.name.value} ({persona.display_name})")
        else:
            self.logger.warning(f"Personas directory not found: {self.personas_dir}")

        if AssistantType.GENERAL not in self._personas:
            self.logger.warning("No general persona loaded, using built-in finance persona")
            self._personas[AssistantType.GENERAL] = FALLBACK_PERSONA

    def _load_persona_from_yaml(self, yaml_file: Path) -> Optional[Persona]:
        try:
            with open(yaml_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
            return Persona(
                name=data["name"],
                display_name=data["display_name"],
                description=data.get("description", ""),
                system_prompt=data["system_prompt"].strip(),
                tone=data.get("tone", "friendly"),
                specializations=data.get("specializations") or [],
            )
        except Exception as e:
            self.logger.error(f"Error loading persona from {yaml_file}: {str(e)}")
            return None

    def get_persona(self, assistant_type: Optional[AssistantType] = None) -> Persona:
        """Persona for ``assistant_type``, falling back to the general one"""
        if assistant_type is None:
            return self._personas[AssistantType.GENERAL]
        return self._personas.get(AssistantType(assistant_type), self._personas[AssistantType.GENERAL])

    def has_persona(self, assistant_type: AssistantType) -> bool:
        return AssistantType(assistant_type) in self._personas

    def list_personas(self) -> Dict[str, str]:
        return {name.value: persona.display_name for name, persona in self._personas.items()}


__all__ = ["FALLBACK_PERSONA", "PERSONAS_DIR", "Persona", "PersonaManager"]
