"""
Assistant personas

System prompt templates per assistant type, loaded from ``finchat/personas``.
"""

from .personas import Persona, PersonaManager

__all__ = [
    "Persona",
    "PersonaManager",
]
