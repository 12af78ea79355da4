"""Finance chat assistant core: rich content, SUI transfer detection, LLM dispatch and speech."""

__version__ = "0.1.0"
