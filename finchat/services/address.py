"""Helpers for normalizing and validating Sui wallet addresses."""

from __future__ import annotations

import re
from functools import lru_cache

SUI_ADDRESS_LENGTH = 66  # "0x" + 64 hex digits

_SUI_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{64}$")


def normalize_sui_address(address: str | None) -> str:
    """Prepend ``0x`` when missing. Idempotent on prefixed input."""

    if not address:
        return ""
    candidate = address.strip()
    if candidate[:2].lower() == "0x":
        return "0x" + candidate[2:]
    return "0x" + candidate


@lru_cache(maxsize=256)
def is_valid_sui_address(address: str) -> bool:
    if not address or len(address) != SUI_ADDRESS_LENGTH:
        return False
    return bool(_SUI_ADDRESS_RE.fullmatch(address))


def shorten_address(address: str, head: int = 8, tail: int = 8) -> str:
    """``0x123456...abcdef`` style display form."""

    if len(address) <= head + tail:
        return address
    return f"{address[:head]}...{address[-tail:]}"


__all__ = [
    "SUI_ADDRESS_LENGTH",
    "normalize_sui_address",
    "is_valid_sui_address",
    "shorten_address",
]
