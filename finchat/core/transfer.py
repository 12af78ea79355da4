"""Transfer intent detection.

Recognizes "send 2.5 SUI to 0x..." style requests inside free text and turns
them into a validated ``TransferIntent``. Matching is deterministic: the
matchers in ``TRANSFER_MATCHERS`` are tried in order and the first one that
matches decides the outcome. If the winning match does not validate, the
result is ``None``; later matchers are not consulted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..services.address import is_valid_sui_address, normalize_sui_address, shorten_address

SUPPORTED_CURRENCY = "SUI"
MIST_PER_SUI = Decimal(10) ** 9

_AMOUNT = r"(?P<amount>-?\d+(?:,\d{3})*(?:\.\d+)?)"
_UNIT = r"(?:\s*sui\b)?"
_ADDRESS = r"(?P<address>(?:0x)?[0-9a-f]+)\b"
# Bare hex words ("dad", "cafe") only count as an address with the 0x prefix or at full length
_STRICT_ADDRESS = r"(?P<address>0x[0-9a-f]+|[0-9a-f]{64})\b"
_TARGET = r"(?:the\s+)?(?:address\s+|wallet\s+|account\s+)?"
_VERB = r"(?:send|transfer|pay)"
_POLITE = (
    r"(?:please|kindly|can\s+you|could\s+you|would\s+you|will\s+you"
    r"|i\s+want\s+to|i\s+wanna|i'd\s+like\s+to|i\s+would\s+like\s+to|help\s+me)"
)
_QUALIFIER = r"(?:about\s+|around\s+|exactly\s+|an\s+amount\s+of\s+)?"


class TransferIntent(BaseModel):
    """A fully validated instruction to move SUI to an address."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    amount: Decimal = Field(gt=0)
    currency: Literal["SUI"] = SUPPORTED_CURRENCY
    to_address: str = Field(alias="toAddress")

    @field_validator("to_address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        if not is_valid_sui_address(value):
            raise ValueError("to_address must be 0x followed by 64 hex digits")
        return value

    @property
    def amount_mist(self) -> int:
        return int((self.amount * MIST_PER_SUI).to_integral_value(rounding=ROUND_DOWN))

    @property
    def short_address(self) -> str:
        return shorten_address(self.to_address)


@dataclass(frozen=True)
class TransferMatcher:
    """One phrasing variant. ``pattern`` must define ``amount`` and ``address`` groups."""

    name: str
    pattern: re.Pattern

    def match(self, text: str) -> Optional[Tuple[str, str]]:
        found = self.pattern.search(text)
        if not found:
            return None
        return found.group("amount"), found.group("address")


def _matcher(name: str, pattern: str) -> TransferMatcher:
    return TransferMatcher(name=name, pattern=re.compile(pattern, re.IGNORECASE))


# Priority order: most specific phrasing first.
TRANSFER_MATCHERS: Tuple[TransferMatcher, ...] = (
    _matcher(
        "create_transfer",
        rf"\bcreate\s+(?:a\s+|new\s+)?transfer\s+(?:of\s+)?{_AMOUNT}{_UNIT}\s+to\s+{_TARGET}{_ADDRESS}",
    ),
    _matcher(
        "polite_request",
        rf"\b{_POLITE}\s+(?:please\s+)?{_VERB}\s+{_QUALIFIER}{_AMOUNT}{_UNIT}"
        rf"(?:\s+(?:tokens?|coins?))?\s+to\s+{_TARGET}{_ADDRESS}",
    ),
    _matcher(
        "named_recipient",
        rf"\b{_VERB}\s+{_AMOUNT}{_UNIT}\s+to\s+(?:my\s+)?[a-z]+(?:\s+[a-z]+)?\s+at\s+{_TARGET}{_ADDRESS}",
    ),
    _matcher(
        "verb_amount_to",
        rf"\b{_VERB}\s+{_AMOUNT}{_UNIT}\s+to\s+{_TARGET}{_ADDRESS}",
    ),
    _matcher(
        "recipient_first",
        rf"\b(?:send|pay)\s+{_STRICT_ADDRESS}\s+{_AMOUNT}\s*sui\b",
    ),
    _matcher(
        "amount_to_address",
        rf"(?<![\w.,+-]){_AMOUNT}\s*sui\s+to\s+{_TARGET}{_ADDRESS}",
    ),
)


def parse_amount(raw: str) -> Optional[Decimal]:
    try:
        amount = Decimal(raw.replace(",", ""))
    except (InvalidOperation, AttributeError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def detect_transfer(text: str) -> Optional[TransferIntent]:
    """Return the transfer requested in ``text``, or ``None``.

    Never raises.
    """
    if not text:
        return None

    for matcher in TRANSFER_MATCHERS:
        groups = matcher.match(text)
        if groups is None:
            continue

        raw_amount, raw_address = groups
        amount = parse_amount(raw_amount)
        address = normalize_sui_address(raw_address)
        if amount is None or not is_valid_sui_address(address):
            return None
        return TransferIntent(amount=amount, to_address=address)

    return None


def describe_transfer(intent: TransferIntent) -> str:
    """Assistant acknowledgement shown instead of a model reply."""

    return (
        f"I detected a SUI transfer request: {intent.amount} {intent.currency} "
        f"to {intent.short_address}"
    )


__all__ = [
    "MIST_PER_SUI",
    "SUPPORTED_CURRENCY",
    "TRANSFER_MATCHERS",
    "TransferIntent",
    "TransferMatcher",
    "describe_transfer",
    "detect_transfer",
    "parse_amount",
]
