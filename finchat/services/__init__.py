"""Service layer helpers"""

from .address import is_valid_sui_address, normalize_sui_address, shorten_address

__all__ = [
    "is_valid_sui_address",
    "normalize_sui_address",
    "shorten_address",
]
