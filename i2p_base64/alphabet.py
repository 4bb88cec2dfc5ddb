"""I2P Base64 alphabet.

Same ordering as RFC 4648 Base64 except for the last two symbols: ``-``
takes the place of ``+`` (index 62) and ``~`` the place of ``/`` (index 63).
See https://geti2p.net/spec/common-structures#destination.
"""

from typing import Optional

from i2p_base64.errors import InvalidSymbolError

I2P_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-~"
PAD = "="
_I2P_MAP = {char: idx for idx, char in enumerate(I2P_ALPHABET)}


def symbol_of(index: int) -> str:
    """Return the symbol for a 6-bit value."""
    if not 0 <= index < 64:
        raise ValueError(f"Symbol index out of range: {index}")
    return I2P_ALPHABET[index]


def index_of(char: str, offset: Optional[int] = None) -> int:
    """Return the 6-bit value of ``char``.

    Raises InvalidSymbolError for anything outside the 64 symbols, padding
    and whitespace included. ``offset`` is only used for the error message.
    """
    try:
        return _I2P_MAP[char]
    except KeyError:
        raise InvalidSymbolError(char, offset) from None


def is_symbol(char: str) -> bool:
    return char in _I2P_MAP
