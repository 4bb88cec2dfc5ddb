"""Exceptions raised by the I2P Base64 codec.

Decode failures carry the character offset at which they were detected so
callers can point at the offending spot in the input.
"""

from typing import Optional


class Base64Error(Exception):
    """Base exception for codec operations."""


class DecodeError(Base64Error, ValueError):
    """Raised when encoded input is malformed."""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset


class InvalidSymbolError(DecodeError):
    """Raised for a character outside the alphabet and padding."""

    def __init__(self, symbol: str, offset: Optional[int] = None):
        where = f" at offset {offset}" if offset is not None else ""
        super().__init__(f"Invalid base64 character {symbol!r}{where}", offset)
        self.symbol = symbol


class InvalidLengthError(DecodeError):
    """Raised when the encoded length is not a whole number of groups."""


class InvalidPaddingError(DecodeError):
    """Raised when padding is misplaced or has the wrong length."""


class StreamError(Base64Error, OSError):
    """Raised when reading the source or writing the sink fails."""
