"""I2P Base64 encode/decode.

Every 3 input bytes become 4 symbols of the I2P alphabet; a short final
group is padded with ``=``. The in-memory functions and the stream functions
share one incremental Encoder/Decoder, so a stream is never held in memory
beyond one chunk plus an unfinished group.
"""

import base64
import logging
from typing import Optional

from i2p_base64.alphabet import I2P_ALPHABET, PAD, index_of
from i2p_base64.errors import InvalidLengthError, InvalidPaddingError, StreamError

logger = logging.getLogger(__name__)

GROUP_BYTES = 3
GROUP_CHARS = 4
DEFAULT_CHUNK_SIZE = 1024 * GROUP_BYTES
DEFAULT_DECODE_CHUNK_SIZE = 1024 * GROUP_CHARS
WHITESPACE = frozenset(" \t\r\n\v\f")

_SYMBOLS = frozenset(I2P_ALPHABET)
_TO_STANDARD = str.maketrans("-~", "+/")

_BYTES_LIKE = (bytes, bytearray, memoryview)


def _check_bytes(data) -> None:
    if not isinstance(data, _BYTES_LIKE):
        raise TypeError("Input must be bytes")


def _encode_groups(data: bytes) -> str:
    """Encode whole groups; ``len(data)`` must be a multiple of 3."""
    out = []
    for i in range(0, len(data), GROUP_BYTES):
        n = (data[i] << 16) | (data[i + 1] << 8) | data[i + 2]
        out.append(
            I2P_ALPHABET[n >> 18]
            + I2P_ALPHABET[(n >> 12) & 0x3F]
            + I2P_ALPHABET[(n >> 6) & 0x3F]
            + I2P_ALPHABET[n & 0x3F]
        )
    return "".join(out)


def _encode_tail(tail: bytes) -> str:
    """Encode the last 0-2 bytes of the input as one padded group."""
    if not tail:
        return ""
    n = tail[0] << 16
    if len(tail) == 2:
        n |= tail[1] << 8
    head = I2P_ALPHABET[n >> 18] + I2P_ALPHABET[(n >> 12) & 0x3F]
    if len(tail) == 1:
        return head + PAD * 2
    return head + I2P_ALPHABET[(n >> 6) & 0x3F] + PAD


class Encoder:
    """Incremental encoder.

    Bytes may be fed in pieces of any size. Up to two bytes that do not yet
    complete a group are held back until the next ``feed`` or ``finish``.
    """

    def __init__(self) -> None:
        self._carry = b""

    def feed(self, data) -> str:
        _check_bytes(data)
        buf = self._carry + bytes(data)
        cut = len(buf) - len(buf) % GROUP_BYTES
        self._carry = buf[cut:]
        return _encode_groups(buf[:cut])

    def finish(self) -> str:
        tail, self._carry = self._carry, b""
        return _encode_tail(tail)


class Decoder:
    """Incremental decoder.

    Text may be fed in pieces of any size. Bytes are accepted too and read
    one byte per character, so non-ASCII input surfaces as an invalid symbol.

    Args:
        ignore_whitespace: Skip ASCII whitespace instead of rejecting it.
        allow_unpadded: Accept a final group of 2 or 3 symbols without ``=``.
    """

    def __init__(
        self, *, ignore_whitespace: bool = False, allow_unpadded: bool = False
    ) -> None:
        self.ignore_whitespace = ignore_whitespace
        self.allow_unpadded = allow_unpadded
        # 6-bit values of the current group, None marks padding
        self._group: list[Optional[int]] = []
        self._group_offset = 0
        self._offset = 0
        self._count = 0
        self._padded = False

    def feed(self, text) -> bytes:
        if isinstance(text, _BYTES_LIKE):
            text = bytes(text).decode("latin-1")
        out = bytearray()

        # Runs of plain symbols skip the per-character checks; padding,
        # whitespace and bad characters go through the loop below.
        body = text.rstrip(PAD)
        if (
            body
            and not self._padded
            and not (self._group and self._group[-1] is None)
            and _SYMBOLS.issuperset(body)
        ):
            out += self._feed_symbols(body)
            text = text[len(body) :]

        for char in text:
            pos = self._offset
            self._offset += 1
            if self.ignore_whitespace and char in WHITESPACE:
                continue

            value = None if char == PAD else index_of(char, pos)
            if self._padded:
                raise InvalidPaddingError(
                    f"Data after padding at offset {pos}", pos
                )
            if value is not None and self._group and self._group[-1] is None:
                raise InvalidPaddingError(
                    f"Symbol after padding at offset {pos}", pos
                )

            if not self._group:
                self._group_offset = pos
            self._group.append(value)
            self._count += 1
            if len(self._group) == GROUP_CHARS:
                out += self._decode_group()
        return bytes(out)

    def finish(self) -> bytes:
        group = self._group
        if not group:
            return b""
        if not self.allow_unpadded:
            raise InvalidLengthError(
                f"Encoded length {self._count} is not a multiple of {GROUP_CHARS}",
                self._offset,
            )
        if None in group:
            raise InvalidPaddingError(
                f"Incomplete padded group at offset {self._group_offset}",
                self._group_offset,
            )
        if len(group) == 1:
            raise InvalidLengthError(
                f"Single trailing character at offset {self._group_offset}",
                self._group_offset,
            )
        group.extend([None] * (GROUP_CHARS - len(group)))
        return self._decode_group()

    def _feed_symbols(self, text: str) -> bytes:
        """Decode a run of alphabet symbols containing no padding."""
        start = self._offset
        self._offset += len(text)
        self._count += len(text)

        pending = "".join(I2P_ALPHABET[value] for value in self._group) + text
        cut = len(pending) - len(pending) % GROUP_CHARS
        tail = pending[cut:]
        if cut:
            self._group_offset = self._offset - len(tail)
        elif not self._group:
            self._group_offset = start
        self._group = [index_of(char) for char in tail]
        return base64.b64decode(pending[:cut].translate(_TO_STANDARD))

    def _decode_group(self) -> bytes:
        group = self._group[:]
        self._group.clear()

        pads = group.count(None)
        if pads > 2:
            raise InvalidPaddingError(
                f"Group at offset {self._group_offset} has {pads} padding characters",
                self._group_offset,
            )
        if pads:
            self._padded = True

        n = 0
        for value in group:
            n = (n << 6) | (value or 0)
        # Trailing bits of a padded group that do not fill a byte are dropped
        return n.to_bytes(GROUP_BYTES, "big")[: GROUP_BYTES - pads]


# ---------------------------------------------------------------------------
# In-memory API
# ---------------------------------------------------------------------------


def b64encode(data: bytes) -> str:
    """Encode bytes to an I2P base64 string."""
    _check_bytes(data)
    encoder = Encoder()
    return encoder.feed(data) + encoder.finish()


def b64decode(
    encoded: str, *, ignore_whitespace: bool = False, allow_unpadded: bool = False
) -> bytes:
    """Decode an I2P base64 string to bytes.

    Raises:
        InvalidSymbolError: A character outside the alphabet and padding.
        InvalidLengthError: Input is not a whole number of 4-character groups.
        InvalidPaddingError: ``=`` anywhere but the end of the last group.
    """
    if not isinstance(encoded, str):
        raise TypeError("Input must be a string")
    decoder = Decoder(
        ignore_whitespace=ignore_whitespace, allow_unpadded=allow_unpadded
    )
    return decoder.feed(encoded) + decoder.finish()


def b64encode_str(text: str, encoding: str = "utf-8") -> str:
    """Encode a text string to I2P base64."""
    return b64encode(text.encode(encoding))


def b64decode_str(encoded: str, encoding: str = "utf-8", **options) -> str:
    """Decode I2P base64 to a text string."""
    return b64decode(encoded, **options).decode(encoding)


# ---------------------------------------------------------------------------
# Stream API
# ---------------------------------------------------------------------------


def _check_chunk_size(chunk_size: int, group: int) -> None:
    if (
        isinstance(chunk_size, bool)
        or not isinstance(chunk_size, int)
        or chunk_size <= 0
        or chunk_size % group
    ):
        raise ValueError(
            f"chunk_size must be a positive multiple of {group}, got {chunk_size!r}"
        )


def _read_chunk(source, size: int, position: int):
    try:
        chunk = source.read(size)
    except (OSError, ValueError) as exc:
        raise StreamError(
            f"Failed to read source at offset {position}: {exc}"
        ) from exc
    if chunk is None:
        raise StreamError(f"Source returned no data at offset {position}")
    return chunk


def _write_chunk(sink, data, position: int) -> int:
    if not data:
        return 0
    try:
        written = sink.write(data)
    except (OSError, ValueError) as exc:
        raise StreamError(
            f"Failed to write sink at offset {position}: {exc}"
        ) from exc
    if isinstance(written, int) and written < len(data):
        raise StreamError(
            f"Short write at offset {position}: {written} of {len(data)}"
        )
    return len(data)


def _flush(sink) -> None:
    flush = getattr(sink, "flush", None)
    if flush is None:
        return
    try:
        flush()
    except (OSError, ValueError) as exc:
        raise StreamError(f"Failed to flush sink: {exc}") from exc


def encode_stream(source, sink, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Encode everything readable from ``source`` into ``sink``.

    Args:
        source: Binary file-like object; ``read(size)`` returns bytes.
        sink: Text file-like object; ``write(str)``.
        chunk_size: Bytes per read, a positive multiple of 3.

    Returns:
        The number of characters written.

    Raises:
        StreamError: Reading, writing or flushing failed. Output written
            before the failure stays in the sink.
    """
    _check_chunk_size(chunk_size, GROUP_BYTES)
    encoder = Encoder()
    consumed = written = 0
    while True:
        chunk = _read_chunk(source, chunk_size, consumed)
        if not chunk:
            break
        consumed += len(chunk)
        written += _write_chunk(sink, encoder.feed(chunk), written)
    written += _write_chunk(sink, encoder.finish(), written)
    _flush(sink)
    logger.debug(f"Encoded {consumed} bytes into {written} characters")
    return written


def decode_stream(
    source,
    sink,
    chunk_size: int = DEFAULT_DECODE_CHUNK_SIZE,
    *,
    ignore_whitespace: bool = False,
    allow_unpadded: bool = False,
) -> int:
    """Decode everything readable from ``source`` into ``sink``.

    ``source.read(size)`` may return str or bytes; ``sink.write`` receives
    bytes. ``chunk_size`` must be a positive multiple of 4. Returns the
    number of bytes written. Decode errors propagate as raised by Decoder;
    whatever was decoded before the error has already been written.
    """
    _check_chunk_size(chunk_size, GROUP_CHARS)
    decoder = Decoder(
        ignore_whitespace=ignore_whitespace, allow_unpadded=allow_unpadded
    )
    consumed = written = 0
    while True:
        chunk = _read_chunk(source, chunk_size, consumed)
        if not chunk:
            break
        consumed += len(chunk)
        written += _write_chunk(sink, decoder.feed(chunk), written)
    written += _write_chunk(sink, decoder.finish(), written)
    _flush(sink)
    logger.debug(f"Decoded {consumed} characters into {written} bytes")
    return written
