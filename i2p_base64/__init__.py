"""I2P Base64 - reversible text encoding with the I2P alphabet.

I2P writes destinations and router identities in Base64 with ``-`` and ``~``
in place of ``+`` and ``/``. This package provides that codec for in-memory
values and for streams, plus a small CLI.
"""

__version__ = "0.1.0"

from i2p_base64.errors import (  # noqa: F401
    Base64Error,
    DecodeError,
    InvalidSymbolError,
    InvalidLengthError,
    InvalidPaddingError,
    StreamError,
)
from i2p_base64.alphabet import (  # noqa: F401
    I2P_ALPHABET,
    PAD,
    index_of,
    is_symbol,
    symbol_of,
)
from i2p_base64.codec import (  # noqa: F401
    Decoder,
    Encoder,
    b64decode,
    b64decode_str,
    b64encode,
    b64encode_str,
    decode_stream,
    encode_stream,
)
from i2p_base64.cli import main  # noqa: F401
