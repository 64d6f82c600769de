"""Data models for the Base block stream client."""

from .errors import (
    StreamError,
    ConnectError,
    SubscribeError,
    TransportError,
    EndOfStream,
    RecordError,
    DecodeError,
    ParseError,
    EnvelopeError,
    SubmitError,
)
from .records import (
    ConsumerState,
    ConsumerResult,
    DecodedTransaction,
    NormalizedRecord,
)

__all__ = [
    "StreamError",
    "ConnectError",
    "SubscribeError",
    "TransportError",
    "EndOfStream",
    "RecordError",
    "DecodeError",
    "ParseError",
    "EnvelopeError",
    "SubmitError",
    "ConsumerState",
    "ConsumerResult",
    "DecodedTransaction",
    "NormalizedRecord",
]
