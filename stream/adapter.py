"""Transport adapter interface shared by the gRPC and WebSocket streams."""

from abc import ABC, abstractmethod

from models.records import NormalizedRecord
from parser.decoder import decode
from parser.normalizer import normalize


class StreamHandle(ABC):
    """
    A live, authenticated subscription.

    The handle owns its connection. Once next() raises EndOfStream or
    TransportError it must not be called again.
    """

    @abstractmethod
    async def next(self) -> bytes:
        """
        Block until the next raw payload arrives.

        Raises:
            EndOfStream: server closed the subscription.
            TransportError: the connection failed.
            RecordError: this message is unusable, the next one may be fine.
        """

    @abstractmethod
    async def close(self):
        """Release the subscription."""


class StreamAdapter(ABC):
    """
    One transport variant for receiving block payloads.

    Adapters are single-attempt: they never retry or reconnect.
    """

    # Log prefix, e.g. "BlockStream"
    name = "Stream"

    @abstractmethod
    async def connect(self):
        """
        Establish the transport.

        Raises:
            ConnectError: on dial failure or connect timeout.
        """

    @abstractmethod
    async def subscribe(self) -> StreamHandle:
        """
        Open the authenticated subscription.

        Raises:
            SubscribeError: if the server does not accept it.
        """

    @abstractmethod
    async def close(self):
        """Close the transport."""

    def decode(self, raw: bytes) -> NormalizedRecord:
        """Turn one raw payload into a record (brotli JSON by default)."""
        return normalize(decode(raw))
