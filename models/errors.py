"""Error taxonomy for stream ingestion and transaction submission."""


class StreamError(Exception):
    """Base class for every error raised by the stream client."""


# Stream lifecycle errors: end the current run, never the process.

class ConnectError(StreamError):
    """Transport could not be established (dial failure or timeout)."""


class SubscribeError(StreamError):
    """Connection is up but the subscription was not accepted."""


class TransportError(StreamError):
    """The live subscription failed while receiving."""


class EndOfStream(StreamError):
    """The server closed the subscription cleanly."""


# Per-record errors: logged and skipped, the stream keeps going.

class RecordError(StreamError):
    """A single payload could not be turned into a record."""


class DecodeError(RecordError):
    """Payload is truncated, corrupt, or not brotli compressed."""


class ParseError(RecordError):
    """Decoded text is not a JSON object."""


class EnvelopeError(RecordError):
    """WebSocket frame is not a usable JSON-RPC envelope."""


class SubmitError(StreamError):
    """SendTransaction was rejected or did not complete in time."""
