"""Models describing consumer state and decoded block contents."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .errors import EndOfStream, StreamError

# A decoded block or flash block update, keys in document order.
NormalizedRecord = Dict[str, Any]


class ConsumerState(str, Enum):
    """Lifecycle of one consumer loop invocation."""
    CONNECTING = "connecting"
    SUBSCRIBING = "subscribing"
    STREAMING = "streaming"
    TERMINATED = "terminated"


@dataclass
class ConsumerResult:
    """
    Outcome of a consumer run.

    `error` holds the lifecycle error that ended the run. It is None only
    when the loop was stopped on request.
    """
    state: ConsumerState
    records: int = 0
    skipped: int = 0
    sink_errors: int = 0
    error: Optional[StreamError] = None

    @property
    def ended_cleanly(self) -> bool:
        """True if the server closed the stream or the loop was stopped."""
        return self.error is None or isinstance(self.error, EndOfStream)


@dataclass
class DecodedTransaction:
    """Identity of one raw transaction carried in a block."""
    index: int
    tx_type: int
    tx_hash: str
    size: int
