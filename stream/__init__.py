"""Stream module for Base API block ingest."""

from .adapter import StreamAdapter, StreamHandle
from .grpc_adapter import GrpcAdapter, GrpcBlockAdapter, GrpcFlashBlockAdapter
from .websocket_adapter import WebSocketAdapter
from .consumer import StreamConsumer, log_record, log_block_summary
from .submitter import submit_transaction

__all__ = [
    "StreamAdapter",
    "StreamHandle",
    "GrpcAdapter",
    "GrpcBlockAdapter",
    "GrpcFlashBlockAdapter",
    "WebSocketAdapter",
    "StreamConsumer",
    "log_record",
    "log_block_summary",
    "submit_transaction",
]
