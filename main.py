"""
Base block stream client.

Subscribes to the BlockRazor Base API block, flash block, or WebSocket flash
block feed and logs every record. Connects and subscribes once; the run ends
on the first stream error. Reconnection is left to the integrator.
"""

import asyncio
import logging
import signal
import sys
from typing import Optional

from config.settings import settings
from models.errors import ConnectError, DecodeError, SubmitError
from models.records import ConsumerResult, NormalizedRecord
from parser.transactions import decode_transactions
from stream.adapter import StreamAdapter
from stream.consumer import StreamConsumer, log_block_summary, log_record
from stream.grpc_adapter import GrpcBlockAdapter, GrpcFlashBlockAdapter
from stream.submitter import submit_transaction
from stream.websocket_adapter import WebSocketAdapter

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)

logger = logging.getLogger("basestream")

STREAMS = ("block", "flash", "ws")


def build_adapter(stream: str) -> StreamAdapter:
    """Create the adapter for a stream name."""
    if stream == "block":
        return GrpcBlockAdapter()
    if stream == "flash":
        return GrpcFlashBlockAdapter()
    if stream == "ws":
        return WebSocketAdapter()
    raise ValueError(f"Unknown stream: {stream}")


async def log_block_with_transactions(record: NormalizedRecord):
    """Block sink that also decodes every transaction in the block."""
    await log_block_summary(record)
    try:
        decode_transactions(record.get("transactions") or [])
    except DecodeError as e:
        logger.error(f"Failed to decode block transactions: {e}")


def setup_signal_handlers(task: asyncio.Task, consumer: StreamConsumer):
    """Setup cross-platform signal handlers for graceful shutdown."""
    loop = asyncio.get_running_loop()
    shutting_down = False

    def handler(signum, frame):
        nonlocal shutting_down
        sig_name = signal.Signals(signum).name
        if shutting_down:
            logger.info(f"Received {sig_name}, shutdown already in progress")
            return
        shutting_down = True
        logger.info(f"Received {sig_name}, shutting down...")
        consumer.stop()
        # The consumer may be blocked on a receive
        try:
            loop.call_soon_threadsafe(task.cancel)
        except RuntimeError:
            # Loop already closed
            logger.debug("Event loop closed before shutdown was scheduled")

    signal.signal(signal.SIGINT, handler)
    signal.signal(signal.SIGTERM, handler)

    # Windows-specific: SIGBREAK (Ctrl+Break)
    if hasattr(signal, 'SIGBREAK'):
        signal.signal(signal.SIGBREAK, handler)


async def run_stream(stream: str, decode_txs: bool = False) -> Optional[ConsumerResult]:
    """Consume one stream until it terminates."""
    adapter = build_adapter(stream)

    if stream == "block":
        on_record = log_block_with_transactions if decode_txs else log_block_summary
    else:
        on_record = log_record

    consumer = StreamConsumer(adapter, on_record=on_record)
    task = asyncio.current_task()
    setup_signal_handlers(task, consumer)

    try:
        result = await consumer.run()
    except asyncio.CancelledError:
        logger.info(f"[{adapter.name}] Stream task cancelled")
        await adapter.close()
        return None

    logger.info(
        f"[{adapter.name}] Stream terminated: {result.records} records, "
        f"{result.skipped} skipped"
    )
    return result


async def send_transaction(raw_tx: str) -> Optional[str]:
    """Open a gRPC channel, submit one transaction, and close."""
    adapter = GrpcBlockAdapter()
    try:
        await adapter.connect()
    except ConnectError as e:
        logger.error(f"[SendTx] Failed to connect to gRPC server: {e}")
        return None

    try:
        return await submit_transaction(adapter.channel, adapter.token, raw_tx)
    except SubmitError:
        return None
    finally:
        await adapter.close()


async def main(
    stream: str = "block",
    decode_txs: bool = False,
    send_tx: Optional[str] = None,
) -> int:
    """Main entry point.

    Args:
        stream: "block", "flash" (gRPC) or "ws" (WebSocket flash blocks)
        decode_txs: Decode the transactions of each regular block
        send_tx: Submit this raw transaction instead of streaming

    Returns:
        Process exit code
    """
    if not settings.auth_token:
        logger.warning("BASE_AUTH_TOKEN is not set, the server will reject the subscription")

    try:
        if send_tx:
            tx_hash = await send_transaction(send_tx)
            return 0 if tx_hash else 1

        result = await run_stream(stream, decode_txs=decode_txs)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise

    if result is None:
        return 0
    return 0 if result.ended_cleanly else 1


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Base API block stream client")
    parser.add_argument(
        "--stream",
        choices=STREAMS,
        default="block",
        help="Feed to subscribe to: gRPC blocks, gRPC flash blocks, or WebSocket flash blocks"
    )
    parser.add_argument(
        "--decode-txs",
        action="store_true",
        help="Decode transactions of each block (block stream only)"
    )
    parser.add_argument(
        "--send-tx",
        type=str,
        default=None,
        metavar="HEX",
        help="Submit a signed raw transaction (0x...) and exit"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    sys.exit(asyncio.run(main(
        stream=args.stream,
        decode_txs=args.decode_txs,
        send_tx=args.send_tx,
    )))
