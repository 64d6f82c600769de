"""Consumer loop driving one stream adapter through decode and normalize."""

import logging
import time
from typing import Awaitable, Callable, Optional

from models.errors import (
    ConnectError,
    EndOfStream,
    RecordError,
    StreamError,
    SubscribeError,
    TransportError,
)
from models.records import ConsumerResult, ConsumerState, NormalizedRecord
from parser.normalizer import pretty
from .adapter import StreamAdapter, StreamHandle

logger = logging.getLogger(__name__)

RecordSink = Callable[[NormalizedRecord], Awaitable[None]]
ErrorCallback = Callable[[RecordError], Awaitable[None]]


async def log_record(record: NormalizedRecord):
    """Default sink: log the record as indented JSON."""
    logger.info(pretty(record))


async def log_block_summary(record: NormalizedRecord):
    """Sink for the regular block feed: one line per block."""
    logger.info(
        f"=> [BlockStream] Received new block: Number={record.get('blockNumber')}, "
        f"Hash={record.get('blockHash')}, "
        f"TransactionCount={len(record.get('transactions') or [])}"
    )


class StreamConsumer:
    """
    Single-attempt consumer for one stream adapter.

    Connects, subscribes, then processes payloads strictly in order, one
    receive at a time. Undecodable payloads are logged and skipped. The
    first EndOfStream or TransportError ends the run; nothing reconnects.
    """

    def __init__(
        self,
        adapter: StreamAdapter,
        on_record: Optional[RecordSink] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.adapter = adapter
        self.on_record = on_record or log_record
        self.on_error = on_error

        self._state = ConsumerState.CONNECTING
        self._result: Optional[ConsumerResult] = None
        self._running = False

        # Stats
        self._records = 0
        self._skipped = 0
        self._sink_errors = 0
        self._start_time = 0

    @property
    def name(self) -> str:
        return self.adapter.name

    @property
    def state(self) -> ConsumerState:
        return self._state

    async def run(self) -> ConsumerResult:
        """
        Run the loop until the stream terminates.

        Lifecycle errors are returned in the result, not raised. Calling
        run() again after termination returns the same result.
        """
        if self._result is not None:
            return self._result

        self._running = True
        self._start_time = time.time()

        self._state = ConsumerState.CONNECTING
        try:
            await self.adapter.connect()
        except ConnectError as e:
            logger.error(f"[{self.name}] Failed to connect: {e}")
            return self._terminate(e)

        self._state = ConsumerState.SUBSCRIBING
        try:
            handle = await self.adapter.subscribe()
        except SubscribeError as e:
            logger.error(f"[{self.name}] Failed to subscribe to stream: {e}")
            await self.adapter.close()
            return self._terminate(e)

        self._state = ConsumerState.STREAMING
        logger.info(f"[{self.name}] Subscription successful. Waiting for new blocks...")

        error = None
        try:
            error = await self._consume(handle)
        finally:
            await handle.close()
            await self.adapter.close()
            self._state = ConsumerState.TERMINATED

        return self._terminate(error)

    async def _consume(self, handle: StreamHandle) -> Optional[StreamError]:
        """Receive loop. Returns the error that ended the stream, if any."""
        while self._running:
            try:
                raw = await handle.next()
                record = self.adapter.decode(raw)
            except EndOfStream as e:
                logger.info(f"[{self.name}] Stream closed by the server (EOF).")
                return e
            except TransportError as e:
                logger.error(f"[{self.name}] An error occurred while receiving data: {e}")
                return e
            except RecordError as e:
                self._skipped += 1
                logger.warning(f"[{self.name}] Skipping message: {e}")
                if self.on_error:
                    try:
                        await self.on_error(e)
                    except Exception as cb_err:
                        self._sink_errors += 1
                        logger.error(f"[{self.name}] Error in error callback: {cb_err}")
                continue

            self._records += 1
            try:
                await self.on_record(record)
            except Exception as e:
                self._sink_errors += 1
                logger.error(f"[{self.name}] Error processing record: {e}")

        logger.info(f"[{self.name}] Consumer stopped")
        return None

    def _terminate(self, error: Optional[StreamError]) -> ConsumerResult:
        self._running = False
        self._state = ConsumerState.TERMINATED
        self._result = ConsumerResult(
            state=self._state,
            records=self._records,
            skipped=self._skipped,
            sink_errors=self._sink_errors,
            error=error,
        )
        return self._result

    def stop(self):
        """Signal to stop after the current record."""
        self._running = False

    def get_stats(self) -> dict:
        """Get consumer statistics."""
        uptime = time.time() - self._start_time if self._start_time > 0 else 0
        records_per_sec = self._records / uptime if uptime > 0 else 0

        return {
            "stream": self.name,
            "state": self._state.value,
            "records": self._records,
            "skipped": self._skipped,
            "sink_errors": self._sink_errors,
            "uptime_seconds": uptime,
            "records_per_second": records_per_sec,
            "running": self._running,
        }
