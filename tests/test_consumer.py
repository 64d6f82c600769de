"""Tests for the stream consumer loop."""

import brotli
import pytest
from unittest.mock import AsyncMock

from models.errors import (
    ConnectError,
    EndOfStream,
    EnvelopeError,
    ParseError,
    SubscribeError,
    TransportError,
)
from models.records import ConsumerState
from stream.adapter import StreamAdapter, StreamHandle
from stream.consumer import StreamConsumer, log_block_summary


class FakeHandle(StreamHandle):
    """Handle replaying a fixed list of payloads and errors."""

    def __init__(self, items):
        self._items = list(items)
        self.calls = 0
        self.closed = False

    async def next(self) -> bytes:
        self.calls += 1
        item = self._items.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self):
        self.closed = True


class FakeAdapter(StreamAdapter):
    """Adapter recording lifecycle calls."""

    name = "Fake"

    def __init__(self, items=(), connect_error=None, subscribe_error=None):
        self.handle = FakeHandle(items)
        self.connect_error = connect_error
        self.subscribe_error = subscribe_error
        self.subscribed = False
        self.closed = False

    async def connect(self):
        if self.connect_error:
            raise self.connect_error

    async def subscribe(self):
        if self.subscribe_error:
            raise self.subscribe_error
        self.subscribed = True
        return self.handle

    async def close(self):
        self.closed = True


def _payload(text: str) -> bytes:
    return brotli.compress(text.encode("utf-8"))


class TestStreamConsumer:
    """Tests for StreamConsumer state transitions and skip semantics."""

    @pytest.mark.asyncio
    async def test_records_emitted_in_order(self):
        """Test payloads are decoded and delivered in arrival order."""
        adapter = FakeAdapter([
            _payload('{"index": 0}'),
            _payload('{"index": 1}'),
            _payload('{"index": 2}'),
            EndOfStream("eof"),
        ])
        received = []

        async def on_record(record):
            received.append(record)

        consumer = StreamConsumer(adapter, on_record=on_record)
        result = await consumer.run()

        assert received == [{"index": 0}, {"index": 1}, {"index": 2}]
        assert result.records == 3
        assert result.state == ConsumerState.TERMINATED
        assert isinstance(result.error, EndOfStream)
        assert result.ended_cleanly

    @pytest.mark.asyncio
    async def test_immediate_end_of_stream(self):
        """Test EOF before any data terminates with zero records."""
        adapter = FakeAdapter([EndOfStream("eof")])
        on_record = AsyncMock()

        consumer = StreamConsumer(adapter, on_record=on_record)
        result = await consumer.run()

        assert result.records == 0
        assert result.state == ConsumerState.TERMINATED
        assert isinstance(result.error, EndOfStream)
        on_record.assert_not_called()
        assert adapter.handle.closed
        assert adapter.closed

    @pytest.mark.asyncio
    async def test_bad_payloads_are_skipped(self):
        """Test decode and parse failures do not end the stream."""
        adapter = FakeAdapter([
            b"\x00not brotli",
            _payload("[1, 2, 3]"),
            _payload("{broken"),
            _payload('{"a": 1}'),
            EndOfStream("eof"),
        ])
        received = []
        on_error = AsyncMock()

        async def on_record(record):
            received.append(record)

        consumer = StreamConsumer(adapter, on_record=on_record, on_error=on_error)
        result = await consumer.run()

        assert received == [{"a": 1}]
        assert result.skipped == 3
        assert on_error.await_count == 3
        assert isinstance(on_error.await_args_list[1].args[0], ParseError)

    @pytest.mark.asyncio
    async def test_envelope_error_from_handle_is_skipped(self):
        """Test per-message errors raised by the handle are skippable."""
        adapter = FakeAdapter([
            EnvelopeError("bad frame"),
            _payload('{"a": 1}'),
            EndOfStream("eof"),
        ])
        on_record = AsyncMock()

        result = await StreamConsumer(adapter, on_record=on_record).run()

        on_record.assert_awaited_once_with({"a": 1})
        assert result.skipped == 1
        assert result.records == 1

    @pytest.mark.asyncio
    async def test_transport_error_terminates(self):
        """Test a transport error ends the run without further reads."""
        adapter = FakeAdapter([
            _payload('{"a": 1}'),
            TransportError("connection reset"),
            _payload('{"never": true}'),
        ])
        on_record = AsyncMock()

        result = await StreamConsumer(adapter, on_record=on_record).run()

        assert isinstance(result.error, TransportError)
        assert not result.ended_cleanly
        assert result.records == 1
        assert adapter.handle.calls == 2

    @pytest.mark.asyncio
    async def test_connect_error_never_subscribes(self):
        """Test a connect failure terminates before Subscribing."""
        adapter = FakeAdapter(connect_error=ConnectError("timed out"))

        consumer = StreamConsumer(adapter)
        result = await consumer.run()

        assert isinstance(result.error, ConnectError)
        assert result.state == ConsumerState.TERMINATED
        assert not adapter.subscribed

    @pytest.mark.asyncio
    async def test_subscribe_error_closes_transport(self):
        """Test a rejected subscription terminates and closes the adapter."""
        adapter = FakeAdapter(subscribe_error=SubscribeError("unauthenticated"))

        result = await StreamConsumer(adapter).run()

        assert isinstance(result.error, SubscribeError)
        assert adapter.closed

    @pytest.mark.asyncio
    async def test_sink_error_does_not_stop_stream(self):
        """Test a failing sink is counted and the loop continues."""
        adapter = FakeAdapter([
            _payload('{"a": 1}'),
            _payload('{"a": 2}'),
            EndOfStream("eof"),
        ])
        on_record = AsyncMock(side_effect=[RuntimeError("sink down"), None])

        result = await StreamConsumer(adapter, on_record=on_record).run()

        assert result.records == 2
        assert result.sink_errors == 1
        assert on_record.await_count == 2

    @pytest.mark.asyncio
    async def test_error_callback_failure_does_not_stop_stream(self):
        """Test a failing on_error callback is counted and the loop continues."""
        adapter = FakeAdapter([
            EnvelopeError("bad frame"),
            _payload('{"a": 1}'),
            EndOfStream("eof"),
        ])
        on_record = AsyncMock()
        on_error = AsyncMock(side_effect=RuntimeError("alerting down"))

        consumer = StreamConsumer(adapter, on_record=on_record, on_error=on_error)
        result = await consumer.run()

        on_error.assert_awaited_once()
        on_record.assert_awaited_once_with({"a": 1})
        assert result.skipped == 1
        assert result.sink_errors == 1
        assert isinstance(result.error, EndOfStream)
        assert await consumer.run() is result

    @pytest.mark.asyncio
    async def test_terminated_is_absorbing(self):
        """Test running again does not reconnect."""
        adapter = FakeAdapter([EndOfStream("eof")])
        adapter.connect = AsyncMock()

        consumer = StreamConsumer(adapter)
        first = await consumer.run()
        second = await consumer.run()

        assert first is second
        assert adapter.connect.await_count == 1

    @pytest.mark.asyncio
    async def test_stop_ends_loop(self):
        """Test stop() exits after the current record."""
        adapter = FakeAdapter([
            _payload('{"a": 1}'),
            _payload('{"a": 2}'),
            EndOfStream("eof"),
        ])
        consumer = StreamConsumer(adapter)

        async def on_record(record):
            consumer.stop()

        consumer.on_record = on_record
        result = await consumer.run()

        assert result.records == 1
        assert result.error is None
        assert result.ended_cleanly

    @pytest.mark.asyncio
    async def test_default_sink_logs_record(self, caplog):
        """Test the default sink logs the formatted record."""
        adapter = FakeAdapter([_payload('{"b": 1, "a": 2}'), EndOfStream("eof")])

        with caplog.at_level("INFO"):
            await StreamConsumer(adapter).run()

        assert '"a": 2' in caplog.text

    @pytest.mark.asyncio
    async def test_block_summary_sink(self, caplog):
        """Test the block summary line."""
        record = {"blockNumber": 7, "blockHash": "0xabc", "transactions": [b"\x01", b"\x02"]}

        with caplog.at_level("INFO"):
            await log_block_summary(record)

        assert "Number=7, Hash=0xabc, TransactionCount=2" in caplog.text

    def test_get_stats(self):
        """Test stats before running."""
        stats = StreamConsumer(FakeAdapter()).get_stats()

        assert stats["stream"] == "Fake"
        assert stats["state"] == "connecting"
        assert stats["records"] == 0
        assert stats["running"] is False
