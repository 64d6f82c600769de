"""gRPC stream adapters for the Base API block and flash block feeds."""

import asyncio
import logging
from abc import abstractmethod
from typing import Callable, List, Optional, Tuple

import grpc
from google.protobuf.message import DecodeError as ProtobufDecodeError
from grpc import aio as grpc_aio

from config.settings import settings
from models.errors import (
    ConnectError,
    DecodeError,
    EndOfStream,
    SubscribeError,
    TransportError,
)
from models.records import NormalizedRecord
from .adapter import StreamAdapter, StreamHandle
from . import baseapi_pb2
from .baseapi_pb2_grpc import BaseApiStub

logger = logging.getLogger(__name__)


def auth_metadata(token: str) -> Tuple[Tuple[str, str], ...]:
    """Call metadata carrying the Base API token."""
    return (("authorization", token),)


def describe_rpc_error(error: grpc.RpcError) -> str:
    """Short `CODE: details` string for logs and error messages."""
    code = error.code() if hasattr(error, "code") else None
    details = error.details() if hasattr(error, "details") else None
    if code is None:
        return str(error)
    return f"{code.name}: {details}"


class GrpcStreamHandle(StreamHandle):
    """Server-streaming call wrapped as a StreamHandle."""

    def __init__(self, call, extract: Callable[[object], bytes]):
        self._call = call
        self._extract = extract

    async def next(self) -> bytes:
        try:
            response = await self._call.read()
        except grpc.RpcError as e:
            raise TransportError(describe_rpc_error(e)) from e

        if response is grpc_aio.EOF:
            raise EndOfStream("stream closed by the server (EOF)")

        return self._extract(response)

    async def close(self):
        self._call.cancel()


class GrpcAdapter(StreamAdapter):
    """
    Plaintext gRPC connection to the Base API.

    Connects once with a bounded wait for the channel to become ready.
    Subclasses choose which server-streaming call to open.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        token: Optional[str] = None,
        connect_timeout: Optional[float] = None,
        channel_options: Optional[List[Tuple[str, object]]] = None,
    ):
        self.endpoint = endpoint or settings.grpc_endpoint
        self.token = token if token is not None else settings.auth_token
        self.connect_timeout = connect_timeout or self.default_connect_timeout()
        self.channel_options = channel_options or settings.grpc_channel_options

        self._channel: Optional[grpc_aio.Channel] = None
        self._stub: Optional[BaseApiStub] = None

    def default_connect_timeout(self) -> float:
        return settings.block_connect_timeout

    @property
    def channel(self) -> Optional[grpc_aio.Channel]:
        """Open channel, shareable with submit_transaction()."""
        return self._channel

    async def connect(self):
        """Open the channel and wait until it is ready."""
        logger.info(f"[{self.name}] Attempting to connect to gRPC server at {self.endpoint}...")

        self._channel = grpc_aio.insecure_channel(
            self.endpoint,
            options=self.channel_options,
        )
        try:
            await asyncio.wait_for(
                self._channel.channel_ready(),
                timeout=self.connect_timeout,
            )
        except asyncio.TimeoutError as e:
            await self.close()
            raise ConnectError(
                f"timed out after {self.connect_timeout}s connecting to {self.endpoint}"
            ) from e
        except grpc.RpcError as e:
            await self.close()
            raise ConnectError(describe_rpc_error(e)) from e

        self._stub = BaseApiStub(self._channel)
        logger.info(f"[{self.name}] Successfully connected to gRPC server.")

    @abstractmethod
    def _open_call(self, stub: BaseApiStub):
        """Start the feed's server-streaming call."""

    @abstractmethod
    def _extract(self, response) -> bytes:
        """Get the RawPayload out of one stream message."""

    async def subscribe(self) -> GrpcStreamHandle:
        """Start the server-streaming call with the auth token attached."""
        if self._stub is None:
            raise SubscribeError("not connected")

        call = self._open_call(self._stub)
        try:
            await call.wait_for_connection()
        except grpc.RpcError as e:
            call.cancel()
            raise SubscribeError(describe_rpc_error(e)) from e

        return GrpcStreamHandle(call, self._extract)

    async def close(self):
        """Close gRPC connection."""
        if self._channel:
            await self._channel.close()
            self._channel = None
            self._stub = None


class GrpcBlockAdapter(GrpcAdapter):
    """Finalized block feed (GetBlockStream)."""

    name = "BlockStream"

    def _open_call(self, stub: BaseApiStub):
        return stub.GetBlockStream(
            baseapi_pb2.GetBlockStreamRequest(),
            metadata=auth_metadata(self.token),
        )

    def _extract(self, response) -> bytes:
        # RawPayload is bytes, so the block is re-serialized here and parsed back in decode()
        return response.SerializeToString()

    def decode(self, raw: bytes) -> NormalizedRecord:
        """Blocks arrive uncompressed; map the message to a record."""
        try:
            block = baseapi_pb2.Block.FromString(raw)
        except ProtobufDecodeError as e:
            raise DecodeError(f"invalid block message: {e}") from e

        return {
            "blockNumber": block.block_number,
            "blockHash": block.block_hash,
            "transactions": list(block.transactions),
        }


class GrpcFlashBlockAdapter(GrpcAdapter):
    """Flash block feed (GetRawFlashBlockStream), brotli compressed JSON."""

    name = "FlashStream"

    def default_connect_timeout(self) -> float:
        return settings.flash_connect_timeout

    def _open_call(self, stub: BaseApiStub):
        return stub.GetRawFlashBlockStream(
            baseapi_pb2.GetRawFlashBlocksStreamRequest(),
            metadata=auth_metadata(self.token),
        )

    def _extract(self, response) -> bytes:
        return response.message
