"""WebSocket stream adapter for the Base API flash block feed."""

import asyncio
import base64
import binascii
import json
import logging
from typing import Optional, Union

import websockets
from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedOK,
    InvalidStatus,
    WebSocketException,
)

from config.settings import settings
from models.errors import (
    ConnectError,
    EndOfStream,
    EnvelopeError,
    SubscribeError,
    TransportError,
)
from .adapter import StreamAdapter, StreamHandle

logger = logging.getLogger(__name__)

SUBSCRIBE_REQUEST = {
    "jsonrpc": "2.0",
    "method": "subscribe_FlashBlock",
    "params": [],
    "id": 1,
}


def unwrap_envelope(frame: Union[str, bytes]) -> bytes:
    """
    Extract the compressed payload from a JSON-RPC frame.

    The `result` field carries the payload as base64 (the JSON encoding of
    a byte field). The jsonrpc version and the subscription id are not
    checked.

    Raises:
        EnvelopeError: frame is not JSON, not an object, has no result,
            or result is not valid base64.
    """
    try:
        envelope = json.loads(frame)
    except ValueError as e:
        raise EnvelopeError(f"failed to parse JSON from server: {e}") from e

    if not isinstance(envelope, dict):
        raise EnvelopeError("envelope is not a JSON object")

    result = envelope.get("result")
    if result is None:
        raise EnvelopeError("message without a result field")
    if not isinstance(result, str):
        raise EnvelopeError(f"result is {type(result).__name__}, expected base64 string")

    try:
        return base64.b64decode(result, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EnvelopeError(f"result is not base64: {e}") from e


class WebSocketStreamHandle(StreamHandle):
    """Flash block subscription over an open WebSocket."""

    def __init__(self, ws):
        self._ws = ws

    async def next(self) -> bytes:
        # Ping/pong and close frames are handled by websockets, recv()
        # only returns text or binary messages.
        try:
            frame = await self._ws.recv()
        except ConnectionClosedOK as e:
            raise EndOfStream(f"connection closed by the server: {e}") from e
        except ConnectionClosed as e:
            raise TransportError(f"error reading message: {e}") from e

        return unwrap_envelope(frame)

    async def close(self):
        await self._ws.close()


class WebSocketAdapter(StreamAdapter):
    """
    WebSocket connection to the Base API flash block feed.

    The token goes in the Authorization header of the handshake, and a
    single subscribe_FlashBlock request is sent right after connecting.
    """

    name = "WebSocket"

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        connect_timeout: Optional[float] = None,
        max_message_size: Optional[int] = None,
    ):
        self.url = url or settings.websocket_url
        self.token = token if token is not None else settings.auth_token
        self.connect_timeout = connect_timeout or settings.websocket_connect_timeout
        self.max_message_size = max_message_size or settings.websocket_max_message_size

        self._ws = None

    async def connect(self):
        """Dial the server with the auth header."""
        try:
            self._ws = await websockets.connect(
                self.url,
                additional_headers={"Authorization": self.token},
                open_timeout=self.connect_timeout,
                max_size=self.max_message_size,
            )
        except InvalidStatus as e:
            raise ConnectError(
                f"dial failed: {e} (HTTP status: {e.response.status_code})"
            ) from e
        except asyncio.TimeoutError as e:
            raise ConnectError(
                f"timed out after {self.connect_timeout}s connecting to {self.url}"
            ) from e
        except (OSError, WebSocketException) as e:
            raise ConnectError(f"dial failed: {e}") from e

        logger.info(f"[{self.name}] Successfully connected to {self.url}")

    async def subscribe(self) -> WebSocketStreamHandle:
        """Send the subscribe_FlashBlock request."""
        if self._ws is None:
            raise SubscribeError("not connected")

        request = json.dumps(SUBSCRIBE_REQUEST, separators=(",", ":"))
        try:
            await self._ws.send(request)
        except (ConnectionClosed, OSError) as e:
            raise SubscribeError(f"failed to send subscription request: {e}") from e

        logger.info(f"[{self.name}] Subscription request sent: {request}")
        return WebSocketStreamHandle(self._ws)

    async def close(self):
        """Close the socket."""
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
