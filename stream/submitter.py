"""Raw transaction submission over an open Base API gRPC channel."""

import logging
from typing import Optional

import grpc
from grpc import aio as grpc_aio

from config.settings import settings
from models.errors import SubmitError
from . import baseapi_pb2
from .baseapi_pb2_grpc import BaseApiStub
from .grpc_adapter import auth_metadata, describe_rpc_error

logger = logging.getLogger(__name__)


async def submit_transaction(
    channel: grpc_aio.Channel,
    token: str,
    raw_tx: str,
    timeout: Optional[float] = None,
) -> str:
    """
    Send a signed raw transaction and return its hash.

    Reuses an already-open channel to avoid connection latency. Single
    shot: there is no retry, callers that retry must de-duplicate.

    Args:
        channel: open channel, e.g. GrpcAdapter.channel
        token: Base API auth token
        raw_tx: signed transaction as a 0x-prefixed hex string
        timeout: call deadline in seconds (settings.submit_timeout by default)

    Raises:
        SubmitError: if the transaction is empty or the call fails.
    """
    if channel is None:
        raise SubmitError("no open gRPC channel")
    if not raw_tx or not raw_tx.strip():
        raise SubmitError("empty raw transaction")

    logger.info("[SendTx] Sending transaction...")
    stub = BaseApiStub(channel)
    request = baseapi_pb2.SendTransactionRequest(raw_transaction=raw_tx.strip())

    try:
        response = await stub.SendTransaction(
            request,
            metadata=auth_metadata(token),
            timeout=timeout or settings.submit_timeout,
        )
    except grpc.RpcError as e:
        logger.error(f"[SendTx] Failed to send transaction: {describe_rpc_error(e)}")
        raise SubmitError(describe_rpc_error(e)) from e

    logger.info(f"[SendTx] Transaction sent successfully. Hash: {response.tx_hash}")
    return response.tx_hash
