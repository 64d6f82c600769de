"""Decoding of raw Base transactions carried in block records."""

import logging
from typing import Iterable, List

import rlp
from rlp.exceptions import DecodingError
from web3 import Web3

from models.errors import DecodeError
from models.records import DecodedTransaction

logger = logging.getLogger(__name__)

LEGACY_TX_TYPE = 0
MAX_TYPED_TX_TYPE = 0x7F
RLP_LIST_PREFIX = 0xC0


def transaction_type(raw: bytes) -> int:
    """
    Get the EIP-2718 type of a raw transaction.

    Legacy transactions are bare RLP lists and report type 0. Typed
    transactions start with a single type byte in [0x01, 0x7f].
    """
    if not raw:
        raise DecodeError("empty transaction")

    first = raw[0]
    if first >= RLP_LIST_PREFIX:
        return LEGACY_TX_TYPE
    if 0 < first <= MAX_TYPED_TX_TYPE:
        return first
    raise DecodeError(f"unknown transaction envelope byte 0x{first:02x}")


def decode_transaction(raw: bytes) -> list:
    """
    Decode the RLP field list of a raw transaction.

    Legacy transactions are the list itself, typed ones (including OP
    stack 0x7e deposits) carry it after the type byte.

    Raises:
        DecodeError: envelope byte unknown, RLP truncated or malformed,
            trailing bytes, or the payload is not a list.
    """
    tx_type = transaction_type(raw)
    payload = raw if tx_type == LEGACY_TX_TYPE else raw[1:]

    try:
        fields = rlp.decode(payload)
    except DecodingError as e:
        raise DecodeError(f"invalid RLP in type {tx_type} transaction: {e}") from e

    if not isinstance(fields, list):
        raise DecodeError(f"type {tx_type} transaction payload is not an RLP list")

    return fields


def decode_transactions(blobs: Iterable[bytes]) -> List[DecodedTransaction]:
    """
    Decode the binary transactions of a block.

    The transaction hash is the keccak-256 of the raw envelope, for both
    legacy and typed transactions.

    Raises:
        DecodeError: on the first blob that is not a valid transaction.
    """
    decoded = []
    for idx, blob in enumerate(blobs):
        raw = bytes(blob)
        try:
            decode_transaction(raw)
        except DecodeError as e:
            logger.error(f"Error decoding transaction {idx}: {e}")
            raise

        tx_hash = Web3.to_hex(Web3.keccak(raw))
        logger.info(f"Decoded transaction with hash: {tx_hash}")
        decoded.append(DecodedTransaction(
            index=idx,
            tx_type=transaction_type(raw),
            tx_hash=tx_hash,
            size=len(raw),
        ))

    return decoded
