"""Brotli payload decoding for flash block messages."""

import brotli

from models.errors import DecodeError


def decode(raw: bytes) -> str:
    """
    Decompress a brotli payload into text.

    The whole stream is decompressed in memory; payloads are small enough
    that nothing is returned lazily.

    Raises:
        DecodeError: payload is empty, truncated, corrupt, not brotli,
            or does not decompress to UTF-8.
    """
    if not raw:
        raise DecodeError("empty payload")

    try:
        data = brotli.decompress(bytes(raw))
    except brotli.error as e:
        raise DecodeError(f"brotli decompression failed: {e}") from e

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"payload is not UTF-8 text: {e}") from e
