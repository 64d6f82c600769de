"""Parser module for block payload decoding."""

from .decoder import decode
from .normalizer import normalize, format_record, pretty
from .transactions import decode_transaction, decode_transactions, transaction_type

__all__ = [
    "decode",
    "normalize",
    "format_record",
    "pretty",
    "decode_transaction",
    "decode_transactions",
    "transaction_type",
]
