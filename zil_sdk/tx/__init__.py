"""
zil_sdk.tx
----------

Submitted transactions, confirmation polling and receipt decoding.
"""

from __future__ import annotations

from .transaction import (  # noqa: F401
    EventLogEntry,
    ExceptionEntry,
    Transaction,
    TransactionReceipt,
    TransactionResponse,
    TransitionEntry,
    TransitionMsg,
    TxStatus,
)

__all__ = [
    "EventLogEntry",
    "ExceptionEntry",
    "Transaction",
    "TransactionReceipt",
    "TransactionResponse",
    "TransitionEntry",
    "TransitionMsg",
    "TxStatus",
]
