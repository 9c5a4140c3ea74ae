"""
zil_sdk.types
-------------

Value types shared by the transport, transaction and contract layers.

- core  : BNum, TransactionParams, CreateTransactionRequest, version packing
- units : Zil / Li / Qa conversions
"""

from __future__ import annotations

from .core import (  # noqa: F401
    BNum,
    CreateTransactionRequest,
    TransactionParams,
    pack_version,
)
from .units import Units, from_qa, parse_li, parse_zil, to_qa, to_zil  # noqa: F401

__all__ = [
    "BNum",
    "CreateTransactionRequest",
    "TransactionParams",
    "pack_version",
    "Units",
    "from_qa",
    "parse_li",
    "parse_zil",
    "to_qa",
    "to_zil",
]
