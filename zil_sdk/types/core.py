from __future__ import annotations

"""
Core chain types for the Python SDK.

- `BNum`: block number value (Scilla `BNum`).
- `TransactionParams`: the overridable, all-optional transaction knobs a caller
  may set (nonce, amount, gas, explicit signer, ...).
- `CreateTransactionRequest`: the fully-populated payload for
  `CreateTransaction`, with `.to_rpc()` producing the node's JSON shape.

Nothing here performs network I/O; these are just types and converters.
"""

import re
from dataclasses import dataclass, field, fields, replace
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from ..address import Address

if TYPE_CHECKING:  # pragma: no cover
    from ..signers import Signer

__all__ = ["BNum", "TransactionParams", "CreateTransactionRequest", "pack_version"]

_DECIMAL_RE = re.compile(r"^[0-9]+$")


class BNum(str):
    """A block number, kept in the decimal string form the chain reports."""

    __slots__ = ()

    def __new__(cls, value: Union[int, str]) -> "BNum":
        s = str(value).strip()
        if not _DECIMAL_RE.match(s):
            raise ValueError(f"{value!r} is not a valid block number")
        return super().__new__(cls, s)

    def __int__(self) -> int:
        return int(str(self))

    def __repr__(self) -> str:
        return f"BNum({str(self)!r})"


def pack_version(chain_id: int, msg_version: int) -> int:
    """Zilliqa tx `version` field: chain id in the high 16 bits, message version low."""
    return (int(chain_id) << 16) + int(msg_version)


@dataclass
class TransactionParams:
    """
    Caller-overridable transaction parameters. `None` means "let the SDK pick".

    `signer` selects an explicit signer for this transaction only; otherwise the
    provider's default signer is used.
    """

    nonce: Optional[int] = None
    to_addr: Optional[Address] = None
    amount: Optional[int] = None
    gas_price: Optional[int] = None
    gas_limit: Optional[int] = None
    code: Optional[str] = None
    data: Optional[str] = None
    signer: Optional["Signer"] = field(default=None, repr=False)

    def with_defaults(self, **defaults: Any) -> "TransactionParams":
        """Copy with every still-unset field in `defaults` filled in."""
        known = {f.name for f in fields(self)}
        updates = {
            k: v for k, v in defaults.items() if k in known and getattr(self, k) is None
        }
        return replace(self, **updates)

    def merged(self, other: Optional["TransactionParams"]) -> "TransactionParams":
        """Copy where fields explicitly set on `other` win."""
        if other is None:
            return replace(self)
        updates = {
            f.name: getattr(other, f.name)
            for f in fields(other)
            if getattr(other, f.name) is not None
        }
        return replace(self, **updates)


@dataclass(frozen=True)
class CreateTransactionRequest:
    version: int
    nonce: int
    to_addr: Address
    amount: int
    gas_price: int
    gas_limit: int
    pub_key: Optional[str] = None
    code: Optional[str] = None
    data: Optional[str] = None
    signature: Optional[str] = None
    priority: bool = False

    def with_signature(self, signature: str) -> "CreateTransactionRequest":
        return replace(self, signature=signature)

    def to_rpc(self) -> Dict[str, Any]:
        """
        JSON object for `CreateTransaction`: amounts and gas as decimal strings,
        `toAddr` in checksum form without prefix.
        """
        out: Dict[str, Any] = {
            "version": int(self.version),
            "nonce": int(self.nonce),
            "toAddr": Address(self.to_addr).checksummed()[2:],
            "amount": str(int(self.amount)),
            "pubKey": self.pub_key or "",
            "gasPrice": str(int(self.gas_price)),
            "gasLimit": str(int(self.gas_limit)),
            "code": self.code or "",
            "data": self.data or "",
            "signature": self.signature or "",
            "priority": bool(self.priority),
        }
        return out
