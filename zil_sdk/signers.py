"""
zil_sdk.signers
===============

Signing is an external concern: the SDK only needs something that can tell it
the sender address and public key and produce a signature for a fully
populated `CreateTransactionRequest`. Key storage and the Schnorr / protobuf
signing encoding live in the implementation.

    class MySigner:
        address = Address("0x...")
        public_key = "02..."

        def sign(self, request: CreateTransactionRequest) -> str:
            return my_schnorr_sign(request)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .address import Address

if TYPE_CHECKING:  # pragma: no cover
    from .types.core import CreateTransactionRequest


@runtime_checkable
class Signer(Protocol):
    @property
    def address(self) -> Address: ...

    @property
    def public_key(self) -> str:
        """Compressed secp256k1 public key, hex without 0x."""
        ...

    def sign(self, request: "CreateTransactionRequest") -> str:
        """Return the hex signature over `request` (its `signature` is unset)."""
        ...


__all__ = ["Signer"]
