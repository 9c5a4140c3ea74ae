"""
zil_sdk.address
===============

The `ByStr20` address value type.

Zilliqa addresses are 20 bytes, written as `0x` followed by 40 hex digits.
Contract state reports map keys and field values in lowercase hex, so
`Address` normalises to lowercase; comparisons with plain strings work against
that canonical form.

`Address.checksummed()` renders the mixed-case form nodes expect for
`toAddr`. Bech32 (`zil1...`) conversion is not handled here; pass hex.
"""

from __future__ import annotations

import hashlib
import re
from typing import Union

__all__ = ["Address", "AddressError", "is_valid"]

_HEX40_RE = re.compile(r"^(0x|0X)?[0-9a-fA-F]{40}$")


class AddressError(ValueError):
    """Raised for malformed addresses."""


class Address(str):
    """
    A 20-byte hex address in canonical form (`0x` + 40 lowercase hex digits).

        >>> Address("0xABCDEF7890123456789012345678901234567890")
        Address('0xabcdef7890123456789012345678901234567890')
    """

    __slots__ = ()

    def __new__(cls, value: Union[str, bytes, "Address"]) -> "Address":
        if isinstance(value, Address):
            return value
        if isinstance(value, (bytes, bytearray)):
            if len(value) != 20:
                raise AddressError(f"address must be 20 bytes, got {len(value)}")
            return super().__new__(cls, "0x" + bytes(value).hex())
        if not isinstance(value, str):
            raise AddressError(f"unsupported address value: {value!r}")
        s = value.strip()
        if s.lower().startswith("zil1"):
            raise AddressError(f"bech32 addresses are not supported, use hex: {value!r}")
        if not _HEX40_RE.match(s):
            raise AddressError(f"{value!r} is not a valid base-16 address")
        if s[:2] in ("0x", "0X"):
            s = s[2:]
        return super().__new__(cls, "0x" + s.lower())

    @classmethod
    def nil(cls) -> "Address":
        """The all-zero address used as `toAddr` for contract deployments."""
        return cls("0x" + "0" * 40)

    @property
    def bare(self) -> str:
        """Lowercase hex without the `0x` prefix (the form used in RPC params)."""
        return str(self)[2:]

    def to_bytes(self) -> bytes:
        return bytes.fromhex(self.bare)

    def checksummed(self) -> str:
        """
        Mixed-case checksum form expected by `CreateTransaction` for `toAddr`.

        Bit `255 - 6*i` of sha256(address bytes) decides whether hex letter `i`
        is upper-cased.
        """
        digest = int.from_bytes(hashlib.sha256(self.to_bytes()).digest(), "big")
        out = []
        for i, ch in enumerate(self.bare):
            if ch.isdigit():
                out.append(ch)
            else:
                out.append(ch.upper() if digest & (1 << (255 - 6 * i)) else ch)
        return "0x" + "".join(out)

    def __repr__(self) -> str:
        return f"Address({str(self)!r})"


def is_valid(value: object) -> bool:
    """True if `value` can be read as a hex address."""
    try:
        Address(value)  # type: ignore[arg-type]
    except AddressError:
        return False
    return True
