"""
Zil amount units.

Amounts travel on the wire as integers of Qa:

    1 ZIL = 10**12 Qa
    1 Li  = 10**6  Qa

`parse_zil("0.002") == 2_000_000_000` is the default gas price the contract
runtime uses.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Union

__all__ = ["Units", "to_qa", "from_qa", "parse_zil", "parse_li", "to_zil"]

Number = Union[int, str, Decimal]


class Units(Enum):
    QA = 0
    LI = 6
    ZIL = 12

    @classmethod
    def parse(cls, name: str) -> "Units":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown units: {name}") from None


def to_qa(amount: Number, unit: Union[Units, str] = Units.ZIL) -> int:
    """Convert `amount` expressed in `unit` to an integer number of Qa."""
    u = Units.parse(unit) if isinstance(unit, str) else unit
    try:
        d = Decimal(str(amount).strip())
    except InvalidOperation:
        raise ValueError(f"not a number: {amount!r}") from None
    if d < 0:
        raise ValueError("Negative values are not allowed")
    qa = d.scaleb(u.value)
    if qa != qa.to_integral_value():
        raise ValueError(f"{amount} {u.name} is not a whole number of Qa")
    return int(qa)


def from_qa(qa: int, unit: Union[Units, str] = Units.ZIL) -> Decimal:
    """Convert an integer Qa amount to `unit` (exact Decimal)."""
    u = Units.parse(unit) if isinstance(unit, str) else unit
    return Decimal(int(qa)).scaleb(-u.value)


def parse_zil(amount: Number) -> int:
    return to_qa(amount, Units.ZIL)


def parse_li(amount: Number) -> int:
    return to_qa(amount, Units.LI)


def to_zil(qa: int) -> Decimal:
    return from_qa(qa, Units.ZIL)
