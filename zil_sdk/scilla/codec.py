"""
zil_sdk.scilla.codec
====================

Bidirectional codec between native Python values and Scilla wire values.

Every supported Scilla type has one `Codec` with three operations:

- `type_name()`  constant Scilla spelling of the type (used for `argtypes` and
                 for `NamedValue.type`)
- `encode(v)`    native -> wire
- `decode(w)`    wire -> native, raising `CodecError` on any mismatch

Containers compose their element codecs:

    >>> c = codec_for("Pair String Uint32")
    >>> c.encode(("hello", 123)).to_json()
    {'constructor': 'Pair', 'argtypes': ['String', 'Uint32'], 'arguments': ['hello', '123']}
    >>> c.decode(c.encode(("hello", 123)))
    ('hello', 123)

Lists are asymmetric on the chain: transition arguments must be sent as a
`Cons`/`Nil` chain, while state reads return a flat JSON array. `ListCodec`
always encodes the cons form and decodes both.

Native representations:

    IntN / UintN   int            (range checked both ways)
    String         str
    ByStr20        Address
    ByStr / ByStrN str            (0x-prefixed lowercase hex)
    BNum           BNum
    Bool           bool
    Option T       None | T       (nested options: None | Some(inner))
    Pair A B       tuple (a, b)
    List T         list
    Map K V        dict
    <unsupported>  str            (raw wire text)

Codecs hold no mutable state and can be shared freely between tasks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Generic, List, Mapping, Tuple, TypeVar, Union

from ..address import Address, AddressError
from ..errors import CodecError
from ..types.core import BNum
from .types import ScillaType, parse_type
from .values import AdtValue, NamedValue, WireValue, dumps_wire

T = TypeVar("T")

_DECIMAL = re.compile(r"-?[0-9]+")

__all__ = [
    "Codec",
    "IntCodec",
    "StringCodec",
    "AddressCodec",
    "ByStrCodec",
    "BNumCodec",
    "BoolCodec",
    "OptionCodec",
    "Some",
    "PairCodec",
    "ListCodec",
    "MapCodec",
    "RawCodec",
    "codec_for",
]


class Codec:
    """Base class; subclasses implement `type_name`, `encode` and `decode`."""

    def type_name(self) -> str:  # pragma: no cover - abstract
        raise NotImplementedError

    def encode(self, value: Any) -> WireValue:  # pragma: no cover - abstract
        raise NotImplementedError

    def decode(self, wire: WireValue) -> Any:  # pragma: no cover - abstract
        raise NotImplementedError

    def named(self, vname: str, value: Any) -> NamedValue:
        """Encode `value` and wrap it as a `NamedValue` of this type."""
        return NamedValue(vname=vname, type=self.type_name(), value=self.encode(value))

    # -- helpers --

    def _bad_wire(self, wire: Any, reason: str) -> CodecError:
        return CodecError(expected=self.type_name(), value=dumps_wire(wire), reason=reason)

    def _bad_native(self, value: Any, reason: str) -> CodecError:
        return CodecError(expected=self.type_name(), value=repr(value), reason=reason)

    def _expect_adt(self, wire: Any, *constructors: str) -> AdtValue:
        if not isinstance(wire, AdtValue):
            raise self._bad_wire(wire, "expected an ADT value")
        if wire.constructor not in constructors:
            raise self._bad_wire(wire, f"unexpected constructor {wire.constructor!r}")
        return wire

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.type_name()!r})"


# ---------- Primitives --------------------------------------------------------


class _PrimitiveCodec(Codec):
    def _expect_str(self, wire: Any) -> str:
        if not isinstance(wire, str):
            raise self._bad_wire(wire, "expected a primitive string")
        return wire


class IntCodec(_PrimitiveCodec):
    def __init__(self, bits: int, signed: bool):
        self.bits = int(bits)
        self.signed = bool(signed)
        if self.signed:
            self.min = -(1 << (self.bits - 1))
            self.max = (1 << (self.bits - 1)) - 1
        else:
            self.min = 0
            self.max = (1 << self.bits) - 1

    def type_name(self) -> str:
        return f"{'Int' if self.signed else 'Uint'}{self.bits}"

    def _check(self, n: int, err) -> int:
        if not (self.min <= n <= self.max):
            raise err(f"out of range [{self.min}, {self.max}]")
        return n

    def encode(self, value: Any) -> WireValue:
        if isinstance(value, bool) or not isinstance(value, int):
            raise self._bad_native(value, "expected an int")
        return str(self._check(int(value), lambda r: self._bad_native(value, r)))

    def decode(self, wire: WireValue) -> int:
        s = self._expect_str(wire)
        if not _DECIMAL.fullmatch(s):
            raise self._bad_wire(wire, "not a decimal integer")
        n = int(s)
        return self._check(n, lambda r: self._bad_wire(wire, r))


class StringCodec(_PrimitiveCodec):
    def type_name(self) -> str:
        return "String"

    def encode(self, value: Any) -> WireValue:
        if not isinstance(value, str):
            raise self._bad_native(value, "expected a str")
        return str(value)

    def decode(self, wire: WireValue) -> str:
        return self._expect_str(wire)


class AddressCodec(_PrimitiveCodec):
    def __init__(self, type_text: str = "ByStr20"):
        self._name = type_text

    def type_name(self) -> str:
        return self._name

    def encode(self, value: Any) -> WireValue:
        try:
            return str(Address(value))
        except AddressError as e:
            raise self._bad_native(value, str(e)) from None

    def decode(self, wire: WireValue) -> Address:
        try:
            return Address(self._expect_str(wire))
        except AddressError as e:
            raise self._bad_wire(wire, str(e)) from None


class ByStrCodec(_PrimitiveCodec):
    """Hex byte strings other than addresses (`ByStr`, `ByStr32`, ...)."""

    def __init__(self, width: Union[int, None] = None):
        self.width = width

    def type_name(self) -> str:
        return "ByStr" if self.width is None else f"ByStr{self.width}"

    def _normalize(self, s: str) -> str:
        body = s[2:] if s[:2] in ("0x", "0X") else s
        try:
            raw = bytes.fromhex(body)
        except ValueError:
            raise ValueError("not a hex string") from None
        if self.width is not None and len(raw) != self.width:
            raise ValueError(f"expected {self.width} bytes, got {len(raw)}")
        return "0x" + raw.hex()

    def encode(self, value: Any) -> WireValue:
        if isinstance(value, (bytes, bytearray)):
            value = bytes(value).hex()
        if not isinstance(value, str):
            raise self._bad_native(value, "expected bytes or a hex str")
        try:
            return self._normalize(value)
        except ValueError as e:
            raise self._bad_native(value, str(e)) from None

    def decode(self, wire: WireValue) -> str:
        try:
            return self._normalize(self._expect_str(wire))
        except ValueError as e:
            raise self._bad_wire(wire, str(e)) from None


class BNumCodec(_PrimitiveCodec):
    def type_name(self) -> str:
        return "BNum"

    def encode(self, value: Any) -> WireValue:
        if isinstance(value, bool):
            raise self._bad_native(value, "expected a block number")
        try:
            return str(BNum(value))
        except ValueError as e:
            raise self._bad_native(value, str(e)) from None

    def decode(self, wire: WireValue) -> BNum:
        try:
            return BNum(self._expect_str(wire))
        except ValueError as e:
            raise self._bad_wire(wire, str(e)) from None


# ---------- ADTs --------------------------------------------------------------


class BoolCodec(Codec):
    def type_name(self) -> str:
        return "Bool"

    def encode(self, value: Any) -> WireValue:
        if not isinstance(value, bool):
            raise self._bad_native(value, "expected a bool")
        return AdtValue("True" if value else "False", (), ())

    def decode(self, wire: WireValue) -> bool:
        adt = self._expect_adt(wire, "True", "False")
        if adt.arguments:
            raise self._bad_wire(wire, "Bool constructors take no arguments")
        return adt.constructor == "True"


@dataclass(frozen=True)
class Some(Generic[T]):
    """`Some v` of a nested option; `Some(None)` is distinct from `None`."""

    value: T


class OptionCodec(Codec):
    def __init__(self, inner: Codec):
        self.inner = inner

    def type_name(self) -> str:
        return f"Option ({self.inner.type_name()})"

    @property
    def nested(self) -> bool:
        return isinstance(self.inner, OptionCodec)

    def encode(self, value: Any) -> WireValue:
        argtypes = (self.inner.type_name(),)
        if value is None:
            return AdtValue("None", argtypes, ())
        if isinstance(value, Some):
            value = value.value
        return AdtValue("Some", argtypes, (self.inner.encode(value),))

    def decode(self, wire: WireValue) -> Any:
        adt = self._expect_adt(wire, "Some", "None")
        if adt.constructor == "None":
            if adt.arguments:
                raise self._bad_wire(wire, "None takes no arguments")
            return None
        if len(adt.arguments) != 1:
            raise self._bad_wire(wire, f"Some takes 1 argument, got {len(adt.arguments)}")
        value = self.inner.decode(adt.arguments[0])
        return Some(value) if self.nested else value


class PairCodec(Codec):
    def __init__(self, left: Codec, right: Codec):
        self.left = left
        self.right = right

    def type_name(self) -> str:
        return f"Pair {_atom(self.left)} {_atom(self.right)}"

    def encode(self, value: Any) -> WireValue:
        if not isinstance(value, (tuple, list)) or len(value) != 2:
            raise self._bad_native(value, "expected a 2-tuple")
        a, b = value
        return AdtValue(
            "Pair",
            (self.left.type_name(), self.right.type_name()),
            (self.left.encode(a), self.right.encode(b)),
        )

    def decode(self, wire: WireValue) -> Tuple[Any, Any]:
        adt = self._expect_adt(wire, "Pair")
        if len(adt.arguments) != 2:
            raise self._bad_wire(wire, f"Pair takes 2 arguments, got {len(adt.arguments)}")
        return self.left.decode(adt.arguments[0]), self.right.decode(adt.arguments[1])


class ListCodec(Codec):
    def __init__(self, inner: Codec):
        self.inner = inner

    def type_name(self) -> str:
        return f"List ({self.inner.type_name()})"

    def encode(self, value: Any) -> WireValue:
        if isinstance(value, (str, bytes, Mapping)) or not hasattr(value, "__iter__"):
            raise self._bad_native(value, "expected a list")
        items = [self.inner.encode(v) for v in value]
        argtypes = (self.inner.type_name(),)
        out: WireValue = AdtValue("Nil", argtypes, ())
        for item in reversed(items):
            out = AdtValue("Cons", argtypes, (item, out))
        return out

    def decode(self, wire: WireValue) -> List[Any]:
        if isinstance(wire, list):
            return [self.inner.decode(w) for w in wire]
        out: List[Any] = []
        cur = wire
        while True:
            adt = self._expect_adt(cur, "Cons", "Nil")
            if adt.constructor == "Nil":
                if adt.arguments:
                    raise self._bad_wire(wire, "Nil takes no arguments")
                return out
            if len(adt.arguments) != 2:
                raise self._bad_wire(wire, f"Cons takes 2 arguments, got {len(adt.arguments)}")
            out.append(self.inner.decode(adt.arguments[0]))
            cur = adt.arguments[1]


class MapCodec(Codec):
    def __init__(self, key: Codec, value: Codec):
        if not isinstance(key, _PrimitiveCodec):
            raise TypeError(f"map keys must be primitive, got {key.type_name()}")
        self.key = key
        self.value = value

    def type_name(self) -> str:
        return f"Map {_atom(self.key)} {_atom(self.value)}"

    def encode(self, value: Any) -> WireValue:
        if not isinstance(value, Mapping):
            raise self._bad_native(value, "expected a mapping")
        out: Dict[str, WireValue] = {}
        for k, v in value.items():
            out[str(self.key.encode(k))] = self.value.encode(v)
        return out

    def decode(self, wire: WireValue) -> Dict[Any, Any]:
        if not isinstance(wire, Mapping):
            raise self._bad_wire(wire, "expected a map")
        return {self.key.decode(str(k)): self.value.decode(v) for k, v in wire.items()}


class RawCodec(Codec):
    """
    Fallback for types outside the supported grammar: values are carried as
    raw strings (or pre-built wire values) under the original type text.
    """

    def __init__(self, type_text: str):
        self._name = type_text

    def type_name(self) -> str:
        return self._name

    def encode(self, value: Any) -> WireValue:
        if isinstance(value, (AdtValue, Mapping, list)):
            return value
        return str(value)

    def decode(self, wire: WireValue) -> str:
        if isinstance(wire, str):
            return wire
        return dumps_wire(wire)


def _atom(codec: Codec) -> str:
    name = codec.type_name()
    return f"({name})" if " " in name else name


# ---------- Factory -----------------------------------------------------------


@lru_cache(maxsize=1024)
def _build(t: ScillaType) -> Codec:
    k = t.kind
    if k in ("int", "uint"):
        return IntCodec(t.width or 256, signed=(k == "int"))
    if k == "string":
        return StringCodec()
    if k == "bnum":
        return BNumCodec()
    if k == "bool":
        return BoolCodec()
    if k == "bystr":
        if t.is_address:
            return AddressCodec(t.type_name())
        return ByStrCodec(t.width)
    if k == "option":
        return OptionCodec(_build(t.args[0]))
    if k == "list":
        return ListCodec(_build(t.args[0]))
    if k == "pair":
        return PairCodec(_build(t.args[0]), _build(t.args[1]))
    if k == "map":
        return MapCodec(_build(t.args[0]), _build(t.args[1]))
    return RawCodec(t.type_name())


def codec_for(scilla_type: Union[str, ScillaType]) -> Codec:
    """Codec for a Scilla type given as text (`"Map String Int32"`) or parsed."""
    t = parse_type(scilla_type) if isinstance(scilla_type, str) else scilla_type
    return _build(t)
