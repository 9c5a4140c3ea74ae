"""
zil_sdk.scilla.values
=====================

Wire-level representation of Scilla values, exactly as the node's JSON-RPC
exchanges them.

A wire value is one of:

- a primitive: Python `str` (`"123"`, `"hello"`, `"0x1234..."`)
- an ADT: `AdtValue(constructor, argtypes, arguments)`, e.g.
  `{"constructor": "Some", "argtypes": ["Bool"], "arguments": [...]}`
- a map: Python `dict[str, WireValue]`
- a flat list: Python `list[WireValue]` (only seen on state reads)

`NamedValue` (`vname`, `type`, `value`) is the unit exchanged for init
parameters, transition arguments and event / message params.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

__all__ = [
    "AdtValue",
    "NamedValue",
    "ScillaVariable",
    "WireValue",
    "wire_to_json",
    "wire_from_json",
    "dumps_wire",
]


@dataclass(frozen=True)
class AdtValue:
    constructor: str
    argtypes: Tuple[str, ...] = ()
    arguments: Tuple["WireValue", ...] = ()

    def __post_init__(self) -> None:
        # callers may pass lists
        object.__setattr__(self, "argtypes", tuple(self.argtypes))
        object.__setattr__(self, "arguments", tuple(self.arguments))

    def to_json(self) -> Dict[str, Any]:
        return {
            "constructor": self.constructor,
            "argtypes": list(self.argtypes),
            "arguments": [wire_to_json(a) for a in self.arguments],
        }


WireValue = Union[str, AdtValue, Dict[str, Any], List[Any]]


def wire_to_json(value: WireValue) -> Any:
    """Convert a wire value to plain JSON-serialisable Python objects."""
    if isinstance(value, AdtValue):
        return value.to_json()
    if isinstance(value, Mapping):
        return {str(k): wire_to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [wire_to_json(v) for v in value]
    return value


_ADT_KEYS = frozenset({"constructor", "argtypes", "arguments"})


def _is_adt_json(obj: Mapping[str, Any]) -> bool:
    # a map field may legitimately use "constructor" as a key
    return (
        set(obj.keys()) == _ADT_KEYS
        and isinstance(obj["constructor"], str)
        and isinstance(obj["argtypes"], list)
        and isinstance(obj["arguments"], list)
    )


def wire_from_json(obj: Any) -> WireValue:
    """
    Read a JSON-decoded object as a wire value.

    Objects with exactly the ADT shape (`constructor`, `argtypes` and
    `arguments` lists) are ADTs; every other object is a map.
    Bare JSON numbers/booleans/null (some nodes emit them in state dumps) are
    turned into primitives via their JSON text.
    """
    if isinstance(obj, AdtValue):
        return obj
    if isinstance(obj, str):
        return obj
    if isinstance(obj, Mapping):
        if _is_adt_json(obj):
            return AdtValue(
                constructor=obj["constructor"],
                argtypes=tuple(str(t) for t in obj["argtypes"]),
                arguments=tuple(wire_from_json(a) for a in obj["arguments"]),
            )
        return {str(k): wire_from_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [wire_from_json(v) for v in obj]
    if isinstance(obj, bool) or obj is None:
        return json.dumps(obj)
    return str(obj)


def dumps_wire(value: Any) -> str:
    """Compact JSON text of a wire value (used in error messages)."""
    try:
        return json.dumps(wire_to_json(value), separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)


@dataclass(frozen=True)
class NamedValue:
    vname: str
    type: str
    value: WireValue = field(hash=False)

    def to_json(self) -> Dict[str, Any]:
        return {"vname": self.vname, "type": self.type, "value": wire_to_json(self.value)}

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "NamedValue":
        try:
            return cls(
                vname=str(obj["vname"]),
                type=str(obj["type"]),
                value=wire_from_json(obj["value"]),
            )
        except KeyError as e:
            raise ValueError(f"named value is missing {e.args[0]!r}: {obj!r}") from None

    @classmethod
    def many_from_json(cls, items: Sequence[Mapping[str, Any]]) -> List["NamedValue"]:
        return [cls.from_json(i) for i in items or ()]


# The chain (and the rest of the SDK docs) call this a "Scilla variable".
ScillaVariable = NamedValue
