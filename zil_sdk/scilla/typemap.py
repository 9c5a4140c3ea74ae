"""
zil_sdk.scilla.typemap
======================

Map Scilla types to native Python types.

`map_type` is total: any descriptor outside the supported grammar maps to the
distinguished `raw` kind (annotated as `str`) and a warning is logged, so
binding generation always succeeds and the degraded field is still visible
through `NativeType.degraded`.

    >>> map_type("Map ByStr20 Uint128").hint
    'Dict[Address, int]'
    >>> map_type("Option (Bool)").hint
    'Optional[bool]'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple, Union

from .types import ScillaType, parse_type

__all__ = ["NativeType", "map_type"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NativeType:
    """
    Native counterpart of a Scilla type.

    kind: int | str | address | bnum | bool | option | pair | list | map | raw
    hint: Python annotation text used by the binding generator
    """

    kind: str
    hint: str
    args: Tuple["NativeType", ...] = ()
    scilla: str = ""

    @property
    def is_raw(self) -> bool:
        return self.kind == "raw"

    @property
    def degraded(self) -> bool:
        """True if this type or any nested component fell back to raw."""
        return self.is_raw or any(a.degraded for a in self.args)


_SCALARS = {
    "int": ("int", "int"),
    "uint": ("int", "int"),
    "string": ("str", "str"),
    "bnum": ("bnum", "BNum"),
    "bool": ("bool", "bool"),
}


def map_type(scilla_type: Union[str, ScillaType]) -> NativeType:
    """Map a Scilla type (text or parsed) to its native descriptor."""
    t = parse_type(scilla_type) if isinstance(scilla_type, str) else scilla_type
    name = t.type_name()

    if t.kind in _SCALARS:
        kind, hint = _SCALARS[t.kind]
        return NativeType(kind, hint, scilla=name)
    if t.kind == "bystr":
        if t.is_address:
            return NativeType("address", "Address", scilla=name)
        return NativeType("str", "str", scilla=name)
    if t.kind == "option":
        inner = map_type(t.args[0])
        # Some(...) keeps Some(None) apart from None
        hint = f"Some[{inner.hint}]" if inner.kind == "option" else inner.hint
        return NativeType("option", f"Optional[{hint}]", (inner,), scilla=name)
    if t.kind == "list":
        inner = map_type(t.args[0])
        return NativeType("list", f"List[{inner.hint}]", (inner,), scilla=name)
    if t.kind == "pair":
        a, b = map_type(t.args[0]), map_type(t.args[1])
        return NativeType("pair", f"Tuple[{a.hint}, {b.hint}]", (a, b), scilla=name)
    if t.kind == "map":
        k, v = map_type(t.args[0]), map_type(t.args[1])
        return NativeType("map", f"Dict[{k.hint}, {v.hint}]", (k, v), scilla=name)

    logger.warning(
        "Failed to map %r to any python type; the value is kept as a raw string", name
    )
    return NativeType("raw", "str", scilla=name)
