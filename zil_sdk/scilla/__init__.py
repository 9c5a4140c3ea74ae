"""
zil_sdk.scilla
==============

The Scilla / Python type bridge.

- types     : Scilla type descriptors (`parse_type`)
- typemap   : Scilla type -> native Python type (`map_type`)
- values    : wire values (`AdtValue`, `NamedValue`)
- codec     : native <-> wire codecs (`codec_for`)
- parser    : contract header parser (`parse_contract_file`)
- generator : binding generation (`generate_bindings`, `load_bindings`)
"""

from __future__ import annotations

from .codec import Codec, Some, codec_for
from .generator import (
    discover_contracts,
    emit_contract_binding,
    generate_bindings,
    load_bindings,
    write_bindings,
)
from .parser import Contract, Field, Transition, parse_contract, parse_contract_file
from .typemap import NativeType, map_type
from .types import ScillaType, parse_type
from .values import AdtValue, NamedValue, ScillaVariable, WireValue

__all__ = [
    "AdtValue",
    "Codec",
    "Contract",
    "Field",
    "NamedValue",
    "NativeType",
    "ScillaType",
    "ScillaVariable",
    "Some",
    "Transition",
    "WireValue",
    "codec_for",
    "discover_contracts",
    "emit_contract_binding",
    "generate_bindings",
    "load_bindings",
    "map_type",
    "parse_contract",
    "parse_contract_file",
    "parse_type",
    "write_bindings",
]
