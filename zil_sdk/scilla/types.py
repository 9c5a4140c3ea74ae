from __future__ import annotations

"""
Scilla type descriptors.

`parse_type(text)` turns a Scilla type as written in a contract (or in a
`NamedValue.type`) into a small `ScillaType` tree covering the closed set of
built-in types the codec supports:

    Int32 Int64 Int128 Int256 Uint32 Uint64 Uint128 Uint256
    String BNum Bool ByStr ByStrN
    Option T | List T | Pair A B | Map K V

Address types with a contract refinement (`ByStr20 with contract ... end`)
are read as `ByStr20` and keep their full text for the wire. Everything else
(user ADTs, type variables, function types, malformed text) becomes
`kind="other"` with the original text; parsing never raises.

`ScillaType.type_name()` renders the canonical wire spelling, e.g.
`Option (Bool)`, `Pair String Uint32`, `List (Pair ByStr20 Uint32)`,
`Map String Int32`.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

__all__ = ["ScillaType", "parse_type", "INT_WIDTHS", "PRIMITIVE_KINDS"]

INT_WIDTHS = (32, 64, 128, 256)

# Kinds that travel as a bare string literal on the wire
PRIMITIVE_KINDS = frozenset({"int", "uint", "string", "bystr", "bnum"})

_CONTAINER_ARITY = {"Option": 1, "List": 1, "Pair": 2, "Map": 2}

_TOKEN_RE = re.compile(r"\s*(->|\(|\)|'?[A-Za-z_][A-Za-z0-9_.']*|\S)")
_INT_RE = re.compile(r"^(Int|Uint)([0-9]+)$")
_BYSTR_RE = re.compile(r"^ByStr([0-9]*)$")


@dataclass(frozen=True)
class ScillaType:
    kind: str
    args: Tuple["ScillaType", ...] = ()
    # bit width for int/uint, byte length for bystr (None = dynamic ByStr)
    width: Optional[int] = None
    # original text for "other" and for refined address types
    text: Optional[str] = None

    @property
    def is_primitive(self) -> bool:
        return self.kind in PRIMITIVE_KINDS

    @property
    def is_address(self) -> bool:
        return self.kind == "bystr" and self.width == 20

    def type_name(self) -> str:
        k = self.kind
        if k == "int":
            return f"Int{self.width}"
        if k == "uint":
            return f"Uint{self.width}"
        if k == "string":
            return "String"
        if k == "bnum":
            return "BNum"
        if k == "bool":
            return "Bool"
        if k == "bystr":
            if self.text:
                return self.text
            return "ByStr" if self.width is None else f"ByStr{self.width}"
        if k == "option":
            return f"Option ({self.args[0].type_name()})"
        if k == "list":
            return f"List ({self.args[0].type_name()})"
        if k == "pair":
            return f"Pair {_atom(self.args[0])} {_atom(self.args[1])}"
        if k == "map":
            return f"Map {_atom(self.args[0])} {_atom(self.args[1])}"
        return self.text or "?"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.type_name()


def _atom(t: ScillaType) -> str:
    name = t.type_name()
    return f"({name})" if " " in name else name


# ---------- Parsing -----------------------------------------------------------


class _ParseFailure(Exception):
    pass


def _tokenize(text: str) -> List[str]:
    tokens: List[str] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m:
            break
        tok = m.group(1)
        pos = m.end()
        if tok:
            tokens.append(tok)
    return tokens


class _TypeParser:
    def __init__(self, tokens: List[str]):
        self.toks = tokens
        self.i = 0

    def peek(self) -> Optional[str]:
        return self.toks[self.i] if self.i < len(self.toks) else None

    def take(self) -> str:
        tok = self.peek()
        if tok is None:
            raise _ParseFailure("unexpected end of type")
        self.i += 1
        return tok

    def expect(self, tok: str) -> None:
        got = self.take()
        if got != tok:
            raise _ParseFailure(f"expected {tok!r}, got {got!r}")

    def parse(self) -> ScillaType:
        t = self.parse_app()
        if self.peek() is not None:
            raise _ParseFailure(f"trailing tokens from {self.peek()!r}")
        return t

    def parse_app(self) -> ScillaType:
        tok = self.peek()
        if tok == "(":
            return self.parse_atom()
        name = self.take()
        arity = _CONTAINER_ARITY.get(name)
        if arity is not None:
            args = tuple(self.parse_atom() for _ in range(arity))
            return _container(name, args)
        if name.startswith("ByStr") and self.peek() == "with":
            return self.parse_refined_address(name)
        base = _scalar(name)
        if base.kind == "other" and self.peek() not in (None, ")"):
            # user ADT application; swallow arguments
            while self.peek() not in (None, ")"):
                self.parse_atom()
            raise _ParseFailure(f"unsupported type application {name!r}")
        return base

    def parse_atom(self) -> ScillaType:
        tok = self.take()
        if tok == "(":
            inner = self.parse_app()
            self.expect(")")
            return inner
        if tok in (")", "->"):
            raise _ParseFailure(f"unexpected {tok!r}")
        if tok in _CONTAINER_ARITY:
            raise _ParseFailure(f"{tok} needs parentheses when used as an argument")
        if tok.startswith("ByStr") and self.peek() == "with":
            return self.parse_refined_address(tok)
        return _scalar(tok)

    def parse_refined_address(self, head: str) -> ScillaType:
        start = self.i - 1
        depth = 0
        while True:
            tok = self.take()
            if tok == "with":
                depth += 1
            elif tok == "end":
                depth -= 1
                if depth == 0:
                    break
        base = _scalar(head)
        if not base.is_address:
            raise _ParseFailure(f"refinement on non-address type {head!r}")
        text = " ".join(self.toks[start:self.i])
        return ScillaType("bystr", width=20, text=text)


def _scalar(name: str) -> ScillaType:
    m = _INT_RE.match(name)
    if m:
        width = int(m.group(2))
        if width in INT_WIDTHS:
            return ScillaType("int" if m.group(1) == "Int" else "uint", width=width)
        return ScillaType("other", text=name)
    if name == "String":
        return ScillaType("string")
    if name == "BNum":
        return ScillaType("bnum")
    if name == "Bool":
        return ScillaType("bool")
    m = _BYSTR_RE.match(name)
    if m:
        digits = m.group(1)
        if not digits:
            return ScillaType("bystr")
        width = int(digits)
        if width <= 0:
            return ScillaType("other", text=name)
        return ScillaType("bystr", width=width)
    return ScillaType("other", text=name)


def _container(name: str, args: Tuple[ScillaType, ...]) -> ScillaType:
    if name == "Option":
        return ScillaType("option", args=args)
    if name == "List":
        return ScillaType("list", args=args)
    if name == "Pair":
        return ScillaType("pair", args=args)
    key = args[0]
    if not key.is_primitive:
        raise _ParseFailure(f"map key must be a primitive type, got {key.type_name()!r}")
    return ScillaType("map", args=args)


def parse_type(text: str) -> ScillaType:
    """Parse a Scilla type; unsupported or malformed input yields kind "other"."""
    if isinstance(text, ScillaType):
        return text
    normalized = " ".join(str(text).split())
    tokens = _tokenize(normalized)
    if not tokens:
        return ScillaType("other", text=normalized)
    try:
        return _TypeParser(tokens).parse()
    except _ParseFailure:
        return ScillaType("other", text=normalized)
