from __future__ import annotations

"""
Scilla contract header parser
=============================

Reads just enough of a `.scilla` source file to drive binding generation:

- the contract name and its immutable (init) parameters,
- mutable `field` declarations (name and type, initialisers are skipped),
- `transition` names and parameter lists, in source order.

Library code, procedure bodies and transition bodies are skipped without being
interpreted. Comments `(* ... *)` may nest; string literals are blanked before
scanning so their contents never look like keywords.

    contract = parse_contract_file("contracts/HelloWorld.scilla")
    contract.name                       # "HelloWorld"
    [f.name for f in contract.fields]   # ["welcome_msg"]
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from ..errors import ContractParseError
from .types import ScillaType, parse_type

__all__ = [
    "Field",
    "Transition",
    "Contract",
    "parse_contract",
    "parse_contract_file",
    "strip_comments",
]


@dataclass(frozen=True)
class Field:
    name: str
    type: ScillaType

    @property
    def type_text(self) -> str:
        return self.type.type_name()


@dataclass(frozen=True)
class Transition:
    name: str
    params: Tuple[Field, ...] = ()


@dataclass(frozen=True)
class Contract:
    name: str
    init_params: Tuple[Field, ...] = ()
    fields: Tuple[Field, ...] = ()
    transitions: Tuple[Transition, ...] = ()
    path: Optional[Path] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        def _fields(fs: Sequence[Field]) -> list:
            return [{"name": f.name, "type": f.type_text} for f in fs]

        return {
            "name": self.name,
            "path": str(self.path) if self.path else None,
            "init_params": _fields(self.init_params),
            "fields": _fields(self.fields),
            "transitions": [
                {"name": t.name, "params": _fields(t.params)} for t in self.transitions
            ],
        }


# ---------- Lexing -------------------------------------------------------------

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<op>=>|<-|:=|->)
  | (?P<ident>'?[A-Za-z_][A-Za-z0-9_.']*)
  | (?P<num>[0-9]+)
  | (?P<punct>\S)
    """,
    re.VERBOSE,
)

# (kind, text, start, end)
_Token = Tuple[str, str, int, int]


def strip_comments(source: str) -> str:
    """
    Replace `(* ... *)` comments (nested) and string literal bodies with spaces,
    keeping offsets stable so token spans index into the original text.
    """
    out = list(source)
    i, n = 0, len(source)
    depth = 0
    in_string = False
    while i < n:
        two = source[i:i + 2]
        if in_string:
            if source[i] == "\\" and i + 1 < n:
                out[i] = out[i + 1] = " "
                i += 2
                continue
            if source[i] == '"':
                in_string = False
            elif source[i] != "\n":
                out[i] = " "
            i += 1
            continue
        if two == "(*":
            depth += 1
            out[i] = out[i + 1] = " "
            i += 2
            continue
        if depth > 0:
            if two == "*)":
                depth -= 1
                out[i] = out[i + 1] = " "
                i += 2
                continue
            if source[i] != "\n":
                out[i] = " "
            i += 1
            continue
        if source[i] == '"':
            in_string = True
        i += 1
    if depth > 0:
        raise ContractParseError("unterminated comment")
    if in_string:
        raise ContractParseError("unterminated string literal")
    return "".join(out)


def _tokenize(text: str) -> List[_Token]:
    tokens: List[_Token] = []
    for m in _TOKEN_RE.finditer(text):
        kind = m.lastgroup or "punct"
        if kind == "ws":
            continue
        tokens.append((kind, m.group(), m.start(), m.end()))
    return tokens


# ---------- Parsing ------------------------------------------------------------

_SECTION_KEYWORDS = ("field", "transition", "procedure")


class _ContractParser:
    def __init__(self, source: str, path: Optional[str]):
        self.path = path
        self.text = strip_comments(source)
        self.toks = _tokenize(self.text)
        self.i = 0

    # -- cursor helpers --

    def error(self, message: str) -> ContractParseError:
        line = None
        if self.i < len(self.toks):
            line = self.text.count("\n", 0, self.toks[self.i][2]) + 1
        where = f" (line {line})" if line else ""
        return ContractParseError(message + where, path=self.path)

    def peek(self, offset: int = 0) -> Optional[str]:
        j = self.i + offset
        return self.toks[j][1] if j < len(self.toks) else None

    def take(self) -> _Token:
        if self.i >= len(self.toks):
            raise self.error("unexpected end of file")
        tok = self.toks[self.i]
        self.i += 1
        return tok

    def expect(self, text: str) -> _Token:
        tok = self.take()
        if tok[1] != text:
            self.i -= 1
            raise self.error(f"expected {text!r}, found {tok[1]!r}")
        return tok

    def ident(self, what: str) -> str:
        tok = self.take()
        if tok[0] != "ident":
            self.i -= 1
            raise self.error(f"expected {what}, found {tok[1]!r}")
        return tok[1]

    # -- grammar --

    def parse(self) -> Contract:
        self.seek_contract()
        name = self.ident("contract name")
        init_params = self.param_list()
        if self.peek() == "with":
            # contract constraint: `with <expr> =>`
            self.take()
            self.skip_until({"=>"})
            self.expect("=>")

        fields: List[Field] = []
        transitions: List[Transition] = []
        while self.i < len(self.toks):
            kw = self.peek()
            if kw == "field":
                self.take()
                fields.append(self.field_decl())
                self.skip_until(set(_SECTION_KEYWORDS))
            elif kw in ("transition", "procedure"):
                self.take()
                comp_name = self.ident(f"{kw} name")
                params = self.param_list()
                self.skip_body()
                if kw == "transition":
                    transitions.append(Transition(comp_name, tuple(params)))
            else:
                raise self.error(f"unexpected {kw!r} in contract body")

        return Contract(
            name=name,
            init_params=tuple(init_params),
            fields=tuple(fields),
            transitions=tuple(transitions),
            path=Path(self.path) if self.path else None,
        )

    def seek_contract(self) -> None:
        for j, tok in enumerate(self.toks):
            if tok[1] != "contract" or tok[0] != "ident":
                continue
            if j > 0 and self.toks[j - 1][1] == "with":
                continue  # address type `ByStr20 with contract ... end`
            if j + 2 < len(self.toks) and self.toks[j + 2][1] == "(":
                self.i = j + 1
                return
        raise ContractParseError("no contract declaration found", path=self.path)

    def type_until(self, stops: Sequence[str]) -> ScillaType:
        """Consume a type up to (not including) a stop token at depth zero."""
        start: Optional[int] = None
        end = 0
        paren = 0
        with_depth = 0
        while True:
            tok_text = self.peek()
            if tok_text is None:
                raise self.error("unexpected end of file in type")
            if paren == 0 and with_depth == 0 and tok_text in stops:
                break
            tok = self.take()
            if tok_text == "(":
                paren += 1
            elif tok_text == ")":
                paren -= 1
                if paren < 0:
                    self.i -= 1
                    raise self.error("unbalanced ')' in type")
            elif tok_text == "with":
                with_depth += 1
            elif tok_text == "end":
                with_depth -= 1
            if start is None:
                start = tok[2]
            end = tok[3]
        if start is None:
            raise self.error("missing type")
        return parse_type(self.text[start:end])

    def param_list(self) -> List[Field]:
        self.expect("(")
        params: List[Field] = []
        if self.peek() == ")":
            self.take()
            return params
        while True:
            pname = self.ident("parameter name")
            self.expect(":")
            ptype = self.type_until((",", ")"))
            params.append(Field(pname, ptype))
            sep = self.take()[1]
            if sep == ")":
                return params
            if sep != ",":  # pragma: no cover - type_until stops only on , or )
                raise self.error(f"unexpected {sep!r} in parameter list")

    def field_decl(self) -> Field:
        fname = self.ident("field name")
        self.expect(":")
        ftype = self.type_until(("=",))
        self.expect("=")
        return Field(fname, ftype)

    def skip_until(self, stops: set) -> None:
        depth = 0
        while self.i < len(self.toks):
            tok_text = self.toks[self.i][1]
            if depth == 0 and tok_text in stops:
                return
            if tok_text == "with":
                depth += 1
            elif tok_text == "end" and depth > 0:
                depth -= 1
            self.i += 1

    def skip_body(self) -> None:
        """Skip a transition/procedure body up to and including its `end`."""
        depth = 0
        while True:
            tok_text = self.take()[1]
            if tok_text == "with":
                depth += 1
            elif tok_text == "end":
                if depth == 0:
                    return
                depth -= 1


def parse_contract(source: str, path: Union[str, Path, None] = None) -> Contract:
    """Parse Scilla source text into a `Contract` descriptor."""
    return _ContractParser(source, str(path) if path is not None else None).parse()


def parse_contract_file(path: Union[str, Path]) -> Contract:
    p = Path(path)
    try:
        source = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ContractParseError(f"cannot read contract: {e}", path=str(p)) from e
    return parse_contract(source, p)
