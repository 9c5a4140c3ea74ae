"""
zil_sdk.scilla.generator
========================

Generate typed Python bindings from Scilla contract sources.

For every `*.scilla` file in a directory one class per contract is emitted:

- `deploy(provider, <init params>, *, compressed=False, overridden_params=None)`
  (async classmethod) deploys the source file with `_scilla_version = 0`
  followed by the encoded init parameters.
- one method per transition (snake_case) returning a `TransitionCall`
- one async getter per mutable field and per init parameter
- `get_state()` / `get_init()` returning `<Name>State` / `<Name>Init`

A contract that fails to parse or generate is logged and skipped; the rest of
the directory still produces bindings.

Quickstart
----------
    from zil_sdk.scilla.generator import write_bindings, load_bindings

    write_bindings("contracts/", "my_app/bindings.py")   # commit the file

    # or at runtime, without writing anything:
    bindings = load_bindings("contracts/")
    hello = await bindings.HelloWorld.deploy(provider, owner=me)
"""

from __future__ import annotations

import hashlib
import keyword
import logging
import os
import re
import types
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from ..errors import ContractParseError, GenerationError
from .parser import Contract, Field, parse_contract_file
from .typemap import map_type

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# ---------- Name utilities ----------------------------------------------------

_PY_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Attributes every generated contract class already has
_CLASS_RESERVED = frozenset(
    {
        "deploy",
        "attach",
        "address",
        "base",
        "connect",
        "get_state",
        "get_init",
        "CONTRACT_NAME",
        "SOURCE_PATH",
    }
)

# Attributes of BindingState / BindingInit
_RECORD_RESERVED = frozenset({"raw", "decode", "names", "from_state", "from_init"})

# Keyword-only parameters of deploy()
_DEPLOY_RESERVED = frozenset({"cls", "provider", "compressed", "overridden_params", "init"})

# Module globals called from generated method bodies
_BODY_GLOBALS = frozenset({"codec_for", "named_arg"})


def _py_ident(name: str) -> str:
    """Return a safe Python identifier (snake_case), avoiding keywords."""
    if not name:
        return "arg"
    # camelCase / PascalCase -> snake_case
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    snake = re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()
    snake = re.sub(r"[^A-Za-z0-9_]", "_", snake)
    if snake[0].isdigit():
        snake = f"_{snake}"
    if not _PY_IDENT_RE.match(snake) or keyword.iskeyword(snake):
        snake = f"{snake}_"
    return snake


def _class_ident(name: str) -> str:
    ident = re.sub(r"[^A-Za-z0-9_]", "_", name) or "Contract"
    if ident[0].isdigit() or keyword.iskeyword(ident):
        ident = f"{ident}_"
    return ident


def _unique(name: str, taken: Set[str]) -> str:
    """Deterministic de-duplication: name, name_1, name_2, ..."""
    if name not in taken:
        taken.add(name)
        return name
    k = 1
    while f"{name}_{k}" in taken:
        k += 1
    out = f"{name}_{k}"
    taken.add(out)
    return out


# ---------- Templates ---------------------------------------------------------

_HEADER = '''"""
Generated contract bindings for {title}

This file was generated by zil_sdk.scilla.generator.generate_bindings.
Do not edit by hand.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from zil_sdk.address import Address
from zil_sdk.contract.base import BindingInit, BindingState, ContractBinding, named_arg
from zil_sdk.contract.transition_call import TransitionCall
from zil_sdk.provider import Provider
from zil_sdk.scilla.codec import Some, codec_for
from zil_sdk.types.core import BNum, TransactionParams
'''

_RECORD_TMPL = '''

class {record_name}({record_base}):
    """{doc}"""

    _FIELDS = {{{fields}}}
    _CODECS = {{{codecs}}}
{annotations}'''

_CLASS_TMPL = '''

class {class_name}(ContractBinding):
    """Typed binding for the "{contract_name}" contract.

    Source: {source_name}
    """

    CONTRACT_NAME = {contract_name!r}
    SOURCE_PATH = {source!r}
    _STATE_CLS = {state_cls}
    _INIT_CLS = {init_cls}

    @classmethod
    async def deploy(
        cls,
        provider: Provider,{deploy_args}
        *,
        compressed: bool = False,
        overridden_params: Optional[TransactionParams] = None,
    ) -> "{class_name}":
        """Deploy {contract_name} and return a binding attached to the new address."""
        init = [
            named_arg("_scilla_version", codec_for("Uint32"), 0),{deploy_init}
        ]
        return await cls._deploy(provider, init, compressed=compressed, overridden_params=overridden_params)
'''

_TRANSITION_TMPL = '''
    def {py_name}(self{sig_args}) -> TransitionCall:
        """Transition {name}({human_sig})"""
        return self.base.transition(
            {name!r},
            [{args}],
        )
'''

_FIELD_GETTER_TMPL = '''
    async def {py_name}(self) -> {hint}:
        """Mutable field {name} : {type_text}"""
        return await self.base.get_field({name!r}, codec_for({type_text!r}))
'''

_INIT_GETTER_TMPL = '''
    async def {py_name}(self) -> {hint}:
        """Init parameter {name} : {type_text}"""
        return await self.base.get_init_field({name!r}, codec_for({type_text!r}))
'''

_STATE_ACCESSORS_TMPL = '''
    async def get_state(self) -> {state_cls}:
        return await super().get_state()  # type: ignore[return-value]

    async def get_init(self) -> {init_cls}:
        return await super().get_init()  # type: ignore[return-value]
'''


# ---------- Emission ----------------------------------------------------------


def _record(record_name: str, record_base: str, doc: str, fields: Sequence[Field]) -> str:
    taken: Set[str] = set(_RECORD_RESERVED)
    names: List[Tuple[str, Field]] = [(_unique(_py_ident(f.name), taken), f) for f in fields]
    field_map = ", ".join(f"{attr!r}: {f.name!r}" for attr, f in names)
    codec_map = ", ".join(f"{f.name!r}: codec_for({f.type_text!r})" for _, f in names)
    annotations = "".join(f"\n    {attr}: Any" for attr, _ in names)
    return _RECORD_TMPL.format(
        record_name=record_name,
        record_base=record_base,
        doc=doc,
        fields=field_map,
        codecs=codec_map,
        annotations=annotations,
    )


def _params(fields: Sequence[Field], taken: Set[str]) -> Tuple[List[Tuple[str, Field, str]], str, str]:
    """Return ([(py_name, field, hint)], signature suffix, human signature)."""
    out: List[Tuple[str, Field, str]] = []
    for f in fields:
        py_name = _unique(_py_ident(f.name), taken)
        out.append((py_name, f, map_type(f.type).hint))
    sig = "".join(f", {p}: {hint}" for p, _, hint in out)
    human = ", ".join(f"{f.name} : {f.type_text}" for _, f, _ in out)
    return out, sig, human


def emit_contract_binding(contract: Contract, *, class_name: Optional[str] = None) -> str:
    """
    Python source for one contract: `<Name>State`, `<Name>Init` and `<Name>`.

    Raises GenerationError if the emitted source does not compile.
    """
    cls_name = class_name or _class_ident(contract.name)
    state_cls = f"{cls_name}State"
    init_cls = f"{cls_name}Init"
    source = str(contract.path.resolve()) if contract.path else None

    parts: List[str] = [
        _record(state_cls, "BindingState", f"Mutable fields of {contract.name} (undecoded wire values).", contract.fields),
        _record(init_cls, "BindingInit", f"Init parameters of {contract.name} (undecoded wire values).", contract.init_params),
    ]

    # deploy(): one keyword-capable argument per init parameter
    deploy_params, _, _ = _params(contract.init_params, set(_DEPLOY_RESERVED | _BODY_GLOBALS))
    deploy_args = "".join(f"\n        {p}: {hint}," for p, _, hint in deploy_params)
    deploy_init = "".join(
        f"\n            named_arg({f.name!r}, codec_for({f.type_text!r}), {p}),"
        for p, f, _ in deploy_params
    )
    parts.append(
        _CLASS_TMPL.format(
            class_name=cls_name,
            contract_name=contract.name,
            source=source,
            source_name=contract.path.name if contract.path else "(inline)",
            state_cls=state_cls,
            init_cls=init_cls,
            deploy_args=deploy_args,
            deploy_init=deploy_init,
        )
    )

    # transitions, then field getters, then init getters share one namespace
    members: Set[str] = set(_CLASS_RESERVED)
    for tr in contract.transitions:
        py_name = _unique(_py_ident(tr.name), members)
        params, sig, human = _params(tr.params, {"self"} | _BODY_GLOBALS)
        args = ", ".join(f"named_arg({f.name!r}, codec_for({f.type_text!r}), {p})" for p, f, _ in params)
        parts.append(
            _TRANSITION_TMPL.format(py_name=py_name, name=tr.name, sig_args=sig, human_sig=human, args=args)
        )
    for f in contract.fields:
        parts.append(
            _FIELD_GETTER_TMPL.format(
                py_name=_unique(_py_ident(f.name), members),
                hint=map_type(f.type).hint,
                name=f.name,
                type_text=f.type_text,
            )
        )
    for f in contract.init_params:
        parts.append(
            _INIT_GETTER_TMPL.format(
                py_name=_unique(_py_ident(f.name), members),
                hint=map_type(f.type).hint,
                name=f.name,
                type_text=f.type_text,
            )
        )
    parts.append(_STATE_ACCESSORS_TMPL.format(state_cls=state_cls, init_cls=init_cls))

    src = "".join(parts)
    try:
        compile(_HEADER.format(title=contract.name) + src, source or f"<{contract.name}>", "exec")
    except SyntaxError as e:
        raise GenerationError(f"emitted source does not compile: {e}", contract=contract.name, path=source) from e
    return src


def discover_contracts(contracts_path: Optional[PathLike]) -> List[Path]:
    """Sorted `*.scilla` files directly under `contracts_path` (empty if unset/missing)."""
    if not contracts_path:
        logger.info("contracts path is not set; no bindings generated")
        return []
    root = Path(contracts_path)
    if not root.is_dir():
        logger.info("contracts path %s does not exist; no bindings generated", root)
        return []
    files = sorted(p for p in root.glob("*.scilla") if p.is_file())
    logger.info("found %d contract(s) in %s", len(files), root)
    return files


def _emit_all(paths: Iterable[Path]) -> Tuple[List[str], List[str]]:
    bodies: List[str] = []
    exported: List[str] = []
    taken: Set[str] = set()
    for path in paths:
        try:
            contract = parse_contract_file(path)
        except ContractParseError as e:
            logger.warning("Failed to parse %s: %s", path, e)
            continue
        base_name = _class_ident(contract.name)
        cls_name = base_name
        k = 0
        while {cls_name, f"{cls_name}State", f"{cls_name}Init"} & taken:
            k += 1
            cls_name = f"{base_name}_{k}"
        if cls_name != base_name:
            logger.warning("contract name %s in %s is already bound; using %s", contract.name, path, cls_name)
        try:
            bodies.append(emit_contract_binding(contract, class_name=cls_name))
        except GenerationError as e:
            logger.warning("Failed to generate binding for %s: %s", path, e)
            continue
        taken.update({cls_name, f"{cls_name}State", f"{cls_name}Init"})
        exported.extend([cls_name, f"{cls_name}State", f"{cls_name}Init"])
    return bodies, exported


def generate_bindings(contracts_path: Optional[PathLike], *, title: Optional[str] = None) -> str:
    """Full module source with bindings for every contract under `contracts_path`."""
    bodies, exported = _emit_all(discover_contracts(contracts_path))
    title = title or (str(contracts_path) if contracts_path else "(no contracts)")
    src = _HEADER.format(title=title.replace("\\", "/"))
    src += "".join(bodies)
    src += "\n\n__all__ = [" + ", ".join(repr(n) for n in exported) + "]\n"
    return src


def write_bindings(contracts_path: Optional[PathLike], output_path: PathLike) -> Path:
    """Generate and write the bindings module to `output_path`."""
    src = generate_bindings(contracts_path)
    out = Path(output_path)
    os.makedirs(out.parent, exist_ok=True)
    out.write_text(src, encoding="utf-8")
    logger.info("wrote bindings to %s", out)
    return out


# ---------- Runtime registry --------------------------------------------------


def _resolve(contracts_path: Optional[PathLike]) -> Optional[str]:
    if contracts_path is None:
        from ..config import SDKConfig

        contracts_path = SDKConfig.from_env().contracts_path
    return str(Path(contracts_path).resolve()) if contracts_path else None


@lru_cache(maxsize=None)
def _load(resolved: Optional[str]) -> types.ModuleType:
    src = generate_bindings(resolved)
    digest = hashlib.sha256((resolved or "").encode()).hexdigest()[:12]
    module = types.ModuleType(f"zil_sdk_bindings_{digest}")
    module.__file__ = f"<zil-sdk bindings: {resolved}>"
    exec(compile(src, module.__file__, "exec"), module.__dict__)
    return module


def load_bindings(contracts_path: Optional[PathLike] = None) -> types.ModuleType:
    """
    Generate, compile and execute bindings for `contracts_path` (defaults to
    `SDKConfig.contracts_path`). Done once per resolved path.
    """
    return _load(_resolve(contracts_path))


def clear_bindings_cache() -> None:
    _load.cache_clear()


__all__ = [
    "discover_contracts",
    "emit_contract_binding",
    "generate_bindings",
    "write_bindings",
    "load_bindings",
    "clear_bindings_cache",
]
