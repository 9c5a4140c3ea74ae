"""
zil_sdk.contract.base
=====================

Runtime pieces shared by every contract binding.

- `BaseContract`: an address plus a provider. Untyped transition calls and
  state / init reads with an explicit codec.
- `BindingState` / `BindingInit`: snapshot records. Generated `<C>State` and
  `<C>Init` subclasses declare their attributes in `_FIELDS` and codecs in
  `_CODECS`; attributes hold the *undecoded* wire value, `decode(name)` runs
  the codec. A field that fails to decode does not affect its siblings.
- `ContractBinding`: base class of every generated contract class.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Sequence, Type, TypeVar

from ..address import Address
from ..errors import CodecError, ContractError, FieldDecodeError, NoSuchFieldError
from ..scilla.codec import Codec
from ..scilla.values import NamedValue, WireValue, dumps_wire, wire_from_json
from ..types.core import TransactionParams
from .transition_call import TransitionCall

if TYPE_CHECKING:  # pragma: no cover
    from ..provider import Provider
    from ..tx.transaction import Transaction

logger = logging.getLogger(__name__)

_MISSING = object()


def named_arg(vname: str, codec: Codec, value: Any) -> NamedValue:
    """Encode `value` as argument `vname`; a prebuilt NamedValue is passed through."""
    if isinstance(value, NamedValue):
        return value
    return codec.named(vname, value)


def _decode(name: str, raw: WireValue, codec: Codec) -> Any:
    try:
        return codec.decode(raw)
    except CodecError as e:
        raise FieldDecodeError(name, dumps_wire(raw), e) from e


class BaseContract:
    def __init__(self, address: Address, provider: "Provider", *, deploy_tx: Optional["Transaction"] = None):
        self.address = Address(address)
        self.provider = provider
        self.deploy_tx = deploy_tx

    def __repr__(self) -> str:
        return f"BaseContract({self.address})"

    def connect(self, provider: "Provider") -> "BaseContract":
        """Same contract, seen through another provider (e.g. another signer)."""
        return BaseContract(self.address, provider)

    # --- transitions -----------------------------------------------------

    def transition(self, name: str, args: Optional[Sequence[NamedValue]] = None) -> TransitionCall:
        return TransitionCall(name, self.address, self.provider, args=args)

    async def call(
        self,
        transition: str,
        args: Sequence[NamedValue],
        overridden_params: Optional[TransactionParams] = None,
    ) -> "Transaction":
        return await TransitionCall(
            transition, self.address, self.provider, args=args, overridden_params=overridden_params
        ).call()

    # --- reads -----------------------------------------------------------

    async def get_state(self) -> Dict[str, Any]:
        """Raw `GetSmartContractState` JSON."""
        return await self.provider.get_smart_contract_state(self.address)

    async def get_init(self) -> List[NamedValue]:
        return await self.provider.get_smart_contract_init(self.address)

    async def get_field(self, name: str, codec: Codec) -> Any:
        state = await self.get_state()
        if name not in state:
            raise NoSuchFieldError(name, scope="state")
        return _decode(name, wire_from_json(state[name]), codec)

    async def get_init_field(self, name: str, codec: Codec) -> Any:
        for item in await self.get_init():
            if item.vname == name:
                return _decode(name, item.value, codec)
        raise NoSuchFieldError(name, scope="init")


# ---------- Snapshot records --------------------------------------------------

R = TypeVar("R", bound="_BindingRecord")


class _BindingRecord:
    # python attribute -> scilla name
    _FIELDS: ClassVar[Dict[str, str]] = {}
    # scilla name -> codec
    _CODECS: ClassVar[Dict[str, Codec]] = {}
    _SCOPE: ClassVar[str] = "state"

    def __init__(self, values: Mapping[str, WireValue]):
        self._values = dict(values)
        for attr, scilla_name in self._FIELDS.items():
            setattr(self, attr, self._values.get(scilla_name))

    def __repr__(self) -> str:
        inner = ", ".join(f"{a}={getattr(self, a)!r}" for a in self._FIELDS)
        return f"{type(self).__name__}({inner})"

    def _scilla_name(self, name: str) -> str:
        return self._FIELDS.get(name, name)

    def raw(self, name: str) -> WireValue:
        """Undecoded wire value by Scilla name or attribute name."""
        key = self._scilla_name(name)
        value = self._values.get(key, _MISSING)
        if value is _MISSING:
            raise NoSuchFieldError(key, scope=self._SCOPE)
        return value  # type: ignore[return-value]

    def decode(self, name: str) -> Any:
        key = self._scilla_name(name)
        codec = self._CODECS.get(key)
        if codec is None:
            raise NoSuchFieldError(key, scope=self._SCOPE)
        return _decode(key, self.raw(key), codec)

    def names(self) -> List[str]:
        return list(self._FIELDS.values())


class BindingState(_BindingRecord):
    _SCOPE = "state"

    @classmethod
    def from_state(cls: Type[R], state: Mapping[str, Any]) -> R:
        return cls({k: wire_from_json(v) for k, v in (state or {}).items()})


class BindingInit(_BindingRecord):
    _SCOPE = "init"

    @classmethod
    def from_init(cls: Type[R], init: Iterable[NamedValue]) -> R:
        return cls({item.vname: item.value for item in init})


# ---------- Generated class base ----------------------------------------------

B = TypeVar("B", bound="ContractBinding")


class ContractBinding:
    """
    Base of generated contract classes. Subclasses set:

    - `CONTRACT_NAME`  Scilla contract name
    - `SOURCE_PATH`    the `.scilla` file the binding was generated from
    - `_STATE_CLS` / `_INIT_CLS`  generated snapshot records
    """

    CONTRACT_NAME: ClassVar[str] = ""
    SOURCE_PATH: ClassVar[Optional[str]] = None
    _STATE_CLS: ClassVar[Type[BindingState]] = BindingState
    _INIT_CLS: ClassVar[Type[BindingInit]] = BindingInit

    def __init__(self, base: BaseContract):
        self.base = base

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address})"

    @classmethod
    def attach(cls: Type[B], address: Address, provider: "Provider") -> B:
        return cls(BaseContract(address, provider))

    @property
    def address(self) -> Address:
        return self.base.address

    def connect(self: B, provider: "Provider") -> B:
        return type(self)(self.base.connect(provider))

    @classmethod
    async def _deploy(
        cls: Type[B],
        provider: "Provider",
        init: Sequence[NamedValue],
        *,
        compressed: bool = False,
        overridden_params: Optional[TransactionParams] = None,
    ) -> B:
        from .factory import ContractFactory

        if not cls.SOURCE_PATH:
            raise ContractError("binding has no source file to deploy", contract=cls.CONTRACT_NAME or cls.__name__)
        base = await ContractFactory(provider).deploy_from_file(
            Path(cls.SOURCE_PATH), init, overridden_params, compressed=compressed
        )
        return cls(base)

    async def get_state(self) -> BindingState:
        return self._STATE_CLS.from_state(await self.base.get_state())

    async def get_init(self) -> BindingInit:
        return self._INIT_CLS.from_init(await self.base.get_init())


__all__ = ["BaseContract", "BindingState", "BindingInit", "ContractBinding", "named_arg"]
