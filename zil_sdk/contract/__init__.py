"""
zil_sdk.contract
================

Contract runtime: deployment, transition calls and typed bindings.

Submodules
----------
- base            : BaseContract, binding base classes and snapshot records
- transition_call : single-use TransitionCall builder
- factory         : ContractFactory and compress_contract

Generated bindings
------------------
Bindings for every `*.scilla` file under `ZIL_CONTRACTS_PATH` (or
`CONTRACTS_PATH`) are generated on first access and exposed as attributes of
this package:

    from zil_sdk import contract
    hello = await contract.HelloWorld.deploy(provider, owner=my_address)
    await hello.set_hello("hi").call()
    print(await hello.welcome_msg())

Use `zil_sdk.scilla.generator.load_bindings(path)` to load from an explicit
directory instead.
"""

from __future__ import annotations

from typing import Any

from .base import BaseContract, BindingInit, BindingState, ContractBinding
from .factory import ContractFactory, compress_contract
from .transition_call import DEFAULT_GAS_LIMIT, DEFAULT_GAS_PRICE, TransitionCall

__all__ = [
    "BaseContract",
    "BindingInit",
    "BindingState",
    "ContractBinding",
    "ContractFactory",
    "TransitionCall",
    "compress_contract",
    "DEFAULT_GAS_LIMIT",
    "DEFAULT_GAS_PRICE",
]


def __getattr__(name: str) -> Any:
    # generated bindings are looked up lazily; dunder/private lookups never trigger generation
    if name.startswith("_"):
        raise AttributeError(name)
    from ..config import SDKConfig
    from ..scilla.generator import load_bindings

    module = load_bindings(SDKConfig.from_env().contracts_path)
    try:
        return getattr(module, name)
    except AttributeError:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}") from None
