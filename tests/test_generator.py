import json
import logging
import shutil

import pytest

from zil_sdk.contract.base import ContractBinding
from zil_sdk.scilla.generator import (
    _py_ident,
    discover_contracts,
    emit_contract_binding,
    generate_bindings,
    load_bindings,
    write_bindings,
)
from zil_sdk.scilla.parser import parse_contract

from .conftest import BROKEN_DIR, CONTRACTS_DIR


@pytest.mark.parametrize(
    "name,expected",
    [
        ("setHello", "set_hello"),
        ("SetPaused", "set_paused"),
        ("welcome_msg", "welcome_msg"),
        ("ProxyTransferFrom", "proxy_transfer_from"),
        ("class", "class_"),
        ("1st", "_1st"),
    ],
)
def test_py_ident(name, expected):
    assert _py_ident(name) == expected


def test_discover_contracts_sorted(tmp_path):
    assert discover_contracts(None) == []
    assert discover_contracts(tmp_path / "missing") == []
    assert [p.name for p in discover_contracts(CONTRACTS_DIR)] == ["HelloWorld.scilla", "Registry.scilla"]


def test_generated_source_shape():
    src = generate_bindings(CONTRACTS_DIR)
    compile(src, "<bindings>", "exec")
    assert "class HelloWorld(ContractBinding):" in src
    assert "class HelloWorldState(BindingState):" in src
    assert "class HelloWorldInit(BindingInit):" in src
    assert "def set_hello(self, msg: str) -> TransitionCall:" in src
    assert "async def welcome_msg(self) -> str:" in src
    assert "async def owner(self) -> Address:" in src
    assert "async def pending_admin(self) -> Optional[Address]:" in src
    assert "async def members(self) -> List[Tuple[Address, int]]:" in src
    # raw fallback for the user ADT
    assert "async def tier(self) -> str:" in src
    # two transitions that both snake-case to set_paused
    assert "def set_paused(self, value: bool)" in src
    assert "def set_paused_1(self, value: bool)" in src
    assert "__all__ = ['HelloWorld', 'HelloWorldState', 'HelloWorldInit', 'Registry', 'RegistryState', 'RegistryInit']" in src


def test_reserved_and_keyword_names_are_renamed():
    contract = parse_contract(
        """
        contract Clashy (provider : ByStr20, compressed : Bool)
        field get_state : Uint32 = Uint32 0
        transition deploy (class : String, self : Uint32)
        end
        transition Deploy ()
        end
        """
    )
    src = emit_contract_binding(contract)
    assert "def deploy_1(self, class_: str, self_1: int) -> TransitionCall:" in src
    assert "def deploy_2(self) -> TransitionCall:" in src
    assert "async def get_state_1(self) -> int:" in src
    assert "provider_1: Address," in src
    assert "compressed_1: bool," in src
    assert "named_arg('provider', codec_for('ByStr20'), provider_1)" in src


def test_params_do_not_shadow_helpers_used_in_bodies():
    contract = parse_contract(
        """
        contract Helpers (named_arg : String)
        transition Store (codec_for : Uint32, named_arg : Bool)
        end
        """
    )
    src = emit_contract_binding(contract)
    assert "def store(self, codec_for_1: int, named_arg_1: bool) -> TransitionCall:" in src
    assert "named_arg('codec_for', codec_for('Uint32'), codec_for_1)" in src
    assert "named_arg('named_arg', codec_for('Bool'), named_arg_1)" in src
    assert "named_arg_1: str," in src
    assert "named_arg('named_arg', codec_for('String'), named_arg_1)," in src


@pytest.mark.asyncio
async def test_helper_named_params_still_encode(tmp_path, provider, node):
    (tmp_path / "Helpers.scilla").write_text(
        "scilla_version 0\n"
        "contract Helpers (named_arg : String)\n"
        "transition Store (codec_for : Uint32, named_arg : Bool)\nend\n",
        encoding="utf-8",
    )
    helpers = await load_bindings(tmp_path).Helpers.deploy(provider, "x")
    call = helpers.store(3, True)
    assert [a.to_json()["value"] for a in call.arguments] == [
        "3",
        {"constructor": "True", "argtypes": [], "arguments": []},
    ]
    init = json.loads(node.last("CreateTransaction")[0]["data"])
    assert init[1] == {"vname": "named_arg", "type": "String", "value": "x"}


def test_bad_contract_is_skipped(tmp_path, caplog):
    shutil.copy(CONTRACTS_DIR / "HelloWorld.scilla", tmp_path)
    shutil.copy(BROKEN_DIR / "Broken.scilla", tmp_path)
    with caplog.at_level(logging.WARNING, logger="zil_sdk.scilla.generator"):
        module = load_bindings(tmp_path)
    assert hasattr(module, "HelloWorld")
    assert not hasattr(module, "Broken")
    assert "Failed to parse" in caplog.text
    assert "Broken.scilla" in caplog.text


def test_duplicate_contract_names(tmp_path):
    shutil.copy(CONTRACTS_DIR / "HelloWorld.scilla", tmp_path / "a.scilla")
    shutil.copy(CONTRACTS_DIR / "HelloWorld.scilla", tmp_path / "b.scilla")
    module = load_bindings(tmp_path)
    assert module.HelloWorld.SOURCE_PATH.endswith("a.scilla")
    assert module.HelloWorld_1.SOURCE_PATH.endswith("b.scilla")
    assert module.HelloWorld_1.CONTRACT_NAME == "HelloWorld"


def test_empty_or_missing_directory(tmp_path):
    module = load_bindings(tmp_path / "nothing-here")
    assert module.__all__ == []


def test_load_bindings_is_cached_per_path():
    a = load_bindings(CONTRACTS_DIR)
    b = load_bindings(str(CONTRACTS_DIR / ".." / "contracts"))
    assert a is b
    assert issubclass(a.Registry, ContractBinding)
    assert a.Registry._STATE_CLS is a.RegistryState
    assert a.Registry.CONTRACT_NAME == "Registry"


def test_write_bindings(tmp_path):
    out = write_bindings(CONTRACTS_DIR, tmp_path / "pkg" / "bindings.py")
    text = out.read_text(encoding="utf-8")
    assert text.startswith('"""\nGenerated contract bindings for')
    assert "class Registry(ContractBinding):" in text


def test_contracts_package_resolves_from_environment(monkeypatch):
    from zil_sdk import contract

    monkeypatch.setenv("ZIL_CONTRACTS_PATH", str(CONTRACTS_DIR))
    assert contract.HelloWorld.CONTRACT_NAME == "HelloWorld"
    with pytest.raises(AttributeError):
        contract.NotAContract  # noqa: B018
