import pytest

from zil_sdk.errors import ContractParseError
from zil_sdk.scilla.parser import parse_contract, parse_contract_file, strip_comments

from .conftest import BROKEN_DIR, CONTRACTS_DIR


def test_hello_world_header():
    c = parse_contract_file(CONTRACTS_DIR / "HelloWorld.scilla")
    assert c.name == "HelloWorld"
    assert [(p.name, p.type_text) for p in c.init_params] == [("owner", "ByStr20")]
    assert [(f.name, f.type_text) for f in c.fields] == [("welcome_msg", "String")]
    assert [t.name for t in c.transitions] == ["setHello", "getHello"]
    assert [(p.name, p.type_text) for p in c.transitions[0].params] == [("msg", "String")]
    assert c.transitions[1].params == ()
    assert c.path == CONTRACTS_DIR / "HelloWorld.scilla"


def test_registry_header():
    c = parse_contract_file(CONTRACTS_DIR / "Registry.scilla")
    assert c.name == "Registry"
    assert [p.name for p in c.init_params] == ["admin", "label", "token", "start_block"]
    assert c.init_params[2].type.is_address
    assert c.init_params[3].type_text == "BNum"

    fields = {f.name: f.type_text for f in c.fields}
    assert fields == {
        "balances": "Map ByStr20 Uint128",
        "paused": "Bool",
        "pending_admin": "Option (ByStr20)",
        "members": "List (Pair ByStr20 Uint32)",
        "nested": "Map String (Map Uint32 Bool)",
        "tier": "Tier",
        "last_note": "String",
        "hash": "ByStr32",
    }

    # procedures and commented-out / quoted transitions are not reported
    names = [t.name for t in c.transitions]
    assert names == ["SetPaused", "AddMember", "SetTier", "Transfer", "set_paused"]

    transfer = c.transitions[3]
    assert [p.name for p in transfer.params] == ["to", "amount", "tags"]
    assert transfer.params[0].type.is_address
    assert transfer.params[2].type_text == "List (String)"


def test_strip_comments_nested_and_offsets():
    src = 'a (* x (* y *) z *) b "s (* t" c'
    out = strip_comments(src)
    assert len(out) == len(src)
    assert out.split() == ["a", "b", '"', '"', "c"]


def test_unterminated_comment():
    with pytest.raises(ContractParseError):
        strip_comments("contract X () (* oops")


def test_no_contract():
    with pytest.raises(ContractParseError) as ei:
        parse_contract("library Foo\nlet x = Uint32 0\n", path="Foo.scilla")
    assert ei.value.path == "Foo.scilla"


def test_malformed_contract_reports_path():
    with pytest.raises(ContractParseError) as ei:
        parse_contract_file(BROKEN_DIR / "Broken.scilla")
    assert ei.value.path.endswith("Broken.scilla")


def test_missing_file():
    with pytest.raises(ContractParseError):
        parse_contract_file(BROKEN_DIR / "Nope.scilla")


def test_to_dict():
    c = parse_contract("contract C (a : Uint32)\ntransition T (b : Option Bool)\nend\n")
    assert c.to_dict() == {
        "name": "C",
        "path": None,
        "init_params": [{"name": "a", "type": "Uint32"}],
        "fields": [],
        "transitions": [{"name": "T", "params": [{"name": "b", "type": "Option (Bool)"}]}],
    }
