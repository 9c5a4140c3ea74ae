import logging

import pytest

from zil_sdk.scilla.typemap import map_type
from zil_sdk.scilla.types import parse_type


@pytest.mark.parametrize(
    "text,kind",
    [
        ("Uint128", "uint"),
        ("Int32", "int"),
        ("String", "string"),
        ("BNum", "bnum"),
        ("Bool", "bool"),
        ("ByStr", "bystr"),
        ("ByStr33", "bystr"),
        ("Option (Bool)", "option"),
        ("List String", "list"),
        ("Pair ByStr20 Uint32", "pair"),
        ("Map ByStr20 (Map ByStr20 Uint128)", "map"),
    ],
)
def test_parse_supported(text, kind):
    assert parse_type(text).kind == kind


@pytest.mark.parametrize(
    "text",
    [
        "Tier",
        "Uint7",
        "Option",
        "Map (List Uint32) String",
        "List (Option 'A)",
        "Uint32 -> Uint32",
        "(Bool",
        "",
    ],
)
def test_parse_unsupported_degrades_and_never_raises(text):
    t = parse_type(text)
    assert map_type(t).degraded


def test_parse_refined_address():
    t = parse_type("ByStr20 with contract field balances : Map ByStr20 Uint128 end")
    assert t.is_address
    assert t.type_name().startswith("ByStr20 with contract")
    assert parse_type("ByStr20 with end").is_address


def test_type_name_round_trips():
    for text in ["Option (Bool)", "List (Pair ByStr20 Uint32)", "Map String (Map Uint32 Bool)"]:
        assert parse_type(parse_type(text).type_name()).type_name() == text


def test_map_type_hints():
    assert map_type("Uint256").hint == "int"
    assert map_type("ByStr20").hint == "Address"
    assert map_type("ByStr32").hint == "str"
    assert map_type("BNum").hint == "BNum"
    assert map_type("Option (Bool)").hint == "Optional[bool]"
    assert map_type("Option (Option (Uint32))").hint == "Optional[Some[Optional[int]]]"
    assert map_type("Pair String Uint32").hint == "Tuple[str, int]"
    assert map_type("List (Pair ByStr20 Uint32)").hint == "List[Tuple[Address, int]]"
    assert map_type("Map ByStr20 Uint128").hint == "Dict[Address, int]"


def test_map_type_raw_fallback_logs_and_flags(caplog):
    with caplog.at_level(logging.WARNING, logger="zil_sdk.scilla.typemap"):
        nt = map_type("Tier")
    assert nt.is_raw and nt.degraded
    assert nt.hint == "str"
    assert "Failed to map 'Tier'" in caplog.text

    nested = map_type("Map String Tier")
    assert nested.kind == "map"
    assert not nested.is_raw
    assert nested.degraded
    assert nested.hint == "Dict[str, str]"
