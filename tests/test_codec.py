import pytest

from zil_sdk.address import Address
from zil_sdk.errors import CodecError
from zil_sdk.scilla.codec import AddressCodec, ListCodec, MapCodec, RawCodec, Some, codec_for
from zil_sdk.scilla.values import AdtValue, NamedValue, wire_from_json
from zil_sdk.types.core import BNum

ADDR = "0x" + "a1" * 20


def test_type_names_are_canonical():
    assert codec_for("Option Bool").type_name() == "Option (Bool)"
    assert codec_for("Option (Bool)").type_name() == "Option (Bool)"
    assert codec_for("List (Pair ByStr20 Uint32)").type_name() == "List (Pair ByStr20 Uint32)"
    assert codec_for("Pair String Uint32").type_name() == "Pair String Uint32"
    assert codec_for("Map String (Map Uint32 Bool)").type_name() == "Map String (Map Uint32 Bool)"
    assert codec_for("Pair (Option Int32) (List String)").type_name() == "Pair (Option (Int32)) (List (String))"


def test_codecs_are_shared_per_type():
    assert codec_for("Map ByStr20 Uint128") is codec_for("Map  ByStr20   Uint128")


@pytest.mark.parametrize(
    "ty,native,wire",
    [
        ("Uint32", 123, "123"),
        ("Int256", -5, "-5"),
        ("String", "hello", "hello"),
        ("BNum", BNum(100), "100"),
        ("ByStr32", "0x" + "ff" * 32, "0x" + "ff" * 32),
    ],
)
def test_primitives_travel_as_strings(ty, native, wire):
    c = codec_for(ty)
    assert c.encode(native) == wire
    assert c.decode(wire) == native


def test_int_range_checked_both_ways():
    c = codec_for("Uint32")
    with pytest.raises(CodecError):
        c.encode(-1)
    with pytest.raises(CodecError):
        c.encode(1 << 32)
    with pytest.raises(CodecError):
        c.decode(str(1 << 32))
    with pytest.raises(CodecError):
        codec_for("Int32").decode("12.5")
    with pytest.raises(CodecError):
        codec_for("Int32").encode(True)


@pytest.mark.parametrize("text", [" 7", "7 ", "+7", "1_000", "", "-", "0x10", "٣"])
def test_int_decode_requires_plain_decimal(text):
    with pytest.raises(CodecError) as ei:
        codec_for("Int64").decode(text)
    assert ei.value.reason == "not a decimal integer"


def test_int_decode_accepts_sign_and_leading_zeros():
    assert codec_for("Int64").decode("-42") == -42
    assert codec_for("Uint32").decode("007") == 7


def test_address_is_normalised():
    c = codec_for("ByStr20")
    assert isinstance(c, AddressCodec)
    decoded = c.decode(ADDR.upper().replace("0X", "0x"))
    assert decoded == Address(ADDR)
    assert c.encode(ADDR[2:]) == ADDR
    with pytest.raises(CodecError):
        c.encode("zil1notsupported")


def test_bytestring_width_enforced():
    with pytest.raises(CodecError):
        codec_for("ByStr32").decode("0x1234")
    assert codec_for("ByStr").encode(b"\x01\x02") == "0x0102"


def test_bool_is_an_adt():
    c = codec_for("Bool")
    assert c.encode(True) == AdtValue("True")
    assert c.encode(False).to_json() == {"constructor": "False", "argtypes": [], "arguments": []}
    assert c.decode(wire_from_json({"constructor": "True", "argtypes": [], "arguments": []})) is True
    with pytest.raises(CodecError):
        c.decode("True")
    with pytest.raises(CodecError):
        c.decode(AdtValue("Maybe"))


def test_option_some_and_none():
    c = codec_for("Option (Uint32)")
    assert c.encode(None) == AdtValue("None", ["Uint32"], [])
    assert c.encode(7).to_json() == {"constructor": "Some", "argtypes": ["Uint32"], "arguments": ["7"]}
    assert c.decode(AdtValue("Some", ["Uint32"], ["7"])) == 7
    assert c.decode(AdtValue("None", ["Uint32"])) is None
    with pytest.raises(CodecError):
        c.decode(AdtValue("Some", ["Uint32"], []))


def test_nested_option_keeps_some_none():
    c = codec_for("Option (Option (Uint32))")
    some_none = AdtValue("Some", ["Option (Uint32)"], [AdtValue("None", ["Uint32"])])

    assert c.decode(some_none) == Some(None)
    assert c.encode(Some(None)) == some_none
    assert c.decode(c.encode(Some(None))) == Some(None)

    assert c.encode(None) == AdtValue("None", ["Option (Uint32)"], [])
    assert c.decode(c.encode(None)) is None

    assert c.decode(c.encode(Some(5))) == Some(5)
    # a bare value is Some(Some(value))
    assert c.encode(5) == c.encode(Some(5))


def test_triple_option_round_trips():
    c = codec_for("Option (Option (Option Bool))")
    for value in [None, Some(None), Some(Some(None)), Some(Some(True))]:
        assert c.decode(c.encode(value)) == value


def test_option_of_bool_argtypes():
    wire = codec_for("Option Bool").encode(True)
    assert wire.argtypes == ("Bool",)
    assert wire.arguments == (AdtValue("True"),)


def test_pair():
    c = codec_for("Pair String Uint32")
    wire = c.encode(("hello", 123))
    assert wire.to_json() == {
        "constructor": "Pair",
        "argtypes": ["String", "Uint32"],
        "arguments": ["hello", "123"],
    }
    assert c.decode(wire) == ("hello", 123)
    with pytest.raises(CodecError):
        c.encode(("only-one",))
    with pytest.raises(CodecError):
        c.decode(AdtValue("Pair", ["String", "Uint32"], ["x"]))


def test_list_encodes_cons_chain():
    c = codec_for("List (Uint32)")
    assert isinstance(c, ListCodec)
    wire = c.encode([1, 2])
    assert wire == AdtValue(
        "Cons",
        ["Uint32"],
        ["1", AdtValue("Cons", ["Uint32"], ["2", AdtValue("Nil", ["Uint32"])])],
    )
    assert c.encode([]) == AdtValue("Nil", ["Uint32"])


def test_list_decodes_flat_and_cons():
    c = codec_for("List (Uint32)")
    assert c.decode(["1", "2", "3"]) == [1, 2, 3]
    assert c.decode(c.encode([4, 5])) == [4, 5]
    assert c.decode([]) == []
    with pytest.raises(CodecError):
        c.decode(AdtValue("Cons", ["Uint32"], ["1"]))


def test_nested_list_of_pairs_from_state():
    c = codec_for("List (Pair ByStr20 Uint32)")
    raw = wire_from_json(
        [{"constructor": "Pair", "argtypes": ["ByStr20", "Uint32"], "arguments": [ADDR, "3"]}]
    )
    assert c.decode(raw) == [(Address(ADDR), 3)]


def test_map_keys_use_string_form():
    c = codec_for("Map ByStr20 Uint128")
    assert isinstance(c, MapCodec)
    assert c.encode({Address(ADDR): 10}) == {ADDR: "10"}
    assert c.decode({ADDR: "10"}) == {Address(ADDR): 10}
    assert codec_for("Map Uint32 String").decode({"1": "a", "2": "b"}) == {1: "a", 2: "b"}


def test_nested_map():
    c = codec_for("Map String (Map Uint32 Bool)")
    raw = wire_from_json({"a": {"1": {"constructor": "True", "argtypes": [], "arguments": []}}})
    assert c.decode(raw) == {"a": {1: True}}
    with pytest.raises(CodecError):
        c.decode("not-a-map")


def test_map_key_named_constructor_is_not_an_adt():
    raw = wire_from_json({"constructor": "5", "other": "6"})
    assert raw == {"constructor": "5", "other": "6"}
    assert codec_for("Map String Uint128").decode(raw) == {"constructor": 5, "other": 6}

    # all three ADT keys, but not the ADT shape
    raw = wire_from_json({"constructor": "1", "argtypes": "2", "arguments": "3"})
    assert codec_for("Map String Uint32").decode(raw) == {"constructor": 1, "argtypes": 2, "arguments": 3}

    # extra keys next to an ADT-looking entry
    raw = wire_from_json({"constructor": "True", "argtypes": [], "arguments": [], "x": "y"})
    assert isinstance(raw, dict)


def test_codec_error_carries_context():
    with pytest.raises(CodecError) as ei:
        codec_for("Uint32").decode("abc")
    assert ei.value.expected == "Uint32"
    assert ei.value.value == '"abc"'
    assert "Uint32" in str(ei.value)


def test_raw_fallback_for_user_adts():
    c = codec_for("Tier")
    assert isinstance(c, RawCodec)
    assert c.type_name() == "Tier"
    assert c.encode("Gold") == "Gold"
    assert c.decode(AdtValue("Gold")) == '{"constructor":"Gold","argtypes":[],"arguments":[]}'


def test_named():
    nv = codec_for("Option (Bool)").named("flag", False)
    assert isinstance(nv, NamedValue)
    assert nv.to_json() == {
        "vname": "flag",
        "type": "Option (Bool)",
        "value": {
            "constructor": "Some",
            "argtypes": ["Bool"],
            "arguments": [{"constructor": "False", "argtypes": [], "arguments": []}],
        },
    }
