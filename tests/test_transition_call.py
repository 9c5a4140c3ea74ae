import json

import pytest

from zil_sdk.address import Address
from zil_sdk.contract import DEFAULT_GAS_LIMIT, DEFAULT_GAS_PRICE, BaseContract, TransitionCall, compress_contract
from zil_sdk.errors import ContractError
from zil_sdk.scilla.codec import codec_for
from zil_sdk.types.core import TransactionParams

from .conftest import DEPLOYED


def test_defaults():
    assert DEFAULT_GAS_PRICE == 2_000_000_000
    assert DEFAULT_GAS_LIMIT == 10_000


def test_tx_params_defaults_and_forced_recipient(provider):
    other = Address("0x" + "99" * 20)
    call = TransitionCall(
        "Mint",
        DEPLOYED,
        provider,
        args=[codec_for("Uint128").named("amount", 5)],
        overridden_params=TransactionParams(to_addr=other, gas_limit=20_000),
    )
    params = call.tx_params()
    assert params.to_addr == DEPLOYED
    assert params.gas_price == DEFAULT_GAS_PRICE
    assert params.gas_limit == 20_000
    assert params.amount == 0
    assert params.nonce is None
    assert json.loads(params.data) == {
        "_tag": "Mint",
        "params": [{"vname": "amount", "type": "Uint128", "value": "5"}],
    }


def test_overridden_params_are_not_mutated(provider):
    shared = TransactionParams(gas_limit=1)
    TransitionCall("A", DEPLOYED, provider, overridden_params=shared).nonce(3).gas_price(10)
    assert shared.nonce is None
    assert shared.gas_price is None


def test_chained_setters(provider, signer):
    call = (
        BaseContract(DEPLOYED, provider)
        .transition("A")
        .nonce(3)
        .amount(4)
        .gas_price(5)
        .gas_limit(6)
        .signer(signer)
    )
    params = call.tx_params()
    assert (params.nonce, params.amount, params.gas_price, params.gas_limit) == (3, 4, 5, 6)
    assert params.signer is signer
    assert call.payload() == {"_tag": "A", "params": []}


@pytest.mark.asyncio
async def test_call_is_single_use(provider, node):
    call = BaseContract(DEPLOYED, provider).transition("A")
    tx = await call.call()
    assert tx.success
    with pytest.raises(ContractError):
        await call.call()
    assert node.methods().count("CreateTransaction") == 1


@pytest.mark.asyncio
async def test_base_contract_untyped_reads(provider, node):
    node.state = {"count": "12"}
    base = BaseContract(DEPLOYED, provider)
    assert await base.get_field("count", codec_for("Uint32")) == 12
    assert node.last("GetSmartContractState") == [DEPLOYED.bare]


@pytest.mark.parametrize(
    "code,expected",
    [
        (
            "(***************************************************)\n"
            "(*             The contract definition             *)\n"
            "(***************************************************)\n"
            "contract HelloWorld\n"
            "(owner: ByStr20)",
            "contract HelloWorld\n(owner: ByStr20)",
        ),
        (
            "(*something*)contract HelloWorld\n(owner: ByStr20)",
            "contract HelloWorld\n(owner: ByStr20)",
        ),
        (
            "contract HelloWorld (* a dummy comment*)\n(owner: ByStr20)",
            "contract HelloWorld\n(owner: ByStr20)",
        ),
        (
            "contract WithComment          (*contract name*)\n"
            "()\n"
            "(*fields*)\n"
            'field welcome_msg : String = "" (*welcome*) (*another comment*)  ',
            'contract WithComment\n()\nfield welcome_msg : String = ""',
        ),
    ],
)
def test_compress_contract(code, expected):
    assert compress_contract(code) == expected
