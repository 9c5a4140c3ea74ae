"""
Shared pytest fixtures:
- An in-memory Zilliqa node served through httpx.MockTransport
- A recording signer (no cryptography)
- A Provider wired to both, with instant confirmation polling
- Paths to the sample contracts under tests/contracts
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest

from zil_sdk.address import Address
from zil_sdk.config import SDKConfig
from zil_sdk.provider import Provider
from zil_sdk.scilla.generator import clear_bindings_cache
from zil_sdk.types.core import CreateTransactionRequest

HERE = Path(__file__).parent
CONTRACTS_DIR = HERE / "contracts"
BROKEN_DIR = HERE / "broken"

SENDER = Address("0x" + "11" * 20)
DEPLOYED = Address("0x" + "ab" * 20)


class FakeSigner:
    """Implements the Signer protocol; remembers every request it signed."""

    def __init__(self, address: Address = SENDER, public_key: str = "02" + "33" * 32) -> None:
        self._address = Address(address)
        self._public_key = public_key
        self.signed: List[CreateTransactionRequest] = []

    @property
    def address(self) -> Address:
        return self._address

    @property
    def public_key(self) -> str:
        return self._public_key

    def sign(self, request: CreateTransactionRequest) -> str:
        self.signed.append(request)
        return "ee" * 64


class FakeNode:
    """
    Minimal JSON-RPC stub of a Zilliqa node.

    - `state` / `init` are served for every contract address
    - `pending_polls` GetTransaction lookups fail before the tx is "mined"
    - `fail_receipts` makes every receipt report success = False
    """

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.nonces: Dict[str, int] = {SENDER.bare: 4}
        self.balance = "5000000000000"
        self.state: Dict[str, Any] = {}
        self.init: List[Dict[str, Any]] = []
        self.txs: Dict[str, Dict[str, Any]] = {}
        self.pending_polls = 0
        self.fail_receipts = False
        self.event_logs: List[Dict[str, Any]] = []
        self.report_contract_address = True

    # -- httpx.MockTransport handler --

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if isinstance(body, list):
            return httpx.Response(200, json=[self._dispatch(item) for item in body])
        return httpx.Response(200, json=self._dispatch(body))

    def _dispatch(self, req: Dict[str, Any]) -> Dict[str, Any]:
        method, params = req["method"], req.get("params") or []
        self.calls.append((method, params))
        try:
            result = getattr(self, f"rpc_{method}")(*params)
        except _NodeError as e:
            return {"jsonrpc": "2.0", "id": req["id"], "error": {"code": e.code, "message": e.message}}
        return {"jsonrpc": "2.0", "id": req["id"], "result": result}

    def methods(self) -> List[str]:
        return [m for m, _ in self.calls]

    def last(self, method: str) -> List[Any]:
        for m, p in reversed(self.calls):
            if m == method:
                return p
        raise AssertionError(f"{method} was never called")

    # -- RPC methods --

    def rpc_GetNetworkId(self) -> str:
        return "222"

    def rpc_GetMinimumGasPrice(self) -> str:
        return "2000000000"

    def rpc_GetBalance(self, address: str) -> Dict[str, Any]:
        if address not in self.nonces:
            raise _NodeError(-5, "Account is not created")
        return {"balance": self.balance, "nonce": self.nonces[address]}

    def rpc_CreateTransaction(self, tx: Dict[str, Any]) -> Dict[str, Any]:
        tx_id = f"{len(self.txs) + 1:064x}"
        self.txs[tx_id] = tx
        out: Dict[str, Any] = {"TranID": tx_id, "Info": "Non-contract txn, sent to shard"}
        if tx.get("code") and self.report_contract_address:
            out["Info"] = "Contract Creation txn, sent to shard"
            out["ContractAddress"] = DEPLOYED.bare
        return out

    def rpc_GetTransaction(self, tx_id: str) -> Dict[str, Any]:
        if self.pending_polls > 0:
            self.pending_polls -= 1
            raise _NodeError(-20, "Txn Hash not Present")
        tx = self.txs[tx_id]
        return {
            "ID": tx_id,
            "version": str(tx["version"]),
            "nonce": str(tx["nonce"]),
            "toAddr": tx["toAddr"].lower(),
            "amount": tx["amount"],
            "gasPrice": tx["gasPrice"],
            "gasLimit": tx["gasLimit"],
            "senderPubKey": "0x" + tx["pubKey"],
            "signature": "0x" + tx["signature"],
            "receipt": {
                "success": not self.fail_receipts,
                "cumulative_gas": "381",
                "epoch_num": "586524",
                "event_logs": self.event_logs,
                "exceptions": [{"line": 12, "message": "Exception thrown"}] if self.fail_receipts else [],
            },
        }

    def rpc_GetContractAddressFromTransactionID(self, tx_id: str) -> str:
        return DEPLOYED.bare

    def rpc_GetSmartContractState(self, address: str) -> Dict[str, Any]:
        return self.state

    def rpc_GetSmartContractInit(self, address: str) -> List[Dict[str, Any]]:
        return self.init


class _NodeError(Exception):
    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message


@pytest.fixture
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def config() -> SDKConfig:
    return SDKConfig(rpc_url="http://zil.test", chain_id=222, confirm_tries=3, confirm_interval=0.0)


@pytest.fixture
def provider(node: FakeNode, signer: FakeSigner, config: SDKConfig) -> Provider:
    return Provider.from_config(config, signer=signer, transport=httpx.MockTransport(node.handle))


@pytest.fixture(autouse=True)
def _fresh_bindings():
    clear_bindings_cache()
    yield
    clear_bindings_cache()
