"""
zil_sdk.provider
================

`Provider` wraps an `RpcClient` with the Zilliqa methods the contract layer
needs, and submits signed transactions.

    provider = Provider.from_config(SDKConfig.from_env(), signer=my_signer)
    balance = await provider.get_balance("0x...")
    tx = await provider.send_transaction(
        TransactionParams(to_addr=dest, amount=parse_zil("1"), gas_price=parse_li("2000"), gas_limit=50)
    )
    await tx.confirm()

Nonces: when `TransactionParams.nonce` is unset the provider reads the sender's
current nonce with `GetBalance` and uses `nonce + 1`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from .address import Address
from .config import SDKConfig
from .errors import JsonRpcCode, RpcError, TxError
from .rpc.http import JSON, Params, RpcClient
from .rpc.methods import RPCMethod
from .scilla.values import NamedValue
from .signers import Signer
from .tx.transaction import Transaction, TransactionResponse
from .types.core import CreateTransactionRequest, TransactionParams, pack_version

logger = logging.getLogger(__name__)

AddressLike = Union[str, bytes, Address]


@dataclass(frozen=True)
class Balance:
    balance: int
    nonce: int


def _bare(address: AddressLike) -> str:
    return Address(address).bare


class Provider:
    """Typed access to a Zilliqa node, optionally bound to a default signer."""

    def __init__(
        self,
        rpc: RpcClient,
        chain_id: int,
        msg_version: int = 1,
        signer: Optional[Signer] = None,
        config: Optional[SDKConfig] = None,
    ):
        self.rpc = rpc
        self.chain_id = int(chain_id)
        self.msg_version = int(msg_version)
        self.signer = signer
        self.config = config

    def __repr__(self) -> str:
        return f"Provider(url={self.rpc.url!r}, chain_id={self.chain_id}, signer={self.signer is not None})"

    @classmethod
    def from_config(cls, config: Optional[SDKConfig] = None, *, signer: Optional[Signer] = None, **rpc_kwargs: Any) -> "Provider":
        config = config or SDKConfig.from_env()
        rpc = RpcClient.from_config(config, **rpc_kwargs)
        return cls(rpc, config.chain_id, config.msg_version, signer=signer, config=config)

    def with_signer(self, signer: Optional[Signer]) -> "Provider":
        """Same connection, different default signer."""
        return Provider(self.rpc, self.chain_id, self.msg_version, signer=signer, config=self.config)

    @property
    def version(self) -> int:
        return pack_version(self.chain_id, self.msg_version)

    async def aclose(self) -> None:
        await self.rpc.aclose()

    async def __aenter__(self) -> "Provider":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    # --- raw access ------------------------------------------------------

    async def request(self, method: Union[RPCMethod, str], params: Params = None) -> JSON:
        name = method.value if isinstance(method, RPCMethod) else str(method)
        return await self.rpc.request(name, params)

    # --- network / accounts ----------------------------------------------

    async def get_network_id(self) -> str:
        return str(await self.request(RPCMethod.GetNetworkId))

    async def get_minimum_gas_price(self) -> int:
        return int(str(await self.request(RPCMethod.GetMinimumGasPrice)))

    async def get_balance(self, address: AddressLike) -> Balance:
        """Balance in Qa and current nonce; unknown accounts read as zero."""
        try:
            res = await self.request(RPCMethod.GetBalance, [_bare(address)])
        except RpcError as e:
            if e.code == JsonRpcCode.RPC_INVALID_ADDRESS_OR_KEY:
                return Balance(balance=0, nonce=0)
            raise
        assert isinstance(res, dict)
        return Balance(balance=int(res.get("balance", 0)), nonce=int(res.get("nonce", 0)))

    # --- transactions ----------------------------------------------------

    async def create_transaction(self, request: CreateTransactionRequest) -> Dict[str, Any]:
        if request.version <= 0xFFFF or (request.version & 0xFFFF) == 0:
            raise TxError(f"invalid transaction version {request.version:#x}")
        res = await self.request(RPCMethod.CreateTransaction, [request.to_rpc()])
        if not isinstance(res, dict) or "TranID" not in res:
            raise TxError(f"unexpected CreateTransaction result: {res!r}")
        return res

    async def get_transaction(self, tx_hash: str) -> TransactionResponse:
        res = await self.request(RPCMethod.GetTransaction, [tx_hash])
        if not isinstance(res, dict):
            raise TxError(f"unexpected GetTransaction result: {res!r}", tx_hash=tx_hash)
        return TransactionResponse.from_json(res)

    async def send_transaction(self, params: TransactionParams) -> Transaction:
        """
        Fill nonce/version/public key, sign with `params.signer` (or the
        provider's default signer) and submit. Returns the pending Transaction.
        """
        signer = params.signer or self.signer
        if signer is None:
            raise TxError("no signer specified for transaction")
        if params.to_addr is None:
            raise TxError("transaction has no recipient")
        if params.gas_price is None or params.gas_limit is None:
            raise TxError("gas_price and gas_limit must be set")

        nonce = params.nonce
        if nonce is None:
            nonce = (await self.get_balance(signer.address)).nonce + 1

        request = CreateTransactionRequest(
            version=self.version,
            nonce=int(nonce),
            to_addr=Address(params.to_addr),
            amount=int(params.amount or 0),
            gas_price=int(params.gas_price),
            gas_limit=int(params.gas_limit),
            pub_key=signer.public_key,
            code=params.code,
            data=params.data,
        )
        request = request.with_signature(signer.sign(request))
        res = await self.create_transaction(request)
        logger.info("submitted tx %s nonce=%d to=%s", res["TranID"], request.nonce, request.to_addr)

        contract_address = res.get("ContractAddress")
        return Transaction(
            str(res["TranID"]),
            self,
            info=res.get("Info"),
            contract_address=Address(contract_address) if contract_address else None,
        )

    async def deploy_contract(self, params: TransactionParams) -> Transaction:
        """Submit a deployment (code + init data) to the nil address."""
        if not params.code:
            raise TxError("deployment has no contract code")
        return await self.send_transaction(
            params.merged(TransactionParams(to_addr=Address.nil(), amount=params.amount or 0))
        )

    # --- contracts -------------------------------------------------------

    async def get_smart_contract_state(self, address: AddressLike) -> Dict[str, Any]:
        res = await self.request(RPCMethod.GetSmartContractState, [_bare(address)])
        return res if isinstance(res, dict) else {}

    async def get_smart_contract_sub_state(
        self, address: AddressLike, field: str, indices: Sequence[str] = ()
    ) -> Optional[Dict[str, Any]]:
        res = await self.request(
            RPCMethod.GetSmartContractSubState, [_bare(address), field, [str(i) for i in indices]]
        )
        return res if isinstance(res, dict) else None

    async def get_smart_contract_init(self, address: AddressLike) -> List[NamedValue]:
        res = await self.request(RPCMethod.GetSmartContractInit, [_bare(address)])
        return NamedValue.many_from_json(res or [])  # type: ignore[arg-type]

    async def get_smart_contract_code(self, address: AddressLike) -> str:
        res = await self.request(RPCMethod.GetSmartContractCode, [_bare(address)])
        return str(res.get("code", "")) if isinstance(res, dict) else ""

    async def get_contract_address_from_transaction_id(self, tx_hash: str) -> Address:
        res = await self.request(RPCMethod.GetContractAddressFromTransactionID, [tx_hash])
        return Address(str(res))


__all__ = ["Provider", "Balance"]
