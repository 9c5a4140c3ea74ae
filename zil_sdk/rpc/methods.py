"""
Zilliqa JSON-RPC method names used by the SDK.
"""

from __future__ import annotations

from enum import Enum


class RPCMethod(str, Enum):
    # Network
    GetNetworkId = "GetNetworkId"
    GetMinimumGasPrice = "GetMinimumGasPrice"
    GetNumTxBlocks = "GetNumTxBlocks"

    # Transactions
    CreateTransaction = "CreateTransaction"
    GetTransaction = "GetTransaction"
    GetPendingTxn = "GetPendingTxn"

    # Contracts
    GetSmartContractState = "GetSmartContractState"
    GetSmartContractSubState = "GetSmartContractSubState"
    GetSmartContractInit = "GetSmartContractInit"
    GetSmartContractCode = "GetSmartContractCode"
    GetContractAddressFromTransactionID = "GetContractAddressFromTransactionID"

    # Accounts
    GetBalance = "GetBalance"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value


__all__ = ["RPCMethod"]
