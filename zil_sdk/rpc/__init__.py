"""
zil_sdk.rpc
-----------

JSON-RPC transport.

This package exposes:
- RpcClient: async HTTP JSON-RPC client (see .http)
- RPCMethod: the Zilliqa method names the SDK calls (see .methods)

    from zil_sdk.rpc import RpcClient, RPCMethod
    rpc = RpcClient(url="https://dev-api.zilliqa.com")
    state = await rpc.request(RPCMethod.GetSmartContractState, ["0x..."])
"""

from __future__ import annotations

from .http import RpcClient
from .methods import RPCMethod

__all__ = ["RpcClient", "RPCMethod"]
