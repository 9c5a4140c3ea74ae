"""
Zilliqa SDK for Python
Convenience exports for the most common client APIs.
"""

from .version import __version__  # noqa: F401

# Core config & errors
from .config import SDKConfig  # noqa: F401
from .errors import (  # noqa: F401
    CodecError,
    ContractError,
    ContractParseError,
    FieldDecodeError,
    GenerationError,
    NoSuchFieldError,
    RpcError,
    TxError,
    ZilSdkError,
)

# RPC & provider
from .rpc import RpcClient, RPCMethod  # noqa: F401
from .provider import Balance, Provider  # noqa: F401
from .signers import Signer  # noqa: F401

# Types
from .address import Address  # noqa: F401
from .types import (  # noqa: F401
    BNum,
    CreateTransactionRequest,
    TransactionParams,
    parse_li,
    parse_zil,
    to_zil,
)

# Transactions
from .tx import Transaction, TransactionReceipt  # noqa: F401

# Scilla bridge
from .scilla import (  # noqa: F401
    AdtValue,
    NamedValue,
    ScillaVariable,
    codec_for,
    generate_bindings,
    load_bindings,
    map_type,
    parse_contract_file,
)

# Contracts
from .contract import (  # noqa: F401
    BaseContract,
    ContractFactory,
    TransitionCall,
    compress_contract,
)

__all__ = [
    "__version__",
    # Core
    "SDKConfig",
    "ZilSdkError", "RpcError", "TxError", "CodecError", "ContractParseError",
    "GenerationError", "NoSuchFieldError", "FieldDecodeError", "ContractError",
    # RPC
    "RpcClient", "RPCMethod", "Provider", "Balance", "Signer",
    # Types
    "Address", "BNum", "CreateTransactionRequest", "TransactionParams",
    "parse_li", "parse_zil", "to_zil",
    # Tx
    "Transaction", "TransactionReceipt",
    # Scilla
    "AdtValue", "NamedValue", "ScillaVariable", "codec_for", "generate_bindings",
    "load_bindings", "map_type", "parse_contract_file",
    # Contracts
    "BaseContract", "ContractFactory", "TransitionCall", "compress_contract",
]
