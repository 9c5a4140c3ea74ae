"""
Typed error classes for zil-sdk.

These are raised by rpc/http, the provider, the Scilla value codec and the
contract runtime so callers can catch specific failure modes while still being
able to catch the base `ZilSdkError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional

__all__ = [
    "ZilSdkError",
    "RpcError",
    "TxError",
    "CodecError",
    "ContractParseError",
    "GenerationError",
    "NoSuchFieldError",
    "FieldDecodeError",
    "ContractError",
    "JsonRpcCode",
    "from_jsonrpc_error",
    "raise_for_jsonrpc_result",
]


class ZilSdkError(Exception):
    """Base class for all SDK errors."""


class JsonRpcCode(IntEnum):
    # JSON-RPC 2.0 standard codes
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Server errors (implementation-defined range: -32099 to -32000)
    SERVER_ERROR = -32000

    # Zilliqa node extensions
    RPC_MISC_ERROR = -1
    RPC_TYPE_ERROR = -3
    RPC_INVALID_ADDRESS_OR_KEY = -5
    RPC_VERIFY_REJECTED = -26

    # Client-side transport failure (never sent by a node)
    TRANSPORT_ERROR = -32098


@dataclass(slots=True)
class RpcError(ZilSdkError):
    """Raised when a JSON-RPC call returns an error object or the transport fails."""

    code: int
    message: str
    method: Optional[str] = None
    data: Optional[Any] = None
    request_id: Optional[Any] = None
    http_status: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        parts = [f"RPC[{self.method or '-'}] code={self.code} msg={self.message!r}"]
        if self.request_id is not None:
            parts.append(f"id={self.request_id}")
        if self.http_status is not None:
            parts.append(f"http={self.http_status}")
        if self.data is not None:
            parts.append(f"data={self.data!r}")
        return " ".join(parts)

    @property
    def code_enum(self) -> Optional[JsonRpcCode]:
        try:
            return JsonRpcCode(self.code)
        except ValueError:
            return None


@dataclass(slots=True)
class TxError(ZilSdkError):
    """
    Raised when a submitted transaction cannot be confirmed or is rejected.

    Fields:
      - tx_hash: transaction id if known (None if rejected pre-broadcast)
      - tries: number of confirmation polls made (if the error came from polling)
      - message: human-readable description
      - receipt: optional receipt body with more context
    """

    message: str
    tx_hash: Optional[str] = None
    tries: Optional[int] = None
    receipt: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        suffix = f" tx={self.tx_hash}" if self.tx_hash else ""
        tries = f" tries={self.tries}" if self.tries is not None else ""
        return f"TxError{suffix}{tries}: {self.message}"


@dataclass(slots=True)
class CodecError(ZilSdkError):
    """
    A wire value does not have the shape expected for a native type (wrong tag,
    wrong constructor, wrong arity, unparsable literal), or a native value
    cannot be encoded as the requested Scilla type.

    `value` is the offending value serialised as compact JSON text and
    `expected` the Scilla type name the codec was working with.
    """

    expected: str
    value: str
    reason: str = ""

    def __str__(self) -> str:  # pragma: no cover - trivial
        why = f" ({self.reason})" if self.reason else ""
        return f"Failed to parse scilla value {self.value} as {self.expected} type{why}"


@dataclass(slots=True)
class ContractParseError(ZilSdkError):
    """Raised when a Scilla source file cannot be read as a contract header."""

    message: str
    path: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = f"{self.path}: " if self.path else ""
        return f"ContractParseError: {where}{self.message}"


@dataclass(slots=True)
class GenerationError(ZilSdkError):
    """Raised when binding source for a parsed contract cannot be produced."""

    message: str
    contract: Optional[str] = None
    path: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = []
        if self.contract:
            where.append(f"contract={self.contract}")
        if self.path:
            where.append(f"path={self.path}")
        where_s = (" [" + ", ".join(where) + "]") if where else ""
        return f"GenerationError{where_s}: {self.message}"


@dataclass(slots=True)
class NoSuchFieldError(ZilSdkError):
    """A requested field (scope="state") or init parameter (scope="init") is absent."""

    field: str
    scope: str = "state"

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = {"init": "contract init", "state": "the contract"}.get(self.scope, self.scope)
        return f"Field {self.field} doesn't exist in {where}."


@dataclass(slots=True)
class FieldDecodeError(ZilSdkError):
    """A field was found but its wire value does not decode to the declared type."""

    field: str
    raw: str
    error: CodecError

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Failed to parse {self.field}: {self.raw} is not a valid {self.error.expected}"


@dataclass(slots=True)
class ContractError(ZilSdkError):
    """Misuse of the contract runtime (e.g. a transition call submitted twice)."""

    message: str
    contract: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = f" [{self.contract}]" if self.contract else ""
        return f"ContractError{where}: {self.message}"


def from_jsonrpc_error(
    err_obj: Dict[str, Any],
    *,
    method: Optional[str] = None,
    request_id: Optional[Any] = None,
    http_status: Optional[int] = None,
) -> RpcError:
    """
    Convert a JSON-RPC error object into RpcError.

    `err_obj` should resemble: {"code": int, "message": str, "data": any?}
    """
    code = int(err_obj.get("code", JsonRpcCode.SERVER_ERROR))
    message = str(err_obj.get("message", "Unknown JSON-RPC error"))
    return RpcError(
        code=code,
        message=message,
        method=method,
        data=err_obj.get("data"),
        request_id=request_id,
        http_status=http_status,
    )


def raise_for_jsonrpc_result(
    result: Dict[str, Any],
    *,
    method: Optional[str] = None,
    http_status: Optional[int] = None,
) -> None:
    """
    If `result` contains an "error" field, raise RpcError.

    Called by the HTTP client after parsing a JSON-RPC response.
    """
    if "error" in result and result["error"] is not None:
        raise from_jsonrpc_error(
            result["error"], method=method, request_id=result.get("id"), http_status=http_status
        )
