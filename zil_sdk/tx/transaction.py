"""
zil_sdk.tx.transaction
======================

Submitted transactions and their receipts.

- `Transaction`: a transaction id plus the provider used to poll it.
  `await tx.confirm()` polls `GetTransaction` until the node knows the
  transaction, then records whether the receipt reports success.
- `TransactionResponse`: the `GetTransaction` body.
- `TransactionReceipt`: receipt with event logs, exceptions and the chain of
  transition messages; `event_log(name)` finds an event by `_eventname`.
- `EventLogEntry.param(name, codec)` decodes one event parameter.

Receipt failures (`success == False`) are *not* raised: the confirmed
transaction is returned with `status == TxStatus.REJECTED` so callers can
inspect `receipt.exceptions`.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from ..address import Address
from ..errors import NoSuchFieldError, RpcError, TxError
from ..scilla.values import NamedValue

if TYPE_CHECKING:  # pragma: no cover
    from ..provider import Provider
    from ..scilla.codec import Codec

logger = logging.getLogger(__name__)

DEFAULT_CONFIRM_TRIES = 33
DEFAULT_CONFIRM_INTERVAL = 10.0


class TxStatus(str, Enum):
    INITIALIZED = "initialized"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


def _params(items: Any) -> List[NamedValue]:
    return NamedValue.many_from_json(items or [])


@dataclass(frozen=True)
class EventLogEntry:
    address: str
    name: str
    params: List[NamedValue] = field(default_factory=list)

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "EventLogEntry":
        return cls(
            address=str(obj.get("address", "")),
            name=str(obj.get("_eventname", "")),
            params=_params(obj.get("params")),
        )

    def raw_param(self, name: str) -> NamedValue:
        for p in self.params:
            if p.vname == name:
                return p
        raise NoSuchFieldError(name, scope=f"event {self.name}")

    def param(self, name: str, codec: "Codec") -> Any:
        """Decode event parameter `name` with `codec`; CodecError propagates."""
        return codec.decode(self.raw_param(name).value)


@dataclass(frozen=True)
class ExceptionEntry:
    line: int
    message: str

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "ExceptionEntry":
        return cls(line=int(obj.get("line", 0)), message=str(obj.get("message", "")))


@dataclass(frozen=True)
class TransitionMsg:
    tag: str
    amount: str
    recipient: str
    params: List[NamedValue] = field(default_factory=list)

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "TransitionMsg":
        return cls(
            tag=str(obj.get("_tag", "")),
            amount=str(obj.get("_amount", "0")),
            recipient=str(obj.get("_recipient", "")),
            params=_params(obj.get("params")),
        )


@dataclass(frozen=True)
class TransitionEntry:
    accepted: bool
    addr: str
    depth: int
    msg: TransitionMsg

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "TransitionEntry":
        return cls(
            accepted=bool(obj.get("accepted", False)),
            addr=str(obj.get("addr", "")),
            depth=int(obj.get("depth", 0)),
            msg=TransitionMsg.from_json(obj.get("msg") or {}),
        )


@dataclass(frozen=True)
class TransactionReceipt:
    success: bool
    cumulative_gas: str = "0"
    epoch_num: str = "0"
    accepted: Optional[bool] = None
    event_logs: List[EventLogEntry] = field(default_factory=list)
    exceptions: List[ExceptionEntry] = field(default_factory=list)
    transitions: List[TransitionEntry] = field(default_factory=list)
    errors: Any = None

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "TransactionReceipt":
        return cls(
            success=bool(obj.get("success", False)),
            cumulative_gas=str(obj.get("cumulative_gas", "0")),
            epoch_num=str(obj.get("epoch_num", "0")),
            accepted=obj.get("accepted"),
            event_logs=[EventLogEntry.from_json(e) for e in obj.get("event_logs") or []],
            exceptions=[ExceptionEntry.from_json(e) for e in obj.get("exceptions") or []],
            transitions=[TransitionEntry.from_json(t) for t in obj.get("transitions") or []],
            errors=obj.get("errors"),
        )

    def event_log(self, name: str) -> Optional[EventLogEntry]:
        """First event named `name`, or None."""
        for entry in self.event_logs:
            if entry.name == name:
                return entry
        return None


@dataclass(frozen=True)
class TransactionResponse:
    id: str
    version: str
    nonce: str
    to_addr: str
    amount: str
    gas_price: str
    gas_limit: str
    receipt: TransactionReceipt
    code: Optional[str] = None
    data: Optional[str] = None
    signature: str = ""
    sender_pub_key: str = ""

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "TransactionResponse":
        return cls(
            id=str(obj.get("ID", "")),
            version=str(obj.get("version", "")),
            nonce=str(obj.get("nonce", "")),
            to_addr=str(obj.get("toAddr", "")),
            amount=str(obj.get("amount", "0")),
            gas_price=str(obj.get("gasPrice", "0")),
            gas_limit=str(obj.get("gasLimit", "0")),
            receipt=TransactionReceipt.from_json(obj.get("receipt") or {}),
            code=obj.get("code"),
            data=obj.get("data"),
            signature=str(obj.get("signature", "")),
            sender_pub_key=str(obj.get("senderPubKey", "")),
        )


class Transaction:
    """A submitted transaction; `confirm()` waits for it to be mined."""

    def __init__(
        self,
        id: str,
        provider: "Provider",
        *,
        info: Optional[str] = None,
        contract_address: Optional[Address] = None,
    ):
        self.id = id
        self.provider = provider
        self.info = info
        # set for deployments when the node reports it
        self.contract_address = contract_address
        self.status = TxStatus.INITIALIZED
        self.response: Optional[TransactionResponse] = None

    def __repr__(self) -> str:
        return f"Transaction(id={self.id!r}, status={self.status.value})"

    @property
    def receipt(self) -> Optional[TransactionReceipt]:
        return self.response.receipt if self.response else None

    @property
    def success(self) -> bool:
        return self.status is TxStatus.CONFIRMED

    async def confirm(self, tries: Optional[int] = None, interval: Optional[float] = None) -> "Transaction":
        """
        Poll until the node returns the transaction.

        Each failed lookup (the node answers with an RPC error while the
        transaction is still pending) sleeps `interval` seconds. After `tries`
        lookups TxError is raised.
        """
        cfg = getattr(self.provider, "config", None)
        tries = int(tries if tries is not None else getattr(cfg, "confirm_tries", DEFAULT_CONFIRM_TRIES))
        interval = float(
            interval if interval is not None else getattr(cfg, "confirm_interval", DEFAULT_CONFIRM_INTERVAL)
        )

        self.status = TxStatus.PENDING
        for attempt in range(1, tries + 1):
            try:
                response = await self.provider.get_transaction(self.id)
            except RpcError as e:
                logger.debug("tx %s not confirmed yet (attempt %d/%d): %s", self.id, attempt, tries, e.message)
                if attempt < tries:
                    await asyncio.sleep(interval)
                continue
            self.response = response
            self.status = TxStatus.CONFIRMED if response.receipt.success else TxStatus.REJECTED
            if self.status is TxStatus.REJECTED:
                logger.info("tx %s was rejected: %s", self.id, response.receipt.exceptions)
            return self

        raise TxError(
            f"unable to confirm transaction after {tries} tries",
            tx_hash=self.id,
            tries=tries,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status.value,
            "info": self.info,
            "contract_address": self.contract_address,
        }
