"""
zil_sdk.contract.transition_call
================================

`TransitionCall` is a single-use builder for one transition invocation:

    call = contract.transition("SetHello", [codec_for("String").named("msg", "hi")])
    tx = await call.amount(parse_zil("1")).gas_limit(20_000).call()

Unset knobs get defaults at `call()` time: gas price 2000 Li (0.002 ZIL),
gas limit 10000, amount 0, nonce from the chain.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from ..address import Address
from ..errors import ContractError
from ..scilla.values import NamedValue
from ..types.core import TransactionParams
from ..types.units import parse_zil

if TYPE_CHECKING:  # pragma: no cover
    from ..provider import Provider
    from ..signers import Signer
    from ..tx.transaction import Transaction

logger = logging.getLogger(__name__)

DEFAULT_GAS_PRICE = parse_zil("0.002")
DEFAULT_GAS_LIMIT = 10_000


class TransitionCall:
    def __init__(
        self,
        name: str,
        contract_address: Address,
        provider: "Provider",
        args: Optional[Sequence[NamedValue]] = None,
        overridden_params: Optional[TransactionParams] = None,
    ):
        self.name = name
        self.contract_address = Address(contract_address)
        self.provider = provider
        self._args: List[NamedValue] = list(args or [])
        self._params = replace(overridden_params) if overridden_params else TransactionParams()
        self._submitted = False

    def __repr__(self) -> str:
        return f"TransitionCall({self.name!r}, {self.contract_address}, args={len(self._args)})"

    # --- chained setters -------------------------------------------------

    def args(self, args: Sequence[NamedValue]) -> "TransitionCall":
        self._args = list(args)
        return self

    def overridden_params(self, params: TransactionParams) -> "TransitionCall":
        self._params = replace(params)
        return self

    def nonce(self, nonce: int) -> "TransitionCall":
        self._params.nonce = int(nonce)
        return self

    def amount(self, amount: int) -> "TransitionCall":
        self._params.amount = int(amount)
        return self

    def gas_price(self, gas_price: int) -> "TransitionCall":
        self._params.gas_price = int(gas_price)
        return self

    def gas_limit(self, gas_limit: int) -> "TransitionCall":
        self._params.gas_limit = int(gas_limit)
        return self

    def signer(self, signer: "Signer") -> "TransitionCall":
        self._params.signer = signer
        return self

    # --- payload ---------------------------------------------------------

    @property
    def arguments(self) -> List[NamedValue]:
        return list(self._args)

    def payload(self) -> Dict[str, Any]:
        """The transition message carried in the transaction's `data`."""
        return {"_tag": self.name, "params": [a.to_json() for a in self._args]}

    def tx_params(self) -> TransactionParams:
        params = self._params.with_defaults(gas_price=DEFAULT_GAS_PRICE, gas_limit=DEFAULT_GAS_LIMIT, amount=0)
        params.to_addr = self.contract_address
        params.data = json.dumps(self.payload(), separators=(",", ":"), ensure_ascii=False)
        return params

    async def call(self) -> "Transaction":
        """Submit once and wait for confirmation."""
        if self._submitted:
            raise ContractError(f"transition {self.name} was already submitted", contract=str(self.contract_address))
        self._submitted = True
        params = self.tx_params()
        logger.debug("calling %s on %s", self.name, self.contract_address)
        tx = await self.provider.send_transaction(params)
        return await tx.confirm()


__all__ = ["TransitionCall", "DEFAULT_GAS_PRICE", "DEFAULT_GAS_LIMIT"]
