"""
zil_sdk.contract.factory
========================

Deploy Scilla contracts.

    factory = ContractFactory(provider)
    contract = await factory.deploy_from_file(
        "contracts/HelloWorld.scilla",
        [codec_for("Uint32").named("_scilla_version", 0),
         codec_for("ByStr20").named("owner", owner)],
    )

A deployment is a transaction to the nil address with amount 0 whose `code`
is the contract source and whose `data` is the init list as JSON. Gas price
defaults to 2000 Li and gas limit to 10000; `overridden_params` wins.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence, Union

from ..address import Address
from ..errors import ContractError
from ..scilla.values import NamedValue
from ..types.core import TransactionParams
from .base import BaseContract
from .transition_call import DEFAULT_GAS_LIMIT, DEFAULT_GAS_PRICE

if TYPE_CHECKING:  # pragma: no cover
    from ..provider import Provider

logger = logging.getLogger(__name__)

_COMMENT_RE = re.compile(r"\(\*.*?\*\)")
_BLANK_OR_TRAILING_RE = re.compile(r"(^[ \t]*\r?\n)|([ \t]+$)", re.MULTILINE)


def compress_contract(code: str) -> str:
    """Drop single-line `(* ... *)` comments, blank lines and trailing whitespace."""
    code = _COMMENT_RE.sub("", code)
    return _BLANK_OR_TRAILING_RE.sub("", code)


class ContractFactory:
    def __init__(self, provider: "Provider"):
        self.provider = provider

    async def deploy_from_file(
        self,
        path: Union[str, Path],
        init: Sequence[NamedValue],
        overridden_params: Optional[TransactionParams] = None,
        *,
        compressed: bool = False,
    ) -> BaseContract:
        code = Path(path).read_text(encoding="utf-8")
        return await self.deploy_str(code, init, overridden_params, compressed=compressed)

    async def deploy_str(
        self,
        code: str,
        init: Sequence[NamedValue],
        overridden_params: Optional[TransactionParams] = None,
        *,
        compressed: bool = False,
    ) -> BaseContract:
        if compressed:
            code = compress_contract(code)
        params = (overridden_params or TransactionParams()).with_defaults(
            gas_price=DEFAULT_GAS_PRICE,
            gas_limit=DEFAULT_GAS_LIMIT,
        )
        params = params.merged(
            TransactionParams(
                to_addr=Address.nil(),
                amount=0,
                code=code,
                data=json.dumps([nv.to_json() for nv in init], separators=(",", ":"), ensure_ascii=False),
            )
        )

        tx = await self.provider.deploy_contract(params)
        await tx.confirm()
        if not tx.success:
            raise ContractError(f"deployment transaction {tx.id} was rejected: {tx.receipt}")

        address = tx.contract_address
        if address is None:
            address = await self.provider.get_contract_address_from_transaction_id(tx.id)
        logger.info("deployed contract at %s (tx %s)", address, tx.id)
        return BaseContract(address, self.provider, deploy_tx=tx)


__all__ = ["ContractFactory", "compress_contract"]
