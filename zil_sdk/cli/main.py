"""
zil_sdk.cli.main
================

`zil-sdk`: command-line helpers for Zilliqa nodes and Scilla bindings.

Examples
--------
    $ zil-sdk version
    $ zil-sdk --rpc https://dev-api.zilliqa.com --chain-id 333 env
    $ zil-sdk codegen --contracts ./contracts --out ./bindings.py
    $ zil-sdk inspect ./contracts/HelloWorld.scilla
    $ zil-sdk state 0x1234...abcd --field welcome_msg
    $ zil-sdk init 0x1234...abcd
    $ zil-sdk balance 0x1234...abcd
    $ zil-sdk tx 5c1e...9f

Configuration
-------------
- RPC URL      : `--rpc` or env `ZIL_RPC_URL` (default: http://127.0.0.1:5555)
- Chain ID     : `--chain-id` or env `ZIL_CHAIN_ID` (default: 222)
- HTTP Timeout : `--timeout` or env `ZIL_TIMEOUT` seconds (default: 10.0)
- Contracts    : env `ZIL_CONTRACTS_PATH` / `CONTRACTS_PATH` (codegen default)
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer

from ..config import SDKConfig
from ..errors import ZilSdkError
from ..provider import Provider
from ..scilla.generator import write_bindings
from ..scilla.parser import parse_contract_file
from ..scilla.typemap import map_type
from ..types.units import to_zil
from ..version import __version__ as SDK_VERSION

app = typer.Typer(
    name="zil-sdk",
    help="Zilliqa SDK CLI: query contracts and generate Scilla bindings.",
    no_args_is_help=True,
    add_completion=False,
)

__all__ = ["app", "main", "run"]

T = TypeVar("T")


@dataclass
class Ctx:
    config: SDKConfig


def _print_json(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2, ensure_ascii=False, default=str))


@app.callback()
def _root(
    ctx: typer.Context,
    rpc: Optional[str] = typer.Option(None, "--rpc", help="Node HTTP JSON-RPC URL.", envvar="ZIL_RPC_URL"),
    chain_id: Optional[str] = typer.Option(None, "--chain-id", help="Chain ID (int or 0x-hex).", envvar="ZIL_CHAIN_ID"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="HTTP timeout in seconds.", envvar="ZIL_TIMEOUT"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Python logging level."),
) -> None:
    """Set effective configuration for this CLI process."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    overrides: dict = {}
    if rpc:
        overrides["rpc_url"] = rpc
    if chain_id:
        overrides["chain_id"] = chain_id
    if timeout is not None:
        overrides["request_timeout"] = timeout
    ctx.obj = Ctx(config=SDKConfig.with_overrides(**overrides))


def _with_provider(ctx: typer.Context, fn: Callable[[Provider], Awaitable[T]]) -> T:
    c: Ctx = ctx.obj

    async def _go() -> T:
        async with Provider.from_config(c.config) as provider:
            return await fn(provider)

    try:
        return asyncio.run(_go())
    except ZilSdkError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1) from e


# --- Commands -----------------------------------------------------------------


@app.command("version")
def version() -> None:
    """Print the SDK CLI version."""
    typer.echo(f"zil-sdk {SDK_VERSION}")


@app.command("env")
def env(ctx: typer.Context) -> None:
    """Show the effective configuration."""
    c: Ctx = ctx.obj
    _print_json({**c.config.to_dict(), "sdk_version": SDK_VERSION})


@app.command("codegen")
def codegen(
    ctx: typer.Context,
    contracts: Optional[Path] = typer.Option(None, "--contracts", "-c", help="Directory of *.scilla files."),
    out: Path = typer.Option(..., "--out", "-o", help="Output Python module."),
) -> None:
    """Generate a bindings module for every contract in a directory."""
    c: Ctx = ctx.obj
    src_dir = contracts or c.config.contracts_path
    if not src_dir:
        raise typer.BadParameter("pass --contracts or set ZIL_CONTRACTS_PATH")
    path = write_bindings(src_dir, out)
    typer.echo(f"wrote {path}")


@app.command("inspect")
def inspect(file: Path = typer.Argument(..., exists=True, dir_okay=False, help="A .scilla file.")) -> None:
    """Print the parsed contract header with mapped Python types."""
    try:
        contract = parse_contract_file(file)
    except ZilSdkError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1) from e

    def _typed(fields):
        return [
            {"name": f.name, "type": f.type_text, "python": map_type(f.type).hint, "degraded": map_type(f.type).degraded}
            for f in fields
        ]

    _print_json(
        {
            "name": contract.name,
            "path": str(contract.path),
            "init_params": _typed(contract.init_params),
            "fields": _typed(contract.fields),
            "transitions": [{"name": t.name, "params": _typed(t.params)} for t in contract.transitions],
        }
    )


@app.command("state")
def state(
    ctx: typer.Context,
    address: str = typer.Argument(..., help="Contract address (0x...)"),
    field: Optional[str] = typer.Option(None, "--field", "-f", help="Only print this field."),
) -> None:
    """Fetch a contract's state (raw wire JSON)."""
    res = _with_provider(ctx, lambda p: p.get_smart_contract_state(address))
    if field is not None:
        if field not in res:
            typer.echo(f"error: Field {field} doesn't exist in the contract.", err=True)
            raise typer.Exit(code=1)
        res = res[field]
    _print_json(res)


@app.command("init")
def init(ctx: typer.Context, address: str = typer.Argument(..., help="Contract address (0x...)")) -> None:
    """Fetch a contract's init parameters."""
    res = _with_provider(ctx, lambda p: p.get_smart_contract_init(address))
    _print_json([nv.to_json() for nv in res])


@app.command("balance")
def balance(ctx: typer.Context, address: str = typer.Argument(..., help="Account address (0x...)")) -> None:
    """Fetch an account's balance and nonce."""
    res = _with_provider(ctx, lambda p: p.get_balance(address))
    _print_json({"balance_qa": str(res.balance), "balance_zil": str(to_zil(res.balance)), "nonce": res.nonce})


@app.command("tx")
def tx(ctx: typer.Context, tx_hash: str = typer.Argument(..., help="Transaction id")) -> None:
    """Look up a transaction and its receipt."""
    res = _with_provider(ctx, lambda p: p.get_transaction(tx_hash))
    receipt = res.receipt
    _print_json(
        {
            "id": res.id,
            "to": res.to_addr,
            "amount": res.amount,
            "success": receipt.success,
            "cumulative_gas": receipt.cumulative_gas,
            "events": [
                {"name": e.name, "address": e.address, "params": [p.to_json() for p in e.params]}
                for e in receipt.event_logs
            ],
            "exceptions": [{"line": x.line, "message": x.message} for x in receipt.exceptions],
        }
    )


# --- Entrypoints --------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> int:
    """
    Run the CLI. Returns an integer exit code.
    """
    try:
        app(prog_name="zil-sdk", standalone_mode=False, args=argv)
        return 0
    except typer.Exit as e:  # normal exit
        return int(e.exit_code)
    except Exception as e:
        typer.echo(f"error: {e}", err=True)
        return 1


def run(argv: Optional[list[str]] = None) -> int:
    """Alias for :func:`main`."""
    return main(argv)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
