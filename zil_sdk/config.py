"""
SDK configuration: RPC endpoint, chain id, retry/timeouts and the contracts
directory used for binding generation.

- Loads sane defaults and supports overrides via environment variables (ZIL_*).
- Provides helpers for building HTTP headers and validating endpoints.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .version import user_agent as default_user_agent

_DEFAULT_RPC = "http://127.0.0.1:5555"
_DEFAULT_CHAIN_ID = 222  # isolated server / local devnet


_HEX_RE = re.compile(r"^0x[0-9a-fA-F]+$")


def _parse_chain_id(val: Any, default: int = _DEFAULT_CHAIN_ID) -> int:
    """
    Accepts int, decimal str, or 0x-hex str and returns int.
    """
    if val is None or val == "":
        return int(default)
    if isinstance(val, int):
        return val
    s = str(val).strip()
    if _HEX_RE.match(s):
        return int(s, 16)
    return int(s, 10)


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def _ensure_scheme(url: Optional[str], allowed: tuple[str, ...]) -> Optional[str]:
    if not url:
        return url
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ValueError(f"URL must start with {allowed}, got: {url!r}")
    return url


@dataclass(slots=True)
class SDKConfig:
    # Core
    rpc_url: str = field(default_factory=lambda: _DEFAULT_RPC)
    chain_id: int = field(default_factory=lambda: _parse_chain_id(None))
    msg_version: int = 1
    # HTTP behavior
    request_timeout: float = 10.0
    max_retries: int = 3
    backoff_factor: float = 0.25
    # Transaction confirmation polling
    confirm_tries: int = 20
    confirm_interval: float = 1.0
    # Directory of *.scilla sources for binding generation (None = no bindings)
    contracts_path: Optional[str] = None
    # Headers / identity
    user_agent: str = field(default_factory=default_user_agent)

    @classmethod
    def from_env(cls, prefix: str = "ZIL_") -> "SDKConfig":
        """
        Create config from environment variables:

        ZIL_RPC_URL             (http/https)
        ZIL_CHAIN_ID            (int or 0x-hex)
        ZIL_MSG_VERSION         (int)
        ZIL_TIMEOUT             (float seconds, HTTP)
        ZIL_MAX_RETRIES         (int)
        ZIL_BACKOFF             (float)
        ZIL_CONFIRM_TRIES       (int)
        ZIL_CONFIRM_INTERVAL    (float seconds)
        ZIL_CONTRACTS_PATH      (directory; falls back to CONTRACTS_PATH)
        ZIL_USER_AGENT          (str)
        """
        rpc = _env(f"{prefix}RPC_URL", _DEFAULT_RPC)
        _ensure_scheme(rpc, ("http", "https"))

        contracts = _env(f"{prefix}CONTRACTS_PATH") or _env("CONTRACTS_PATH")

        return cls(
            rpc_url=rpc or _DEFAULT_RPC,
            chain_id=_parse_chain_id(_env(f"{prefix}CHAIN_ID", None)),
            msg_version=int(_env(f"{prefix}MSG_VERSION", "1")),
            request_timeout=float(_env(f"{prefix}TIMEOUT", "10.0")),
            max_retries=int(_env(f"{prefix}MAX_RETRIES", "3")),
            backoff_factor=float(_env(f"{prefix}BACKOFF", "0.25")),
            confirm_tries=int(_env(f"{prefix}CONFIRM_TRIES", "20")),
            confirm_interval=float(_env(f"{prefix}CONFIRM_INTERVAL", "1.0")),
            contracts_path=contracts or None,
            user_agent=_env(f"{prefix}USER_AGENT") or default_user_agent(),
        )

    @classmethod
    def with_overrides(
        cls, base: Optional["SDKConfig"] = None, **overrides: Any
    ) -> "SDKConfig":
        """
        Build from an existing config plus keyword overrides.
        Unknown keys are ignored.
        """
        base = base or cls.from_env()
        data = base.to_dict()
        data.update({k: v for k, v in overrides.items() if k in data})
        if "chain_id" in overrides:
            data["chain_id"] = _parse_chain_id(overrides["chain_id"], base.chain_id)
        if "rpc_url" in overrides:
            _ensure_scheme(data["rpc_url"], ("http", "https"))
        return cls(**data)

    def http_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rpc_url": self.rpc_url,
            "chain_id": int(self.chain_id),
            "msg_version": int(self.msg_version),
            "request_timeout": float(self.request_timeout),
            "max_retries": int(self.max_retries),
            "backoff_factor": float(self.backoff_factor),
            "confirm_tries": int(self.confirm_tries),
            "confirm_interval": float(self.confirm_interval),
            "contracts_path": self.contracts_path,
            "user_agent": self.user_agent,
        }


__all__ = ["SDKConfig"]
