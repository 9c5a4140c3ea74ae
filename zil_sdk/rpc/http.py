from __future__ import annotations

"""
HTTP JSON-RPC client (async).

- Built on httpx.AsyncClient; pass `transport=` (e.g. httpx.MockTransport) in tests.
- Retries transient transport failures and HTTP 429/502/503/504 with jittered
  exponential backoff. JSON-RPC error objects are raised as RpcError at once.

Example:
    from zil_sdk.rpc.http import RpcClient
    async with RpcClient("https://dev-api.zilliqa.com") as rpc:
        chain = await rpc.request("GetNetworkId")
"""

import asyncio
import json
import logging
import random
import time
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import httpx

from ..errors import JsonRpcCode, RpcError, from_jsonrpc_error
from ..version import user_agent

logger = logging.getLogger(__name__)

JSON = Union[dict, list, str, int, float, bool, None]
Params = Union[Sequence[Any], Mapping[str, Any], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _is_retriable_http(status: int) -> bool:
    return status in (429, 502, 503, 504)


def _jitter_backoff(base: float, factor: float, attempt: int, jitter: float) -> float:
    # Exponential backoff with jitter in [0, jitter]
    return base * (factor ** max(attempt - 1, 0)) + random.random() * jitter


class _Retriable(Exception):
    """Transient failure; the request may be re-sent."""


@dataclass
class RpcClient:
    """Asynchronous JSON-RPC 2.0 client over HTTP."""

    url: str
    timeout: float = 30.0
    max_retries: int = 3
    backoff_base: float = 0.15
    backoff_factor: float = 1.8
    backoff_jitter: float = 0.2
    headers: Optional[Mapping[str, str]] = None
    transport: Optional[httpx.AsyncBaseTransport] = field(default=None, repr=False)
    _id_counter: Iterator[int] = field(default_factory=lambda: count(start=_now_ms()), repr=False)
    _client: Optional[httpx.AsyncClient] = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        merged_headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": user_agent(),
        }
        if self.headers:
            merged_headers.update(dict(self.headers))
        self.headers = merged_headers

    @classmethod
    def from_config(cls, config: Any, **kwargs: Any) -> "RpcClient":
        """Build from an `SDKConfig` (url, timeout, retries, backoff, headers)."""
        return cls(
            url=config.rpc_url,
            timeout=float(config.request_timeout),
            max_retries=int(config.max_retries),
            backoff_base=float(config.backoff_factor),
            headers=config.http_headers(),
            **kwargs,
        )

    # --- lifecycle -------------------------------------------------------

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=dict(self.headers or {}),
                transport=self.transport,
            )
        return self._client

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # --- public API ------------------------------------------------------

    async def request(self, method: str, params: Params = None, *, id: Optional[Union[int, str]] = None) -> JSON:
        """Perform a single JSON-RPC request and return `result` or raise RpcError."""
        payload = self._make_payload(method, params, id)
        resp = await self._send_with_retries(payload, method)
        if not isinstance(resp, dict):
            raise RpcError(
                code=JsonRpcCode.INTERNAL_ERROR,
                message="Invalid JSON-RPC response type",
                method=method,
                data=type(resp).__name__,
            )
        return self._unwrap(resp, method)

    async def batch(self, calls: Sequence[Tuple[str, Params]]) -> List[JSON]:
        """Perform a JSON-RPC batch; returns results in the same order as `calls`."""
        batch_payload: List[Dict[str, Any]] = []
        methods: Dict[Any, str] = {}
        for method, params in calls:
            p = self._make_payload(method, params)
            batch_payload.append(p)
            methods[p["id"]] = method
        resp = await self._send_with_retries(batch_payload, "batch")
        if not isinstance(resp, list):
            raise RpcError(
                code=JsonRpcCode.INTERNAL_ERROR,
                message="Invalid batch response (not a list)",
                method="batch",
                data=resp,
            )

        by_id: Dict[Any, JSON] = {}
        for item in resp:
            if not isinstance(item, dict) or "id" not in item:
                raise RpcError(
                    code=JsonRpcCode.INTERNAL_ERROR,
                    message="Malformed item in batch response",
                    method="batch",
                    data=item,
                )
            by_id[item["id"]] = self._unwrap(item, methods.get(item["id"], "batch"))

        ordered: List[JSON] = []
        for p in batch_payload:
            if p["id"] not in by_id:
                raise RpcError(
                    code=JsonRpcCode.INTERNAL_ERROR,
                    message=f"Missing result for id {p['id']}",
                    method=p["method"],
                    data=resp,
                )
            ordered.append(by_id[p["id"]])
        return ordered

    # --- internals -------------------------------------------------------

    def _make_payload(self, method: str, params: Params, id: Optional[Union[int, str]] = None) -> Dict[str, Any]:
        if id is None:
            id = next(self._id_counter)
        if params is None:
            params = []
        elif isinstance(params, Mapping):
            params = dict(params)
        elif isinstance(params, Sequence) and not isinstance(params, (str, bytes, bytearray)):
            params = list(params)
        else:
            # single param becomes a positional list
            params = [params]  # type: ignore[list-item]
        return {"jsonrpc": "2.0", "id": id, "method": method, "params": params}

    @staticmethod
    def _unwrap(resp: Dict[str, Any], method: str) -> JSON:
        if resp.get("error") is not None:
            raise from_jsonrpc_error(resp["error"], method=method, request_id=resp.get("id"))
        if "result" not in resp:
            raise RpcError(
                code=JsonRpcCode.INTERNAL_ERROR,
                message="Malformed JSON-RPC response",
                method=method,
                data=resp,
            )
        return resp["result"]

    async def _send_with_retries(self, payload: Union[Dict[str, Any], List[Dict[str, Any]]], method: str) -> JSON:
        last_exc: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 2):  # N retries -> N+1 attempts
            try:
                return await self._send_once(payload, method)
            except _Retriable as e:
                last_exc = e
                if attempt > self.max_retries:
                    break
                delay = _jitter_backoff(self.backoff_base, self.backoff_factor, attempt, self.backoff_jitter)
                logger.debug("rpc %s attempt %d failed (%s); retrying in %.2fs", method, attempt, e, delay)
                await asyncio.sleep(delay)
        raise RpcError(
            code=JsonRpcCode.TRANSPORT_ERROR,
            message="RPC transport failed",
            method=method,
            data=str(last_exc),
        )

    async def _send_once(self, payload: Union[Dict[str, Any], List[Dict[str, Any]]], method: str) -> JSON:
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        try:
            r = await self._http().post(self.url, content=body)
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            raise _Retriable(f"network error: {e}") from e
        if _is_retriable_http(r.status_code):
            raise _Retriable(f"HTTP {r.status_code}")
        # no raise_for_status(): keep the error body visible below
        try:
            return r.json()
        except ValueError as e:
            raise RpcError(
                code=JsonRpcCode.INTERNAL_ERROR,
                message="Non-JSON response from RPC",
                method=method,
                data=f"HTTP {r.status_code}: {r.text[:256]}",
                http_status=r.status_code,
            ) from e


__all__ = ["RpcClient"]
