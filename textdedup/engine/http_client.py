"""Async HTTP client for an out-of-process comparison engine using httpx.

The engine speaks plain JSON. Transport failures, non-2xx responses and
undecodable bodies all surface as ``EngineError`` so the session controller
only has one failure type to handle.
"""
from __future__ import annotations

import time
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from textdedup.config import get_config
from textdedup.engine.base import DedupEngine, RawGroups
from textdedup.errors import EngineError, ErrorCode
from textdedup.results import RawDuplicateGroup
from textdedup.strategy.models import DedupStrategy
from textdedup.utils.logger import log_engine_call, log_error, log_info


class AsyncEngineClient(DedupEngine):
    """Async engine client with a pooled connection.

    Usage::

        async with AsyncEngineClient() as engine:
            controller = SessionController(engine)
            ...
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize client with configuration.

        Args:
            base_url: Engine base URL (defaults to config)
            timeout: Per-request timeout in seconds (defaults to config)
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``
        """
        config = get_config()
        self.base_url = (base_url or config.engine_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.engine_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> None:
        """Create the pooled HTTP client (called by ``async with``)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            )
            log_info("Engine client connected", base_url=self.base_url)

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(self, operation: str, method: str, path: str, payload: Any = None) -> Any:
        """Send one request and decode the JSON body.

        Returns:
            Decoded JSON, or ``None`` for an empty body.

        Raises:
            EngineError: On any transport, status or decoding failure.
        """
        if not self._client:
            raise EngineError("AsyncEngineClient not initialized - use 'async with' context",
                              operation=operation, code=ErrorCode.INTERNAL_ERROR)

        start = time.monotonic()
        try:
            resp = await self._client.request(method, path, json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = e.response.text[:500] if e.response is not None else ""
            log_error("Engine request rejected", operation=operation,
                      status_code=e.response.status_code, response_preview=body)
            raise EngineError(f"Engine {operation} failed with HTTP {e.response.status_code}: {body}",
                              operation=operation) from e
        except httpx.HTTPError as e:
            log_error("Engine request failed", operation=operation, error=str(e))
            raise EngineError(f"Engine {operation} failed: {e}", operation=operation) from e

        log_engine_call(operation, time.monotonic() - start, status_code=resp.status_code)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise EngineError(f"Engine {operation} returned invalid JSON", operation=operation,
                              code=ErrorCode.DESERIALIZATION_ERROR) from e

    @staticmethod
    def _parse_strategy(operation: str, data: Any) -> DedupStrategy:
        try:
            return DedupStrategy.model_validate(data)
        except ValidationError as e:
            raise EngineError(f"Engine {operation} returned an invalid strategy: {e.error_count()} issue(s)",
                              operation=operation, code=ErrorCode.DESERIALIZATION_ERROR) from e

    async def update_strategy(self, strategy: DedupStrategy) -> DedupStrategy:
        data = await self._request("update_strategy", "PUT", "/strategy", strategy.to_wire())
        if data is None:
            # Engines that reply 204 applied the payload as sent
            return strategy
        return self._parse_strategy("update_strategy", data)

    async def get_strategy(self) -> DedupStrategy:
        data = await self._request("get_strategy", "GET", "/strategy")
        return self._parse_strategy("get_strategy", data)

    async def add_text(self, text: str) -> int:
        data = await self._request("add_text", "POST", "/texts", {"text": text})
        index = data.get("index") if isinstance(data, dict) else data
        if isinstance(index, bool) or not isinstance(index, int):
            raise EngineError(f"Engine add_text returned no index: {data!r}", operation="add_text",
                              code=ErrorCode.DESERIALIZATION_ERROR)
        return index

    async def clear(self) -> None:
        await self._request("clear", "DELETE", "/texts")

    async def find_duplicates(self) -> RawGroups:
        data = await self._request("find_duplicates", "POST", "/duplicates")
        return self._parse_groups(data)

    async def is_ready(self) -> bool:
        data = await self._request("is_ready", "GET", "/ready")
        if isinstance(data, dict):
            return bool(data.get("ready"))
        return bool(data)

    @staticmethod
    def _parse_groups(data: Any) -> RawGroups:
        """Accept ``[[i, ...]]``, ``{"groups": [...]}`` and scored groups."""
        if isinstance(data, dict):
            data = data.get("groups", data.get("duplicate_groups"))
        if data is None:
            return []
        if not isinstance(data, list):
            raise EngineError(f"Engine find_duplicates returned {type(data).__name__}, expected a list",
                              operation="find_duplicates", code=ErrorCode.DESERIALIZATION_ERROR)

        groups: List[Any] = []
        for entry in data:
            if isinstance(entry, dict):
                try:
                    groups.append(RawDuplicateGroup.model_validate(entry))
                except ValidationError as e:
                    raise EngineError(f"Malformed duplicate group: {entry!r}", operation="find_duplicates",
                                      code=ErrorCode.DESERIALIZATION_ERROR) from e
            else:
                groups.append(entry)
        return groups

