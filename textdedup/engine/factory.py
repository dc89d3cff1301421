"""Engine factory.

Centralizes engine construction so the CLI and callers pick a backend by
name. Switchable via ``TEXTDEDUP_ENGINE_BACKEND``.
"""

from __future__ import annotations

from typing import Optional

from textdedup.config import get_config
from textdedup.engine.base import DedupEngine
from textdedup.utils.logger import log_info


def get_engine(backend: Optional[str] = None, engine_url: Optional[str] = None) -> DedupEngine:
    """Return an engine for ``backend`` (default: configured backend).

    The HTTP engine is returned unconnected; use it as an async context
    manager or call ``connect()`` before handing it to a controller.

    Raises:
        ValueError: If ``backend`` is not ``local`` or ``http``.
    """
    config = get_config()
    backend = (backend or config.engine_backend).lower()

    if backend == "http":
        from textdedup.engine.http_client import AsyncEngineClient

        url = engine_url or config.engine_url
        log_info("Using HTTP engine", engine_url=url)
        return AsyncEngineClient(base_url=url)

    if backend == "local":
        from textdedup.engine.local import LocalEngine

        log_info("Using local engine")
        return LocalEngine()

    raise ValueError(f"Unknown engine backend: {backend!r} (expected 'local' or 'http')")
