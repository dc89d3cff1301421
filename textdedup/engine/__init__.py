"""Comparison engines: the contract, an HTTP adapter and an in-process engine."""

from .base import DedupEngine, RawGroups
from .factory import get_engine
from .http_client import AsyncEngineClient
from .local import LocalEngine

__all__ = ["AsyncEngineClient", "DedupEngine", "LocalEngine", "RawGroups", "get_engine"]
