"""Orchestrator and driver registry."""

from multistore.store.core import MultiStore
from multistore.store.registry import DriverRegistry

__all__ = [
    "MultiStore",
    "DriverRegistry",
]
