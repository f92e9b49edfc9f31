"""Processor protocols.

A processor may implement either half of the transform, or both. Steps may
be plain functions or coroutines; the pipeline awaits whatever comes back
when it is awaitable.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, TypeAlias, runtime_checkable


@runtime_checkable
class Serializer(Protocol):
    """Processor that transforms values on the write path."""

    def serialize(self, value: Any, options: Mapping[str, Any] | None) -> Any:
        """Encode a value before it reaches the driver."""
        ...


@runtime_checkable
class Deserializer(Protocol):
    """Processor that transforms values on the read path."""

    def deserialize(self, value: Any, options: Mapping[str, Any] | None) -> Any:
        """Decode a value returned by the driver."""
        ...


Processor: TypeAlias = Serializer | Deserializer
"""Anything placed in a driver's processor chain."""
