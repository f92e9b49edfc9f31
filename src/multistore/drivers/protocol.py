"""Driver protocols for pluggable backends.

A driver adapts one backend (cache, durable store, search index, replica)
to the operations the orchestrator fans out. Optional features are declared
through ``options`` (see DriverOptions) rather than by implementing extra
methods, except for shutdown, which is the Stoppable protocol.

Usage:
    class RedisDriver:
        options = DriverOptions(readable=True)

        async def init(self) -> None: ...
        async def put(self, obj, options) -> None: ...
        async def get(self, id, options): ...
        async def delete(self, id, options) -> None: ...
        async def stop(self) -> None: ...   # optional
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from multistore.drivers.models import DriverOptions


@runtime_checkable
class Driver(Protocol):
    """Required driver contract."""

    options: DriverOptions | Mapping[str, Any]

    async def init(self) -> None:
        """Prepare the backend. Called once, right after registration."""
        ...

    async def put(self, obj: Any, options: Mapping[str, Any] | None) -> None:
        """Store an already-serialized object."""
        ...

    async def get(self, id: Any, options: Mapping[str, Any] | None) -> Any:
        """Fetch the serialized value stored under id, or a falsy value if absent."""
        ...

    async def delete(self, id: Any, options: Mapping[str, Any] | None) -> None:
        """Remove the value stored under id."""
        ...


@runtime_checkable
class Stoppable(Protocol):
    """Drivers holding resources that need releasing on shutdown."""

    async def stop(self) -> None:
        """Release backend resources."""
        ...
