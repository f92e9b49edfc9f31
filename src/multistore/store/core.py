"""MultiStore: one async handle over an ordered set of drivers.

Usage:
    store = MultiStore()
    await store.init([MemoryDriver(), ChromaDriver("docs", embed=embedder)])

    await store.put({"id": "foo", "value": "bar"})
    await store.get("foo")            # first readable driver
    await store.find({"value": "bar"})  # first driver with a find function
    await store.delete("foo")         # every driver not ignoring deletes
    await store.stop()

Fan-outs (put, delete, stop) visit drivers one at a time in registration
order, so a cache registered before a durable store is always written first.
A driver with ``awaited=False`` is the exception: its write is started on a
detached task and the loop moves on without waiting for it.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Iterable, Mapping
from typing import Any

from multistore.drivers.models import Capability, resolve_options
from multistore.drivers.protocol import Stoppable
from multistore.errors import MissingCapabilityError, annotate_failure
from multistore.logs import get_logger
from multistore.pipeline.core import deserialize, deserialize_result, serialize
from multistore.store.registry import DriverRegistry

logger = get_logger(__name__)

Options = Mapping[str, Any] | None


class MultiStore:
    """Storage facade fanning operations out across registered drivers.

    Holds no state between calls beyond its driver registry and the set of
    detached writes still running.
    """

    def __init__(self) -> None:
        self._registry = DriverRegistry()
        self._detached: set[asyncio.Task[None]] = set()

    def __repr__(self) -> str:
        return f"MultiStore(drivers={len(self._registry)}, pending_writes={len(self._detached)})"

    @property
    def drivers(self) -> DriverRegistry:
        """Get the driver registry (supports len, iteration and ``in``)."""
        return self._registry

    @property
    def pending_writes(self) -> int:
        """Number of detached writes still in flight."""
        return len(self._detached)

    # Registry

    def add_driver(self, driver: Any) -> bool:
        """Register a driver after the existing ones. Does not call init()."""
        return self._registry.add(driver)

    def remove_driver(self, driver: Any) -> bool:
        """Unregister a driver by identity. Returns False if it was not registered."""
        return self._registry.remove(driver)

    async def init(self, drivers: Iterable[Any] | None = None) -> None:
        """Register and initialize drivers one by one, in order.

        If a driver's init() fails the error propagates and the remaining
        drivers are neither registered nor initialized. Drivers registered so
        far, the failing one included, stay registered.
        """
        for driver in drivers or ():
            self._registry.add(driver)
            try:
                await driver.init()
            except Exception as e:
                annotate_failure(e, driver, "init")
                raise
            logger.debug("driver_initialized", driver=repr(driver))

    async def stop(self) -> None:
        """Stop every driver implementing stop(), in registration order."""
        for driver in self._registry:
            if not isinstance(driver, Stoppable):
                continue
            try:
                await driver.stop()
            except Exception as e:
                annotate_failure(e, driver, "stop")
                raise
            logger.debug("driver_stopped", driver=repr(driver))

    # Writes

    async def _serialize_for(self, driver: Any, obj: Any, options: Options) -> Any:
        try:
            return await serialize(obj, resolve_options(driver).processors, options)
        except Exception as e:
            annotate_failure(e, driver, "put")
            raise

    async def _write(self, driver: Any, serialized: Any, options: Options) -> None:
        try:
            await driver.put(serialized, options)
        except Exception as e:
            annotate_failure(e, driver, "put")
            raise

    def _detach(self, driver: Any, serialized: Any, options: Options) -> None:
        # Eager start: the driver call begins before put() moves on.
        task = asyncio.Task(self._write(driver, serialized, options), eager_start=True)
        self._detached.add(task)
        task.add_done_callback(self._detached_done)

    def _detached_done(self, task: asyncio.Task[None]) -> None:
        self._detached.discard(task)
        if task.cancelled():
            logger.warning("detached_write_cancelled")
            return
        exc = task.exception()
        if exc is not None:
            # Never raised to the put() caller.
            logger.warning("detached_write_failed", error=str(exc), exc_info=exc)

    async def put(self, obj: Any, options: Options = None) -> None:
        """Serialize and write an object to every driver, in registration order.

        Each driver gets the object run through its own processor chain,
        always before put() returns. Awaited drivers are written one after
        another and the first failure stops the fan-out. For drivers with ``awaited=False``
        only the driver write runs on a detached task. That task starts
        eagerly, so the driver sees the value as it was when put() was called
        up to its first suspension point. Its outcome is only logged.
        """
        for driver in self._registry:
            serialized = await self._serialize_for(driver, obj, options)
            if resolve_options(driver).awaited is False:
                self._detach(driver, serialized, options)
                continue
            await self._write(driver, serialized, options)

    async def flush(self) -> None:
        """Wait for every detached write started so far.

        Failures were already logged by the time this returns and are not raised.
        """
        while self._detached:
            await asyncio.gather(*list(self._detached), return_exceptions=True)

    async def delete(self, id: Any, options: Options = None) -> None:
        """Delete an id from every driver not flagged ``ignore_delete``.

        The id is passed through untouched; processors never apply to deletes.
        """
        for driver in self._registry:
            if resolve_options(driver).ignore_delete:
                continue
            try:
                await driver.delete(id, options)
            except Exception as e:
                annotate_failure(e, driver, "delete")
                raise

    # Reads

    def _select(self, capability: Capability, driver: Any | None, message: str) -> Any:
        if driver is not None:
            if capability is not Capability.READABLE and not resolve_options(driver).has(
                capability
            ):
                raise MissingCapabilityError(capability, message)
            return driver
        selected = self._registry.select(capability)
        if selected is None:
            raise MissingCapabilityError(capability, message)
        return selected

    async def get(self, id: Any, options: Options = None, driver: Any | None = None) -> Any:
        """Fetch an object from the given driver or the first readable one.

        Returns whatever the driver's deserializers produce; a falsy raw
        value (not found) is returned as-is.

        Raises:
            MissingCapabilityError: No driver was given and none is readable.
        """
        source = self._select(Capability.READABLE, driver, "missing readable driver")
        try:
            raw = await source.get(id, options)
            return await deserialize(raw, resolve_options(source).processors, options)
        except Exception as e:
            annotate_failure(e, source, "get")
            raise

    async def _search(
        self,
        capability: Capability,
        criteria: Any,
        options: Options,
        driver: Any | None,
    ) -> Any:
        source = self._select(capability, driver, "missing searchable driver")
        source_options = resolve_options(source)
        search = source_options.search_function(capability)
        try:
            result = search(criteria, options, source)  # type: ignore[misc]
            if inspect.isawaitable(result):
                result = await result
            return await deserialize_result(result, source_options.processors, options)
        except Exception as e:
            annotate_failure(e, source, capability.value)
            raise

    async def find(self, criteria: Any, options: Options = None, driver: Any | None = None) -> Any:
        """Search through the given driver or the first one with a find function.

        A sequence of matches comes back as a list, each deserialized on its
        own; a single match comes back as a single value.

        Raises:
            MissingCapabilityError: No driver provides find.
        """
        return await self._search(Capability.FIND, criteria, options, driver)

    async def find_by(
        self, criteria: Any, options: Options = None, driver: Any | None = None
    ) -> Any:
        """Search through the given driver or the first one with a find_by function.

        Raises:
            MissingCapabilityError: No driver provides find_by.
        """
        return await self._search(Capability.FIND_BY, criteria, options, driver)
