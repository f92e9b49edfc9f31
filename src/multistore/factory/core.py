"""Store construction: plain create() and race-safe singleton().

Usage:
    store = await create([MemoryDriver()])

    # One store per owning context, however many tasks ask at once
    config = SingletonConfig(drivers=[MemoryDriver()], timeout=5_000)
    store = await singleton(app, config)

Only one caller builds a singleton. It marks the binding as constructing
before its first suspension point, so concurrent callers always see the
marker and poll (via tenacity) until the instance is bound, the builder
fails, or their timeout elapses.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable
from typing import Any

import tenacity

from multistore.config import StoreSettings
from multistore.errors import SingletonConstructionError, SingletonTimeoutError
from multistore.factory.models import Binding, BindingState, SingletonConfig
from multistore.logs import get_logger
from multistore.store.core import MultiStore

logger = get_logger(__name__)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def create(drivers: Iterable[Any] | None = None) -> MultiStore:
    """Build a store and initialize the given drivers in order."""
    store = MultiStore()
    await store.init(drivers)
    return store


class SingletonRegistry:
    """Singleton bindings keyed by owner identity.

    Owners are never modified; any object (including ones that cannot be
    weak-referenced) can own a store.

    Args:
        settings: Defaults for timeout and polling interval.
    """

    def __init__(self, settings: StoreSettings | None = None) -> None:
        self._settings = settings or StoreSettings()
        self._bindings: dict[int, Binding] = {}

    def __len__(self) -> int:
        return len(self._bindings)

    def state(self, owner: Any) -> BindingState | None:
        """Get the binding state for an owner, or None if absent."""
        binding = self._bindings.get(id(owner))
        return binding.state if binding is not None else None

    def release(self, owner: Any) -> MultiStore | None:
        """Forget a bound instance without stopping it.

        Returns:
            The released instance, or None if the owner had no bound instance.
            Bindings still under construction are left alone.
        """
        binding = self._bindings.get(id(owner))
        if binding is None or binding.state is not BindingState.BOUND:
            return None
        del self._bindings[id(owner)]
        return binding.instance

    async def get_or_create(self, owner: Any, config: SingletonConfig | None = None) -> MultiStore:
        """Return the owner's store, constructing it on first request."""
        config = config or SingletonConfig()
        binding = self._bindings.get(id(owner))

        if binding is None:
            # No await between lookup and insert: this caller owns construction.
            binding = Binding(owner=owner)
            self._bindings[id(owner)] = binding
            return await self._construct(binding, config)

        if binding.state is BindingState.BOUND:
            assert binding.instance is not None
            return binding.instance

        return await self._wait(binding, config)

    async def _construct(self, binding: Binding, config: SingletonConfig) -> MultiStore:
        owner = binding.owner
        logger.info("singleton_construct_started", owner=repr(owner))
        try:
            if config.precreate is not None:
                await _resolve(config.precreate(owner))

            drivers = list(config.drivers)
            if config.create is not None:
                instance = await _resolve(config.create(drivers))
            else:
                instance = await create(drivers)

            if config.postcreate is not None:
                await _resolve(config.postcreate(owner, instance))
        except BaseException as e:
            binding.state = BindingState.FAILED
            binding.error = e
            self._bindings.pop(id(owner), None)
            logger.warning("singleton_construct_failed", owner=repr(owner), error=str(e))
            raise

        binding.instance = instance
        binding.state = BindingState.BOUND
        logger.info("singleton_construct_finished", owner=repr(owner))
        return instance

    async def _wait(self, binding: Binding, config: SingletonConfig) -> MultiStore:
        timeout = config.timeout if config.timeout is not None else self._settings.singleton_timeout_ms
        interval = (
            config.poll_interval
            if config.poll_interval is not None
            else self._settings.singleton_poll_interval_ms
        )
        logger.debug("singleton_wait_started", owner=repr(binding.owner), timeout_ms=timeout)

        async def constructing() -> bool:
            return binding.state is BindingState.CONSTRUCTING

        retrying = tenacity.AsyncRetrying(
            stop=tenacity.stop_never if timeout == 0 else tenacity.stop_after_delay(timeout / 1000),
            wait=tenacity.wait_fixed(interval / 1000),
            retry=tenacity.retry_if_result(lambda still_constructing: still_constructing),
            reraise=False,
        )
        try:
            await retrying(constructing)
        except tenacity.RetryError as e:
            logger.warning("singleton_wait_timed_out", owner=repr(binding.owner), timeout_ms=timeout)
            raise SingletonTimeoutError("multistore.singleton", timeout) from e

        if binding.state is BindingState.FAILED:
            raise SingletonConstructionError(
                f"singleton construction for {binding.owner!r} failed"
            ) from binding.error

        assert binding.instance is not None
        return binding.instance


_default_registry: SingletonRegistry | None = None


def default_registry() -> SingletonRegistry:
    """Get the process-wide registry used by singleton() and release()."""
    global _default_registry
    if _default_registry is None:
        _default_registry = SingletonRegistry()
    return _default_registry


async def singleton(
    owner: Any,
    config: SingletonConfig | None = None,
    registry: SingletonRegistry | None = None,
) -> MultiStore:
    """Return the store bound to an owner, building it exactly once.

    Raises:
        SingletonTimeoutError: Another caller's construction outlasted the timeout.
        SingletonConstructionError: Another caller's construction failed.
    """
    return await (registry or default_registry()).get_or_create(owner, config)


def release(owner: Any, registry: SingletonRegistry | None = None) -> MultiStore | None:
    """Unbind and return an owner's store from the registry, without stopping it."""
    return (registry or default_registry()).release(owner)
