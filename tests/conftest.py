"""Shared test fixtures."""

import asyncio
import sys
from collections.abc import Callable, Mapping
from typing import Any

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from multistore.drivers.models import DriverOptions
from multistore.factory import SingletonRegistry

CallLog = list[tuple[str, str]]


class RecordingDriver:
    """Driver that records every call into a shared log.

    Values written by put() are kept in ``puts``; get() reads from ``values``,
    which tests may pre-populate.
    """

    def __init__(
        self,
        name: str,
        log: CallLog,
        *,
        fail_on: frozenset[str] = frozenset(),
        delay: float = 0.0,
        **options: Any,
    ) -> None:
        self.name = name
        self.log = log
        self.fail_on = fail_on
        self.delay = delay
        self.options = DriverOptions.from_mapping(options)
        self.puts: list[Any] = []
        self.values: dict[Any, Any] = {}

    def __repr__(self) -> str:
        return f"RecordingDriver({self.name!r})"

    async def _record(self, operation: str) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        self.log.append((self.name, operation))
        if operation in self.fail_on:
            raise RuntimeError(f"{self.name} {operation} failed")

    async def init(self) -> None:
        await self._record("init")

    async def stop(self) -> None:
        await self._record("stop")

    async def put(self, obj: Any, options: Mapping[str, Any] | None) -> None:
        await self._record("put")
        self.puts.append(obj)

    async def get(self, id: Any, options: Mapping[str, Any] | None) -> Any:
        await self._record("get")
        return self.values.get(id)

    async def delete(self, id: Any, options: Mapping[str, Any] | None) -> None:
        await self._record(f"delete:{id}")


class BareDriver:
    """Driver with only the required operations (no stop)."""

    def __init__(self, **options: Any) -> None:
        self.options = options

    async def init(self) -> None:
        pass

    async def put(self, obj: Any, options: Mapping[str, Any] | None) -> None:
        pass

    async def get(self, id: Any, options: Mapping[str, Any] | None) -> Any:
        return None

    async def delete(self, id: Any, options: Mapping[str, Any] | None) -> None:
        pass


class Tagger:
    """Asymmetric processor: appends its tag on write, strips it on read.

    Every call is logged so tests can assert exact step order.
    """

    def __init__(self, tag: str, log: CallLog) -> None:
        self.tag = tag
        self.log = log

    def serialize(self, value: str, options: Mapping[str, Any] | None) -> str:
        self.log.append((self.tag, "serialize"))
        return f"{value}|{self.tag}"

    def deserialize(self, value: str, options: Mapping[str, Any] | None) -> str:
        self.log.append((self.tag, "deserialize"))
        suffix = f"|{self.tag}"
        assert value.endswith(suffix), f"{self.tag} expected {value!r} to end with {suffix!r}"
        return value[: -len(suffix)]


@pytest.fixture
def call_log() -> CallLog:
    """Shared, ordered record of driver and processor calls."""
    return []


@pytest.fixture
def make_driver(call_log: CallLog) -> Callable[..., RecordingDriver]:
    """Factory for RecordingDrivers writing to the shared call log."""

    def factory(name: str, **kwargs: Any) -> RecordingDriver:
        return RecordingDriver(name, call_log, **kwargs)

    return factory


@pytest.fixture
def bare_driver_cls() -> type[BareDriver]:
    return BareDriver


@pytest.fixture
def make_tagger(call_log: CallLog) -> Callable[[str], Tagger]:
    """Factory for Tagger processors writing to the shared call log."""

    def factory(tag: str) -> Tagger:
        return Tagger(tag, call_log)

    return factory


@pytest.fixture
def registry() -> SingletonRegistry:
    """Fresh singleton registry, isolated from the process-wide default."""
    return SingletonRegistry()
