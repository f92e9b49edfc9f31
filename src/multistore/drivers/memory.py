"""In-memory driver.

Simple dict-based driver suitable for single-process use, caching and
testing. Values are deep-copied on the way in and out so callers cannot
mutate stored state by accident.

Usage:
    driver = MemoryDriver()                      # readable, searchable
    cache = MemoryDriver(readable=False, awaited=False)
    store = await create([driver])
"""

from __future__ import annotations

import copy as cp
from collections.abc import Callable, Mapping
from typing import Any

from multistore.drivers.models import DriverOptions
from multistore.logs import get_logger

logger = get_logger(__name__)


class MemoryDriver:
    """Driver keeping serialized values in a dict keyed by id.

    The id is read from ``obj[id_field]`` when the stored value is a mapping,
    otherwise from the ``"id"`` entry of the call options (needed once a
    processor has turned the object into text or bytes).

    Args:
        id_field: Field holding the object id.
        searchable: Register find (field equality) and find_by (predicate).
        **options: DriverOptions fields. ``readable`` defaults to True.
    """

    def __init__(self, id_field: str = "id", searchable: bool = True, **options: Any) -> None:
        options.setdefault("readable", True)
        if searchable:
            options.setdefault("find", self._find)
            options.setdefault("find_by", self._find_by)
        self.id_field = id_field
        self.options = DriverOptions.from_mapping(options)
        self._store: dict[Any, Any] = {}

    def __repr__(self) -> str:
        return f"MemoryDriver(id_field={self.id_field!r}, items={len(self._store)})"

    def __len__(self) -> int:
        return len(self._store)

    def _resolve_id(self, obj: Any, options: Mapping[str, Any] | None) -> Any:
        if isinstance(obj, Mapping) and self.id_field in obj:
            return obj[self.id_field]
        if options and "id" in options:
            return options["id"]
        raise KeyError(
            f"Cannot determine id: value has no {self.id_field!r} field and options carry no 'id'"
        )

    async def init(self) -> None:
        self._store = {}

    async def stop(self) -> None:
        logger.debug("memory_driver_stopped", items=len(self._store))
        self._store.clear()

    async def put(self, obj: Any, options: Mapping[str, Any] | None = None) -> None:
        self._store[self._resolve_id(obj, options)] = cp.deepcopy(obj)

    async def get(self, id: Any, options: Mapping[str, Any] | None = None) -> Any:
        return cp.deepcopy(self._store.get(id))

    async def delete(self, id: Any, options: Mapping[str, Any] | None = None) -> None:
        self._store.pop(id, None)

    async def _find(
        self,
        criteria: Mapping[str, Any],
        options: Mapping[str, Any] | None,
        driver: MemoryDriver,
    ) -> list[Any]:
        """Return every stored mapping whose fields equal all criteria values."""
        return [
            cp.deepcopy(value)
            for value in self._store.values()
            if isinstance(value, Mapping)
            and all(key in value and value[key] == expected for key, expected in criteria.items())
        ]

    async def _find_by(
        self,
        predicate: Callable[[Any], bool],
        options: Mapping[str, Any] | None,
        driver: MemoryDriver,
    ) -> list[Any]:
        """Return every stored value the predicate accepts."""
        return [cp.deepcopy(value) for value in self._store.values() if predicate(value)]
